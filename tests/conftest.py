import os
from datetime import date, time, timedelta
from decimal import Decimal
from itertools import count

import pytest

TEST_ENV = {
    'POSTGRES_DB': 'test',
    'POSTGRES_USER': 'test',
    'POSTGRES_PASSWORD': 'test',
    'POSTGRES_HOST': 'localhost',
    'REDIS_HOST': 'localhost',
    'SECRET_KEY': 'test-secret-key',
    'RABBITMQ_DEFAULT_USER': 'guest',
    'RABBITMQ_DEFAULT_PASS': 'guest',
    'RABBITMQ_DEFAULT_HOST': 'localhost',
    'ADMIN_USERNAME': 'superadmin',
    'ADMIN_EMAIL': 'superadmin@sport.ru',
    'ADMIN_PHONE': '+79990000000',
    'ADMIN_PASSWORD': 'Admin123!',
    'NOTIFY_MAIL_FROM': 'noreply@sport.ru',
    'NOTIFY_MAIL_USERNAME': 'noreply@sport.ru',
    'NOTIFY_MAIL_PASSWORD': 'secret',
    'NOTIFY_MAIL_PORT': '587',
    'NOTIFY_MAIL_SERVER': 'smtp.sport.ru',
}
for key, value in TEST_ENV.items():
    os.environ.setdefault(key, value)

from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    async_sessionmaker,
    create_async_engine,
)

from app.core.auth import create_access_token  # noqa: E402
from app.core.db import Base, get_async_session  # noqa: E402
from app.main import app  # noqa: E402
from app.models import (  # noqa: E402
    Reservation,
    TimeSlot,
    User,
    Venue,
    VenueType,
)
from app.utils.enums import ReservationStatus, UserRole  # noqa: E402
from celery_app.tasks import send_email_task  # noqa: E402


def _next_weekday(weekday: int) -> date:
    """Ближайшая будущая дата с нужным днём недели (0 - понедельник)."""
    today = date.today()
    days = (weekday - today.weekday()) % 7 or 7
    return today + timedelta(days=days)


@pytest.fixture
def weekday_date() -> date:
    return _next_weekday(0)


@pytest.fixture
def weekend_date() -> date:
    return _next_weekday(5)


@pytest.fixture
def auth_headers():
    def factory(user: User) -> dict[str, str]:
        token = create_access_token(user.id, user.username)
        return {'Authorization': f'Bearer {token}'}

    return factory


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(
        f'sqlite+aiosqlite:///{tmp_path / "booking.db"}',
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Письма складываются в список вместо очереди Celery."""
    sent = []

    def fake_apply_async(args, **kwargs):
        sent.append(args)

    monkeypatch.setattr(send_email_task, 'apply_async', fake_apply_async)
    return sent


@pytest.fixture
async def client(session_factory):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url='http://test',
    ) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    counter = count(1)

    async def factory(role: UserRole = UserRole.CUSTOMER, **fields) -> User:
        number = next(counter)
        fields.setdefault('username', f'{role.value.lower()}{number}')
        fields.setdefault('email', f'{fields["username"]}@sport.ru')
        user = User(
            hashed_password='not-used',
            role=role,
            is_active=True,
            is_superuser=False,
            is_verified=False,
            **fields,
        )
        session.add(user)
        await session.commit()
        return user

    return factory


@pytest.fixture
async def customer(make_user):
    return await make_user(UserRole.CUSTOMER, full_name='Иван Петров')


@pytest.fixture
async def other_customer(make_user):
    return await make_user(UserRole.CUSTOMER)


@pytest.fixture
async def staff(make_user):
    return await make_user(UserRole.STAFF)


@pytest.fixture
async def admin(make_user):
    return await make_user(UserRole.ADMIN)


@pytest.fixture
async def venue_type(session):
    venue_type = VenueType(name='Футбол', is_active=True)
    session.add(venue_type)
    await session.commit()
    return venue_type


@pytest.fixture
async def venue(session, venue_type):
    """Поле 1000 за час в будни и 1500 в выходные, три слота на день."""
    venue = Venue(
        venue_type_id=venue_type.id,
        name='Футбольное поле №1',
        capacity=22,
        base_price=Decimal('1000.00'),
        weekend_price=Decimal('1500.00'),
        facilities=['Раздевалка', 'Душ'],
        is_active=True,
    )
    session.add(venue)
    await session.flush()
    session.add_all(
        [
            TimeSlot(
                venue_id=venue.id,
                start_time=time(8),
                end_time=time(12),
                price_multiplier_weekday=Decimal('1.00'),
                price_multiplier_weekend=Decimal('1.00'),
                is_available=True,
                is_active=True,
            ),
            TimeSlot(
                venue_id=venue.id,
                start_time=time(12),
                end_time=time(18),
                price_multiplier_weekday=Decimal('1.20'),
                price_multiplier_weekend=Decimal('1.10'),
                is_available=True,
                is_active=True,
            ),
            TimeSlot(
                venue_id=venue.id,
                start_time=time(18),
                end_time=time(22),
                price_multiplier_weekday=Decimal('1.50'),
                price_multiplier_weekend=Decimal('1.50'),
                is_available=True,
                is_active=True,
            ),
        ],
    )
    await session.commit()
    return venue


@pytest.fixture
async def slots(session, venue):
    """Слоты площадки по возрастанию времени начала."""
    await session.refresh(venue, ['time_slots'])
    return list(venue.time_slots)


@pytest.fixture
def make_reservation(session):
    """Записывает бронирование напрямую, минуя проверки."""
    counter = count(1)

    async def factory(
        user: User,
        slot: TimeSlot,
        reservation_date: date,
        start_time: time,
        end_time: time,
        status: ReservationStatus = ReservationStatus.PENDING,
        total_price: Decimal = Decimal('1000.00'),
    ) -> Reservation:
        code = f'OSC{reservation_date:%Y%m%d}{next(counter):04d}'
        reservation = Reservation(
            reservation_code=code,
            user_id=user.id,
            venue_id=slot.venue_id,
            time_slot_id=slot.id,
            reservation_date=reservation_date,
            start_time=start_time,
            end_time=end_time,
            duration_hours=Decimal('1.00'),
            base_price=total_price,
            discount_percentage=Decimal('0'),
            total_price=total_price,
            status=status,
            is_active=True,
        )
        session.add(reservation)
        await session.commit()
        return reservation

    return factory
