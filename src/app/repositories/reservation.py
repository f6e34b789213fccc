from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import STATISTICS_DEFAULT_PERIOD_DAYS
from app.core.exceptions import (
    BookingError,
    NotCancellable,
    ReservationNotFound,
    SlotAlreadyBooked,
    SlotUnavailable,
    Unauthorized,
    VenueUnavailable,
)
from app.models import Reservation, TimeSlot, User, Venue
from app.repositories.base import CRUDBase
from app.repositories.venue import venue_repository
from app.schemas.reservation import (
    ReservationCreate,
    ReservationDraft,
    ReservationQuote,
    ReservationStatusUpdate,
)
from app.schemas.venue import VenueStatistics
from app.services.availability_service import AvailabilityService
from app.services.pricing_service import PricingService
from app.services.reservation_code import generate_unique_reservation_code
from app.utils.enums import (
    ACTIVE_RESERVATION_STATUSES,
    CANCELLABLE_STATUSES,
    ReservationStatus,
)

MONEY_PRECISION = Decimal('0.01')


def _to_money(value: Optional[object]) -> Decimal:
    return Decimal(str(value or 0)).quantize(
        MONEY_PRECISION,
        rounding=ROUND_HALF_UP,
    )


class ReservationRepository(
    CRUDBase[Reservation, ReservationCreate, ReservationStatusUpdate],
):
    """Репозиторий для операций с бронированиями."""

    def __init__(self) -> None:
        """Инициализация репозитория бронирований."""
        super().__init__(Reservation)

    async def get_with_relations(
        self,
        session: AsyncSession,
        reservation_id: UUID,
    ) -> Optional[Reservation]:
        """Получает бронирование с площадкой, слотом и пользователем."""
        stmt = (
            select(Reservation)
            .where(Reservation.id == reservation_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def get_by_code(
        self,
        session: AsyncSession,
        reservation_code: str,
    ) -> Optional[Reservation]:
        """Получает бронирование по коду."""
        return await self.get(session, reservation_code=reservation_code)

    async def get_multi_filtered(
        self,
        session: AsyncSession,
        *,
        user_id: Optional[UUID] = None,
        venue_id: Optional[UUID] = None,
        status: Optional[ReservationStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Reservation]:
        """Получает список бронирований, новые даты первыми."""
        conditions = []
        if user_id:
            conditions.append(Reservation.user_id == user_id)
        if venue_id:
            conditions.append(Reservation.venue_id == venue_id)
        if status:
            conditions.append(Reservation.status == status)
        if date_from:
            conditions.append(Reservation.reservation_date >= date_from)
        if date_to:
            conditions.append(Reservation.reservation_date <= date_to)
        return await self.get(
            session,
            *conditions,
            many=True,
            order_by=(
                Reservation.reservation_date.desc(),
                Reservation.start_time,
            ),
            offset=skip,
            limit=limit,
        )

    async def quote(
        self,
        session: AsyncSession,
        draft: ReservationDraft,
    ) -> ReservationQuote:
        """Рассчитывает стоимость черновика без записи в БД.

        Слот проверяется так же, как при создании брони.
        """
        venue = await venue_repository.get(
            session,
            Venue.is_active.is_(True),
            id=draft.venue_id,
        )
        if venue is None:
            raise VenueUnavailable()
        self._ensure_slot_bookable(venue, draft.time_slot_id)
        calculation = PricingService.quote(
            venue,
            venue.time_slots,
            draft.reservation_date,
            draft.start_time,
            draft.end_time,
            draft.discount_percentage,
        )
        is_available = await AvailabilityService.check_availability(
            session,
            venue.id,
            draft.reservation_date,
            draft.start_time,
            draft.end_time,
        )
        return ReservationQuote(
            **calculation.model_dump(),
            venue_id=venue.id,
            reservation_date=draft.reservation_date,
            start_time=draft.start_time,
            end_time=draft.end_time,
            is_available=is_available,
        )

    async def create_with_validation(
        self,
        session: AsyncSession,
        obj_in: ReservationCreate,
        user: User,
    ) -> Reservation:
        """Создает бронирование в одной транзакции.

        Площадка блокируется на запись, доступность перепроверяется
        внутри транзакции. Если параллельная вставка всё же прошла
        первой, уникальный индекс активных бронирований отклонит
        вторую, и она будет отдана как SlotAlreadyBooked.

        Raises:
            VenueUnavailable: площадка не найдена или неактивна
            SlotUnavailable: слот не найден, чужой или закрыт
            SlotAlreadyBooked: интервал пересекается с действующей бронью
            Unauthorized: скидку назначает не сотрудник
            NoPricingAvailable: нет слота, задающего цену

        """
        try:
            venue = await venue_repository.get_active_for_update(
                session,
                obj_in.venue_id,
            )
            if venue is None:
                raise VenueUnavailable()
            slot = self._ensure_slot_bookable(venue, obj_in.time_slot_id)
            if not await AvailabilityService.check_availability(
                session,
                venue.id,
                obj_in.reservation_date,
                obj_in.start_time,
                obj_in.end_time,
            ):
                raise SlotAlreadyBooked()
            if obj_in.discount_percentage and not user.is_elevated:
                raise Unauthorized('Назначать скидку может только сотрудник')
            calculation = PricingService.quote(
                venue,
                venue.time_slots,
                obj_in.reservation_date,
                obj_in.start_time,
                obj_in.end_time,
                obj_in.discount_percentage,
            )
            db_obj = Reservation(
                reservation_code=await generate_unique_reservation_code(
                    session,
                ),
                user_id=user.id,
                venue_id=venue.id,
                time_slot_id=slot.id,
                reservation_date=obj_in.reservation_date,
                start_time=obj_in.start_time,
                end_time=obj_in.end_time,
                duration_hours=calculation.duration_hours,
                base_price=calculation.base_price,
                discount_percentage=calculation.discount_percentage,
                total_price=calculation.total_price,
                status=ReservationStatus.PENDING,
                notes=obj_in.notes,
            )
            session.add(db_obj)
            await session.commit()
        except BookingError:
            await session.rollback()
            raise
        except IntegrityError:
            await session.rollback()
            if await AvailabilityService.get_conflicting_reservations(
                session,
                obj_in.venue_id,
                obj_in.reservation_date,
                obj_in.start_time,
                obj_in.end_time,
            ):
                logger.warning(
                    'Параллельное бронирование площадки '
                    f'{obj_in.venue_id} на {obj_in.reservation_date} '
                    f'{obj_in.start_time}-{obj_in.end_time} отклонено',
                )
                raise SlotAlreadyBooked()
            raise
        return await self.get_with_relations(session, db_obj.id)

    async def cancel(
        self,
        session: AsyncSession,
        reservation_id: UUID,
        user: User,
    ) -> Reservation:
        """Отменяет бронирование владельца или по решению сотрудника."""
        reservation = await self.get_with_relations(session, reservation_id)
        if reservation is None:
            raise ReservationNotFound()
        if reservation.user_id != user.id and not user.is_elevated:
            raise Unauthorized('Недостаточно прав для отмены бронирования')
        if reservation.status not in CANCELLABLE_STATUSES:
            raise NotCancellable()
        reservation.status = ReservationStatus.CANCELLED
        await session.commit()
        return await self.get_with_relations(session, reservation_id)

    async def update_status(
        self,
        session: AsyncSession,
        reservation: Reservation,
        obj_in: ReservationStatusUpdate,
    ) -> Reservation:
        """Меняет статус и статус оплаты бронирования.

        Возврат отменённой брони в действующий статус блокирует площадку
        так же, как создание, и повторно проверяет, что время не занято.

        Raises:
            VenueUnavailable: площадка брони деактивирована
            SlotAlreadyBooked: время уже занято другой бронью

        """
        reservation_id = reservation.id
        venue_id = reservation.venue_id
        reservation_date = reservation.reservation_date
        start_time = reservation.start_time
        end_time = reservation.end_time
        reactivating = (
            obj_in.status in ACTIVE_RESERVATION_STATUSES
            and reservation.status not in ACTIVE_RESERVATION_STATUSES
        )
        try:
            if reactivating:
                venue = await venue_repository.get_active_for_update(
                    session,
                    venue_id,
                )
                if venue is None:
                    raise VenueUnavailable()
                if not await AvailabilityService.check_availability(
                    session,
                    venue_id,
                    reservation_date,
                    start_time,
                    end_time,
                    exclude_reservation_id=reservation_id,
                ):
                    raise SlotAlreadyBooked()
            update_data = obj_in.model_dump(
                exclude_unset=True,
                exclude_none=True,
            )
            for field, value in update_data.items():
                setattr(reservation, field, value)
            await session.commit()
        except BookingError:
            await session.rollback()
            raise
        except IntegrityError:
            await session.rollback()
            if await AvailabilityService.get_conflicting_reservations(
                session,
                venue_id,
                reservation_date,
                start_time,
                end_time,
                exclude_reservation_id=reservation_id,
            ):
                logger.warning(
                    f'Возврат брони {reservation_id} в действующий статус '
                    'отклонён: время уже занято',
                )
                raise SlotAlreadyBooked()
            raise
        return await self.get_with_relations(session, reservation_id)

    async def get_venue_statistics(
        self,
        session: AsyncSession,
        venue_id: UUID,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> VenueStatistics:
        """Считает статистику бронирований площадки за период.

        По умолчанию берутся последние 30 дней. Выручка и средний чек
        считаются по подтверждённым бронированиям, загрузка это доля
        подтверждённых среди всех бронирований периода.
        """
        date_to = date_to or date.today()
        date_from = date_from or date_to - timedelta(
            days=STATISTICS_DEFAULT_PERIOD_DAYS,
        )
        if date_from > date_to:
            raise ValueError('Начало периода должно быть не позже окончания')

        confirmed = Reservation.status == ReservationStatus.CONFIRMED
        cancelled = Reservation.status == ReservationStatus.CANCELLED
        stmt = select(
            func.count(Reservation.id),
            func.count(case((confirmed, 1))),
            func.count(case((cancelled, 1))),
            func.sum(case((confirmed, Reservation.total_price))),
            func.avg(case((confirmed, Reservation.total_price))),
        ).where(
            Reservation.venue_id == venue_id,
            Reservation.reservation_date.between(date_from, date_to),
        )
        total, confirmed_count, cancelled_count, revenue, average = (
            await session.execute(stmt)
        ).one()
        utilization = (
            Decimal(confirmed_count) / Decimal(total) * 100 if total else 0
        )
        return VenueStatistics(
            venue_id=venue_id,
            date_from=date_from,
            date_to=date_to,
            total_reservations=total,
            confirmed_reservations=confirmed_count,
            cancelled_reservations=cancelled_count,
            total_revenue=_to_money(revenue),
            average_booking_value=_to_money(average),
            utilization_rate=_to_money(utilization),
        )

    @staticmethod
    def _ensure_slot_bookable(venue: Venue, slot_id: UUID) -> TimeSlot:
        """Возвращает слот площадки, открытый для бронирования."""
        slot = next(
            (slot for slot in venue.time_slots if slot.id == slot_id),
            None,
        )
        if slot is None or not slot.is_active or not slot.is_available:
            raise SlotUnavailable()
        return slot


reservation_repository = ReservationRepository()
