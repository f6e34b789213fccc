import asyncio
import uuid
from datetime import date, time, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import (
    NoPricingAvailable,
    NotCancellable,
    ReservationNotFound,
    SlotAlreadyBooked,
    SlotUnavailable,
    Unauthorized,
    VenueUnavailable,
)
from app.models import Reservation, TimeSlot
from app.repositories.reservation import reservation_repository
from app.repositories.venue import venue_repository
from app.schemas.reservation import ReservationCreate, ReservationStatusUpdate
from app.services.availability_service import AvailabilityService
from app.utils.enums import PaymentStatus, ReservationStatus


def draft(venue, slot, reservation_date, start, end, **fields):
    return ReservationCreate(
        venue_id=venue.id,
        time_slot_id=slot.id,
        reservation_date=reservation_date,
        start_time=start,
        end_time=end,
        **fields,
    )


# ============================================================================
# Создание бронирования
# ============================================================================

class TestCreateReservation:
    """Создание бронирования в одной транзакции."""

    async def test_creates_pending_reservation(
        self,
        session,
        venue,
        slots,
        customer,
        weekday_date,
    ):
        reservation = await reservation_repository.create_with_validation(
            session,
            draft(venue, slots[0], weekday_date, time(9), time(11)),
            customer,
        )

        assert reservation.status == ReservationStatus.PENDING
        assert reservation.payment_status == PaymentStatus.PENDING
        assert reservation.reservation_code.startswith(
            f'OSC{date.today():%Y%m%d}',
        )
        assert reservation.user_id == customer.id
        assert reservation.duration_hours == Decimal('2.00')
        assert reservation.base_price == Decimal('2000')
        assert reservation.total_price == Decimal('2000')
        assert reservation.venue.id == venue.id

    async def test_weekend_price(
        self,
        session,
        venue,
        slots,
        customer,
        weekend_date,
    ):
        reservation = await reservation_repository.create_with_validation(
            session,
            draft(venue, slots[1], weekend_date, time(12), time(14)),
            customer,
        )
        assert reservation.total_price == Decimal('3300')

    async def test_overlap_is_rejected(
        self,
        session,
        venue,
        slots,
        customer,
        other_customer,
        weekday_date,
    ):
        await reservation_repository.create_with_validation(
            session,
            draft(venue, slots[0], weekday_date, time(9), time(11)),
            customer,
        )
        with pytest.raises(SlotAlreadyBooked):
            await reservation_repository.create_with_validation(
                session,
                draft(venue, slots[0], weekday_date, time(10), time(12)),
                other_customer,
            )

    async def test_adjacent_booking_is_allowed(
        self,
        session,
        venue,
        slots,
        customer,
        other_customer,
        weekday_date,
    ):
        await reservation_repository.create_with_validation(
            session,
            draft(venue, slots[0], weekday_date, time(9), time(10)),
            customer,
        )
        second = await reservation_repository.create_with_validation(
            session,
            draft(venue, slots[0], weekday_date, time(10), time(11)),
            other_customer,
        )
        assert second.status == ReservationStatus.PENDING

    async def test_cancelled_booking_frees_time(
        self,
        session,
        venue,
        slots,
        customer,
        other_customer,
        weekday_date,
        make_reservation,
    ):
        await make_reservation(
            customer,
            slots[0],
            weekday_date,
            time(9),
            time(11),
            status=ReservationStatus.CANCELLED,
        )
        reservation = await reservation_repository.create_with_validation(
            session,
            draft(venue, slots[0], weekday_date, time(9), time(11)),
            other_customer,
        )
        assert reservation.status == ReservationStatus.PENDING

    async def test_unknown_venue(self, session, slots, customer, weekday_date):
        obj_in = ReservationCreate(
            venue_id=uuid.uuid4(),
            time_slot_id=slots[0].id,
            reservation_date=weekday_date,
            start_time=time(9),
            end_time=time(10),
        )
        with pytest.raises(VenueUnavailable):
            await reservation_repository.create_with_validation(
                session,
                obj_in,
                customer,
            )

    async def test_inactive_venue(
        self,
        session,
        venue,
        slots,
        customer,
        weekday_date,
    ):
        venue.is_active = False
        await session.commit()
        with pytest.raises(VenueUnavailable):
            await reservation_repository.create_with_validation(
                session,
                draft(venue, slots[0], weekday_date, time(9), time(10)),
                customer,
            )

    async def test_closed_slot(
        self,
        session,
        venue,
        slots,
        customer,
        weekday_date,
    ):
        slots[0].is_available = False
        await session.commit()
        with pytest.raises(SlotUnavailable):
            await reservation_repository.create_with_validation(
                session,
                draft(venue, slots[0], weekday_date, time(9), time(10)),
                customer,
            )

    async def test_slot_of_another_venue(
        self,
        session,
        venue,
        slots,
        customer,
        weekday_date,
    ):
        foreign_slot = TimeSlot(id=uuid.uuid4())
        with pytest.raises(SlotUnavailable):
            await reservation_repository.create_with_validation(
                session,
                draft(venue, foreign_slot, weekday_date, time(9), time(10)),
                customer,
            )

    async def test_time_without_pricing_slot(
        self,
        session,
        venue,
        slots,
        customer,
        weekday_date,
    ):
        with pytest.raises(NoPricingAvailable):
            await reservation_repository.create_with_validation(
                session,
                draft(venue, slots[0], weekday_date, time(6), time(9)),
                customer,
            )

    async def test_customer_cannot_set_discount(
        self,
        session,
        venue,
        slots,
        customer,
        weekday_date,
    ):
        obj_in = draft(
            venue,
            slots[0],
            weekday_date,
            time(9),
            time(10),
            discount_percentage=Decimal('20'),
        )
        with pytest.raises(Unauthorized):
            await reservation_repository.create_with_validation(
                session,
                obj_in,
                customer,
            )

    async def test_staff_discount_is_applied(
        self,
        session,
        venue,
        slots,
        staff,
        weekday_date,
    ):
        obj_in = draft(
            venue,
            slots[0],
            weekday_date,
            time(9),
            time(10),
            discount_percentage=Decimal('20'),
        )
        reservation = await reservation_repository.create_with_validation(
            session,
            obj_in,
            staff,
        )
        assert reservation.base_price == Decimal('1000')
        assert reservation.discount_percentage == Decimal('20')
        assert reservation.total_price == Decimal('800')


# ============================================================================
# Конкурентное бронирование
# ============================================================================

class TestConcurrentBooking:
    """Два одновременных запроса на одно время: проходит только один."""

    async def test_parallel_requests_for_same_window(
        self,
        session_factory,
        venue,
        slots,
        customer,
        other_customer,
        weekday_date,
    ):
        async def book(user):
            async with session_factory() as session:
                return await reservation_repository.create_with_validation(
                    session,
                    draft(venue, slots[0], weekday_date, time(9), time(11)),
                    user,
                )

        results = await asyncio.gather(
            book(customer),
            book(other_customer),
            return_exceptions=True,
        )

        created = [r for r in results if isinstance(r, Reservation)]
        rejected = [r for r in results if isinstance(r, SlotAlreadyBooked)]
        assert len(created) == 1
        assert len(rejected) == 1

    async def test_unique_index_rejects_missed_conflict(
        self,
        session,
        venue,
        slots,
        customer,
        other_customer,
        weekday_date,
        make_reservation,
        monkeypatch,
    ):
        await make_reservation(
            customer,
            slots[0],
            weekday_date,
            time(9),
            time(11),
        )

        async def always_available(*args, **kwargs):
            return True

        monkeypatch.setattr(
            AvailabilityService,
            'check_availability',
            staticmethod(always_available),
        )
        with pytest.raises(SlotAlreadyBooked):
            await reservation_repository.create_with_validation(
                session,
                draft(venue, slots[0], weekday_date, time(9), time(11)),
                other_customer,
            )


# ============================================================================
# Отмена и смена статуса
# ============================================================================

class TestCancelReservation:
    """Отмена бронирования владельцем или сотрудником."""

    @pytest.fixture
    async def reservation(
        self,
        slots,
        customer,
        weekday_date,
        make_reservation,
    ):
        return await make_reservation(
            customer,
            slots[0],
            weekday_date,
            time(9),
            time(11),
        )

    async def test_owner_cancels(self, session, reservation, customer):
        cancelled = await reservation_repository.cancel(
            session,
            reservation.id,
            customer,
        )
        assert cancelled.status == ReservationStatus.CANCELLED

    async def test_staff_cancels_any(self, session, reservation, staff):
        cancelled = await reservation_repository.cancel(
            session,
            reservation.id,
            staff,
        )
        assert cancelled.status == ReservationStatus.CANCELLED

    async def test_other_customer_cannot_cancel(
        self,
        session,
        reservation,
        other_customer,
    ):
        with pytest.raises(Unauthorized):
            await reservation_repository.cancel(
                session,
                reservation.id,
                other_customer,
            )

    async def test_cancel_twice(self, session, reservation, customer):
        await reservation_repository.cancel(session, reservation.id, customer)
        with pytest.raises(NotCancellable):
            await reservation_repository.cancel(
                session,
                reservation.id,
                customer,
            )

    async def test_completed_is_not_cancellable(
        self,
        session,
        slots,
        customer,
        weekday_date,
        make_reservation,
    ):
        completed = await make_reservation(
            customer,
            slots[0],
            weekday_date,
            time(9),
            time(10),
            status=ReservationStatus.COMPLETED,
        )
        with pytest.raises(NotCancellable):
            await reservation_repository.cancel(
                session,
                completed.id,
                customer,
            )

    async def test_unknown_reservation(self, session, customer):
        with pytest.raises(ReservationNotFound):
            await reservation_repository.cancel(
                session,
                uuid.uuid4(),
                customer,
            )


class TestUpdateStatus:
    """Смена статуса сотрудником."""

    async def test_confirm_and_mark_paid(
        self,
        session,
        slots,
        customer,
        weekday_date,
        make_reservation,
    ):
        reservation = await make_reservation(
            customer,
            slots[0],
            weekday_date,
            time(9),
            time(10),
        )
        updated = await reservation_repository.update_status(
            session,
            reservation,
            ReservationStatusUpdate(
                status=ReservationStatus.CONFIRMED,
                payment_status=PaymentStatus.PAID,
            ),
        )
        assert updated.status == ReservationStatus.CONFIRMED
        assert updated.payment_status == PaymentStatus.PAID

    async def test_reactivation_of_taken_window(
        self,
        session,
        slots,
        customer,
        other_customer,
        weekday_date,
        make_reservation,
    ):
        cancelled = await make_reservation(
            customer,
            slots[0],
            weekday_date,
            time(9),
            time(11),
            status=ReservationStatus.CANCELLED,
        )
        await make_reservation(
            other_customer,
            slots[0],
            weekday_date,
            time(10),
            time(12),
        )
        with pytest.raises(SlotAlreadyBooked):
            await reservation_repository.update_status(
                session,
                cancelled,
                ReservationStatusUpdate(status=ReservationStatus.CONFIRMED),
            )

    async def test_reactivation_locks_venue(
        self,
        session,
        venue,
        slots,
        customer,
        weekday_date,
        make_reservation,
        monkeypatch,
    ):
        cancelled = await make_reservation(
            customer,
            slots[0],
            weekday_date,
            time(11),
            time(13),
            status=ReservationStatus.CANCELLED,
        )
        locked = []
        get_active_for_update = venue_repository.get_active_for_update

        async def recording_lock(session, venue_id):
            locked.append(venue_id)
            return await get_active_for_update(session, venue_id)

        monkeypatch.setattr(
            venue_repository,
            'get_active_for_update',
            recording_lock,
        )
        updated = await reservation_repository.update_status(
            session,
            cancelled,
            ReservationStatusUpdate(status=ReservationStatus.PENDING),
        )
        assert updated.status == ReservationStatus.PENDING
        assert locked == [venue.id]

    async def test_reactivation_after_overlapping_booking(
        self,
        session,
        venue,
        slots,
        customer,
        other_customer,
        weekday_date,
        make_reservation,
    ):
        cancelled = await make_reservation(
            customer,
            slots[0],
            weekday_date,
            time(11),
            time(13),
            status=ReservationStatus.CANCELLED,
        )
        await reservation_repository.create_with_validation(
            session,
            draft(venue, slots[0], weekday_date, time(10), time(12)),
            other_customer,
        )
        with pytest.raises(SlotAlreadyBooked):
            await reservation_repository.update_status(
                session,
                cancelled,
                ReservationStatusUpdate(status=ReservationStatus.CONFIRMED),
            )
        await session.refresh(cancelled)
        assert cancelled.status == ReservationStatus.CANCELLED

    async def test_payment_update_does_not_lock_venue(
        self,
        session,
        slots,
        customer,
        weekday_date,
        make_reservation,
        monkeypatch,
    ):
        reservation = await make_reservation(
            customer,
            slots[0],
            weekday_date,
            time(9),
            time(10),
        )

        async def unexpected_lock(*args, **kwargs):
            raise AssertionError('площадка не должна блокироваться')

        monkeypatch.setattr(
            venue_repository,
            'get_active_for_update',
            unexpected_lock,
        )
        updated = await reservation_repository.update_status(
            session,
            reservation,
            ReservationStatusUpdate(payment_status=PaymentStatus.PAID),
        )
        assert updated.payment_status == PaymentStatus.PAID

    async def test_reactivation_in_inactive_venue(
        self,
        session,
        venue,
        slots,
        customer,
        weekday_date,
        make_reservation,
    ):
        cancelled = await make_reservation(
            customer,
            slots[0],
            weekday_date,
            time(9),
            time(10),
            status=ReservationStatus.CANCELLED,
        )
        venue.is_active = False
        await session.commit()
        with pytest.raises(VenueUnavailable):
            await reservation_repository.update_status(
                session,
                cancelled,
                ReservationStatusUpdate(status=ReservationStatus.CONFIRMED),
            )

    async def test_unique_index_on_reactivation(
        self,
        session,
        slots,
        customer,
        other_customer,
        weekday_date,
        make_reservation,
        monkeypatch,
    ):
        cancelled = await make_reservation(
            customer,
            slots[0],
            weekday_date,
            time(9),
            time(11),
            status=ReservationStatus.CANCELLED,
        )
        await make_reservation(
            other_customer,
            slots[0],
            weekday_date,
            time(9),
            time(11),
        )

        async def always_available(*args, **kwargs):
            return True

        monkeypatch.setattr(
            AvailabilityService,
            'check_availability',
            staticmethod(always_available),
        )
        with pytest.raises(SlotAlreadyBooked):
            await reservation_repository.update_status(
                session,
                cancelled,
                ReservationStatusUpdate(status=ReservationStatus.CONFIRMED),
            )

    async def test_integrity_error_without_conflict_is_reraised(
        self,
        session,
        slots,
        customer,
        weekday_date,
        make_reservation,
        monkeypatch,
    ):
        reservation = await make_reservation(
            customer,
            slots[0],
            weekday_date,
            time(9),
            time(10),
        )

        async def failing_commit():
            raise IntegrityError(
                'UPDATE reservation',
                {},
                Exception('ck_reservation_total_price'),
            )

        monkeypatch.setattr(session, 'commit', failing_commit)
        with pytest.raises(IntegrityError):
            await reservation_repository.update_status(
                session,
                reservation,
                ReservationStatusUpdate(status=ReservationStatus.CONFIRMED),
            )


# ============================================================================
# Статистика площадки
# ============================================================================

class TestVenueStatistics:
    """Статистика бронирований площадки за период."""

    async def test_statistics_for_last_month(
        self,
        session,
        venue,
        slots,
        customer,
        make_reservation,
    ):
        day = date.today() - timedelta(days=3)
        for hour, status, price in (
            (8, ReservationStatus.CONFIRMED, '1000.00'),
            (9, ReservationStatus.CONFIRMED, '2000.00'),
            (10, ReservationStatus.CANCELLED, '5000.00'),
            (11, ReservationStatus.PENDING, '700.00'),
        ):
            await make_reservation(
                customer,
                slots[0],
                day,
                time(hour),
                time(hour + 1),
                status=status,
                total_price=Decimal(price),
            )
        await make_reservation(
            customer,
            slots[0],
            date.today() - timedelta(days=60),
            time(8),
            time(9),
            status=ReservationStatus.CONFIRMED,
        )

        stats = await reservation_repository.get_venue_statistics(
            session,
            venue.id,
        )

        assert stats.total_reservations == 4
        assert stats.confirmed_reservations == 2
        assert stats.cancelled_reservations == 1
        assert stats.total_revenue == Decimal('3000.00')
        assert stats.average_booking_value == Decimal('1500.00')
        assert stats.utilization_rate == Decimal('50.00')

    async def test_empty_period(self, session, venue):
        stats = await reservation_repository.get_venue_statistics(
            session,
            venue.id,
        )
        assert stats.total_reservations == 0
        assert stats.total_revenue == Decimal('0.00')
        assert stats.utilization_rate == Decimal('0.00')

    async def test_reversed_period(self, session, venue):
        with pytest.raises(ValueError):
            await reservation_repository.get_venue_statistics(
                session,
                venue.id,
                date_from=date.today(),
                date_to=date.today() - timedelta(days=1),
            )
