import uuid
from datetime import date, time, timedelta
from decimal import Decimal

import pytest

from app.models import Reservation
from app.services.availability_service import AvailabilityService
from app.utils.enums import ReservationStatus

VENUE_ID = uuid.uuid4()
BOOKING_DATE = date(2025, 3, 10)


def build_reservation(
    start,
    end,
    status=ReservationStatus.CONFIRMED,
    venue_id=VENUE_ID,
    reservation_date=BOOKING_DATE,
):
    return Reservation(
        id=uuid.uuid4(),
        venue_id=venue_id,
        reservation_date=reservation_date,
        start_time=start,
        end_time=end,
        status=status,
    )


def is_available(start, end, reservations):
    return AvailabilityService.is_available(
        VENUE_ID,
        BOOKING_DATE,
        start,
        end,
        reservations,
    )


class TestIntervalsOverlap:
    """Пересечение полуоткрытых интервалов."""

    @pytest.mark.parametrize(
        'start, end, expected',
        [
            (time(9), time(10), False),
            (time(12), time(13), False),
            (time(9), time(11), True),
            (time(11), time(13), True),
            (time(10, 30), time(11, 30), True),
            (time(9), time(13), True),
        ],
    )
    def test_overlap_with_ten_to_twelve(self, start, end, expected):
        assert AvailabilityService.intervals_overlap(
            start, end, time(10), time(12),
        ) is expected


class TestIsAvailable:
    """Проверка интервала по списку бронирований."""

    def test_empty_day_is_free(self):
        assert is_available(time(10), time(12), []) is True

    def test_adjacent_bookings_do_not_conflict(self):
        reservations = [build_reservation(time(10), time(12))]
        assert is_available(time(12), time(14), reservations) is True
        assert is_available(time(8), time(10), reservations) is True

    def test_overlapping_booking_conflicts(self):
        reservations = [build_reservation(time(10), time(12))]
        assert is_available(time(11), time(13), reservations) is False

    def test_pending_booking_holds_time(self):
        reservations = [
            build_reservation(time(10), time(12), ReservationStatus.PENDING),
        ]
        assert is_available(time(10), time(12), reservations) is False

    @pytest.mark.parametrize(
        'status',
        [ReservationStatus.CANCELLED, ReservationStatus.COMPLETED],
    )
    def test_inactive_statuses_free_time(self, status):
        reservations = [build_reservation(time(10), time(12), status)]
        assert is_available(time(10), time(12), reservations) is True

    def test_other_venue_is_ignored(self):
        reservations = [
            build_reservation(time(10), time(12), venue_id=uuid.uuid4()),
        ]
        assert is_available(time(10), time(12), reservations) is True

    def test_other_date_is_ignored(self):
        reservations = [
            build_reservation(
                time(10),
                time(12),
                reservation_date=BOOKING_DATE + timedelta(days=1),
            ),
        ]
        assert is_available(time(10), time(12), reservations) is True


class TestBookingDate:
    """Дата бронирования не может быть в прошлом."""

    def test_today_is_valid(self):
        assert AvailabilityService.validate_booking_date(date.today())

    def test_yesterday_is_invalid(self):
        yesterday = date.today() - timedelta(days=1)
        assert not AvailabilityService.validate_booking_date(yesterday)


class TestDayAvailability:
    """Доступность слотов площадки на дату по данным БД."""

    async def test_booked_slot_is_marked_busy(
        self,
        session,
        venue,
        slots,
        customer,
        weekday_date,
        make_reservation,
    ):
        afternoon = slots[1]
        await make_reservation(
            customer,
            afternoon,
            weekday_date,
            time(13),
            time(14),
        )
        await session.refresh(venue, ['time_slots'])

        day = await AvailabilityService.get_day_availability(
            session,
            venue,
            weekday_date,
        )

        assert [info.id for info in day] == [slot.id for slot in slots]
        assert [info.is_available for info in day] == [True, False, True]
        assert day[0].price == Decimal('4000')
        assert day[2].price == Decimal('6000')

    async def test_cancelled_booking_does_not_block(
        self,
        session,
        venue,
        slots,
        customer,
        weekday_date,
        make_reservation,
    ):
        await make_reservation(
            customer,
            slots[0],
            weekday_date,
            time(8),
            time(12),
            status=ReservationStatus.CANCELLED,
        )
        assert await AvailabilityService.check_availability(
            session,
            venue.id,
            weekday_date,
            time(8),
            time(12),
        )
