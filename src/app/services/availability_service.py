from datetime import date, time
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NoPricingAvailable
from app.models import Reservation, Venue
from app.schemas.time_slot import SlotAvailabilityInfo
from app.services.pricing_service import PricingService
from app.utils.enums import ACTIVE_RESERVATION_STATUSES


class AvailabilityService:
    """Сервис для проверки свободного времени площадок."""

    @staticmethod
    def intervals_overlap(
        start: time,
        end: time,
        other_start: time,
        other_end: time,
    ) -> bool:
        """Проверяет пересечение полуоткрытых интервалов [start, end).

        Смежные интервалы (end == other_start) не пересекаются.
        """
        return start < other_end and end > other_start

    @staticmethod
    def is_available(
        venue_id: UUID,
        booking_date: date,
        start: time,
        end: time,
        existing_reservations: Iterable[Reservation],
    ) -> bool:
        """Проверяет, что интервал не занят действующими бронированиями.

        Чистая функция: учитываются только бронирования той же площадки
        на ту же дату в статусах PENDING и CONFIRMED, отменённые и
        завершённые время не занимают.

        Args:
            venue_id: UUID площадки
            booking_date: Дата бронирования
            start: Время начала интервала
            end: Время окончания интервала
            existing_reservations: Бронирования для проверки

        Returns:
            bool: True если конфликтующих бронирований нет

        """
        return not any(
            reservation.venue_id == venue_id
            and reservation.reservation_date == booking_date
            and reservation.status in ACTIVE_RESERVATION_STATUSES
            and AvailabilityService.intervals_overlap(
                start,
                end,
                reservation.start_time,
                reservation.end_time,
            )
            for reservation in existing_reservations
        )

    @staticmethod
    async def get_active_reservations(
        session: AsyncSession,
        venue_id: UUID,
        booking_date: date,
        exclude_reservation_id: Optional[UUID] = None,
    ) -> list[Reservation]:
        """Возвращает действующие бронирования площадки на дату."""
        stmt = select(Reservation).where(
            Reservation.venue_id == venue_id,
            Reservation.reservation_date == booking_date,
            Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
        )
        if exclude_reservation_id:
            stmt = stmt.where(Reservation.id != exclude_reservation_id)
        result = await session.execute(stmt.order_by(Reservation.start_time))
        return list(result.scalars().all())

    @staticmethod
    async def get_conflicting_reservations(
        session: AsyncSession,
        venue_id: UUID,
        booking_date: date,
        start: time,
        end: time,
        exclude_reservation_id: Optional[UUID] = None,
    ) -> list[Reservation]:
        """Возвращает бронирования, пересекающиеся с интервалом.

        Raises:
            SQLAlchemyException: При ошибках работы с базой данных

        """
        stmt = select(Reservation).where(
            Reservation.venue_id == venue_id,
            Reservation.reservation_date == booking_date,
            Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
            Reservation.start_time < end,
            Reservation.end_time > start,
        )
        if exclude_reservation_id:
            stmt = stmt.where(Reservation.id != exclude_reservation_id)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def check_availability(
        session: AsyncSession,
        venue_id: UUID,
        booking_date: date,
        start: time,
        end: time,
        exclude_reservation_id: Optional[UUID] = None,
    ) -> bool:
        """Проверяет доступность интервала по текущему состоянию БД."""
        reservations = await AvailabilityService.get_active_reservations(
            session,
            venue_id,
            booking_date,
            exclude_reservation_id,
        )
        return AvailabilityService.is_available(
            venue_id,
            booking_date,
            start,
            end,
            reservations,
        )

    @staticmethod
    async def get_day_availability(
        session: AsyncSession,
        venue: Venue,
        booking_date: date,
    ) -> list[SlotAvailabilityInfo]:
        """Возвращает активные слоты площадки с доступностью и ценой."""
        reservations = await AvailabilityService.get_active_reservations(
            session,
            venue.id,
            booking_date,
        )
        slots = [slot for slot in venue.time_slots if slot.is_active]
        day = []
        for slot in slots:
            free = slot.is_available and AvailabilityService.is_available(
                venue.id,
                booking_date,
                slot.start_time,
                slot.end_time,
                reservations,
            )
            try:
                price = PricingService.calculate_price(
                    venue,
                    slots,
                    booking_date,
                    slot.start_time,
                    slot.end_time,
                )
            except NoPricingAvailable:
                price = None
            day.append(
                SlotAvailabilityInfo(
                    id=slot.id,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    price_multiplier_weekday=slot.price_multiplier_weekday,
                    price_multiplier_weekend=slot.price_multiplier_weekend,
                    is_available=free,
                    price=price,
                ),
            )
        return day

    @staticmethod
    def validate_booking_date(booking_date: date) -> bool:
        """Проверяет, что дата бронирования не в прошлом."""
        return booking_date >= date.today()
