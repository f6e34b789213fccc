from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from app.core.constants import (
    MAX_DISCOUNT_PERCENTAGE,
    SECONDS_IN_HOUR,
    WEEKEND_DAYS,
)
from app.core.exceptions import NoPricingAvailable
from app.models import TimeSlot, Venue
from app.schemas.reservation import PriceCalculation

WHOLE_UNIT = Decimal('1')
HOURS_PRECISION = Decimal('0.01')


def _round_to_unit(amount: Decimal) -> Decimal:
    return amount.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)


class PricingService:
    """Расчёт стоимости бронирования.

    Цена = ставка за час (будни/выходные) × множитель слота × длительность,
    округлённая до целой денежной единицы. Все методы чистые.
    """

    @staticmethod
    def is_weekend(booking_date: date) -> bool:
        """Суббота или воскресенье."""
        return booking_date.weekday() in WEEKEND_DAYS

    @staticmethod
    def duration_seconds(start: time, end: time) -> int:
        """Длительность интервала в секундах (в пределах одних суток)."""
        delta = datetime.combine(date.min, end) - datetime.combine(
            date.min,
            start,
        )
        return int(delta.total_seconds())

    @staticmethod
    def duration_hours(start: time, end: time) -> Decimal:
        """Длительность интервала в часах с точностью до сотых."""
        seconds = Decimal(PricingService.duration_seconds(start, end))
        return (seconds / SECONDS_IN_HOUR).quantize(
            HOURS_PRECISION,
            rounding=ROUND_HALF_UP,
        )

    @staticmethod
    def hourly_rate(venue: Venue, weekend: bool) -> Decimal:
        """Ставка площадки за час для типа дня."""
        if weekend and venue.weekend_price is not None:
            return Decimal(venue.weekend_price)
        return Decimal(venue.base_price)

    @staticmethod
    def find_pricing_slot(
        slots: Iterable[TimeSlot],
        start: time,
    ) -> Optional[TimeSlot]:
        """Находит слот, содержащий время начала.

        Пересечения слотов допускаются: побеждает первый подходящий
        в порядке обхода (слоты площадки отсортированы по началу).
        """
        return next(
            (
                slot
                for slot in slots
                if slot.is_active
                and slot.is_available
                and slot.start_time <= start < slot.end_time
            ),
            None,
        )

    @staticmethod
    def slot_multiplier(slot: TimeSlot, weekend: bool) -> Decimal:
        """Множитель слота для типа дня."""
        if weekend:
            return Decimal(slot.price_multiplier_weekend)
        return Decimal(slot.price_multiplier_weekday)

    @staticmethod
    def calculate_price(
        venue: Venue,
        slots: Iterable[TimeSlot],
        booking_date: date,
        start: time,
        end: time,
    ) -> Decimal:
        """Возвращает базовую стоимость интервала без скидки.

        Raises:
            NoPricingAvailable: если ни один слот не содержит время начала

        """
        slot = PricingService.find_pricing_slot(slots, start)
        if slot is None:
            raise NoPricingAvailable()
        weekend = PricingService.is_weekend(booking_date)
        seconds = Decimal(PricingService.duration_seconds(start, end))
        amount = (
            PricingService.hourly_rate(venue, weekend)
            * PricingService.slot_multiplier(slot, weekend)
            * seconds
            / SECONDS_IN_HOUR
        )
        return _round_to_unit(amount)

    @staticmethod
    def apply_discount(
        base_price: Decimal,
        discount_percentage: Decimal,
    ) -> Decimal:
        """Итоговая цена: base × (1 − discount / 100)."""
        discount = Decimal(discount_percentage)
        if not Decimal('0') <= discount <= MAX_DISCOUNT_PERCENTAGE:
            raise ValueError('Скидка должна быть в диапазоне от 0 до 100')
        return _round_to_unit(
            Decimal(base_price) * (1 - discount / MAX_DISCOUNT_PERCENTAGE),
        )

    @staticmethod
    def quote(
        venue: Venue,
        slots: Iterable[TimeSlot],
        booking_date: date,
        start: time,
        end: time,
        discount_percentage: Decimal = Decimal('0'),
    ) -> PriceCalculation:
        """Полный расчёт стоимости для черновика бронирования."""
        slots = list(slots)
        base_price = PricingService.calculate_price(
            venue,
            slots,
            booking_date,
            start,
            end,
        )
        total_price = PricingService.apply_discount(
            base_price,
            discount_percentage,
        )
        return PriceCalculation(
            time_slot_id=PricingService.find_pricing_slot(slots, start).id,
            is_weekend=PricingService.is_weekend(booking_date),
            duration_hours=PricingService.duration_hours(start, end),
            base_price=base_price,
            discount_percentage=Decimal(discount_percentage),
            discount_amount=base_price - total_price,
            total_price=total_price,
        )
