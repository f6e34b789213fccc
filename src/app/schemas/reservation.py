from datetime import date, datetime, time
from decimal import Decimal
from typing import Annotated, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from app.utils.enums import PaymentStatus, ReservationStatus

Discount = Annotated[
    Decimal,
    Field(ge=0, le=100, max_digits=5, decimal_places=2),
]


class ReservationDraft(BaseModel):
    """Черновик бронирования: выбор площадки, даты, слота и интервала.

    Используется и для предварительного расчёта стоимости, и для
    создания бронирования.
    """

    venue_id: UUID
    time_slot_id: UUID
    reservation_date: date
    start_time: time
    end_time: time
    discount_percentage: Discount = Decimal('0')
    notes: Optional[str] = None

    @field_validator('notes', mode='before')
    @classmethod
    def normalize_notes(cls, value: Optional[str]) -> Optional[str]:
        """Очищает комментарий от лишних пробелов."""
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError('Комментарий должен быть строкой')
        cleaned = value.strip()
        return cleaned or None

    @field_validator('reservation_date', mode='after')
    @classmethod
    def validate_reservation_date(cls, value: date) -> date:
        """Проверяет, что дата бронирования не в прошлом."""
        if value < date.today():
            raise ValueError('Нельзя забронировать площадку на прошедшую дату')
        return value

    @model_validator(mode='after')
    def check_time_interval(self) -> 'ReservationDraft':
        """Проверяет, что время начала меньше времени окончания."""
        if self.start_time >= self.end_time:
            raise ValueError(
                'Время начала должно быть меньше времени окончания',
            )
        return self


class ReservationCreate(ReservationDraft):
    """Схема для создания нового бронирования."""


class ReservationStatusUpdate(BaseModel):
    """Схема для изменения статуса бронирования сотрудником."""

    status: Optional[ReservationStatus] = None
    payment_status: Optional[PaymentStatus] = None
    notes: Optional[str] = None

    @model_validator(mode='after')
    def check_not_empty(self) -> 'ReservationStatusUpdate':
        """Требует хотя бы один статус."""
        if self.status is None and self.payment_status is None:
            raise ValueError('Необходимо указать статус или статус оплаты')
        return self


class PriceCalculation(BaseModel):
    """Разбивка стоимости бронирования."""

    time_slot_id: UUID
    is_weekend: bool
    duration_hours: Decimal
    base_price: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    total_price: Decimal


class ReservationQuote(PriceCalculation):
    """Предварительный расчёт стоимости черновика бронирования."""

    venue_id: UUID
    reservation_date: date
    start_time: time
    end_time: time
    is_available: bool


class ReservationShortInfo(BaseModel):
    """Сокращенная схема бронирования для списков."""

    id: UUID
    reservation_code: str
    venue: 'VenueShortInfo'
    reservation_date: date
    start_time: time
    end_time: time
    total_price: Decimal
    status: ReservationStatus
    payment_status: PaymentStatus

    model_config = ConfigDict(from_attributes=True)


class ReservationInfo(ReservationShortInfo):
    """Полная схема бронирования со всей информацией и связями."""

    user: 'UserShortInfo'
    time_slot: 'TimeSlotShortInfo'
    duration_hours: Decimal
    base_price: Decimal
    discount_percentage: Decimal
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


from app.schemas.time_slot import TimeSlotShortInfo  # noqa: E402
from app.schemas.user import UserShortInfo  # noqa: E402
from app.schemas.venue import VenueShortInfo  # noqa: E402

ReservationShortInfo.model_rebuild()
ReservationInfo.model_rebuild()
