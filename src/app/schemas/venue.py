from datetime import date, datetime
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
from pydantic.types import StringConstraints

NameConstraint = StringConstraints(
    strip_whitespace=True,
    min_length=1,
    max_length=200,
)

Price = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]


def _clean_facilities(value: list[str]) -> list[str]:
    cleaned = [item.strip() for item in value if item and item.strip()]
    if len(cleaned) != len(set(cleaned)):
        raise ValueError('Список удобств не должен содержать дубликаты')
    return cleaned


class VenueBase(BaseModel):
    """Базовая схема для площадки с общими полями."""

    venue_type_id: UUID
    name: Annotated[str, NameConstraint]
    description: Optional[str] = None
    capacity: Annotated[int, Field(ge=0)] = 0
    base_price: Price
    weekend_price: Optional[Price] = None
    facilities: list[str] = Field(default_factory=list)
    rules: Optional[str] = None
    image_url: Optional[Annotated[str, StringConstraints(max_length=500)]] = (
        None
    )

    @field_validator('description', 'rules', mode='after')
    @classmethod
    def normalize_text(cls, value: Optional[str]) -> Optional[str]:
        """Очищает текстовые поля от лишних пробелов и пустых значений."""
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None

    @field_validator('facilities', mode='after')
    @classmethod
    def validate_facilities(cls, value: list[str]) -> list[str]:
        """Убирает пустые элементы и проверяет дубликаты."""
        return _clean_facilities(value)


class VenueCreate(VenueBase):
    """Схема для создания новой площадки."""


class VenueUpdate(BaseModel):
    """Схема для обновления существующей площадки."""

    venue_type_id: Optional[UUID] = None
    name: Optional[Annotated[str, NameConstraint]] = None
    description: Optional[str] = None
    capacity: Optional[Annotated[int, Field(ge=0)]] = None
    base_price: Optional[Price] = None
    weekend_price: Optional[Price] = None
    facilities: Optional[list[str]] = None
    rules: Optional[str] = None
    image_url: Optional[Annotated[str, StringConstraints(max_length=500)]] = (
        None
    )
    is_active: Optional[bool] = None

    @field_validator('facilities', mode='after')
    @classmethod
    def validate_facilities(
        cls,
        value: Optional[list[str]],
    ) -> Optional[list[str]]:
        """Проверяет список удобств, если он передан."""
        if value is None:
            return None
        return _clean_facilities(value)

    @model_validator(mode='after')
    def check_not_empty(self) -> 'VenueUpdate':
        """Запрещает пустой запрос на обновление."""
        if not self.model_fields_set:
            raise ValueError('Не переданы поля для обновления')
        return self


class VenueShortInfo(BaseModel):
    """Сокращенная схема площадки для вложенных объектов."""

    id: UUID
    name: str
    base_price: Decimal
    weekend_price: Optional[Decimal] = None

    model_config = ConfigDict(from_attributes=True)


class VenueInfo(VenueShortInfo):
    """Полная схема площадки со всей информацией и связями."""

    venue_type: 'VenueTypeShortInfo'
    description: Optional[str] = None
    capacity: int
    facilities: list[str] = []
    rules: Optional[str] = None
    image_url: Optional[str] = None
    time_slots: list['TimeSlotShortInfo'] = []
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VenueStatistics(BaseModel):
    """Статистика бронирований площадки за период."""

    venue_id: UUID
    date_from: date
    date_to: date
    total_reservations: int
    confirmed_reservations: int
    cancelled_reservations: int
    total_revenue: Decimal
    average_booking_value: Decimal
    utilization_rate: Decimal


# Для избежания циклических импортов
from app.schemas.time_slot import TimeSlotShortInfo  # noqa: E402
from app.schemas.venue_type import VenueTypeShortInfo  # noqa: E402

VenueInfo.model_rebuild()
