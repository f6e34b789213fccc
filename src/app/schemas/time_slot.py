from datetime import datetime, time
from decimal import Decimal
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.core.constants import DEFAULT_PRICE_MULTIPLIER

Multiplier = Annotated[Decimal, Field(gt=0, max_digits=4, decimal_places=2)]


class TimeSlotBase(BaseModel):
    """Базовая схема для временного слота с общими полями."""

    start_time: time
    end_time: time
    price_multiplier_weekday: Multiplier = DEFAULT_PRICE_MULTIPLIER
    price_multiplier_weekend: Multiplier = DEFAULT_PRICE_MULTIPLIER
    is_available: bool = True

    @model_validator(mode='after')
    def check_time_interval(self) -> 'TimeSlotBase':
        """Проверяет, что время начала меньше времени окончания."""
        if self.start_time >= self.end_time:
            raise ValueError(
                'Время начала должно быть меньше времени окончания',
            )
        return self


class TimeSlotCreate(TimeSlotBase):
    """Схема для создания нового временного слота."""


class TimeSlotUpdate(BaseModel):
    """Схема для обновления существующего временного слота."""

    start_time: Optional[time] = None
    end_time: Optional[time] = None
    price_multiplier_weekday: Optional[Multiplier] = None
    price_multiplier_weekend: Optional[Multiplier] = None
    is_available: Optional[bool] = None
    is_active: Optional[bool] = None

    @model_validator(mode='after')
    def validate_time_range(self) -> 'TimeSlotUpdate':
        """Проверяет корректность временного интервала при обновлении."""
        if self.start_time is not None and self.end_time is not None:
            if self.start_time >= self.end_time:
                raise ValueError(
                    'Время начала должно быть меньше времени окончания',
                )
        return self


class TimeSlotShortInfo(BaseModel):
    """Сокращенная схема временного слота для вложенных объектов."""

    id: UUID
    start_time: time
    end_time: time
    price_multiplier_weekday: Decimal
    price_multiplier_weekend: Decimal

    model_config = ConfigDict(from_attributes=True)


class TimeSlotInfo(TimeSlotShortInfo):
    """Полная схема временного слота."""

    venue_id: UUID
    is_available: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SlotAvailabilityInfo(TimeSlotShortInfo):
    """Слот площадки на конкретную дату: свободен ли и сколько стоит."""

    is_available: bool
    price: Optional[Decimal] = None
