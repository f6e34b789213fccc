from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.types import StringConstraints

NameConstraint = StringConstraints(
    strip_whitespace=True,
    min_length=1,
    max_length=100,
)

IconConstraint = StringConstraints(strip_whitespace=True, max_length=50)


class VenueTypeBase(BaseModel):
    """Базовая схема для типа площадки."""

    name: Annotated[str, NameConstraint]
    description: Optional[str] = None
    icon: Optional[Annotated[str, IconConstraint]] = None

    @field_validator('description', mode='after')
    @classmethod
    def normalize_description(cls, value: Optional[str]) -> Optional[str]:
        """Очищает описание от лишних пробелов и пустых значений."""
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class VenueTypeCreate(VenueTypeBase):
    """Схема для создания типа площадки."""


class VenueTypeUpdate(BaseModel):
    """Схема для обновления типа площадки."""

    name: Optional[Annotated[str, NameConstraint]] = None
    description: Optional[str] = None
    icon: Optional[Annotated[str, IconConstraint]] = None
    is_active: Optional[bool] = None


class VenueTypeShortInfo(BaseModel):
    """Сокращенная схема типа площадки для вложенных объектов."""

    id: UUID
    name: str
    icon: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class VenueTypeInfo(VenueTypeShortInfo):
    """Полная схема типа площадки."""

    description: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
