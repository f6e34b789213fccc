import uuid
from datetime import time
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Numeric,
    Time,
    UniqueConstraint,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.constants import DEFAULT_PRICE_MULTIPLIER
from app.core.db import Base

if TYPE_CHECKING:
    from app.models import Venue


class TimeSlot(Base):
    """Таблица временных слотов площадки с множителями цены."""

    venue_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('venue.id', ondelete='CASCADE'),
        index=True,
        nullable=False,
    )
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    price_multiplier_weekday: Mapped[Decimal] = mapped_column(
        Numeric(4, 2),
        nullable=False,
        default=DEFAULT_PRICE_MULTIPLIER,
        server_default='1.00',
    )
    price_multiplier_weekend: Mapped[Decimal] = mapped_column(
        Numeric(4, 2),
        nullable=False,
        default=DEFAULT_PRICE_MULTIPLIER,
        server_default='1.00',
    )
    is_available: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        server_default=true(),
    )

    venue: Mapped['Venue'] = relationship(
        back_populates='time_slots',
        lazy='selectin',
    )

    __table_args__ = (
        UniqueConstraint(
            'venue_id',
            'start_time',
            'end_time',
            name='uq_time_slot_venue_window',
        ),
        CheckConstraint('start_time < end_time', name='ck_time_slot_interval'),
        CheckConstraint(
            'price_multiplier_weekday > 0 AND price_multiplier_weekend > 0',
            name='ck_time_slot_multipliers',
        ),
    )
