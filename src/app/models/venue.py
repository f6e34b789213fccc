import uuid
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import (
    JSON,
    CheckConstraint,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base

if TYPE_CHECKING:
    from app.models import TimeSlot, VenueType


class Venue(Base):
    """Таблица спортивных площадок.

    ``base_price`` это стоимость часа в будни, ``weekend_price`` в выходные;
    если цена выходного дня не задана, используется будничная.
    """

    venue_type_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('venuetype.id', ondelete='RESTRICT'),
        index=True,
        nullable=False,
    )
    name: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
        unique=True,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    capacity: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default='0',
    )
    base_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    weekend_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2),
        nullable=True,
    )
    facilities: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )
    rules: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    venue_type: Mapped['VenueType'] = relationship(
        back_populates='venues',
        lazy='selectin',
    )
    time_slots: Mapped[List['TimeSlot']] = relationship(
        back_populates='venue',
        order_by='TimeSlot.start_time',
        lazy='selectin',
    )

    __table_args__ = (
        CheckConstraint('base_price >= 0', name='ck_venue_base_price'),
        CheckConstraint(
            'weekend_price IS NULL OR weekend_price >= 0',
            name='ck_venue_weekend_price',
        ),
        CheckConstraint('capacity >= 0', name='ck_venue_capacity'),
    )
