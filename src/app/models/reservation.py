import uuid
from datetime import date, time
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    Date,
    Enum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    Time,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base
from app.utils.enums import PaymentStatus, ReservationStatus

if TYPE_CHECKING:
    from app.models import TimeSlot, User, Venue

ACTIVE_STATUS_CLAUSE = text("status IN ('PENDING', 'CONFIRMED')")


class Reservation(Base):
    """Таблица бронирований площадок."""

    reservation_code: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('user.id', ondelete='CASCADE'),
        index=True,
        nullable=False,
    )
    venue_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('venue.id', ondelete='RESTRICT'),
        index=True,
        nullable=False,
    )
    time_slot_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey('timeslot.id', ondelete='RESTRICT'),
        nullable=False,
    )
    reservation_date: Mapped[date] = mapped_column(
        Date,
        index=True,
        nullable=False,
    )
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    duration_hours: Mapped[Decimal] = mapped_column(
        Numeric(4, 2),
        nullable=False,
    )
    base_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    discount_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        nullable=False,
        default=Decimal('0'),
        server_default='0',
    )
    total_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
    )
    status: Mapped[ReservationStatus] = mapped_column(
        Enum(ReservationStatus, name='reservation_status'),
        nullable=False,
        default=ReservationStatus.PENDING,
        server_default=ReservationStatus.PENDING.value,
        index=True,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name='payment_status'),
        nullable=False,
        default=PaymentStatus.PENDING,
        server_default=PaymentStatus.PENDING.value,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped['User'] = relationship(
        back_populates='reservations',
        lazy='selectin',
    )
    venue: Mapped['Venue'] = relationship(lazy='selectin')
    time_slot: Mapped['TimeSlot'] = relationship(lazy='selectin')

    __table_args__ = (
        CheckConstraint(
            'start_time < end_time',
            name='ck_reservation_interval',
        ),
        CheckConstraint(
            'discount_percentage >= 0 AND discount_percentage <= 100',
            name='ck_reservation_discount',
        ),
        Index(
            'ix_reservation_venue_date_window',
            'venue_id',
            'reservation_date',
            'start_time',
            'end_time',
        ),
        # Последний рубеж против двойного бронирования одного окна
        Index(
            'uq_reservation_active_window',
            'venue_id',
            'reservation_date',
            'start_time',
            'end_time',
            unique=True,
            postgresql_where=ACTIVE_STATUS_CLAUSE,
            sqlite_where=ACTIVE_STATUS_CLAUSE,
        ),
    )
