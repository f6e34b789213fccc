import uuid
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    Enum,
    ForeignKey,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base
from app.utils.enums import TransactionType

if TYPE_CHECKING:
    from app.models import Reservation


class FinancialTransaction(Base):
    """Таблица финансовых операций (доходы и расходы центра)."""

    reservation_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey('reservation.id', ondelete='SET NULL'),
        index=True,
        nullable=True,
    )
    transaction_type: Mapped[TransactionType] = mapped_column(
        Enum(TransactionType, name='transaction_type'),
        index=True,
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    transaction_date: Mapped[date] = mapped_column(
        Date,
        index=True,
        nullable=False,
        default=date.today,
        server_default=func.current_date(),
    )
    reference_number: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
    payment_method: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
    )
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey('user.id', ondelete='SET NULL'),
        nullable=True,
    )

    reservation: Mapped[Optional['Reservation']] = relationship(
        lazy='selectin',
    )

    __table_args__ = (
        CheckConstraint('amount > 0', name='ck_financial_amount_positive'),
    )
