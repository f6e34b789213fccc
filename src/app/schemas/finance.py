from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.types import StringConstraints

from app.utils.enums import TransactionType

Amount = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]


class FinancialTransactionCreate(BaseModel):
    """Схема для регистрации финансовой операции."""

    reservation_id: Optional[UUID] = None
    transaction_type: TransactionType
    amount: Amount
    description: Annotated[
        str,
        StringConstraints(strip_whitespace=True, min_length=1),
    ]
    transaction_date: Optional[date] = None
    reference_number: Optional[
        Annotated[str, StringConstraints(max_length=100)]
    ] = None
    payment_method: Optional[
        Annotated[str, StringConstraints(max_length=50)]
    ] = None

    @field_validator('reference_number', 'payment_method', mode='after')
    @classmethod
    def normalize_optional(cls, value: Optional[str]) -> Optional[str]:
        """Приводит пустые строки к None."""
        if value is None:
            return None
        return value.strip() or None


class FinancialTransactionUpdate(BaseModel):
    """Схема для исправления финансовой операции."""

    transaction_type: Optional[TransactionType] = None
    amount: Optional[Amount] = None
    description: Optional[str] = None
    transaction_date: Optional[date] = None
    reference_number: Optional[str] = None
    payment_method: Optional[str] = None
    is_active: Optional[bool] = None


class FinancialTransactionInfo(BaseModel):
    """Полная схема финансовой операции."""

    id: UUID
    reservation_id: Optional[UUID] = None
    transaction_type: TransactionType
    amount: Decimal
    description: str
    transaction_date: date
    reference_number: Optional[str] = None
    payment_method: Optional[str] = None
    created_by: Optional[UUID] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FinancialSummary(BaseModel):
    """Сводка доходов и расходов за период."""

    date_from: date
    date_to: date
    total_income: Decimal
    total_expense: Decimal
    net_profit: Decimal
    transaction_count: int
