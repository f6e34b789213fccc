from datetime import date, timedelta
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import STATISTICS_DEFAULT_PERIOD_DAYS
from app.models import FinancialTransaction, Reservation, User
from app.repositories.base import CRUDBase
from app.schemas.finance import (
    FinancialSummary,
    FinancialTransactionCreate,
    FinancialTransactionUpdate,
)
from app.utils.enums import TransactionType

MONEY_PRECISION = Decimal('0.01')


class FinancialTransactionRepository(
    CRUDBase[
        FinancialTransaction,
        FinancialTransactionCreate,
        FinancialTransactionUpdate,
    ],
):
    """Репозиторий для финансовых операций."""

    def __init__(self) -> None:
        """Инициализация репозитория финансовых операций."""
        super().__init__(FinancialTransaction)

    async def create_by_user(
        self,
        session: AsyncSession,
        obj_in: FinancialTransactionCreate,
        user: User,
    ) -> FinancialTransaction:
        """Регистрирует операцию от имени сотрудника."""
        if obj_in.reservation_id is not None:
            reservation = await session.get(Reservation, obj_in.reservation_id)
            if reservation is None:
                raise ValueError('Бронирование не найдено')
        extra = {'created_by': user.id}
        if obj_in.transaction_date is None:
            extra['transaction_date'] = date.today()
        return await self.create(session, obj_in, **extra)

    async def get_multi_filtered(
        self,
        session: AsyncSession,
        *,
        transaction_type: Optional[TransactionType] = None,
        reservation_id: Optional[UUID] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[FinancialTransaction]:
        """Получает операции с фильтрами, новые первыми."""
        conditions = [FinancialTransaction.is_active.is_(True)]
        if transaction_type:
            conditions.append(
                FinancialTransaction.transaction_type == transaction_type,
            )
        if reservation_id:
            conditions.append(
                FinancialTransaction.reservation_id == reservation_id,
            )
        if date_from:
            conditions.append(
                FinancialTransaction.transaction_date >= date_from,
            )
        if date_to:
            conditions.append(
                FinancialTransaction.transaction_date <= date_to,
            )
        return await self.get(
            session,
            *conditions,
            many=True,
            order_by=(FinancialTransaction.transaction_date.desc(),),
            offset=skip,
            limit=limit,
        )

    async def get_summary(
        self,
        session: AsyncSession,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> FinancialSummary:
        """Сводка доходов и расходов, по умолчанию за 30 дней."""
        date_to = date_to or date.today()
        date_from = date_from or date_to - timedelta(
            days=STATISTICS_DEFAULT_PERIOD_DAYS,
        )
        if date_from > date_to:
            raise ValueError('Начало периода должно быть не позже окончания')

        amount = FinancialTransaction.amount
        kind = FinancialTransaction.transaction_type
        stmt = select(
            func.sum(case((kind == TransactionType.INCOME, amount))),
            func.sum(case((kind == TransactionType.EXPENSE, amount))),
            func.count(FinancialTransaction.id),
        ).where(
            FinancialTransaction.is_active.is_(True),
            FinancialTransaction.transaction_date.between(date_from, date_to),
        )
        income, expense, count = (await session.execute(stmt)).one()
        income = Decimal(str(income or 0)).quantize(MONEY_PRECISION)
        expense = Decimal(str(expense or 0)).quantize(MONEY_PRECISION)
        return FinancialSummary(
            date_from=date_from,
            date_to=date_to,
            total_income=income,
            total_expense=expense,
            net_profit=income - expense,
            transaction_count=count,
        )


financial_transaction_repository = FinancialTransactionRepository()
