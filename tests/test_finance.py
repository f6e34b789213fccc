import uuid
from datetime import date, timedelta
from decimal import Decimal

import pytest

from app.repositories.financial_transaction import (
    financial_transaction_repository,
)
from app.schemas.finance import FinancialTransactionCreate
from app.utils.enums import TransactionType


def transaction(kind, amount, **fields):
    return FinancialTransactionCreate(
        transaction_type=kind,
        amount=Decimal(amount),
        description='Операция',
        **fields,
    )


class TestFinancialTransactions:
    """Учёт доходов и расходов."""

    async def test_created_by_current_user_today(self, session, staff):
        created = await financial_transaction_repository.create_by_user(
            session,
            transaction(TransactionType.INCOME, '1500'),
            staff,
        )
        assert created.created_by == staff.id
        assert created.transaction_date == date.today()

    async def test_unknown_reservation(self, session, staff):
        with pytest.raises(ValueError):
            await financial_transaction_repository.create_by_user(
                session,
                transaction(
                    TransactionType.INCOME,
                    '1500',
                    reservation_id=uuid.uuid4(),
                ),
                staff,
            )

    async def test_summary(self, session, admin):
        today = date.today()
        for kind, amount, day in (
            (TransactionType.INCOME, '3000', today),
            (TransactionType.INCOME, '1500.50', today - timedelta(days=2)),
            (TransactionType.EXPENSE, '1200', today - timedelta(days=5)),
            (TransactionType.INCOME, '9999', today - timedelta(days=90)),
        ):
            await financial_transaction_repository.create_by_user(
                session,
                transaction(kind, amount, transaction_date=day),
                admin,
            )

        summary = await financial_transaction_repository.get_summary(session)

        assert summary.total_income == Decimal('4500.50')
        assert summary.total_expense == Decimal('1200.00')
        assert summary.net_profit == Decimal('3300.50')
        assert summary.transaction_count == 3

    def test_amount_must_be_positive(self):
        with pytest.raises(ValueError):
            transaction(TransactionType.EXPENSE, '0')


class TestFinanceApi:
    """Доступ к финансам только у сотрудников и администраторов."""

    async def test_customer_has_no_access(
        self,
        client,
        customer,
        auth_headers,
    ):
        response = await client.get(
            '/finance/transactions',
            headers=auth_headers(customer),
        )
        assert response.status_code == 403

    async def test_staff_records_income(self, client, staff, auth_headers):
        response = await client.post(
            '/finance/transactions',
            json={
                'transaction_type': 'INCOME',
                'amount': '2500.00',
                'description': 'Оплата аренды поля',
                'payment_method': 'card',
            },
            headers=auth_headers(staff),
        )
        assert response.status_code == 201
        assert response.json()['created_by'] == str(staff.id)

    async def test_summary_is_admin_only(
        self,
        client,
        staff,
        admin,
        auth_headers,
    ):
        forbidden = await client.get(
            '/finance/summary',
            headers=auth_headers(staff),
        )
        allowed = await client.get(
            '/finance/summary',
            headers=auth_headers(admin),
        )
        assert forbidden.status_code == 403
        assert allowed.status_code == 200
        assert allowed.json()['transaction_count'] == 0

    async def test_reversed_period(self, client, admin, auth_headers):
        response = await client.get(
            '/finance/summary',
            params={'date_from': '2025-02-01', 'date_to': '2025-01-01'},
            headers=auth_headers(admin),
        )
        assert response.status_code == 400
