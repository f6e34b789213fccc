from datetime import date
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger

from app.core.auth import role_checker
from app.core.db import DbSession
from app.models import User
from app.repositories.financial_transaction import (
    financial_transaction_repository,
)
from app.schemas.common import ErrorResponse
from app.schemas.finance import (
    FinancialSummary,
    FinancialTransactionCreate,
    FinancialTransactionInfo,
    FinancialTransactionUpdate,
)
from app.utils.enums import ADMIN_ROLES, STAFF_ROLES, TransactionType
from app.utils.http import build_error
from app.utils.logging_decorator import event_logger

router = APIRouter(prefix='/finance', tags=['Финансы'])


@router.get(
    '/transactions',
    response_model=list[FinancialTransactionInfo],
    responses={
        status.HTTP_403_FORBIDDEN: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_transactions(
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(STAFF_ROLES))],
    transaction_type: Optional[TransactionType] = Query(None),
    reservation_id: Optional[UUID] = Query(None),
    date_from: Optional[date] = Query(None, description='С даты'),
    date_to: Optional[date] = Query(None, description='По дату'),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
) -> list[FinancialTransactionInfo]:
    """Журнал финансовых операций."""
    try:
        return await financial_transaction_repository.get_multi_filtered(
            session,
            transaction_type=transaction_type,
            reservation_id=reservation_id,
            date_from=date_from,
            date_to=date_to,
            skip=skip,
            limit=limit,
        )
    except Exception as e:
        logger.error(f'Ошибка при получении финансовых операций: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.post(
    '/transactions',
    response_model=FinancialTransactionInfo,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_403_FORBIDDEN: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Создана', 'FinancialTransaction')
async def create_transaction(
    transaction_data: FinancialTransactionCreate,
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(STAFF_ROLES))],
) -> FinancialTransactionInfo:
    """Регистрирует доход или расход."""
    try:
        return await financial_transaction_repository.create_by_user(
            session,
            transaction_data,
            current_user,
        )
    except ValueError as e:
        error_code = (
            status.HTTP_404_NOT_FOUND
            if 'не найд' in str(e).lower()
            else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(
            status_code=error_code,
            detail=build_error(str(e), error_code),
        )
    except Exception as e:
        logger.error(f'Ошибка при создании финансовой операции: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при создании операции',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.patch(
    '/transactions/{transaction_id}',
    response_model=FinancialTransactionInfo,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_403_FORBIDDEN: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Обновлена', 'FinancialTransaction')
async def update_transaction(
    transaction_id: UUID,
    update_data: FinancialTransactionUpdate,
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(ADMIN_ROLES))],
) -> FinancialTransactionInfo:
    """Исправляет операцию. Удаление заменено деактивацией."""
    try:
        transaction = await financial_transaction_repository.get(
            session,
            id=transaction_id,
        )
        if transaction is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=build_error(
                    'Финансовая операция не найдена',
                    status.HTTP_404_NOT_FOUND,
                ),
            )
        return await financial_transaction_repository.update_obj(
            session,
            transaction,
            update_data,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=build_error(str(e), status.HTTP_400_BAD_REQUEST),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f'Ошибка при обновлении финансовой операции: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при обновлении операции',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.get(
    '/summary',
    response_model=FinancialSummary,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_403_FORBIDDEN: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_financial_summary(
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(ADMIN_ROLES))],
    date_from: Optional[date] = Query(None, description='Начало периода'),
    date_to: Optional[date] = Query(None, description='Конец периода'),
) -> FinancialSummary:
    """Доходы, расходы и прибыль, по умолчанию за 30 дней."""
    try:
        return await financial_transaction_repository.get_summary(
            session,
            date_from=date_from,
            date_to=date_to,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=build_error(str(e), status.HTTP_400_BAD_REQUEST),
        )
    except Exception as e:
        logger.error(f'Ошибка при расчёте финансовой сводки: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )
