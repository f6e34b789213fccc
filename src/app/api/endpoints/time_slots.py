from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger

from app.core.auth import role_checker
from app.core.db import DbSession
from app.core.dependencies import CacheServiceDep
from app.models import TimeSlot, User
from app.repositories.time_slot import time_slot_repository
from app.schemas.common import ErrorResponse
from app.schemas.time_slot import TimeSlotCreate, TimeSlotInfo, TimeSlotUpdate
from app.utils.enums import STAFF_ROLES
from app.utils.http import build_error
from app.utils.logging_decorator import event_logger

router = APIRouter(
    prefix='/venues/{venue_id}/time-slots',
    tags=['Временные слоты'],
)


async def _get_slot_or_404(
    session: DbSession,
    venue_id: UUID,
    slot_id: UUID,
) -> TimeSlot:
    slot = await time_slot_repository.get_for_venue(session, venue_id, slot_id)
    if slot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=build_error(
                'Временной слот не найден',
                status.HTTP_404_NOT_FOUND,
            ),
        )
    return slot


@router.get(
    '/',
    response_model=list[TimeSlotInfo],
    responses={
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_venue_time_slots(
    venue_id: UUID,
    session: DbSession,
    show_all: bool = Query(False, description='Показывать неактивные слоты?'),
) -> list[TimeSlotInfo]:
    """Получает слоты площадки в порядке времени начала."""
    try:
        return await time_slot_repository.get_multi_by_venue(
            session,
            venue_id,
            show_all=show_all,
        )
    except Exception as e:
        logger.error(f'Ошибка при получении слотов площадки: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.post(
    '/',
    response_model=TimeSlotInfo,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_403_FORBIDDEN: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Создана', 'TimeSlot')
async def create_time_slot(
    venue_id: UUID,
    slot_data: TimeSlotCreate,
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(STAFF_ROLES))],
    cache: CacheServiceDep,
) -> TimeSlotInfo:
    """Создает временной слот площадки."""
    try:
        slot = await time_slot_repository.create_for_venue(
            session,
            venue_id,
            slot_data,
        )
        await cache.clear_venues_cache()
        return slot
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
        logger.error(f'Ошибка при создании слота: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при создании слота',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.patch(
    '/{slot_id}',
    response_model=TimeSlotInfo,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_403_FORBIDDEN: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Обновлена', 'TimeSlot')
async def update_time_slot(
    venue_id: UUID,
    slot_id: UUID,
    update_data: TimeSlotUpdate,
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(STAFF_ROLES))],
    cache: CacheServiceDep,
) -> TimeSlotInfo:
    """Обновляет слот: время, множители цены, доступность."""
    try:
        slot = await _get_slot_or_404(session, venue_id, slot_id)
        slot = await time_slot_repository.update_with_validation(
            session,
            slot,
            update_data,
        )
        await cache.clear_venues_cache()
        return slot
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=build_error(str(e), status.HTTP_400_BAD_REQUEST),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f'Ошибка при обновлении слота: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при обновлении слота',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )
