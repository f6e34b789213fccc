from datetime import date
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger

from app.core.auth import role_checker
from app.core.constants import VENUES_CACHE_PREFIX
from app.core.db import DbSession
from app.core.dependencies import CacheServiceDep
from app.models import User, Venue
from app.repositories.reservation import reservation_repository
from app.repositories.venue import venue_repository
from app.schemas.common import ErrorResponse
from app.schemas.time_slot import SlotAvailabilityInfo
from app.schemas.venue import (
    VenueCreate,
    VenueInfo,
    VenueStatistics,
    VenueUpdate,
)
from app.services.availability_service import AvailabilityService
from app.utils.enums import STAFF_ROLES
from app.utils.http import build_error
from app.utils.logging_decorator import event_logger

router = APIRouter(prefix='/venues', tags=['Площадки'])


def _get_venues_cache_key(
    show_all: bool,
    venue_type_id: Optional[UUID],
) -> str:
    """Генерация ключа кеша для списка площадок."""
    base_key = f'{VENUES_CACHE_PREFIX}:list:show_all={show_all}'
    if venue_type_id:
        return f'{base_key}:venue_type_id={venue_type_id}'
    return base_key


async def _get_venue_or_404(
    session: DbSession,
    venue_id: UUID,
    active_only: bool = False,
) -> Venue:
    venue = await venue_repository.get(session, id=venue_id)
    if venue is None or (active_only and not venue.is_active):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=build_error(
                'Площадка не найдена',
                status.HTTP_404_NOT_FOUND,
            ),
        )
    return venue


@router.get(
    '/',
    response_model=list[VenueInfo],
    responses={
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_all_venues(
    session: DbSession,
    cache: CacheServiceDep,
    show_all: bool = Query(False, description='Показывать неактивные?'),
    venue_type_id: Optional[UUID] = Query(None, description='ID типа'),
) -> list[VenueInfo]:
    """Публичный каталог площадок с кешированием."""
    try:
        cache_key = _get_venues_cache_key(show_all, venue_type_id)
        cached = await cache.get(cache_key)
        if cached is not None:
            return [VenueInfo.model_validate(item) for item in cached]
        venues = [
            VenueInfo.model_validate(venue)
            for venue in await venue_repository.get_multi_filtered(
                session,
                venue_type_id=venue_type_id,
                show_all=show_all,
            )
        ]
        await cache.set(
            cache_key,
            [venue.model_dump(mode='json') for venue in venues],
        )
        return venues
    except Exception as e:
        logger.error(f'Ошибка при получении списка площадок: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.post(
    '/',
    response_model=VenueInfo,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_403_FORBIDDEN: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Создана', 'Venue')
async def create_venue(
    venue_data: VenueCreate,
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(STAFF_ROLES))],
    cache: CacheServiceDep,
) -> VenueInfo:
    """Создает площадку и инвалидирует кеш каталога."""
    try:
        venue = await venue_repository.create_with_validation(
            session,
            venue_data,
        )
        await cache.clear_venues_cache()
        return venue
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
        logger.error(f'Ошибка при создании площадки: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при создании площадки',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.get(
    '/{venue_id}',
    response_model=VenueInfo,
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
    },
)
async def get_venue(venue_id: UUID, session: DbSession) -> VenueInfo:
    """Получает площадку со слотами по ID."""
    return await _get_venue_or_404(session, venue_id)


@router.patch(
    '/{venue_id}',
    response_model=VenueInfo,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_403_FORBIDDEN: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Обновлена', 'Venue')
async def update_venue(
    venue_id: UUID,
    update_data: VenueUpdate,
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(STAFF_ROLES))],
    cache: CacheServiceDep,
) -> VenueInfo:
    """Обновляет площадку. Удаление заменено деактивацией."""
    try:
        venue = await _get_venue_or_404(session, venue_id)
        venue = await venue_repository.update_with_validation(
            session,
            venue,
            update_data,
        )
        await cache.clear_venues_cache()
        return venue
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
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f'Ошибка при обновлении площадки: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при обновлении площадки',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.get(
    '/{venue_id}/availability',
    response_model=list[SlotAvailabilityInfo],
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_venue_availability(
    venue_id: UUID,
    session: DbSession,
    reservation_date: date = Query(..., description='Дата бронирования'),
) -> list[SlotAvailabilityInfo]:
    """Слоты площадки на дату с признаком доступности и ценой."""
    try:
        venue = await _get_venue_or_404(session, venue_id, active_only=True)
        return await AvailabilityService.get_day_availability(
            session,
            venue,
            reservation_date,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(
            f'Ошибка при получении доступности площадки {venue_id}: {str(e)}',
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.get(
    '/{venue_id}/statistics',
    response_model=VenueStatistics,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_403_FORBIDDEN: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_venue_statistics(
    venue_id: UUID,
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(STAFF_ROLES))],
    date_from: Optional[date] = Query(None, description='Начало периода'),
    date_to: Optional[date] = Query(None, description='Конец периода'),
) -> VenueStatistics:
    """Статистика бронирований площадки, по умолчанию за 30 дней."""
    try:
        await _get_venue_or_404(session, venue_id)
        return await reservation_repository.get_venue_statistics(
            session,
            venue_id,
            date_from=date_from,
            date_to=date_to,
        )
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=build_error(str(e), status.HTTP_400_BAD_REQUEST),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f'Ошибка при расчёте статистики площадки: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )
