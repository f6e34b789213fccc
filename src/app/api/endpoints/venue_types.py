from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger

from app.core.auth import role_checker
from app.core.constants import VENUE_TYPES_CACHE_PREFIX
from app.core.db import DbSession
from app.core.dependencies import CacheServiceDep
from app.models import User, VenueType
from app.repositories.venue_type import venue_type_repository
from app.schemas.common import ErrorResponse
from app.schemas.venue_type import (
    VenueTypeCreate,
    VenueTypeInfo,
    VenueTypeUpdate,
)
from app.utils.enums import STAFF_ROLES
from app.utils.http import build_error
from app.utils.logging_decorator import event_logger

router = APIRouter(prefix='/venue-types', tags=['Типы площадок'])


def _get_venue_types_cache_key(show_all: bool) -> str:
    """Генерация ключа кеша для списка типов площадок."""
    return f'{VENUE_TYPES_CACHE_PREFIX}:list:show_all={show_all}'


async def _get_venue_type_or_404(
    session: DbSession,
    venue_type_id: UUID,
) -> VenueType:
    venue_type = await venue_type_repository.get(session, id=venue_type_id)
    if venue_type is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=build_error(
                'Тип площадки не найден',
                status.HTTP_404_NOT_FOUND,
            ),
        )
    return venue_type


@router.get(
    '/',
    response_model=list[VenueTypeInfo],
    responses={
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_all_venue_types(
    session: DbSession,
    cache: CacheServiceDep,
    show_all: bool = Query(False, description='Показывать неактивные типы?'),
) -> list[VenueTypeInfo]:
    """Публичный список типов площадок с кешированием."""
    try:
        cache_key = _get_venue_types_cache_key(show_all)
        cached = await cache.get(cache_key)
        if cached is not None:
            return [VenueTypeInfo.model_validate(item) for item in cached]
        venue_types = [
            VenueTypeInfo.model_validate(venue_type)
            for venue_type in await venue_type_repository.get_multi(
                session,
                show_all=show_all,
            )
        ]
        await cache.set(
            cache_key,
            [item.model_dump(mode='json') for item in venue_types],
        )
        return venue_types
    except Exception as e:
        logger.error(f'Ошибка при получении типов площадок: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.post(
    '/',
    response_model=VenueTypeInfo,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_403_FORBIDDEN: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Создана', 'VenueType')
async def create_venue_type(
    venue_type_data: VenueTypeCreate,
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(STAFF_ROLES))],
    cache: CacheServiceDep,
) -> VenueTypeInfo:
    """Создает тип площадки и инвалидирует кеш."""
    try:
        venue_type = await venue_type_repository.create_unique(
            session,
            venue_type_data,
        )
        await cache.clear_venue_types_cache()
        return venue_type
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=build_error(str(e), status.HTTP_400_BAD_REQUEST),
        )
    except Exception as e:
        logger.error(f'Ошибка при создании типа площадки: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при создании типа площадки',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )


@router.get(
    '/{venue_type_id}',
    response_model=VenueTypeInfo,
    responses={
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
    },
)
async def get_venue_type(
    venue_type_id: UUID,
    session: DbSession,
) -> VenueTypeInfo:
    """Получает тип площадки по ID."""
    return await _get_venue_type_or_404(session, venue_type_id)


@router.patch(
    '/{venue_type_id}',
    response_model=VenueTypeInfo,
    responses={
        status.HTTP_400_BAD_REQUEST: {'model': ErrorResponse},
        status.HTTP_403_FORBIDDEN: {'model': ErrorResponse},
        status.HTTP_404_NOT_FOUND: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
@event_logger('Обновлена', 'VenueType')
async def update_venue_type(
    venue_type_id: UUID,
    update_data: VenueTypeUpdate,
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(STAFF_ROLES))],
    cache: CacheServiceDep,
) -> VenueTypeInfo:
    """Обновляет тип площадки. Деактивация через is_active=false."""
    try:
        venue_type = await _get_venue_type_or_404(session, venue_type_id)
        venue_type = await venue_type_repository.update_unique(
            session,
            venue_type,
            update_data,
        )
        await cache.clear_venue_types_cache()
        return venue_type
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=build_error(str(e), status.HTTP_400_BAD_REQUEST),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f'Ошибка при обновлении типа площадки: {str(e)}')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=build_error(
                'Внутренняя ошибка сервера при обновлении типа площадки',
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ),
        )
