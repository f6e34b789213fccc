from datetime import date
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from loguru import logger

from app.core.auth import role_checker
from app.core.db import DbSession
from app.core.exceptions import BookingError, ReservationNotFound, Unauthorized
from app.models import Reservation, User
from app.repositories.reservation import reservation_repository
from app.schemas.common import BookingErrorResponse, ErrorResponse
from app.schemas.reservation import (
    ReservationCreate,
    ReservationDraft,
    ReservationInfo,
    ReservationQuote,
    ReservationShortInfo,
    ReservationStatusUpdate,
)
from app.services.send_email_service import NotificationService
from app.utils.enums import ALL_ROLES, STAFF_ROLES, ReservationStatus
from app.utils.http import build_error
from app.utils.logging_decorator import event_logger

router = APIRouter(prefix='/reservations', tags=['Бронирования'])

BOOKING_ERRORS = {
    status.HTTP_400_BAD_REQUEST: {'model': BookingErrorResponse},
    status.HTTP_403_FORBIDDEN: {'model': BookingErrorResponse},
    status.HTTP_404_NOT_FOUND: {'model': BookingErrorResponse},
    status.HTTP_409_CONFLICT: {'model': BookingErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
}


def _internal_error(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=build_error(message, status.HTTP_500_INTERNAL_SERVER_ERROR),
    )


def _ensure_can_view(
    reservation: Optional[Reservation],
    user: User,
) -> Reservation:
    """Клиент видит только свои бронирования, сотрудник любые."""
    if reservation is None:
        raise ReservationNotFound()
    if reservation.user_id != user.id and not user.is_elevated:
        raise Unauthorized('Недостаточно прав для просмотра бронирования')
    return reservation


@router.post(
    '/quote',
    response_model=ReservationQuote,
    responses=BOOKING_ERRORS,
)
async def quote_reservation(
    draft: ReservationDraft,
    session: DbSession,
) -> ReservationQuote:
    """Предварительный расчёт стоимости без создания бронирования."""
    try:
        return await reservation_repository.quote(session, draft)
    except BookingError:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=build_error(str(e), status.HTTP_400_BAD_REQUEST),
        )
    except Exception as e:
        logger.error(f'Ошибка при расчёте стоимости: {str(e)}')
        raise _internal_error('Внутренняя ошибка сервера при расчёте цены')


@router.post(
    '/',
    response_model=ReservationInfo,
    status_code=status.HTTP_201_CREATED,
    responses=BOOKING_ERRORS,
)
@event_logger('Создана', 'Reservation')
async def create_reservation(
    reservation_data: ReservationCreate,
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(ALL_ROLES))],
) -> ReservationInfo:
    """Создает бронирование площадки.

    Args:
        reservation_data: Черновик бронирования
        session: Асинхронная сессия базы данных
        current_user: Информация о текущем пользователе
    Returns:
        ReservationInfo: Бронирование в статусе PENDING
    Raises:
        VenueUnavailable: 404 если площадка не найдена или неактивна
        SlotUnavailable: 400 если слот чужой или закрыт
        SlotAlreadyBooked: 409 если время уже занято
        NoPricingAvailable: 400 если для времени нет цены
        Unauthorized: 403 если скидку назначает не сотрудник

    """
    user_id = current_user.id
    try:
        reservation = await reservation_repository.create_with_validation(
            session,
            reservation_data,
            current_user,
        )
    except BookingError:
        raise
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=build_error(str(e), status.HTTP_400_BAD_REQUEST),
        )
    except Exception as e:
        logger.error(f'Неожиданная ошибка при создании бронирования: {e}')
        raise _internal_error(
            'Внутренняя ошибка сервера при создании бронирования',
        )
    try:
        await NotificationService.send_reservation_created_notification(
            session,
            reservation.id,
            user_id,
        )
    except Exception as e:
        logger.error(f'Ошибка отправки уведомления: {str(e)}')
    return reservation


@router.get(
    '/',
    response_model=list[ReservationShortInfo],
    responses={
        status.HTTP_401_UNAUTHORIZED: {'model': ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {'model': ErrorResponse},
    },
)
async def get_reservations(
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(ALL_ROLES))],
    venue_id: Optional[UUID] = Query(None, description='ID площадки'),
    reservation_status: Optional[ReservationStatus] = Query(
        None,
        alias='status',
        description='Статус бронирования',
    ),
    date_from: Optional[date] = Query(None, description='С даты'),
    date_to: Optional[date] = Query(None, description='По дату'),
    user_id: Optional[UUID] = Query(
        None,
        description='ID клиента (только для сотрудников)',
    ),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
) -> list[ReservationShortInfo]:
    """Список бронирований: клиенту свои, сотруднику все."""
    if not current_user.is_elevated:
        user_id = current_user.id
    try:
        return await reservation_repository.get_multi_filtered(
            session,
            user_id=user_id,
            venue_id=venue_id,
            status=reservation_status,
            date_from=date_from,
            date_to=date_to,
            skip=skip,
            limit=limit,
        )
    except Exception as e:
        logger.error(f'Ошибка при получении списка бронирований: {str(e)}')
        raise _internal_error('Внутренняя ошибка сервера')


@router.get(
    '/code/{reservation_code}',
    response_model=ReservationInfo,
    responses=BOOKING_ERRORS,
)
async def get_reservation_by_code(
    reservation_code: str,
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(ALL_ROLES))],
) -> ReservationInfo:
    """Получает бронирование по коду вида OSC20250101XXXX."""
    reservation = await reservation_repository.get_by_code(
        session,
        reservation_code.strip().upper(),
    )
    return _ensure_can_view(reservation, current_user)


@router.get(
    '/{reservation_id}',
    response_model=ReservationInfo,
    responses=BOOKING_ERRORS,
)
async def get_reservation(
    reservation_id: UUID,
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(ALL_ROLES))],
) -> ReservationInfo:
    """Получает бронирование по ID."""
    reservation = await reservation_repository.get_with_relations(
        session,
        reservation_id,
    )
    return _ensure_can_view(reservation, current_user)


@router.post(
    '/{reservation_id}/cancel',
    response_model=ReservationInfo,
    responses=BOOKING_ERRORS,
)
@event_logger('Отменена', 'Reservation')
async def cancel_reservation(
    reservation_id: UUID,
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(ALL_ROLES))],
) -> ReservationInfo:
    """Отменяет ожидающее или подтверждённое бронирование.

    Raises:
        ReservationNotFound: 404 если бронирования нет
        Unauthorized: 403 если отменяет не владелец и не сотрудник
        NotCancellable: 409 если бронь уже отменена или завершена

    """
    user_id = current_user.id
    reservation = await reservation_repository.cancel(
        session,
        reservation_id,
        current_user,
    )
    try:
        await NotificationService.send_reservation_cancelled_notification(
            session,
            reservation.id,
            user_id,
        )
    except Exception as e:
        logger.error(f'Ошибка отправки уведомления об отмене: {str(e)}')
    return reservation


@router.patch(
    '/{reservation_id}/status',
    response_model=ReservationInfo,
    responses=BOOKING_ERRORS,
)
@event_logger('Обновлена', 'Reservation')
async def update_reservation_status(
    reservation_id: UUID,
    update_data: ReservationStatusUpdate,
    session: DbSession,
    current_user: Annotated[User, Depends(role_checker(STAFF_ROLES))],
) -> ReservationInfo:
    """Сотрудник меняет статус бронирования и статус оплаты."""
    user_id = current_user.id
    reservation = await reservation_repository.get_with_relations(
        session,
        reservation_id,
    )
    if reservation is None:
        raise ReservationNotFound()
    reservation = await reservation_repository.update_status(
        session,
        reservation,
        update_data,
    )
    try:
        await NotificationService.send_reservation_status_notification(
            session,
            reservation.id,
            user_id,
        )
    except Exception as e:
        logger.error(f'Ошибка отправки уведомления о статусе: {str(e)}')
    return reservation
