"""Модуль схем Pydantic для валидации и сериализации данных.

Содержит схемы для всех сущностей системы:
- Типы площадок (VenueType)
- Площадки (Venue)
- Временные слоты (TimeSlot)
- Бронирования (Reservation)
- Финансовые операции (FinancialTransaction)
- Пользователи (User)
- Токен аутентификации (Auth)

Все схемы используют UUID для идентификаторов и поддерживают
валидацию данных.
"""

from .auth import AuthData, AuthToken
from .common import BookingErrorResponse, ErrorResponse
from .finance import (
    FinancialSummary,
    FinancialTransactionCreate,
    FinancialTransactionInfo,
    FinancialTransactionUpdate,
)
from .reservation import (
    PriceCalculation,
    ReservationCreate,
    ReservationDraft,
    ReservationInfo,
    ReservationQuote,
    ReservationShortInfo,
    ReservationStatusUpdate,
)
from .time_slot import (
    SlotAvailabilityInfo,
    TimeSlotCreate,
    TimeSlotInfo,
    TimeSlotShortInfo,
    TimeSlotUpdate,
)
from .user import UserCreate, UserInfo, UserShortInfo, UserUpdate, UserUpdateMe
from .venue import (
    VenueCreate,
    VenueInfo,
    VenueShortInfo,
    VenueStatistics,
    VenueUpdate,
)
from .venue_type import (
    VenueTypeCreate,
    VenueTypeInfo,
    VenueTypeShortInfo,
    VenueTypeUpdate,
)

__all__ = [
    'AuthData',
    'AuthToken',
    'BookingErrorResponse',
    'ErrorResponse',
    'FinancialSummary',
    'FinancialTransactionCreate',
    'FinancialTransactionInfo',
    'FinancialTransactionUpdate',
    'PriceCalculation',
    'ReservationCreate',
    'ReservationDraft',
    'ReservationInfo',
    'ReservationQuote',
    'ReservationShortInfo',
    'ReservationStatusUpdate',
    'SlotAvailabilityInfo',
    'TimeSlotCreate',
    'TimeSlotInfo',
    'TimeSlotShortInfo',
    'TimeSlotUpdate',
    'UserCreate',
    'UserInfo',
    'UserShortInfo',
    'UserUpdate',
    'UserUpdateMe',
    'VenueCreate',
    'VenueInfo',
    'VenueShortInfo',
    'VenueStatistics',
    'VenueUpdate',
    'VenueTypeCreate',
    'VenueTypeInfo',
    'VenueTypeShortInfo',
    'VenueTypeUpdate',
]
