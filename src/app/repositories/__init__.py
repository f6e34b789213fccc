from .base import CRUDBase
from .financial_transaction import (
    FinancialTransactionRepository,
    financial_transaction_repository,
)
from .reservation import ReservationRepository, reservation_repository
from .time_slot import TimeSlotRepository, time_slot_repository
from .user import UserRepository, user_repository
from .venue import VenueRepository, venue_repository
from .venue_type import VenueTypeRepository, venue_type_repository

__all__ = [
    'CRUDBase',
    'UserRepository',
    'user_repository',
    'VenueTypeRepository',
    'venue_type_repository',
    'VenueRepository',
    'venue_repository',
    'TimeSlotRepository',
    'time_slot_repository',
    'ReservationRepository',
    'reservation_repository',
    'FinancialTransactionRepository',
    'financial_transaction_repository',
]
