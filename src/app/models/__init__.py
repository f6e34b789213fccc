from .financial_transaction import FinancialTransaction
from .reservation import Reservation
from .time_slot import TimeSlot
from .user import User
from .venue import Venue
from .venue_type import VenueType

__all__ = [
    'User',
    'VenueType',
    'Venue',
    'TimeSlot',
    'Reservation',
    'FinancialTransaction',
]
