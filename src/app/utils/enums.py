from enum import Enum


class UserRole(str, Enum):
    """Enum класс для ролей пользователей."""

    CUSTOMER = 'CUSTOMER'
    MEMBER = 'MEMBER'
    STAFF = 'STAFF'
    ADMIN = 'ADMIN'
    SUPERADMIN = 'SUPERADMIN'


class ReservationStatus(str, Enum):
    """Enum класс для статусов бронирований."""

    PENDING = 'PENDING'
    CONFIRMED = 'CONFIRMED'
    CANCELLED = 'CANCELLED'
    COMPLETED = 'COMPLETED'


class PaymentStatus(str, Enum):
    """Enum класс для статусов оплаты бронирований."""

    PENDING = 'PENDING'
    PAID = 'PAID'
    FAILED = 'FAILED'
    REFUNDED = 'REFUNDED'


class TransactionType(str, Enum):
    """Enum класс для типов финансовых операций."""

    INCOME = 'INCOME'
    EXPENSE = 'EXPENSE'


ELEVATED_ROLES = frozenset(
    {UserRole.STAFF, UserRole.ADMIN, UserRole.SUPERADMIN},
)
ALL_ROLES = list(UserRole)
STAFF_ROLES = [UserRole.STAFF, UserRole.ADMIN, UserRole.SUPERADMIN]
ADMIN_ROLES = [UserRole.ADMIN, UserRole.SUPERADMIN]

# Только такие бронирования занимают время площадки
ACTIVE_RESERVATION_STATUSES = frozenset(
    {ReservationStatus.PENDING, ReservationStatus.CONFIRMED},
)
CANCELLABLE_STATUSES = ACTIVE_RESERVATION_STATUSES
