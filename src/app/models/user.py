from typing import TYPE_CHECKING, List

from fastapi_users.db import SQLAlchemyBaseUserTableUUID
from sqlalchemy import CheckConstraint, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base
from app.utils.enums import ELEVATED_ROLES, UserRole

if TYPE_CHECKING:
    from app.models import Reservation


class User(SQLAlchemyBaseUserTableUUID, Base):
    """Расширенная таблица пользователей от FastAPI Users."""

    email: Mapped[str | None] = mapped_column(
        String(length=320),
        unique=True,
        index=True,
        nullable=True,
    )
    username: Mapped[str] = mapped_column(
        String(128),
        index=True,
        unique=True,
        nullable=False,
    )
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(
        String(32),
        unique=True,
        nullable=True,
    )
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name='user_role'),
        nullable=False,
        default=UserRole.CUSTOMER,
        server_default=UserRole.CUSTOMER.value,
        index=True,
    )

    reservations: Mapped[List['Reservation']] = relationship(
        back_populates='user',
        lazy='noload',
    )

    __table_args__ = (
        CheckConstraint('phone IS NOT NULL OR email IS NOT NULL'),
    )

    @property
    def is_elevated(self) -> bool:
        """Сотрудник, администратор или суперадминистратор."""
        return self.role in ELEVATED_ROLES
