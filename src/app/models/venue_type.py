from typing import TYPE_CHECKING, List

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.db import Base

if TYPE_CHECKING:
    from app.models import Venue


class VenueType(Base):
    """Таблица видов площадок (футбол, бадминтон, бассейн...)."""

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str | None] = mapped_column(String(50), nullable=True)

    venues: Mapped[List['Venue']] = relationship(
        back_populates='venue_type',
        lazy='noload',
    )
