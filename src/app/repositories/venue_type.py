from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import VenueType
from app.repositories.base import CRUDBase
from app.schemas.venue_type import VenueTypeCreate, VenueTypeUpdate

DUPLICATE_NAME_MESSAGE = 'Тип площадки с таким названием уже существует'


class VenueTypeRepository(
    CRUDBase[VenueType, VenueTypeCreate, VenueTypeUpdate],
):
    """Репозиторий для операций с типами площадок."""

    def __init__(self) -> None:
        """Инициализация репозитория типов площадок."""
        super().__init__(VenueType)

    async def create_unique(
        self,
        session: AsyncSession,
        obj_in: VenueTypeCreate,
    ) -> VenueType:
        """Создает тип площадки с уникальным названием."""
        await self._ensure_unique_name(session, obj_in.name)
        try:
            return await self.create(session, obj_in)
        except IntegrityError:
            await session.rollback()
            raise ValueError(DUPLICATE_NAME_MESSAGE)

    async def update_unique(
        self,
        session: AsyncSession,
        db_obj: VenueType,
        obj_in: VenueTypeUpdate,
    ) -> VenueType:
        """Обновляет тип площадки, сохраняя уникальность названия."""
        if obj_in.name:
            await self._ensure_unique_name(
                session,
                obj_in.name,
                exclude_id=db_obj.id,
            )
        try:
            return await self.update_obj(session, db_obj, obj_in)
        except IntegrityError:
            await session.rollback()
            raise ValueError(DUPLICATE_NAME_MESSAGE)

    async def _ensure_unique_name(
        self,
        session: AsyncSession,
        name: str,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        """Проверяет уникальность названия без учёта регистра."""
        stmt = select(VenueType.name)
        if exclude_id is not None:
            stmt = stmt.where(VenueType.id != exclude_id)
        result = await session.execute(stmt)
        folded = name.casefold()
        if any(
            existing.casefold() == folded
            for existing in result.scalars().all()
        ):
            raise ValueError(DUPLICATE_NAME_MESSAGE)


venue_type_repository = VenueTypeRepository()
