from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Venue, VenueType
from app.repositories.base import CRUDBase
from app.schemas.venue import VenueCreate, VenueUpdate

DUPLICATE_NAME_MESSAGE = 'Площадка с таким названием уже существует'


class VenueRepository(CRUDBase[Venue, VenueCreate, VenueUpdate]):
    """Репозиторий для операций с площадками."""

    def __init__(self) -> None:
        """Инициализация репозитория площадок."""
        super().__init__(Venue)

    async def get_multi_filtered(
        self,
        session: AsyncSession,
        *,
        venue_type_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 100,
        show_all: bool = False,
    ) -> List[Venue]:
        """Получает список площадок с фильтром по типу."""
        conditions = []
        if not show_all:
            conditions.append(Venue.is_active.is_(True))
        if venue_type_id:
            conditions.append(Venue.venue_type_id == venue_type_id)
        return await self.get(
            session,
            *conditions,
            many=True,
            order_by=(Venue.name,),
            offset=skip,
            limit=limit,
        )

    async def get_active_for_update(
        self,
        session: AsyncSession,
        venue_id: UUID,
    ) -> Optional[Venue]:
        """Блокирует строку активной площадки до конца транзакции.

        Сериализует конкурирующие бронирования одной площадки.
        """
        stmt = (
            select(Venue)
            .where(Venue.id == venue_id, Venue.is_active.is_(True))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def create_with_validation(
        self,
        session: AsyncSession,
        obj_in: VenueCreate,
    ) -> Venue:
        """Создает площадку, проверяя тип и уникальность названия."""
        await self._ensure_venue_type_exists(session, obj_in.venue_type_id)
        await self._ensure_unique_name(session, obj_in.name)
        try:
            db_obj = await self.create(session, obj_in)
        except IntegrityError:
            await session.rollback()
            raise ValueError(DUPLICATE_NAME_MESSAGE)
        return await self.get(session, id=db_obj.id)

    async def update_with_validation(
        self,
        session: AsyncSession,
        db_obj: Venue,
        obj_in: VenueUpdate,
    ) -> Venue:
        """Обновляет площадку с проверкой связей."""
        if obj_in.venue_type_id:
            await self._ensure_venue_type_exists(session, obj_in.venue_type_id)
        if obj_in.name:
            await self._ensure_unique_name(
                session,
                obj_in.name,
                exclude_id=db_obj.id,
            )
        venue_id = db_obj.id
        try:
            await self.update_obj(session, db_obj, obj_in)
        except IntegrityError:
            await session.rollback()
            raise ValueError(DUPLICATE_NAME_MESSAGE)
        return await self.get(session, id=venue_id)

    async def _ensure_venue_type_exists(
        self,
        session: AsyncSession,
        venue_type_id: UUID,
    ) -> VenueType:
        """Возвращает тип площадки или выбрасывает ошибку."""
        venue_type = await session.get(VenueType, venue_type_id)
        if venue_type is None or not venue_type.is_active:
            raise ValueError('Тип площадки не найден')
        return venue_type

    async def _ensure_unique_name(
        self,
        session: AsyncSession,
        name: str,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        """Проверяет уникальность названия площадки без учёта регистра.

        Сравнение идёт в Python: lower() в SQLite не знает кириллицы.
        """
        stmt = select(Venue.name)
        if exclude_id is not None:
            stmt = stmt.where(Venue.id != exclude_id)
        result = await session.execute(stmt)
        folded = name.casefold()
        if any(
            existing.casefold() == folded
            for existing in result.scalars().all()
        ):
            raise ValueError(DUPLICATE_NAME_MESSAGE)


venue_repository = VenueRepository()
