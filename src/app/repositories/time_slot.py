from datetime import time
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import TimeSlot, Venue
from app.repositories.base import CRUDBase
from app.schemas.time_slot import TimeSlotCreate, TimeSlotUpdate


class TimeSlotRepository(CRUDBase[TimeSlot, TimeSlotCreate, TimeSlotUpdate]):
    """Репозиторий для операций с временными слотами площадок."""

    def __init__(self) -> None:
        """Инициализация репозитория слотов."""
        super().__init__(TimeSlot)

    async def get_for_venue(
        self,
        session: AsyncSession,
        venue_id: UUID,
        slot_id: UUID,
    ) -> Optional[TimeSlot]:
        """Получает слот, принадлежащий площадке."""
        return await self.get(session, id=slot_id, venue_id=venue_id)

    async def get_multi_by_venue(
        self,
        session: AsyncSession,
        venue_id: UUID,
        *,
        show_all: bool = False,
    ) -> List[TimeSlot]:
        """Получает слоты площадки в порядке начала."""
        conditions = [TimeSlot.venue_id == venue_id]
        if not show_all:
            conditions.append(TimeSlot.is_active.is_(True))
        return await self.get(
            session,
            *conditions,
            many=True,
            order_by=(TimeSlot.start_time,),
        )

    async def create_for_venue(
        self,
        session: AsyncSession,
        venue_id: UUID,
        obj_in: TimeSlotCreate,
    ) -> TimeSlot:
        """Создает слот для конкретной площадки."""
        await self._ensure_venue_exists(session, venue_id)
        self._ensure_valid_interval(obj_in.start_time, obj_in.end_time)
        await self._ensure_no_overlap(
            session,
            venue_id=venue_id,
            start_time=obj_in.start_time,
            end_time=obj_in.end_time,
        )
        return await self.create(session, obj_in, venue_id=venue_id)

    async def update_with_validation(
        self,
        session: AsyncSession,
        db_obj: TimeSlot,
        obj_in: TimeSlotUpdate,
    ) -> TimeSlot:
        """Обновляет слот с проверкой временного интервала."""
        start_time = obj_in.start_time or db_obj.start_time
        end_time = obj_in.end_time or db_obj.end_time
        self._ensure_valid_interval(start_time, end_time)

        if obj_in.start_time is not None or obj_in.end_time is not None:
            await self._ensure_no_overlap(
                session,
                venue_id=db_obj.venue_id,
                start_time=start_time,
                end_time=end_time,
                exclude_id=db_obj.id,
            )
        return await self.update_obj(session, db_obj, obj_in)

    async def _ensure_venue_exists(
        self,
        session: AsyncSession,
        venue_id: UUID,
    ) -> Venue:
        """Возвращает площадку или выбрасывает ошибку, если её нет."""
        venue = await session.get(Venue, venue_id)
        if venue is None:
            raise ValueError('Площадка не найдена')
        return venue

    @staticmethod
    def _ensure_valid_interval(
        start_time: Optional[time],
        end_time: Optional[time],
    ) -> None:
        """Проверяет корректность временного интервала."""
        if start_time is None or end_time is None:
            raise ValueError('Не указано время начала или окончания слота')
        if start_time >= end_time:
            raise ValueError(
                'Время начала должно быть меньше времени окончания',
            )

    async def _ensure_no_overlap(
        self,
        session: AsyncSession,
        *,
        venue_id: UUID,
        start_time: time,
        end_time: time,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        """Проверяет, что интервал не пересекается с активными слотами."""
        stmt = select(TimeSlot.id).where(
            TimeSlot.venue_id == venue_id,
            TimeSlot.is_active.is_(True),
            TimeSlot.start_time < end_time,
            TimeSlot.end_time > start_time,
        )
        if exclude_id:
            stmt = stmt.where(TimeSlot.id != exclude_id)
        result = await session.execute(stmt)
        if result.scalars().first():
            raise ValueError(
                'Временной слот пересекается с существующим '
                'интервалом этой площадки',
            )


time_slot_repository = TimeSlotRepository()
