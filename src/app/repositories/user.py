from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_password_hash
from app.models.user import User
from app.repositories.base import CRUDBase
from app.schemas.user import UserCreate, UserUpdate, UserUpdateMe
from app.utils.enums import UserRole


class UserRepository(CRUDBase[User, UserCreate, UserUpdate]):
    """Репозиторий для операций с пользователями."""

    def __init__(self) -> None:
        """Инициализация репозитория пользователей."""
        super().__init__(User)

    async def create(
        self,
        session: AsyncSession,
        obj_in: UserCreate,
        role: UserRole = UserRole.CUSTOMER,
    ) -> User:
        """Создание пользователя с хешированием пароля."""
        try:
            create_data = obj_in.model_dump(exclude={'password'})
            create_data['hashed_password'] = get_password_hash(obj_in.password)
            create_data['role'] = role

            # Проверяем уникальность username, email, phone
            existing_user = await self.get_by_credentials(session, obj_in)
            if existing_user:
                raise ValueError(
                    'Пользователь с такими данными уже существует',
                )

            db_obj = self.model(**create_data)
            session.add(db_obj)
            await session.commit()
            await session.refresh(db_obj)
        except IntegrityError:
            await session.rollback()
            raise ValueError('Пользователь с такими данными уже существует')

        return db_obj

    async def get_by_credentials(
        self,
        session: AsyncSession,
        user_data: Union[UserCreate, UserUpdate, UserUpdateMe],
        exclude_user_id: Optional[UUID] = None,
    ) -> Optional[User]:
        """Поиск пользователя по учетным данным."""
        conditions = []
        if user_data.username:
            conditions.append(User.username == user_data.username)
        if user_data.email:
            conditions.append(User.email == user_data.email)
        if user_data.phone:
            conditions.append(User.phone == user_data.phone)

        if not conditions:
            return None

        query = select(User).where(or_(*conditions))

        if exclude_user_id:
            query = query.where(User.id != exclude_user_id)

        result = await session.execute(query)
        return result.scalars().first()

    async def update(
        self,
        session: AsyncSession,
        db_obj: User,
        obj_in: UserUpdate | UserUpdateMe,
    ) -> User:
        """Обновление пользователя."""
        update_data = obj_in.model_dump(exclude_unset=True)

        conflicting_user = await self.get_by_credentials(
            session,
            user_data=obj_in,
            exclude_user_id=db_obj.id,
        )

        if conflicting_user:
            raise ValueError(
                'Другой пользователь с такими данными уже существует',
            )

        if 'password' in update_data:
            update_data['hashed_password'] = get_password_hash(
                update_data.pop('password'),
            )

        # Проверяем контакты
        if 'phone' in update_data or 'email' in update_data:
            new_phone = update_data.get('phone', db_obj.phone)
            new_email = update_data.get('email', db_obj.email)
            if not new_phone and not new_email:
                raise ValueError('Пользователь должен иметь email или телефон')

        for field, value in update_data.items():
            setattr(db_obj, field, value)

        session.add(db_obj)
        await session.commit()
        await session.refresh(db_obj)
        return db_obj

    async def get_by_login(
        self,
        session: AsyncSession,
        login: str,
    ) -> Optional[User]:
        """Получает пользователя по email, телефону или имени."""
        return await self.get(
            session,
            or_(
                User.email == login,
                User.phone == login,
                User.username == login,
            ),
        )

    async def get_staff_emails(
        self,
        session: AsyncSession,
        exclude_user_id: Optional[UUID] = None,
    ) -> List[str]:
        """Возвращает адреса активных сотрудников для уведомлений."""
        stmt = select(User.email).where(
            User.role.in_([UserRole.STAFF, UserRole.ADMIN]),
            User.is_active.is_(True),
            User.email.is_not(None),
        )
        if exclude_user_id:
            stmt = stmt.where(User.id != exclude_user_id)
        result = await session.execute(stmt)
        return list(result.scalars().all())


user_repository = UserRepository()
