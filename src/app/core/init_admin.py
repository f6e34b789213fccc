from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import get_password_hash
from app.core.config import settings
from app.core.logging import logger
from app.repositories.user import user_repository
from app.schemas.user import UserCreate
from app.utils.enums import UserRole


async def upsert_admin_if_not_exist(session: AsyncSession) -> None:
    """Проверяет наличие учётки суперадминистратора. Воссоздаёт при нужде."""
    admin_user = UserCreate(
        username=settings.ADMIN_USERNAME,
        email=settings.ADMIN_EMAIL,
        phone=settings.ADMIN_PHONE,
        full_name=settings.ADMIN_USERNAME,
        password=settings.ADMIN_PASSWORD,
    )

    existing_user = await user_repository.get_by_credentials(
        session,
        admin_user,
    )

    if existing_user:
        existing_user.username = admin_user.username
        existing_user.email = admin_user.email
        existing_user.phone = admin_user.phone
        existing_user.hashed_password = get_password_hash(admin_user.password)
        existing_user.role = UserRole.SUPERADMIN
        existing_user.is_active = True
        await session.commit()
        logger.info(f'Учётная запись {admin_user.username} обновлена')
        return

    await user_repository.create(
        session,
        obj_in=admin_user,
        role=UserRole.SUPERADMIN,
    )
    logger.info(f'Создан суперадминистратор {admin_user.username}')
