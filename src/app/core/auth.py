from datetime import datetime, timedelta, timezone
from typing import Annotated, Awaitable, Callable, Iterable, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select

from app.core.config import settings
from app.core.db import DbSession
from app.core.logging import logger
from app.models.user import User
from app.utils.enums import UserRole

security = HTTPBearer(auto_error=False)

pwd_context = CryptContext(schemes=['bcrypt'], deprecated='auto')

Credentials = Annotated[
    Optional[HTTPAuthorizationCredentials],
    Depends(security),
]


def get_token_expires() -> timedelta:
    """Возвращает время жизни токена."""
    return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Проверка пароля."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Хеширование пароля."""
    return pwd_context.hash(password)


def create_access_token(user_id: UUID, username: str) -> str:
    """Создает JWT токен."""
    expire = datetime.now(timezone.utc) + get_token_expires()

    to_encode = {
        'sub': str(user_id),
        'username': username,
        'exp': expire,
    }

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
    )


async def _user_from_token(session: DbSession, token: str) -> Optional[User]:
    """Декодирует токен и находит активного пользователя.

    Raises:
        JWTError: подпись или срок действия токена некорректны

    """
    payload = jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
    )
    user_id: Optional[str] = payload.get('sub')
    if user_id is None:
        return None

    stmt = select(User).where(
        User.id == UUID(user_id),
        User.is_active.is_(True),
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_current_user_optional(
    credentials: Credentials,
    session: DbSession,
) -> Optional[User]:
    """Получение текущего пользователя из JWT токена (опционально).

    Если токен отсутствует или невалиден, возвращает None.
    """
    if credentials is None:
        return None
    try:
        return await _user_from_token(session, credentials.credentials)
    except (JWTError, ValueError) as e:
        logger.warning(f'Ошибка при обработке токена: {e}')
        return None


async def get_current_user(
    credentials: Credentials,
    session: DbSession,
) -> User:
    """Получение текущего пользователя из JWT токена."""
    if credentials is None:
        logger.info('Отсутствует заголовок Authorization в headers')
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Не авторизован',
        )

    try:
        user = await _user_from_token(session, credentials.credentials)
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Неверные учетные данные',
        )

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Пользователь не найден или неактивен',
        )
    return user


def public_or_role_checker(
    allowed_roles: Iterable[UserRole],
) -> Callable[..., Awaitable[Optional[User]]]:
    """Проверка роли или ее отсутствия для публичных эндпоинтов."""
    allowed = frozenset(allowed_roles)

    async def checker(
        credentials: Credentials,
        session: DbSession,
    ) -> Optional[User]:
        current_user = await get_current_user_optional(credentials, session)
        if current_user is None:
            return None
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail='Недостаточно прав для выполнения операции',
            )
        return current_user

    return checker


def role_checker(
    allowed_roles: Iterable[UserRole],
) -> Callable[..., Awaitable[User]]:
    """Универсальная функция для проверки ролей пользователя."""
    allowed = frozenset(allowed_roles)

    async def checker(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail='Недостаточно прав для выполнения операции',
            )

        return current_user

    return checker
