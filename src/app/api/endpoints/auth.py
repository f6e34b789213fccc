from fastapi import APIRouter, HTTPException, status

from app.core.auth import create_access_token, verify_password
from app.core.db import DbSession
from app.core.logging import logger
from app.repositories.user import user_repository
from app.schemas.auth import AuthData, AuthToken
from app.schemas.common import ErrorResponse

router = APIRouter(prefix='/auth', tags=['Аутентификация'])

INVALID_CREDENTIALS = 'Неверный логин или пароль'


@router.post(
    '/login',
    response_model=AuthToken,
    responses={
        status.HTTP_401_UNAUTHORIZED: {'model': ErrorResponse},
    },
)
async def login(
    session: DbSession,
    login_data: AuthData,
) -> AuthToken:
    """Аутентификация по email, телефону или имени и выдача JWT токена."""
    user = await user_repository.get_by_login(session, login_data.login)

    if (
        not user
        or not user.is_active
        or not verify_password(login_data.password, user.hashed_password)
    ):
        logger.warning(f'Неудачная попытка входа: {login_data.login}')
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
        )

    access_token = create_access_token(
        user_id=user.id,
        username=user.username,
    )

    return AuthToken(access_token=access_token, token_type='bearer')
