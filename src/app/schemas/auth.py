from pydantic import BaseModel


class AuthToken(BaseModel):
    """Схема токена аутентификации."""

    access_token: str
    token_type: str = 'bearer'


class AuthData(BaseModel):
    """Схема для запроса логина."""

    login: str  # email, телефон или имя пользователя
    password: str
