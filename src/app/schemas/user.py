import re
from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from email_validator import EmailNotValidError
from email_validator import validate_email as validate_address
from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    field_validator,
    model_validator,
)
from pydantic.types import StringConstraints

from app.core.constants import (
    PASSWORD_MIN_LENGTH,
    PASSWORD_RULES,
    PASSWORD_SPECIAL_CHARS,
    PHONE_PATTERN,
)
from app.utils.enums import UserRole

NameConstraint = StringConstraints(
    strip_whitespace=True,
    min_length=3,
    max_length=128,
)

FullNameConstraint = StringConstraints(strip_whitespace=True, max_length=200)

Phone = Annotated[str, StringConstraints(pattern=PHONE_PATTERN)]

LOGIN_MIN_MATCH_LENGTH = 3

PASSWORD_ALLOWED = re.compile(
    f'[A-Za-z0-9{re.escape(PASSWORD_SPECIAL_CHARS)}]+',
)


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _email_or_none(value: Optional[str]) -> Optional[str]:
    """Email для входа: пустая строка означает, что его нет."""
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        validate_address(value, check_deliverability=False)
    except EmailNotValidError:
        raise ValueError(
            'Укажите адрес электронной почты, например: user@sport.ru',
        )
    return value


def _phone_or_none(value: Optional[str]) -> Optional[str]:
    """Телефон для входа в международном формате."""
    value = _blank_to_none(value)
    if value is None:
        return None
    if not re.fullmatch(PHONE_PATTERN, value):
        raise ValueError('Введите номер телефона в формате +XXXXXXXXX')
    return value


def _password_errors(password: str) -> list[str]:
    errors = []
    if len(password) < PASSWORD_MIN_LENGTH:
        errors.append(f'длина не менее {PASSWORD_MIN_LENGTH} символов')
    errors.extend(
        message
        for pattern, message in PASSWORD_RULES
        if not re.search(pattern, password)
    )
    if not any(char in PASSWORD_SPECIAL_CHARS for char in password):
        errors.append(f'хотя бы один спецсимвол из: {PASSWORD_SPECIAL_CHARS}')
    if not PASSWORD_ALLOWED.fullmatch(password):
        errors.append('только латиница, цифры и перечисленные спецсимволы')
    return errors


def _password_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError('Пароль должен быть строкой')
    errors = _password_errors(value)
    if errors:
        raise ValueError('Пароль нарушает требования: ' + '; '.join(errors))
    return value


def _ensure_password_differs_from_logins(
    password: Optional[str],
    *logins: Optional[str],
) -> None:
    """Пароль не должен содержать ни один из логинов пользователя."""
    if not password:
        return
    lowered = password.lower()
    for login in logins:
        name = login.split('@')[0].lower() if login else ''
        if len(name) >= LOGIN_MIN_MATCH_LENGTH and name in lowered:
            raise ValueError('Пароль не должен содержать логин')


def _normalize_username(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError('Имя пользователя должно быть строкой')
    cleaned = value.strip()
    if not cleaned:
        raise ValueError('Имя пользователя не может быть пустым')
    return cleaned


def _normalize_full_name(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError('Полное имя должно быть строкой')
    return value.strip() or None


class UserBase(BaseModel):
    """Базовая схема для пользователя с основными полями."""

    username: Annotated[str, NameConstraint]
    email: Optional[EmailStr] = None
    phone: Optional[Phone] = None
    full_name: Optional[Annotated[str, FullNameConstraint]] = None

    check_email = field_validator('email', mode='before')(_email_or_none)
    check_phone = field_validator('phone', mode='before')(_phone_or_none)


class UserCreate(UserBase):
    """Схема для регистрации нового пользователя.

    Войти можно по username, email или телефону, поэтому нужен хотя бы
    один контакт, а пароль не должен повторять ни один из логинов.
    """

    password: str

    normalize_username = field_validator('username', mode='before')(
        _normalize_username,
    )
    normalize_full_name = field_validator('full_name', mode='before')(
        _normalize_full_name,
    )
    check_password = field_validator('password', mode='before')(
        _password_or_none,
    )

    @model_validator(mode='after')
    def validate_logins(self) -> 'UserCreate':
        """Проверяет контакты и отличие пароля от логинов."""
        if not self.phone and not self.email:
            raise ValueError('Необходимо указать email или телефон')
        _ensure_password_differs_from_logins(
            self.password,
            self.username,
            self.email,
        )
        return self


class UserUpdateMe(BaseModel):
    """Схема для обновления собственного профиля."""

    username: Optional[Annotated[str, NameConstraint]] = None
    email: Optional[EmailStr] = None
    phone: Optional[Phone] = None
    full_name: Optional[Annotated[str, FullNameConstraint]] = None
    password: Optional[str] = None

    normalize_username = field_validator('username', mode='before')(
        _normalize_username,
    )
    normalize_full_name = field_validator('full_name', mode='before')(
        _normalize_full_name,
    )
    check_email = field_validator('email', mode='before')(_email_or_none)
    check_phone = field_validator('phone', mode='before')(_phone_or_none)
    check_password = field_validator('password', mode='before')(
        _password_or_none,
    )

    @model_validator(mode='after')
    def validate_password_logins(self) -> 'UserUpdateMe':
        """Новый пароль не должен повторять передаваемые логины."""
        _ensure_password_differs_from_logins(
            self.password,
            self.username,
            self.email,
        )
        return self


class UserUpdate(UserUpdateMe):
    """Схема для обновления пользователя администратором."""

    role: Optional[UserRole] = None
    is_active: Optional[bool] = None


class UserShortInfo(BaseModel):
    """Сокращенная схема пользователя для вложенных объектов."""

    id: UUID
    username: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserInfo(UserShortInfo):
    """Полная схема пользователя со всей информацией."""

    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
