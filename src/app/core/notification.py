from functools import lru_cache

from fastapi_mail import ConnectionConfig, FastMail, MessageSchema, MessageType

from app.core.config import email_settings

MAIL_CONFIG_FIELDS = (
    'MAIL_USERNAME',
    'MAIL_PASSWORD',
    'MAIL_FROM',
    'MAIL_PORT',
    'MAIL_SERVER',
    'MAIL_STARTTLS',
    'MAIL_SSL_TLS',
    'USE_CREDENTIALS',
    'VALIDATE_CERTS',
)


@lru_cache
def fastmail() -> FastMail:
    """Клиент SMTP, собранный из настроек NOTIFY_*."""
    conf = ConnectionConfig(
        **email_settings.model_dump(include=set(MAIL_CONFIG_FIELDS)),
    )
    return FastMail(conf)


async def send_notification(
    emails: list[str],
    text: str,
    subject: str,
    html: bool,
) -> None:
    """Отправляет письмо по SMTP."""
    message = MessageSchema(
        subject=subject,
        recipients=emails,
        body=text,
        subtype=MessageType.html if html else MessageType.plain,
    )
    await fastmail().send_message(message)
