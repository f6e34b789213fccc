import asyncio

from fastapi_mail.errors import ConnectionErrors
from loguru import logger

from app.core.notification import send_notification
from celery_app.main import celery_app

MAX_SEND_RETRIES = 3


@celery_app.task(
    name='send-notification',
    autoretry_for=(ConnectionErrors,),
    retry_backoff=True,
    max_retries=MAX_SEND_RETRIES,
)
def send_email_task(
    emails: list[str],
    text: str,
    subject: str,
    html: bool,
) -> int:
    """Таска на отправку письма о бронировании площадки."""
    asyncio.run(
        send_notification(
            emails=emails,
            text=text,
            subject=subject,
            html=html,
        ),
    )
    logger.info(f'Письмо "{subject}" отправлено: {len(emails)} адресатов')
    return len(emails)
