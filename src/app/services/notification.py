from datetime import datetime
from typing import Optional

from celery_app.tasks import send_email_task

DEFAULT_SUBJECT = 'Уведомление о бронировании площадки'
NOTIFICATION_QUEUE = 'default'


def send_notification_task(
    emails: list[str],
    text: str,
    subject: str = DEFAULT_SUBJECT,
    html: bool = False,
    countdown: Optional[int] = None,
    eta: Optional[datetime] = None,
) -> None:
    """Ставит в очередь Celery письмо с уведомлением.

    Args:
        emails (list[str]): список электронных адресов.
        text (str): текст уведомления.
        subject (str, optional): тема письма.
        html (bool, optional): отправлять ли письмо в HTML-формате.
        countdown (Optional[int]): задержка отправки в секундах.
        eta (Optional[datetime]): момент времени для отправки.

    Note:
        eta и countdown взаимоисключающие, пустой список адресов
        считается ошибкой вызывающего кода.

    """
    if countdown and eta:
        raise ValueError('Нельзя одновременно использовать eta и countdown')
    if not emails:
        raise ValueError('Не указаны получатели уведомления')

    send_email_task.apply_async(
        (emails, text, subject, html),
        countdown=countdown,
        eta=eta,
        queue=NOTIFICATION_QUEUE,
    )
