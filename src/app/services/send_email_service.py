from uuid import UUID

from loguru import logger

from app.core.db import DbSession
from app.models import Reservation
from app.repositories.reservation import reservation_repository
from app.repositories.user import user_repository
from app.services.notification import send_notification_task

TIME_FORMAT = '%H:%M'


def format_reservation(reservation: Reservation) -> str:
    """Текст с деталями бронирования для письма."""
    return (
        f'Код бронирования: {reservation.reservation_code}\n'
        f'Площадка: {reservation.venue.name}\n'
        f'Дата: {reservation.reservation_date}\n'
        f'Время: {reservation.start_time.strftime(TIME_FORMAT)}-'
        f'{reservation.end_time.strftime(TIME_FORMAT)}\n'
        f'Стоимость: {reservation.total_price}\n'
        f'Статус: {reservation.status.value}\n'
        f'Оплата: {reservation.payment_status.value}\n'
        f'Комментарий: {reservation.notes or "Не указан"}\n'
    )


class NotificationService:
    """Сервис для управления уведомлениями о бронированиях."""

    @staticmethod
    async def _collect_emails(
        session: DbSession,
        reservation: Reservation,
        current_user_id: UUID,
    ) -> list[str]:
        """Адреса клиента и сотрудников, кроме автора изменения."""
        emails = [reservation.user.email]
        staff_emails = await user_repository.get_staff_emails(
            session,
            exclude_user_id=current_user_id,
        )
        emails.extend(staff_emails)
        unique = dict.fromkeys(email for email in emails if email)
        return list(unique)

    @staticmethod
    async def _notify(
        session: DbSession,
        reservation_id: UUID,
        current_user_id: UUID,
        subject: str,
        header: str,
    ) -> None:
        try:
            reservation = await reservation_repository.get_with_relations(
                session,
                reservation_id,
            )
            if not reservation:
                logger.warning(
                    f'Бронирование {reservation_id} не найдено для '
                    f'уведомления "{subject}"',
                )
                return
            emails = await NotificationService._collect_emails(
                session,
                reservation,
                current_user_id,
            )
            if not emails:
                logger.warning(
                    f'Нет email для уведомления "{subject}" по '
                    f'бронированию {reservation_id}',
                )
                return
            send_notification_task(
                emails=emails,
                text=f'{header}\n\n{format_reservation(reservation)}',
                subject=subject,
            )
            logger.info(
                f'Уведомление "{subject}" по бронированию {reservation_id} '
                'поставлено в очередь',
            )
        except Exception as e:
            logger.error(
                f'Ошибка отправки уведомления "{subject}" по бронированию '
                f'{reservation_id}: {str(e)}',
            )
            raise

    @staticmethod
    async def send_reservation_created_notification(
        session: DbSession,
        reservation_id: UUID,
        current_user_id: UUID,
    ) -> None:
        """Отправляет уведомление о создании бронирования."""
        await NotificationService._notify(
            session,
            reservation_id,
            current_user_id,
            subject='Новое бронирование',
            header='Бронирование создано и ожидает подтверждения.',
        )

    @staticmethod
    async def send_reservation_cancelled_notification(
        session: DbSession,
        reservation_id: UUID,
        current_user_id: UUID,
    ) -> None:
        """Отправляет уведомление об отмене бронирования."""
        await NotificationService._notify(
            session,
            reservation_id,
            current_user_id,
            subject='Бронирование отменено',
            header='Бронирование отменено.',
        )

    @staticmethod
    async def send_reservation_status_notification(
        session: DbSession,
        reservation_id: UUID,
        current_user_id: UUID,
    ) -> None:
        """Отправляет уведомление об изменении статуса бронирования."""
        await NotificationService._notify(
            session,
            reservation_id,
            current_user_id,
            subject='Изменение бронирования',
            header='Статус бронирования изменён.',
        )
