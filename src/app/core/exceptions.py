from fastapi import status


class BookingError(ValueError):
    """Базовая ошибка бизнес-правил бронирования.

    Наследуется от ValueError, чтобы общий обработчик ошибок валидации
    в эндпоинтах продолжал работать. Каждый подкласс несёт HTTP-код и
    машиночитаемое имя ошибки, по которому клиент показывает конкретное
    сообщение пользователю.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = 'Ошибка бронирования'

    def __init__(self, message: str | None = None) -> None:
        """Сохраняет текст ошибки или подставляет текст по умолчанию."""
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def error(self) -> str:
        """Имя типа ошибки для ответа API."""
        return type(self).__name__


class VenueUnavailable(BookingError):
    """Площадка не найдена или неактивна."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Площадка не найдена или неактивна'


class SlotUnavailable(BookingError):
    """Слот не найден, принадлежит другой площадке или закрыт."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Временной слот недоступен для бронирования'


class SlotAlreadyBooked(BookingError):
    """Интервал пересекается с действующим бронированием."""

    status_code = status.HTTP_409_CONFLICT
    default_message = 'Это время уже забронировано другим пользователем'


class NoPricingAvailable(BookingError):
    """Нет слота, задающего цену для времени начала."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Для выбранного времени не задана стоимость'


class NotCancellable(BookingError):
    """Бронирование нельзя отменить в текущем статусе."""

    status_code = status.HTTP_409_CONFLICT
    default_message = (
        'Отменить можно только ожидающие или подтверждённые бронирования'
    )


class Unauthorized(BookingError):
    """Недостаточно прав для операции с бронированием."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'Недостаточно прав для выполнения операции'


class ReservationNotFound(BookingError):
    """Бронирование не найдено."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Бронирование не найдено'
