import json
from functools import wraps
from typing import Any, Callable

from loguru import logger

SENSITIVE_FIELDS = frozenset({'password', 'hashed_password'})
MASK = '***'


def _serialize(obj: Any, only_set: bool = True) -> dict | None:
    """Сериализует схему Pydantic для лога, скрывая пароли."""
    if not hasattr(obj, 'model_dump'):
        return None
    try:
        data = obj.model_dump(
            mode='json',
            exclude_none=True,
            exclude_unset=only_set,
        )
    except Exception as e:
        logger.debug(f'Ошибка сериализации модели {e}')
        return None
    return {
        key: MASK if key in SENSITIVE_FIELDS else value
        for key, value in data.items()
    }


def event_logger(
    event_type: str,
    table_name: str,
    only_set: bool = True,
) -> Callable:
    """Декоратор для логирования изменяющих эндпоинтов.

    После успешного выполнения пишет в лог тип события, таблицу,
    идентификатор результата и тело запроса. Ошибка логируется
    с именем её типа и пробрасывается дальше без изменений.

    Args:
        event_type: Тип события ('Создана', 'Обновлена', 'Отменена').
        table_name: Название таблицы, над которой выполняется операция.
        only_set: Сериализовать только явно переданные поля.

    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            parameters = next(
                (
                    data
                    for data in (
                        _serialize(v, only_set) for v in kwargs.values()
                    )
                    if data is not None
                ),
                None,
            )
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f'{type(e).__name__} при операции с таблицей '
                    f'"{table_name}": {e}',
                )
                raise
            record_id = getattr(result, 'id', None)
            formatted_params = json.dumps(
                parameters or {},
                ensure_ascii=False,
                indent=4,
            )
            logger.info(
                f'{event_type} запись {record_id} в таблице "{table_name}", '
                f'с параметрами:\n{formatted_params}',
            )
            return result

        return wrapper

    return decorator
