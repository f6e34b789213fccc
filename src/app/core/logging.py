import logging
import sys
from pathlib import Path

from loguru import logger

from app.core.config import (
    LOG_DIR,
    settings,
)
from app.core.constants import (
    FILE_LOG_FORMAT,
    INTERCEPTED_LOGGERS,
    LOG_COMPRESSION,
    LOG_DEPTH,
    LOG_ENCODING,
    LOG_FORMAT,
    get_logger_header,
)

_STD_INTERCEPT_CONFIGURED = False

LOG_CONTEXT_DEFAULTS = {
    'username': 'SYSTEM',
    'user_id': '-',
    'request_id': '-',
}


class InterceptHandler(logging.Handler):
    """Перехват stdlib логов (uvicorn, sqlalchemy, celery) в loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Передаёт запись стандартного логгера в Loguru."""
        try:
            lvl = logger.level(record.levelname).name
        except ValueError:
            lvl = record.levelno
        logger.opt(
            depth=LOG_DEPTH,
            exception=record.exc_info,
        ).log(lvl, record.getMessage())


def setup_stdlib_intercept() -> None:
    """Перенаправляет стандартные логи в Loguru (один раз за процесс)."""
    global _STD_INTERCEPT_CONFIGURED
    if _STD_INTERCEPT_CONFIGURED:
        return
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    for name in INTERCEPTED_LOGGERS:
        log = logging.getLogger(name)
        log.handlers = [InterceptHandler()]
        log.propagate = False
    _STD_INTERCEPT_CONFIGURED = True


def _ensure_defaults(record: dict) -> None:
    """Добавляет значения по умолчанию в extra-поля лог-записи."""
    for key, value in LOG_CONTEXT_DEFAULTS.items():
        record['extra'].setdefault(key, value)


def _write_log_header(path: Path) -> None:
    """Записывает заголовок с датой в начало лог-файла при его создании."""
    try:
        with open(path, 'a', encoding=LOG_ENCODING) as f:
            f.write(get_logger_header())
    except OSError as e:
        sys.stderr.write(f'Не удалось записать заголовок в {path}: {e}\n')


def configure_logging(log_to_file: bool = True) -> None:
    """Настраивает Loguru, создаёт sinks и подключает перехват логов stdlib.

    Консольный sink пишется всегда. Файловый sink с ротацией и сжатием
    подключается при ``log_to_file=True`` (воркеры Celery и скрипты
    могут отключить его и писать только в stdout).
    """
    logger.remove()
    logger.configure(patcher=_ensure_defaults)

    logger.add(
        sys.stdout,
        level=settings.LOG_LEVEL,
        format=LOG_FORMAT,
        colorize=True,
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )

    if log_to_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        log_file = LOG_DIR / 'app.log'
        if not log_file.exists() or log_file.stat().st_size == 0:
            _write_log_header(log_file)
        logger.add(
            log_file,
            level=settings.LOG_LEVEL,
            rotation=settings.LOG_ROTATION,
            retention=settings.LOG_RETENTION,
            compression=LOG_COMPRESSION,
            format=FILE_LOG_FORMAT,
            encoding=LOG_ENCODING,
            enqueue=True,
            backtrace=False,
            diagnose=False,
        )

    setup_stdlib_intercept()
