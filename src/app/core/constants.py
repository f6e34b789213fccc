from datetime import datetime
from decimal import Decimal

# Требования к паролям пользователей
PASSWORD_MIN_LENGTH = 8
PASSWORD_SPECIAL_CHARS = '!№;%:?*()_+-=<>,.~`'
PASSWORD_RULES = (
    (r'[A-Z]', 'хотя бы одна заглавная латинская буква'),
    (r'[a-z]', 'хотя бы одна строчная латинская буква'),
    (r'\d', 'хотя бы одна цифра'),
)

# Настройки логгера
MS_IN_SECOND = 1000
LOG_DEPTH = 7
LOG_ENCODING = 'utf-8'
LOG_COMPRESSION = 'zip'
LOG_FORMAT = (
    '<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | '
    '<level>{level: <8}</level> | '
    '{extra[username]}({extra[user_id]}) | '
    '<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | '
    '<level>{message}</level>'
)
FILE_LOG_FORMAT = (
    '{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | '
    '{extra[username]}({extra[user_id]}) | '
    '{name}:{function}:{line} | {message}'
)
INTERCEPTED_LOGGERS = (
    'uvicorn',
    'uvicorn.error',
    'sqlalchemy',
    'celery',
)
NOISE_PATHS = {
    '/docs',
    '/openapi.json',
    '/healthcheck/db',
    '/healthcheck/redis',
}
HTTP_LOG_TEMPLATE = (
    '{method} {path} -> {status} ({ms:.1f} ms)\n    ip={ip}\n    ua={ua}\n'
)

# Разрешённый формат телефонного номера
PHONE_PATTERN = r'^\+[1-9][0-9]{7,14}$'

# Настройки бронирований
RESERVATION_CODE_PREFIX = 'OSC'
RESERVATION_CODE_DATE_FORMAT = '%Y%m%d'
RESERVATION_CODE_SUFFIX_DIGITS = 4
MAX_DISCOUNT_PERCENTAGE = Decimal('100')
DEFAULT_PRICE_MULTIPLIER = Decimal('1.00')
SECONDS_IN_HOUR = 3600
# Суббота и воскресенье по date.weekday()
WEEKEND_DAYS = frozenset({5, 6})
STATISTICS_DEFAULT_PERIOD_DAYS = 30

# Ключи кеша каталога площадок
VENUES_CACHE_PREFIX = 'venues'
VENUE_TYPES_CACHE_PREFIX = 'venue_types'


def get_logger_header() -> str:
    """Формирует заголовок для нового лог-файла."""
    return (
        '\n'
        '================= LOGGER - SPORT_VENUE_BOOKING =================\n'
        f'Date: {datetime.now():%Y-%m-%d %H:%M:%S}\n'
        '================================================================\n\n'
    )
