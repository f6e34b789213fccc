import random
from datetime import date
from typing import Container, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import (
    RESERVATION_CODE_DATE_FORMAT,
    RESERVATION_CODE_PREFIX,
    RESERVATION_CODE_SUFFIX_DIGITS,
)
from app.models import Reservation

_system_random = random.SystemRandom()


def generate_reservation_code(
    on_date: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Генерирует код вида OSC20250101XXXX (префикс, дата, 4 цифры)."""
    on_date = on_date or date.today()
    rng = rng or _system_random
    suffix = rng.randrange(10 ** RESERVATION_CODE_SUFFIX_DIGITS)
    return (
        f'{RESERVATION_CODE_PREFIX}'
        f'{on_date.strftime(RESERVATION_CODE_DATE_FORMAT)}'
        f'{suffix:0{RESERVATION_CODE_SUFFIX_DIGITS}d}'
    )


def pick_unique_code(
    existing: Container[str],
    on_date: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Повторяет генерацию, пока код совпадает с уже выданными."""
    while True:
        code = generate_reservation_code(on_date, rng)
        if code not in existing:
            return code


async def generate_unique_reservation_code(
    session: AsyncSession,
    on_date: Optional[date] = None,
) -> str:
    """Генерирует код, которого ещё нет в таблице бронирований."""
    while True:
        code = generate_reservation_code(on_date)
        stmt = select(Reservation.id).where(
            Reservation.reservation_code == code,
        )
        if (await session.execute(stmt)).first() is None:
            return code
