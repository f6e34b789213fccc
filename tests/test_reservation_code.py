import random
import re
from datetime import date

from app.services.reservation_code import (
    generate_reservation_code,
    generate_unique_reservation_code,
    pick_unique_code,
)

CODE_PATTERN = re.compile(r'^OSC\d{8}\d{4}$')


class SequenceRandom:
    """Выдаёт заранее заданные числа вместо случайных."""

    def __init__(self, *values):
        self.values = iter(values)

    def randrange(self, stop):
        return next(self.values)


class TestReservationCode:
    """Формат и уникальность кода бронирования."""

    def test_code_format(self):
        code = generate_reservation_code(date(2025, 1, 1))
        assert CODE_PATTERN.match(code)
        assert code.startswith('OSC20250101')

    def test_suffix_is_zero_padded(self):
        code = generate_reservation_code(
            date(2025, 12, 31),
            SequenceRandom(42),
        )
        assert code == 'OSC202512310042'

    def test_defaults_to_today(self):
        code = generate_reservation_code()
        assert code[3:11] == date.today().strftime('%Y%m%d')

    def test_seeded_generator_is_reproducible(self):
        first = generate_reservation_code(date(2025, 1, 1), random.Random(7))
        second = generate_reservation_code(date(2025, 1, 1), random.Random(7))
        assert first == second

    def test_pick_unique_skips_taken_codes(self):
        existing = {'OSC202501010001', 'OSC202501010002'}
        code = pick_unique_code(
            existing,
            date(2025, 1, 1),
            SequenceRandom(1, 2, 3),
        )
        assert code == 'OSC202501010003'

    async def test_unique_code_not_in_database(
        self,
        session,
        slots,
        customer,
        weekday_date,
        make_reservation,
    ):
        reservation = await make_reservation(
            customer,
            slots[0],
            weekday_date,
            slots[0].start_time,
            slots[0].end_time,
        )
        code = await generate_unique_reservation_code(session)
        assert CODE_PATTERN.match(code)
        assert code != reservation.reservation_code
