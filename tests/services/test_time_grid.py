"""
Tests for local-time grid arithmetic
"""

from datetime import date, datetime

import pytest

from clinic_agenda.utils.time_grid import (
    add_minutes,
    at_time,
    ceil_to_step,
    floor_to_step,
    hash01,
    hash_int,
    is_day_iso,
    is_hhmm,
    js_round,
    minutes_between,
    overlaps,
    parse_local_iso,
    start_of_week_monday,
    to_local_iso,
)


class TestSnapping:
    """Test grid alignment"""

    def test_ceil_moves_forward_to_next_step(self):
        assert ceil_to_step(datetime(2025, 12, 8, 9, 5), 10) == datetime(2025, 12, 8, 9, 10)

    def test_ceil_keeps_aligned_value(self):
        assert ceil_to_step(datetime(2025, 12, 8, 9, 10), 10) == datetime(2025, 12, 8, 9, 10)

    def test_ceil_rolls_into_next_hour(self):
        assert ceil_to_step(datetime(2025, 12, 8, 9, 55), 10) == datetime(2025, 12, 8, 10, 0)

    def test_ceil_counts_partial_minutes(self):
        """Seconds must never let ceil land before the input"""
        dt = datetime(2025, 12, 8, 9, 10, 30)
        assert ceil_to_step(dt, 10) == datetime(2025, 12, 8, 9, 20)

    def test_floor_moves_backward(self):
        assert floor_to_step(datetime(2025, 12, 8, 8, 37), 15) == datetime(2025, 12, 8, 8, 30)

    def test_step_is_clamped(self):
        assert ceil_to_step(datetime(2025, 12, 8, 9, 1), 3) == datetime(2025, 12, 8, 9, 5)
        assert floor_to_step(datetime(2025, 12, 8, 9, 59), 90) == datetime(2025, 12, 8, 9, 0)

    @pytest.mark.parametrize("step", [5, 7, 10, 15, 20, 30, 45, 60])
    def test_ceil_never_backward_floor_never_forward(self, step):
        for minute in range(60):
            dt = datetime(2025, 12, 8, 10, minute)
            assert ceil_to_step(dt, step) >= dt
            assert floor_to_step(dt, step) <= dt


class TestArithmetic:
    """Test minute arithmetic and interval tests"""

    def test_add_minutes_zeroes_seconds(self):
        assert add_minutes(datetime(2025, 12, 8, 9, 0, 45), 30) == datetime(2025, 12, 8, 9, 30)

    def test_minutes_between_is_signed(self):
        a = datetime(2025, 12, 8, 9, 0)
        b = datetime(2025, 12, 8, 8, 30)
        assert minutes_between(a, b) == -30
        assert minutes_between(b, a) == 30

    def test_overlaps_is_half_open(self):
        nine, ten, eleven = (datetime(2025, 12, 8, h) for h in (9, 10, 11))
        assert overlaps(nine, ten, ten, eleven) is False
        assert overlaps(nine, eleven, ten, eleven) is True
        assert overlaps(ten, eleven, nine, ten) is False

    def test_js_round_rounds_half_up(self):
        assert js_round(2.5) == 3
        assert js_round(2.49) == 2
        assert js_round(-2.5) == -2
        assert js_round(50.4) == 50


class TestParsing:
    """Test day and time-of-day parsing"""

    @pytest.mark.parametrize("value,expected", [
        ("08:30", True),
        ("23:59", True),
        ("00:00", True),
        ("24:00", False),
        ("12:60", False),
        ("9:00", False),
        ("09:00:00", False),
        (None, False),
        (900, False),
    ])
    def test_is_hhmm(self, value, expected):
        assert is_hhmm(value) is expected

    def test_is_day_iso(self):
        assert is_day_iso("2025-12-11") is True
        assert is_day_iso("2025-13-01") is False
        assert is_day_iso("2025-12-11T10:00:00") is False
        assert is_day_iso(None) is False

    def test_local_iso_roundtrip_format(self):
        dt = at_time(date(2025, 12, 8), "09:40")
        assert to_local_iso(dt) == "2025-12-08T09:40:00"
        assert parse_local_iso("2025-12-08T09:40:00") == dt

    def test_start_of_week_monday(self):
        assert start_of_week_monday(date(2025, 12, 11)) == date(2025, 12, 8)
        assert start_of_week_monday(date(2025, 12, 8)) == date(2025, 12, 8)
        assert start_of_week_monday(date(2025, 12, 14)) == date(2025, 12, 8)


class TestHash:
    """Test the FNV-1a hash contract"""

    def test_known_vectors(self):
        assert hash_int("") == 0x811C9DC5
        assert hash_int("a") == 0xE40C292C
        assert hash_int("foobar") == 0xBF9CF968

    def test_hash_is_unsigned_32_bit(self):
        for key in ("BOOK:1:2025-12-08:1:1", "W:2025-12-08:C1:END", "ñandú"):
            assert 0 <= hash_int(key) < 2 ** 32

    def test_hash01_range_and_stability(self):
        for i in range(200):
            value = hash01(f"key-{i}")
            assert 0.0 <= value < 1.0
            assert value == hash01(f"key-{i}")
