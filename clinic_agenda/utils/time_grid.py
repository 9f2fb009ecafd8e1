"""
Local-time grid arithmetic for the agenda engine.

All timestamps are naive local datetimes; the wire format is
``YYYY-MM-DDTHH:MM:SS`` with no offset. Callers attach a real zone if they
need one.

Snapping rules:
- floor: align without moving forward (used for the day-open boundary)
- ceil: align without moving backward (used after adding a duration)
"""

import math
import re
from datetime import date, datetime, timedelta
from typing import Optional

FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
UINT32_MASK = 0xFFFFFFFF

MIN_STEP = 5
MAX_STEP = 60

_HHMM_RE = re.compile(r"^\d{2}:\d{2}$")
_DAY_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def clamp_int(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def js_round(value: float) -> int:
    """Round half up (2.5 -> 3, -2.5 -> -2)."""
    return math.floor(value + 0.5)


def is_hhmm(value) -> bool:
    """Check for a valid ``HH:MM`` time of day."""
    if not isinstance(value, str) or not _HHMM_RE.match(value):
        return False
    hours, minutes = int(value[:2]), int(value[3:])
    return hours < 24 and minutes < 60


def is_day_iso(value) -> bool:
    return isinstance(value, str) and bool(_DAY_ISO_RE.match(value)) and parse_day_iso(value) is not None


def parse_day_iso(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        return None


def at_time(day: date, hhmm: str) -> datetime:
    """Combine a calendar day with an ``HH:MM`` string."""
    return datetime(day.year, day.month, day.day, int(hhmm[:2]), int(hhmm[3:]))


def to_local_iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%S")


def parse_local_iso(value: str) -> datetime:
    return datetime.strptime(value[:19], "%Y-%m-%dT%H:%M:%S")


def add_minutes(dt: datetime, minutes: int) -> datetime:
    """Shift by ``minutes``, zeroing seconds."""
    return (dt + timedelta(minutes=minutes)).replace(second=0, microsecond=0)


def minutes_between(a: datetime, b: datetime) -> int:
    """Whole minutes from ``a`` to ``b``; negative when ``b`` is earlier."""
    return js_round((b - a).total_seconds() / 60)


def floor_to_step(dt: datetime, step_min: int) -> datetime:
    step = clamp_int(step_min, MIN_STEP, MAX_STEP)
    floored = (dt.minute // step) * step
    return dt.replace(minute=0, second=0, microsecond=0) + timedelta(minutes=floored)


def ceil_to_step(dt: datetime, step_min: int) -> datetime:
    step = clamp_int(step_min, MIN_STEP, MAX_STEP)
    minute = dt.minute
    if dt.second or dt.microsecond:
        # Partial minute still counts, otherwise ceil would move backward.
        minute += 1
    ceiled = math.ceil(minute / step) * step
    return dt.replace(minute=0, second=0, microsecond=0) + timedelta(minutes=ceiled)


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Half-open interval test; touching endpoints do not overlap."""
    return a_end > b_start and a_start < b_end


def hash_int(seed: str) -> int:
    """
    FNV-1a 32-bit hash of ``seed``.

    This is a versioned contract: every pseudo-random decision in the
    generator and triage is derived from it, so changing the constants
    changes all downstream output.
    """
    h = FNV_OFFSET_BASIS
    for byte in seed.encode("utf-8"):
        h ^= byte
        h = (h * FNV_PRIME) & UINT32_MASK
    return h


def hash01(seed: str) -> float:
    """Map ``seed`` into [0, 1)."""
    return hash_int(seed) / (UINT32_MASK + 1)


def start_of_week_monday(day: date) -> date:
    return day - timedelta(days=day.weekday())
