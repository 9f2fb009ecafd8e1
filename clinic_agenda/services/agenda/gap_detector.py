"""
Gap Detector.

Finds idle windows per chair (day start, between consecutive appointments,
day end), splits anything touching lunch into pre/post segments, drops the
short ones and ranks what's left.
"""

import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple

from clinic_agenda.models.agenda import Appointment, Gap, ScheduleRules
from clinic_agenda.services.agenda.generator import day_bounds
from clinic_agenda.utils.time_grid import minutes_between, overlaps, to_local_iso

logger = logging.getLogger(__name__)


class _ChairGapCollector:
    """Collects candidate gaps for one chair, splitting around lunch."""

    def __init__(
        self,
        rules: ScheduleRules,
        day_iso: str,
        chair_id: int,
        lunch: Optional[Tuple[datetime, datetime]],
    ):
        self.rules = rules
        self.day_iso = day_iso
        self.chair_id = chair_id
        self.lunch = lunch
        self.gaps: List[Gap] = []

    def _key(self, prefix: str, start: datetime, end: datetime, segment: str = "") -> str:
        segment_part = f":{segment}" if segment else ""
        return (
            f"W:{self.day_iso}:C{self.chair_id}:{prefix}{segment_part}:"
            f"{to_local_iso(start)}__{to_local_iso(end)}"
        )

    def _push(self, start: datetime, end: datetime, key: str, is_start: bool, is_end: bool):
        duration = minutes_between(start, end)
        if duration >= self.rules.long_gap_threshold:
            self.gaps.append(
                Gap(
                    start=start,
                    end=end,
                    duration_min=duration,
                    gap_key=key,
                    chair_id=self.chair_id,
                    is_start_of_day=is_start,
                    is_end_of_day=is_end,
                )
            )

    def add(self, start: datetime, end: datetime, prefix: str, is_start: bool = False, is_end: bool = False):
        if end <= start:
            return

        if self.lunch is None or not overlaps(start, end, *self.lunch):
            self._push(start, end, self._key(prefix, start, end), is_start, is_end)
            return

        lunch_start, lunch_end = self.lunch
        if start < lunch_start:
            self._push(start, lunch_start, self._key(prefix, start, lunch_start, "PRELUNCH"), is_start, False)
        if end > lunch_end:
            self._push(lunch_end, end, self._key(prefix, lunch_end, end, "POSTLUNCH"), False, is_end)


def _group_by_chair(appointments: Iterable[Appointment], chairs_count: int) -> Dict[int, List[Appointment]]:
    """Chairs in order of first appearance, then the configured chairs with nothing booked."""
    by_chair: Dict[int, List[Appointment]] = defaultdict(list)
    for appointment in appointments:
        by_chair[appointment.chair_id].append(appointment)
    for chair_id in range(1, chairs_count + 1):
        by_chair.setdefault(chair_id, [])
    return by_chair


def collect_gaps(appointments: Iterable[Appointment], rules: ScheduleRules, day: date) -> List[Gap]:
    """Every idle window at or above ``long_gap_threshold``, unranked."""
    day_start, day_end = day_bounds(rules, day)
    lunch = rules.lunch_window(day)
    day_iso = day.isoformat()

    candidates: List[Gap] = []
    for chair_id, chair_appointments in _group_by_chair(appointments, rules.chairs_count).items():
        collector = _ChairGapCollector(rules, day_iso, chair_id, lunch)
        ordered = sorted(chair_appointments, key=lambda a: a.start)

        if not ordered:
            collector.add(day_start, day_end, "DAY", is_start=True, is_end=True)
        else:
            collector.add(day_start, ordered[0].start, "START", is_start=True)
            for current, following in zip(ordered, ordered[1:]):
                collector.add(current.end, following.start, f"{current.id}->{following.id}")
            collector.add(ordered[-1].end, day_end, "END", is_end=True)

        candidates.extend(collector.gaps)

    return candidates


def detect_gaps(appointments: Iterable[Appointment], rules: ScheduleRules, day: date) -> List[Gap]:
    """
    Ranked, capped gaps for one day.

    Score is duration, +10 for end-of-day gaps, -40 for anything over 90
    minutes (a whole empty afternoon is a configuration problem, not a
    fillable gap). Ties keep detection order.
    """
    candidates = collect_gaps(appointments, rules, day)
    ranked = sorted(candidates, key=lambda g: g.score, reverse=True)
    surfaced = ranked[: max(0, rules.max_gap_panels)]

    logger.debug(f"{day.isoformat()}: {len(candidates)} gap candidates, surfacing {len(surfaced)}")
    return surfaced
