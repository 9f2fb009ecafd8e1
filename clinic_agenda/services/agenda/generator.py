"""
Synthetic Schedule Generator.

Builds one day of non-overlapping appointments per chair. Each chair walks
a cursor from the (floored) day start to the (ceiled) day end, emitting
appointments and the occasional deliberate bookable gap. Every
pseudo-random decision is a hash of ``PREFIX:seed:day:chair:id`` so the
same inputs always produce the same day.

Hard guarantees:
- no two appointments on a chair overlap
- nothing lands inside (or straddles) lunch
- every boundary is on the granularity grid and within day bounds
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Tuple, Union

from clinic_agenda.models.agenda import Appointment, ScheduleRules
from clinic_agenda.services.agenda.rules import buffer_for_treatment
from clinic_agenda.utils.time_grid import (
    add_minutes,
    at_time,
    ceil_to_step,
    clamp_int,
    floor_to_step,
    hash_int,
    js_round,
    minutes_between,
    overlaps,
)

logger = logging.getLogger(__name__)

FIRST_NAMES = ["María", "Carlos", "Sofía", "Juan", "Ana", "Laura", "Pedro", "Marta", "Diego", "Carmen", "Lucía", "Alberto"]
LAST_NAMES = ["López", "Ruiz", "Navarro", "Pérez", "García", "Martín", "Sánchez", "Díaz", "Torres", "Vega", "Romero", "Molina"]


@dataclass(frozen=True)
class SchedulerHeuristics:
    """
    Tunable constants of the generator.

    The defaults reproduce the shipped behaviour exactly; changing any of
    them changes every generated week.
    """
    target_work_pct: float = 0.84
    min_used_pct_before_gap: float = 0.08
    tail_gap_floor: int = 40
    tail_gap_ceiling: int = 120
    near_end_margin: int = 30

    # Gap chance (percent) by minutes elapsed since day start
    morning_until_min: int = 240
    midday_until_min: int = 420
    morning_gap_chance: int = 48
    midday_gap_chance: int = 42
    afternoon_gap_chance: int = 38

    gap_len_extra: int = 15
    gap_len_cap: int = 45
    gap_len_hard_cap: int = 40

    # Stop chance (percent) once the utilization target is met
    stop_chance_near: int = 35
    stop_chance_mid: int = 15
    stop_chance_far: int = 5
    stop_mid_margin: int = 90

    def gap_chance(self, minutes_from_start: int) -> int:
        if minutes_from_start < self.morning_until_min:
            return self.morning_gap_chance
        if minutes_from_start < self.midday_until_min:
            return self.midday_gap_chance
        return self.afternoon_gap_chance

    def stop_chance(self, remaining: int, max_tail_gap: int) -> int:
        if remaining < max_tail_gap + self.near_end_margin:
            return self.stop_chance_near
        if remaining < max_tail_gap + self.stop_mid_margin:
            return self.stop_chance_mid
        return self.stop_chance_far


DEFAULT_HEURISTICS = SchedulerHeuristics()


def format_seed(seed: Union[int, float]) -> str:
    """Render a seed the way it appears inside hash keys (``12345``, not ``12345.0``)."""
    if isinstance(seed, float) and seed.is_integer():
        return str(int(seed))
    return str(seed)


def patient_name(seed: int) -> str:
    return f"{FIRST_NAMES[seed % len(FIRST_NAMES)]} {LAST_NAMES[(seed + 7) % len(LAST_NAMES)]}"


def day_bounds(rules: ScheduleRules, day: date) -> Tuple[datetime, datetime]:
    """Visible day: start floored, end ceiled to the grid."""
    step = rules.slot_granularity_min
    return (
        floor_to_step(at_time(day, rules.day_start_time), step),
        ceil_to_step(at_time(day, rules.day_end_time), step),
    )


def _in_window(t: datetime, window: Optional[Tuple[datetime, datetime]]) -> bool:
    return window is not None and window[0] <= t < window[1]


def _straddles(a: datetime, b: datetime, window: Optional[Tuple[datetime, datetime]]) -> bool:
    return window is not None and overlaps(a, b, window[0], window[1])


def generate_day(
    rules: ScheduleRules,
    day: date,
    seed: Union[int, float],
    provider_id: Optional[str] = None,
    id_start: int = 1,
    heuristics: SchedulerHeuristics = DEFAULT_HEURISTICS,
) -> Tuple[List[Appointment], int]:
    """
    Generate one day of appointments across all chairs.

    Args:
        rules: Normalized clinic rules
        day: Calendar day to fill
        seed: Run seed; part of every hash key
        provider_id: Optional provider stamped on every appointment
        id_start: First appointment id to use
        heuristics: Tunable generator constants

    Returns:
        (appointments sorted by start, next free id)
    """
    treatments = rules.treatments
    if not treatments:
        return [], id_start

    step = rules.slot_granularity_min
    day_start, day_end = day_bounds(rules, day)
    lunch = rules.lunch_window(day)
    lunch_resume = ceil_to_step(lunch[1], step) if lunch else None

    day_iso = day.isoformat()
    seed_key = format_seed(seed)

    total_min = max(60, minutes_between(day_start, day_end))
    target_clinical_min = js_round(total_min * heuristics.target_work_pct)
    min_used_before_gap = js_round(target_clinical_min * heuristics.min_used_pct_before_gap)
    max_tail_gap = clamp_int(
        max(rules.min_bookable_slot_min, 60), heuristics.tail_gap_floor, heuristics.tail_gap_ceiling
    )
    min_treatment = min(t.duration_min for t in treatments)

    min_gap = rules.min_bookable_slot_min
    max_gap = min(clamp_int(min_gap + heuristics.gap_len_extra, min_gap, heuristics.gap_len_cap), heuristics.gap_len_hard_cap)
    # Above the hard cap the range runs upward from min_gap; an empty range disables deliberate gaps
    gap_span = abs(max_gap - min_gap + 1)

    appointments: List[Appointment] = []
    next_id = id_start

    for chair_id in range(1, rules.chairs_count + 1):
        cursor = day_start
        used_clinical = 0
        last_was_gap = False
        produced = 0

        while True:
            remaining = minutes_between(cursor, day_end)
            if remaining < min_treatment + step:
                break

            if _in_window(cursor, lunch):
                cursor = lunch_resume
                continue

            key = f"{seed_key}:{day_iso}:{chair_id}:{next_id}"

            near_end = remaining <= max_tail_gap + heuristics.near_end_margin
            chance = heuristics.gap_chance(minutes_between(day_start, cursor))
            leave_gap = (
                gap_span > 0
                and not near_end
                and not last_was_gap
                and used_clinical >= min_used_before_gap
                and hash_int(f"BOOK:{key}") % 100 < chance
            )

            if leave_gap:
                gap_len = min_gap + hash_int(f"BOOKLEN:{key}") % gap_span
                gap_end = ceil_to_step(add_minutes(cursor, gap_len), step)
                if _straddles(cursor, gap_end, lunch):
                    gap_end = lunch_resume

                if minutes_between(gap_end, day_end) >= min_treatment + step:
                    cursor = gap_end
                    last_was_gap = True
                    continue

            fitting = [t for t in treatments if t.duration_min <= remaining - step]
            if not fitting:
                break

            treatment = fitting[hash_int(f"TRFIT:{key}") % len(fitting)]
            buffer = buffer_for_treatment(rules, treatment.type)
            if remaining < buffer + treatment.duration_min + step:
                break

            start = ceil_to_step(add_minutes(cursor, buffer), step)
            end = ceil_to_step(add_minutes(start, treatment.duration_min), step)
            if end > day_end:
                break

            # The buffer sits between cursor and start, so check from cursor
            if _straddles(cursor, end, lunch):
                cursor = lunch_resume
                continue

            appointments.append(
                Appointment(
                    id=next_id,
                    patient_name=patient_name(hash_int(f"PAT:{key}") % 1000),
                    start=start,
                    end=end,
                    type=treatment.type,
                    chair_id=chair_id,
                    provider_id=provider_id,
                )
            )
            cursor = end
            last_was_gap = False
            used_clinical += treatment.duration_min
            next_id += 1
            produced += 1

            if used_clinical >= target_clinical_min:
                remaining_after = minutes_between(cursor, day_end)
                if remaining_after <= max_tail_gap:
                    break
                stop_chance = heuristics.stop_chance(remaining_after, max_tail_gap)
                if hash_int(f"STOP:{seed_key}:{day_iso}:{chair_id}:{next_id}") % 100 < stop_chance:
                    break

        logger.debug(
            f"Generated {produced} appointments for chair {chair_id} on {day_iso} "
            f"({used_clinical} clinical min)"
        )

    appointments.sort(key=lambda a: a.start)
    return appointments, next_id
