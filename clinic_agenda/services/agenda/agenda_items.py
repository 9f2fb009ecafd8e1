"""
Agenda Items.

Lays the non-bookable time over a generated day: preparation buffers before
and after each appointment, the lunch break per chair, and the open time
that is left once everything busy is merged. The result is what the
dashboard draws and what the impact totals are computed from.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Iterable, List, Sequence, Tuple, Union

from clinic_agenda.i18n import DEFAULT_LANGUAGE, get_message
from clinic_agenda.models.agenda import (
    AgendaBlock,
    Appointment,
    BlockType,
    DayAgenda,
    Gap,
    GapMeta,
    ScheduleRules,
)
from clinic_agenda.services.agenda.gap_triage import triage_open_time
from clinic_agenda.services.agenda.generator import day_bounds
from clinic_agenda.services.agenda.rules import buffer_for_treatment
from clinic_agenda.utils.time_grid import at_time, minutes_between, overlaps, to_local_iso

logger = logging.getLogger(__name__)

# Dead minutes next to lunch that get folded into the break
DEAD_TIME_MAX_MIN = 15

# Open time shorter than this is never offered, whatever the rules say
MIN_OPEN_TIME_MIN = 10

Interval = Tuple[datetime, datetime]
Busy = Union[Appointment, AgendaBlock]


def buffer_blocks_before(
    appointments: Iterable[Appointment],
    rules: ScheduleRules,
    lang: str = DEFAULT_LANGUAGE,
) -> List[AgendaBlock]:
    """
    Preparation time right before each appointment.

    The block never starts before the configured day start and is dropped
    when it would run into another appointment on the same chair.
    """
    ordered = sorted(appointments, key=lambda a: a.start)
    blocks: List[AgendaBlock] = []

    for appointment in ordered:
        buffer_min = buffer_for_treatment(rules, appointment.type)
        if buffer_min <= 0:
            continue

        end = appointment.start
        start = max(
            end - timedelta(minutes=buffer_min),
            at_time(appointment.start.date(), rules.day_start_time),
        )
        if end <= start:
            continue

        clashes = any(
            other.id != appointment.id
            and other.chair_id == appointment.chair_id
            and overlaps(start, end, other.start, other.end)
            for other in ordered
        )
        if clashes:
            continue

        blocks.append(
            AgendaBlock(
                id=f"BUF_BEFORE:{appointment.id}:{to_local_iso(appointment.start)}",
                start=start,
                end=end,
                block_type=BlockType.BUFFER,
                chair_id=appointment.chair_id,
                label=get_message("block_buffer", lang),
                note=get_message("block_buffer_before", lang, type=appointment.type),
            )
        )

    return blocks


def buffer_blocks_after(
    appointments: Iterable[Appointment],
    rules: ScheduleRules,
    lang: str = DEFAULT_LANGUAGE,
) -> List[AgendaBlock]:
    """Clean-up time right after each appointment, same length as its buffer."""
    blocks: List[AgendaBlock] = []
    for appointment in appointments:
        buffer_min = buffer_for_treatment(rules, appointment.type)
        if buffer_min <= 0:
            continue
        blocks.append(
            AgendaBlock(
                id=f"BUF_AFTER:{appointment.id}:{to_local_iso(appointment.end)}",
                start=appointment.end,
                end=appointment.end + timedelta(minutes=buffer_min),
                block_type=BlockType.BUFFER,
                chair_id=appointment.chair_id,
                label=get_message("block_buffer", lang),
                note=get_message("block_buffer_after", lang, type=appointment.type),
            )
        )
    return blocks


def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """Union of intervals; touching intervals are joined."""
    merged: List[Interval] = []
    for start, end in sorted(intervals):
        if merged and merged[-1][1] >= start:
            if end > merged[-1][1]:
                merged[-1] = (merged[-1][0], end)
        else:
            merged.append((start, end))
    return merged


def busy_intervals(items: Iterable[Busy], chair_id: int, day_start: datetime, day_end: datetime) -> List[Interval]:
    """Merged busy time of one chair, clipped to the day."""
    clipped = []
    for item in items:
        if item.chair_id != chair_id:
            continue
        start, end = max(item.start, day_start), min(item.end, day_end)
        if end > start:
            clipped.append((start, end))
    return merge_intervals(clipped)


def lunch_window_for_chair(
    busy: Sequence[Interval],
    lunch: Interval,
    day_start: datetime,
    day_end: datetime,
) -> Interval:
    """
    Lunch as drawn on one chair.

    Up to ``DEAD_TIME_MAX_MIN`` idle minutes on either side are absorbed
    into the break. When lunch already overlaps busy time it is kept as
    configured.
    """
    lunch_start, lunch_end = lunch
    if any(overlaps(lunch_start, lunch_end, b_start, b_end) for b_start, b_end in busy):
        return lunch

    prev_end = max([b_end for _, b_end in busy if b_end <= lunch_start], default=day_start)
    next_start = min([b_start for b_start, _ in busy if b_start >= lunch_end], default=day_end)

    start, end = lunch_start, lunch_end
    if 0 < minutes_between(prev_end, lunch_start) <= DEAD_TIME_MAX_MIN:
        start = prev_end
    if 0 < minutes_between(lunch_end, next_start) <= DEAD_TIME_MAX_MIN:
        end = next_start
    return start, end


def lunch_blocks(
    items: Sequence[Busy],
    rules: ScheduleRules,
    day: date,
    lang: str = DEFAULT_LANGUAGE,
) -> List[AgendaBlock]:
    """One BREAK block per chair for the lunch window, when breaks are on."""
    lunch = rules.lunch_window(day)
    if not rules.enable_breaks or lunch is None:
        return []

    day_start, day_end = day_bounds(rules, day)
    blocks = []
    for chair_id in range(1, rules.chairs_count + 1):
        busy = busy_intervals(items, chair_id, day_start, day_end)
        start, end = lunch_window_for_chair(busy, lunch, day_start, day_end)
        blocks.append(
            AgendaBlock(
                id=f"RULE_LUNCH:{day.isoformat()}:S{chair_id}",
                start=start,
                end=end,
                block_type=BlockType.BREAK,
                chair_id=chair_id,
                label=get_message("block_lunch", lang),
                note=get_message("block_lunch_note", lang),
            )
        )
    return blocks


def open_time(
    items: Sequence[Busy],
    rules: ScheduleRules,
    day: date,
    lang: str = DEFAULT_LANGUAGE,
) -> List[GapMeta]:
    """
    Bookable time left on each chair once appointments and blocks are laid out.

    Windows shorter than ``min_bookable_slot_min`` (never less than
    ``MIN_OPEN_TIME_MIN``) are dropped. The window running to the end of the
    day is flagged as end-of-day.
    """
    min_bookable = max(MIN_OPEN_TIME_MIN, rules.min_bookable_slot_min)
    day_start, day_end = day_bounds(rules, day)

    windows: List[Gap] = []

    def push(chair_id: int, start: datetime, end: datetime, is_end_of_day: bool):
        duration = minutes_between(start, end)
        if duration < min_bookable:
            return
        windows.append(
            Gap(
                start=start,
                end=end,
                duration_min=duration,
                gap_key=f"AVAIL:S{chair_id}:{to_local_iso(start)}__{to_local_iso(end)}",
                chair_id=chair_id,
                is_end_of_day=is_end_of_day,
            )
        )

    for chair_id in range(1, rules.chairs_count + 1):
        cursor = day_start
        for busy_start, busy_end in busy_intervals(items, chair_id, day_start, day_end):
            push(chair_id, cursor, busy_start, False)
            cursor = max(cursor, busy_end)
        push(chair_id, cursor, day_end, True)

    windows.sort(key=lambda gap: gap.start)
    return [triage_open_time(gap, lang) for gap in windows]


def build_day_agenda(
    appointments: Iterable[Appointment],
    rules: ScheduleRules,
    day: date,
    lang: str = DEFAULT_LANGUAGE,
) -> DayAgenda:
    """
    Lay out one generated day.

    Args:
        appointments: The day's appointments (any chair)
        rules: Normalized rules
        day: The day being laid out
        lang: Language for labels and open-time rationale

    Returns:
        DayAgenda with buffers and lunch blocks sorted by start, and the
        remaining open time triaged by length
    """
    appointments = sorted(appointments, key=lambda a: a.start)

    blocks: List[AgendaBlock] = buffer_blocks_before(appointments, rules, lang)
    blocks.extend(buffer_blocks_after(appointments, rules, lang))
    blocks.extend(lunch_blocks([*appointments, *blocks], rules, day, lang))
    blocks.sort(key=lambda block: block.start)

    availability = open_time([*appointments, *blocks], rules, day, lang)

    logger.debug(
        f"{day.isoformat()}: {len(appointments)} appointments, {len(blocks)} blocks, "
        f"{len(availability)} open windows"
    )

    return DayAgenda(day=day, appointments=appointments, blocks=blocks, availability=availability)
