"""
Utilization, stress and impact metrics for generated days and weeks.
"""

from datetime import date
from typing import Iterable, Sequence

from clinic_agenda.models.agenda import (
    Appointment,
    BlockType,
    DayAgenda,
    DayUtilization,
    GapStatus,
    ImpactReport,
    ImpactTotals,
    ScheduleRules,
    StressLevel,
)
from clinic_agenda.services.agenda.generator import day_bounds
from clinic_agenda.utils.time_grid import minutes_between

HIGH_STRESS_RATIO = 0.9
MEDIUM_STRESS_RATIO = 0.75

WORKDAYS_PER_MONTH = 18
MIN_PER_CONTACT = 2

INTERNAL_PERSONAL_BLOCKS = (BlockType.BREAK, BlockType.PERSONAL, BlockType.INTERNAL)
BLOCKED_STATUSES = (GapStatus.BLOCKED_PERSONAL, GapStatus.BLOCKED_INTERNAL)


def day_utilization(appointments: Iterable[Appointment], rules: ScheduleRules, day: date) -> DayUtilization:
    """Booked chair-minutes against bookable chair-minutes (lunch excluded)."""
    appointments = list(appointments)
    day_start, day_end = day_bounds(rules, day)
    open_min = max(0, minutes_between(day_start, day_end))

    lunch = rules.lunch_window(day)
    if lunch is not None:
        lunch_start, lunch_end = max(lunch[0], day_start), min(lunch[1], day_end)
        open_min -= max(0, minutes_between(lunch_start, lunch_end))

    return DayUtilization(
        day=day,
        appointments_count=len(appointments),
        booked_min=sum(minutes_between(a.start, a.end) for a in appointments),
        capacity_min=max(0, open_min) * rules.chairs_count,
    )


def mean_utilization(days: Sequence[DayUtilization]) -> float:
    if not days:
        return 0.0
    return sum(d.ratio for d in days) / len(days)


def stress_level_for(days: Sequence[DayUtilization]) -> StressLevel:
    ratio = mean_utilization(days)
    if ratio >= HIGH_STRESS_RATIO:
        return StressLevel.HIGH
    if ratio >= MEDIUM_STRESS_RATIO:
        return StressLevel.MEDIUM
    return StressLevel.LOW


def _day_impact(agenda: DayAgenda, min_per_contact: int) -> ImpactTotals:
    appointments_count = len(agenda.appointments)
    # two messages or calls and one form per appointment
    base_contacts = appointments_count * 3
    gap_contacts = sum(m.messages_count + m.calls_count for m in agenda.availability)

    internal_personal = sum(
        b.duration_min for b in agenda.blocks if b.block_type in INTERNAL_PERSONAL_BLOCKS
    ) + sum(m.duration_min for m in agenda.availability if m.status in BLOCKED_STATUSES)

    return ImpactTotals(
        recovered_admin_min=(base_contacts + gap_contacts) * min_per_contact,
        time_available_used_min=sum(
            m.duration_min for m in agenda.availability if m.status == GapStatus.FILLED
        ),
        internal_personal_min=internal_personal,
        operational_min=sum(b.duration_min for b in agenda.blocks if b.block_type == BlockType.BUFFER),
    )


def compute_impact(
    agendas: Sequence[DayAgenda],
    workdays_per_month: int = WORKDAYS_PER_MONTH,
    min_per_contact: int = MIN_PER_CONTACT,
) -> ImpactReport:
    """
    Time the clinic gets back, averaged per day and projected to a month.

    Recovered admin time counts the messages, calls and forms automated per
    appointment plus the contacts made while working open time. Filled open
    time counts as used; breaks and time reserved as personal or internal
    count as internal/personal; buffers count as operational.
    """
    total = ImpactTotals()
    for agenda in agendas:
        total = total + _day_impact(agenda, min_per_contact)

    daily = total.averaged(len(agendas))
    return ImpactReport(daily=daily, monthly=daily.scaled(max(1, workdays_per_month)))
