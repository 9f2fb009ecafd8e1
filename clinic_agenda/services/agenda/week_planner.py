"""
Weekly orchestration.

Runs generate -> detect -> triage for Monday through Saturday of the
anchor's week, sharing one sequential appointment id counter, then appends
confirmation actions and summary insights.
"""

import logging
import time
from datetime import date, timedelta
from typing import Any, List, Mapping, Optional, Union

from clinic_agenda.config import FALLBACK_DAY_ISO, WEEK_DAYS
from clinic_agenda.i18n import DEFAULT_LANGUAGE, get_message
from clinic_agenda.models.agenda import AiAction, AiResult, Appointment, DayUtilization, ScheduleRules
from clinic_agenda.services.agenda.gap_detector import detect_gaps
from clinic_agenda.services.agenda.gap_triage import build_gap_panels, suggest_confirmations
from clinic_agenda.services.agenda.generator import (
    DEFAULT_HEURISTICS,
    SchedulerHeuristics,
    format_seed,
    generate_day,
)
from clinic_agenda.services.agenda.metrics import day_utilization, mean_utilization, stress_level_for
from clinic_agenda.services.agenda.rules import normalize_rules
from clinic_agenda.utils.time_grid import is_day_iso, parse_day_iso, start_of_week_monday

logger = logging.getLogger(__name__)


def resolve_seed(seed: Any) -> Union[int, float]:
    """Numeric seeds pass through; anything else becomes the current epoch millis."""
    if isinstance(seed, (int, float)) and not isinstance(seed, bool):
        return seed
    return int(time.time() * 1000)


def resolve_anchor_day(
    anchor_day_iso: Any = None,
    day_iso: Any = None,
    default_day_iso: str = FALLBACK_DAY_ISO,
) -> date:
    """
    Pick the day whose week gets planned.

    ``anchor_day_iso`` wins when it is a string (only its first 10 chars are
    used); otherwise a well-formed ``day_iso``; otherwise the default.
    """
    candidate = None
    if isinstance(anchor_day_iso, str):
        candidate = anchor_day_iso[:10] if len(anchor_day_iso) >= 10 else None
    elif is_day_iso(day_iso):
        candidate = day_iso

    parsed = parse_day_iso(candidate) if candidate else None
    return parsed or parse_day_iso(default_day_iso)


def week_days(anchor: date) -> List[date]:
    monday = start_of_week_monday(anchor)
    return [monday + timedelta(days=i) for i in range(WEEK_DAYS)]


def plan_week(
    rules: Union[ScheduleRules, Mapping[str, Any], None],
    seed: Union[int, float],
    anchor: date,
    provider_id: Optional[str] = None,
    lang: str = DEFAULT_LANGUAGE,
    summary_name: str = "Fyllio",
    heuristics: SchedulerHeuristics = DEFAULT_HEURISTICS,
) -> AiResult:
    """
    Plan one Monday-Saturday week.

    Args:
        rules: Normalized rules, or a raw rules mapping to normalize
        seed: Run seed
        anchor: Any day of the week to plan
        provider_id: Optional provider stamped on appointments
        lang: Language for rationale, titles and insights
        summary_name: Product name used in the summary line
        heuristics: Generator constants

    Returns:
        AiResult with appointments, GAP_PANEL actions (per day) followed by
        CONFIRM actions, insights and per-day utilization
    """
    rules = normalize_rules(rules)
    days = week_days(anchor)

    appointments: List[Appointment] = []
    gap_panels: List[AiAction] = []
    metrics: List[DayUtilization] = []

    next_id = 1
    for day in days:
        day_appointments, next_id = generate_day(
            rules, day, seed, provider_id=provider_id, id_start=next_id, heuristics=heuristics
        )
        appointments.extend(day_appointments)

        gaps = detect_gaps(day_appointments, rules, day)
        gap_panels.extend(build_gap_panels(gaps, lang))
        metrics.append(day_utilization(day_appointments, rules, day))

    actions = gap_panels + suggest_confirmations(appointments, seed, lang)

    insights = [
        get_message("insight_chairs", lang, chairs=rules.chairs_count),
        get_message("insight_treatments", lang, count=len(rules.treatments)),
        get_message("insight_seed", lang, seed=format_seed(seed)),
        get_message("insight_snapping", lang),
        get_message("insight_days", lang, days=", ".join(d.isoformat() for d in days)),
    ]
    if rules.has_lunch:
        insights.append(get_message("insight_lunch", lang, start=rules.lunch_start_time, end=rules.lunch_end_time))
    insights.append(
        get_message("insight_utilization", lang, pct=round(mean_utilization(metrics) * 100), gaps=len(gap_panels))
    )

    logger.info(
        f"Planned week of {days[0].isoformat()}: {len(appointments)} appointments, "
        f"{len(gap_panels)} gap panels, seed={format_seed(seed)}"
    )

    return AiResult(
        summary=get_message("week_summary", lang, name=summary_name),
        stress_level=stress_level_for(metrics),
        insights=insights,
        appointments=appointments,
        actions=actions,
        metrics=metrics,
    )
