"""
Gap Triage.

Turns ranked gaps into explainable GAP_PANEL actions. The demand signal is
``hash01(gap_key)``, so the same gap key always yields the same
recommendation, rationale and next steps.
"""

import logging
from typing import Iterable, List, Tuple, Union

from clinic_agenda.i18n import DEFAULT_LANGUAGE, get_message
from clinic_agenda.models.agenda import (
    ActionChange,
    ActionType,
    AiAction,
    Appointment,
    FillProbability,
    Gap,
    GapAlternative,
    GapAlternativeType,
    GapMeta,
    GapRecommendation,
)
from clinic_agenda.services.agenda.generator import format_seed
from clinic_agenda.utils.time_grid import hash01

logger = logging.getLogger(__name__)

REQUESTS_THRESHOLD = 0.7
RECALL_THRESHOLD = 0.35

ALTERNATIVE_ORDER = (
    GapAlternativeType.RECALL_PATIENTS,
    GapAlternativeType.ADVANCE_APPOINTMENTS,
    GapAlternativeType.INTERNAL_MEETING,
    GapAlternativeType.PERSONAL_TIME,
    GapAlternativeType.WAIT,
)

PRIMARY_ALTERNATIVE = {
    GapRecommendation.FILL_WITH_REQUESTS: GapAlternativeType.RECALL_PATIENTS,
    GapRecommendation.RECALL_PATIENTS: GapAlternativeType.RECALL_PATIENTS,
    GapRecommendation.PERSONAL_TIME: GapAlternativeType.PERSONAL_TIME,
    GapRecommendation.WAIT_OR_RESCHEDULE: GapAlternativeType.WAIT,
}

NEXT_STEP_KEYS = {
    GapRecommendation.FILL_WITH_REQUESTS: ("step_confirm_requesters", "step_send_auto_confirmation"),
    GapRecommendation.RECALL_PATIENTS: ("step_send_recall", "step_prioritize_short"),
    GapRecommendation.PERSONAL_TIME: ("step_block_personal", "step_keep_alert"),
    GapRecommendation.WAIT_OR_RESCHEDULE: ("step_wait", "step_then_recall"),
}


def fill_probability_for(duration_min: int) -> FillProbability:
    """Shorter gaps are easier to fill."""
    if duration_min >= 70:
        return FillProbability.LOW
    if duration_min >= 45:
        return FillProbability.MEDIUM
    return FillProbability.HIGH


def alternative_title(alternative: GapAlternativeType, lang: str = DEFAULT_LANGUAGE) -> str:
    return get_message(f"alt_{alternative.value.lower()}", lang)


def build_alternatives(primary: GapAlternativeType, lang: str = DEFAULT_LANGUAGE) -> Tuple[GapAlternative, ...]:
    return tuple(
        GapAlternative(type=alt, title=alternative_title(alt, lang), primary=alt == primary)
        for alt in ALTERNATIVE_ORDER
    )


def triage_gap(gap: Gap, lang: str = DEFAULT_LANGUAGE) -> GapMeta:
    """Classify one gap. Pure function of the gap (and language)."""
    r = hash01(gap.gap_key)
    has_requests_now = r > REQUESTS_THRESHOLD
    has_recall_candidates = not has_requests_now and r > RECALL_THRESHOLD

    fill_probability = fill_probability_for(gap.duration_min)

    if has_requests_now:
        recommendation = GapRecommendation.FILL_WITH_REQUESTS
    elif has_recall_candidates:
        recommendation = GapRecommendation.RECALL_PATIENTS
    elif fill_probability == FillProbability.LOW:
        recommendation = GapRecommendation.PERSONAL_TIME
    else:
        recommendation = GapRecommendation.WAIT_OR_RESCHEDULE

    if gap.is_end_of_day:
        rationale = get_message("rationale_end_of_day", lang)
    else:
        rationale = get_message(f"rationale_{recommendation.value.lower()}", lang)

    return GapMeta(
        gap_key=gap.gap_key,
        start=gap.start,
        end=gap.end,
        duration_min=gap.duration_min,
        chair_id=gap.chair_id,
        has_requests_now=has_requests_now,
        has_recall_candidates=has_recall_candidates,
        fill_probability=fill_probability,
        recommendation=recommendation,
        rationale=rationale,
        next_steps=tuple(get_message(key, lang) for key in NEXT_STEP_KEYS[recommendation]),
        alternatives=build_alternatives(PRIMARY_ALTERNATIVE[recommendation], lang),
        is_end_of_day=gap.is_end_of_day,
        is_start_of_day=gap.is_start_of_day,
    )


def triage_open_time(gap: Gap, lang: str = DEFAULT_LANGUAGE) -> GapMeta:
    """
    Classify open chair time from its length alone.

    Used for the availability left after blocks are laid out, where there is
    no demand signal: recall is always possible, long stretches go to
    personal time and a long end-of-day tail is left to wait.
    """
    fill_probability = fill_probability_for(gap.duration_min)

    if gap.is_end_of_day and gap.duration_min >= 60:
        recommendation = GapRecommendation.WAIT_OR_RESCHEDULE
    elif fill_probability == FillProbability.LOW:
        recommendation = GapRecommendation.PERSONAL_TIME
    else:
        recommendation = GapRecommendation.RECALL_PATIENTS

    if gap.is_end_of_day:
        rationale = get_message("rationale_open_end_of_day", lang)
    elif recommendation == GapRecommendation.RECALL_PATIENTS:
        rationale = get_message("rationale_open_recall", lang)
    else:
        rationale = get_message("rationale_open_personal", lang)

    if recommendation == GapRecommendation.PERSONAL_TIME:
        step_keys = ("step_block_personal", "step_keep_alert")
    else:
        step_keys = ("step_send_recall", "step_offer_short", "step_use_alternative")

    return GapMeta(
        gap_key=gap.gap_key,
        start=gap.start,
        end=gap.end,
        duration_min=gap.duration_min,
        chair_id=gap.chair_id,
        has_requests_now=False,
        has_recall_candidates=True,
        fill_probability=fill_probability,
        recommendation=recommendation,
        rationale=rationale,
        next_steps=tuple(get_message(key, lang) for key in step_keys),
        alternatives=build_alternatives(PRIMARY_ALTERNATIVE[recommendation], lang),
        is_end_of_day=gap.is_end_of_day,
        is_start_of_day=gap.is_start_of_day,
    )


def build_gap_panels(gaps: Iterable[Gap], lang: str = DEFAULT_LANGUAGE) -> List[AiAction]:
    """One GAP_PANEL action per ranked gap, numbered from 1."""
    panels = []
    for index, gap in enumerate(gaps, start=1):
        meta = triage_gap(gap, lang)
        panels.append(
            AiAction(
                id=f"GAP_PANEL_{index}_{gap.gap_key}",
                title=get_message("gap_panel_title", lang, index=index, duration=gap.duration_min),
                type=ActionType.GAP_PANEL,
                meta=meta,
                minutes_saved=0,
                stress_delta=-0.2,
                changes=(
                    ActionChange(
                        appointment_id="GAP",
                        new_start=gap.start,
                        new_end=gap.end,
                        note=get_message("gap_panel_note", lang, chair=gap.chair_id),
                    ),
                ),
            )
        )
    return panels


def suggest_confirmations(
    appointments: Iterable[Appointment],
    seed: Union[int, float],
    lang: str = DEFAULT_LANGUAGE,
) -> List[AiAction]:
    """One CONFIRM action per appointment, in the order given."""
    seed_key = format_seed(seed)
    return [
        AiAction(
            id=f"CONF_{seed_key}_{k}_{appointment.id}",
            title=get_message("confirm_title", lang, patient=appointment.patient_name),
            type=ActionType.CONFIRM,
            minutes_saved=2,
            stress_delta=-0.2,
            changes=(ActionChange(appointment_id=str(appointment.id)),),
        )
        for k, appointment in enumerate(appointments, start=1)
    ]
