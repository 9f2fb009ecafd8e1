"""
Gap follow-up state transitions.

Pure functions that move a surfaced gap through its follow-up lifecycle:

    OPEN -> CONTACTING -> FILLED | FAILED
    any non-final -> BLOCKED_PERSONAL | BLOCKED_INTERNAL (via alternatives)

FILLED, BLOCKED_INTERNAL and BLOCKED_PERSONAL are final: every transition
returns the meta unchanged. Simulated outcomes are seeded from the gap key
(plus an attempt counter), never from the wall clock.
"""

import logging
from dataclasses import replace
from datetime import datetime

from clinic_agenda.i18n import DEFAULT_LANGUAGE, get_message
from clinic_agenda.models.agenda import (
    FillProbability,
    GapAlternativeType,
    GapMeta,
    GapStatus,
)
from clinic_agenda.services.agenda.gap_triage import build_alternatives
from clinic_agenda.utils.time_grid import clamp_int, hash01, minutes_between

logger = logging.getLogger(__name__)

FINAL_STATUSES = frozenset({GapStatus.FILLED, GapStatus.BLOCKED_INTERNAL, GapStatus.BLOCKED_PERSONAL})

FILL_CHANCE = {
    FillProbability.HIGH: 0.75,
    FillProbability.MEDIUM: 0.45,
    FillProbability.LOW: 0.2,
}
SWITCH_CHANCE = 0.33

RECALL_EXTRA_MESSAGES = 3
RECALL_EXTRA_CALLS = 1


def is_final(meta: GapMeta) -> bool:
    return meta.status in FINAL_STATUSES


def _default_primary(meta: GapMeta) -> GapAlternativeType:
    existing = meta.primary_alternative
    if existing is not None:
        return existing
    if meta.fill_probability == FillProbability.LOW:
        return GapAlternativeType.INTERNAL_MEETING
    return GapAlternativeType.RECALL_PATIENTS


def start_contacting(meta: GapMeta, now: datetime, lang: str = DEFAULT_LANGUAGE) -> GapMeta:
    """
    Begin automatic outreach for a gap.

    Fill probability degrades as the gap gets close: HIGH drops to MEDIUM
    under 90 minutes to start, MEDIUM drops to LOW under 60.
    """
    if is_final(meta):
        return meta

    minutes_to_start = max(0, minutes_between(now, meta.start))

    fill_probability = meta.fill_probability
    if minutes_to_start < 90 and fill_probability == FillProbability.HIGH:
        fill_probability = FillProbability.MEDIUM
    if minutes_to_start < 60 and fill_probability == FillProbability.MEDIUM:
        fill_probability = FillProbability.LOW

    return replace(
        meta,
        status=GapStatus.CONTACTING,
        fill_probability=fill_probability,
        rationale=get_message("state_contacting", lang),
        alternatives=build_alternatives(_default_primary(meta), lang),
        contacting_progress_pct=0,
    )


def tick_contacting(meta: GapMeta, progress_pct: int) -> GapMeta:
    """Advance outreach progress; message and call counters never go down."""
    if meta.status != GapStatus.CONTACTING:
        return meta

    progress = clamp_int(int(progress_pct), 0, 100)
    target_messages = 6 + int(hash01(f"MSGS:{meta.gap_key}") * 10)
    target_calls = 1 + int(hash01(f"CALLS:{meta.gap_key}") * 4)

    messages = clamp_int(progress * target_messages // 100, meta.messages_count, max(target_messages, meta.messages_count))
    calls = clamp_int(progress * target_calls // 100, meta.calls_count, max(target_calls, meta.calls_count))

    return replace(
        meta,
        contacting_progress_pct=progress,
        messages_count=messages,
        calls_count=calls,
        contacted_count=max(meta.contacted_count, messages + calls),
    )


def resolve_contacting(meta: GapMeta, attempt: int = 0, lang: str = DEFAULT_LANGUAGE) -> GapMeta:
    """Settle outreach: switch request, filled, or failed."""
    if is_final(meta):
        return meta

    alternatives = build_alternatives(_default_primary(meta), lang)

    if hash01(f"SWITCH:{meta.gap_key}:{attempt}") < SWITCH_CHANCE:
        logger.debug(f"Gap {meta.gap_key} resolved with a switch request")
        return replace(
            meta,
            status=GapStatus.FAILED,
            contacting_progress_pct=100,
            switch_requested=True,
            rationale=get_message("state_switch_requested", lang),
            alternatives=alternatives,
        )

    if hash01(f"FILL:{meta.gap_key}:{attempt}") < FILL_CHANCE[meta.fill_probability]:
        return replace(
            meta,
            status=GapStatus.FILLED,
            responses_count=max(meta.responses_count, 1),
            contacting_progress_pct=100,
            rationale=get_message("state_filled", lang),
            alternatives=alternatives,
        )

    return replace(
        meta,
        status=GapStatus.FAILED,
        contacting_progress_pct=100,
        rationale=get_message("state_failed", lang),
        alternatives=alternatives,
    )


def apply_alternative(
    meta: GapMeta,
    alternative: GapAlternativeType,
    lang: str = DEFAULT_LANGUAGE,
) -> GapMeta:
    """Run one of the gap's alternatives; it becomes the only primary."""
    if is_final(meta):
        return meta

    alternative = GapAlternativeType(alternative)
    alternatives = build_alternatives(alternative, lang)

    if alternative == GapAlternativeType.WAIT:
        return replace(meta, status=GapStatus.OPEN, rationale=get_message("state_wait", lang), alternatives=alternatives)

    if alternative == GapAlternativeType.RECALL_PATIENTS:
        return replace(
            meta,
            status=GapStatus.CONTACTING,
            rationale=get_message("state_recall", lang),
            messages_count=meta.messages_count + RECALL_EXTRA_MESSAGES,
            calls_count=meta.calls_count + RECALL_EXTRA_CALLS,
            alternatives=alternatives,
        )

    if alternative == GapAlternativeType.PERSONAL_TIME:
        return replace(
            meta,
            status=GapStatus.BLOCKED_PERSONAL,
            rationale=get_message("state_personal", lang),
            alternatives=alternatives,
        )

    if alternative == GapAlternativeType.ADVANCE_APPOINTMENTS:
        return replace(meta, rationale=get_message("state_advance", lang), alternatives=alternatives)

    return replace(
        meta,
        status=GapStatus.BLOCKED_INTERNAL,
        rationale=get_message("state_internal", lang),
        alternatives=alternatives,
    )
