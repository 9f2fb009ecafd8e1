"""
Rule normalization.

Turns the loosely-typed rules object sent by the dashboard into a
``ScheduleRules`` with every field defaulted and clamped. Never raises:
missing, mistyped or out-of-range values fall back to their defaults.
"""

import logging
import math
from typing import Any, Mapping, Optional, Tuple, Union

from clinic_agenda.models.agenda import ScheduleRules, TreatmentRule
from clinic_agenda.utils.time_grid import clamp_int, is_hhmm

logger = logging.getLogger(__name__)

DEFAULT_DAY_START = "08:30"
DEFAULT_DAY_END = "19:00"
DEFAULT_TREATMENT_TYPE = "Tratamiento"


def _as_int(value: Any) -> Optional[int]:
    """Coerce numbers and numeric strings to int (floored); anything else is None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return int(math.floor(value))
    return None


def _clamped(raw: Mapping[str, Any], key: str, default: int, low: int, high: int) -> int:
    value = _as_int(raw.get(key))
    return clamp_int(default if value is None else value, low, high)


def _flag(raw: Mapping[str, Any], key: str, default: bool = True) -> bool:
    value = raw.get(key)
    return value if isinstance(value, bool) else default


def _hhmm(raw: Mapping[str, Any], key: str, default: Optional[str]) -> Optional[str]:
    value = raw.get(key)
    return value if is_hhmm(value) else default


def _normalize_treatments(raw_treatments: Any) -> Tuple[TreatmentRule, ...]:
    if not isinstance(raw_treatments, (list, tuple)):
        return ()

    treatments = []
    for entry in raw_treatments:
        if isinstance(entry, TreatmentRule):
            entry = entry.to_dict()
        if not isinstance(entry, Mapping):
            continue

        raw_type = entry.get("type")
        type_name = str(DEFAULT_TREATMENT_TYPE if raw_type is None else raw_type).strip()
        if not type_name:
            continue

        duration = _as_int(entry.get("durationMin"))
        buffer = _as_int(entry.get("bufferMin"))
        treatments.append(
            TreatmentRule(
                type=type_name,
                duration_min=clamp_int(30 if duration is None else duration, 10, 240),
                buffer_min=0 if buffer is None else clamp_int(buffer, 0, 60),
            )
        )
    return tuple(treatments)


def normalize_rules(raw: Union[Mapping[str, Any], ScheduleRules, None]) -> ScheduleRules:
    """
    Build a normalized ``ScheduleRules``.

    Args:
        raw: camelCase rules mapping as sent on the wire, a ``ScheduleRules``
            (returned as is when already in range, re-clamped otherwise), or None

    Returns:
        ScheduleRules with every field inside its valid range
    """
    if isinstance(raw, ScheduleRules):
        normalized = normalize_rules(raw.to_dict())
        return raw if normalized == raw else normalized
    if not isinstance(raw, Mapping):
        if raw is not None:
            logger.debug(f"Ignoring rules of type {type(raw).__name__}, using defaults")
        raw = {}

    lunch_start = _hhmm(raw, "lunchStartTime", None)
    lunch_end = _hhmm(raw, "lunchEndTime", None)
    if not (lunch_start and lunch_end):
        lunch_start = lunch_end = None

    min_bookable = _clamped(raw, "minBookableSlotMin", 30, 10, 240)
    buffer_min = _clamped(raw, "bufferMin", 5, 0, 60)

    extra = raw.get("extraRulesText")

    return ScheduleRules(
        day_start_time=_hhmm(raw, "dayStartTime", DEFAULT_DAY_START),
        day_end_time=_hhmm(raw, "dayEndTime", DEFAULT_DAY_END),
        chairs_count=_clamped(raw, "chairsCount", 1, 1, 12),
        slot_granularity_min=_clamped(raw, "slotGranularityMin", 10, 5, 60),
        enable_breaks=_flag(raw, "enableBreaks"),
        enable_buffers=_flag(raw, "enableBuffers"),
        min_bookable_slot_min=min_bookable,
        long_gap_threshold=_clamped(raw, "longGapThreshold", min_bookable, 10, 240),
        max_gap_panels=_clamped(raw, "maxGapPanels", 3, 0, 12),
        buffer_min=buffer_min,
        buffer_target=_clamped(raw, "bufferTarget", buffer_min, 0, 60),
        break_min=_clamped(raw, "breakMin", 10, 0, 90),
        break_target=_clamped(raw, "breakTarget", 15, 0, 90),
        break_max=_clamped(raw, "breakMax", 20, 0, 120),
        lunch_start_time=lunch_start,
        lunch_end_time=lunch_end,
        treatments=_normalize_treatments(raw.get("treatments")),
        extra_rules_text=extra if isinstance(extra, str) else "",
    )


def buffer_for_treatment(rules: ScheduleRules, type_name: str) -> int:
    """Preparation minutes inserted before a treatment."""
    if not rules.enable_buffers:
        return 0

    match = rules.treatment(type_name)
    if match is not None and match.buffer_min > 0:
        return match.buffer_min

    return max(0, rules.buffer_min)
