"""Agenda engine: schedule generation, gap detection and gap triage."""

from .rules import normalize_rules
from .generator import generate_day, SchedulerHeuristics
from .gap_detector import detect_gaps
from .gap_triage import build_gap_panels, suggest_confirmations, triage_gap
from .gap_state import apply_alternative, resolve_contacting, start_contacting, tick_contacting
from .agenda_items import build_day_agenda
from .metrics import compute_impact, day_utilization, stress_level_for
from .week_planner import plan_week

__all__ = [
    "normalize_rules",
    "generate_day",
    "SchedulerHeuristics",
    "detect_gaps",
    "build_gap_panels",
    "suggest_confirmations",
    "triage_gap",
    "apply_alternative",
    "resolve_contacting",
    "start_contacting",
    "tick_contacting",
    "build_day_agenda",
    "compute_impact",
    "day_utilization",
    "stress_level_for",
    "plan_week",
]
