"""Data models for the clinic agenda service."""
from clinic_agenda.models.agenda import (
    AiAction,
    AiResult,
    Appointment,
    Gap,
    GapMeta,
    ScheduleRules,
    TreatmentRule,
)

__all__ = ["AiAction", "AiResult", "Appointment", "Gap", "GapMeta", "ScheduleRules", "TreatmentRule"]
