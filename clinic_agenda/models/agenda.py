"""
Core agenda types: rules, appointments, gaps and the actions built from them.

These are plain dataclasses; the wire (camelCase) shape is produced by
``to_dict``.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from clinic_agenda.utils.time_grid import at_time, to_local_iso


class FillProbability(str, Enum):
    """How likely a gap is to be filled if we try"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class GapRecommendation(str, Enum):
    FILL_WITH_REQUESTS = "FILL_WITH_REQUESTS"
    RECALL_PATIENTS = "RECALL_PATIENTS"
    PERSONAL_TIME = "PERSONAL_TIME"
    WAIT_OR_RESCHEDULE = "WAIT_OR_RESCHEDULE"


class GapAlternativeType(str, Enum):
    RECALL_PATIENTS = "RECALL_PATIENTS"
    ADVANCE_APPOINTMENTS = "ADVANCE_APPOINTMENTS"
    INTERNAL_MEETING = "INTERNAL_MEETING"
    PERSONAL_TIME = "PERSONAL_TIME"
    WAIT = "WAIT"


class GapStatus(str, Enum):
    """Follow-up status of a surfaced gap"""
    OPEN = "OPEN"
    CONTACTING = "CONTACTING"
    FILLED = "FILLED"
    FAILED = "FAILED"
    BLOCKED_INTERNAL = "BLOCKED_INTERNAL"
    BLOCKED_PERSONAL = "BLOCKED_PERSONAL"


class ActionType(str, Enum):
    GAP_PANEL = "GAP_PANEL"
    CONFIRM = "CONFIRM"


class StressLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class BlockType(str, Enum):
    """Non-bookable time laid over a chair"""
    BUFFER = "BUFFER"
    BREAK = "BREAK"
    PERSONAL = "PERSONAL"
    INTERNAL = "INTERNAL"


@dataclass(frozen=True)
class TreatmentRule:
    """A bookable treatment and its preparation buffer"""
    type: str
    duration_min: int = 30
    buffer_min: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "durationMin": self.duration_min, "bufferMin": self.buffer_min}


@dataclass(frozen=True)
class ScheduleRules:
    """
    Fully defaulted, range-clamped clinic rules.

    Build it with ``normalize_rules``; every field is already inside its
    valid range so nothing downstream re-validates.
    """
    day_start_time: str = "08:30"
    day_end_time: str = "19:00"
    chairs_count: int = 1
    slot_granularity_min: int = 10

    enable_breaks: bool = True
    enable_buffers: bool = True

    min_bookable_slot_min: int = 30
    long_gap_threshold: int = 30
    max_gap_panels: int = 3

    buffer_min: int = 5
    buffer_target: int = 5

    break_min: int = 10
    break_target: int = 15
    break_max: int = 20

    lunch_start_time: Optional[str] = None
    lunch_end_time: Optional[str] = None

    treatments: Tuple[TreatmentRule, ...] = ()
    extra_rules_text: str = ""

    _treatment_index: Dict[str, TreatmentRule] = field(
        default=None, init=False, repr=False, compare=False, hash=False
    )

    def __post_init__(self):
        index: Dict[str, TreatmentRule] = {}
        for treatment in self.treatments:
            index.setdefault(treatment.type.strip().lower(), treatment)
        object.__setattr__(self, "_treatment_index", index)

    @property
    def has_lunch(self) -> bool:
        return bool(self.lunch_start_time and self.lunch_end_time)

    def treatment(self, type_name: str) -> Optional[TreatmentRule]:
        """Case-insensitive, trimmed lookup; the first configured match wins."""
        return self._treatment_index.get((type_name or "").strip().lower())

    def lunch_window(self, day: date) -> Optional[Tuple[datetime, datetime]]:
        if not self.has_lunch:
            return None
        start = at_time(day, self.lunch_start_time)
        end = at_time(day, self.lunch_end_time)
        if end <= start:
            return None
        return start, end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dayStartTime": self.day_start_time,
            "dayEndTime": self.day_end_time,
            "chairsCount": self.chairs_count,
            "slotGranularityMin": self.slot_granularity_min,
            "enableBreaks": self.enable_breaks,
            "enableBuffers": self.enable_buffers,
            "minBookableSlotMin": self.min_bookable_slot_min,
            "longGapThreshold": self.long_gap_threshold,
            "maxGapPanels": self.max_gap_panels,
            "bufferMin": self.buffer_min,
            "bufferTarget": self.buffer_target,
            "breakMin": self.break_min,
            "breakTarget": self.break_target,
            "breakMax": self.break_max,
            "lunchStartTime": self.lunch_start_time or "",
            "lunchEndTime": self.lunch_end_time or "",
            "treatments": [t.to_dict() for t in self.treatments],
            "extraRulesText": self.extra_rules_text,
        }


@dataclass(frozen=True)
class Appointment:
    id: int
    patient_name: str
    start: datetime
    end: datetime
    type: str
    chair_id: int
    provider_id: Optional[str] = None

    @property
    def duration_min(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "id": self.id,
            "patientName": self.patient_name,
            "start": to_local_iso(self.start),
            "end": to_local_iso(self.end),
            "type": self.type,
            "chairId": self.chair_id,
        }
        if self.provider_id is not None:
            payload["providerId"] = self.provider_id
        return payload


@dataclass(frozen=True)
class Gap:
    """Idle window on one chair. Recomputed on every run, never stored."""
    start: datetime
    end: datetime
    duration_min: int
    gap_key: str
    chair_id: int
    is_start_of_day: bool = False
    is_end_of_day: bool = False

    @property
    def score(self) -> int:
        giant_penalty = 40 if self.duration_min > 90 else 0
        end_bonus = 10 if self.is_end_of_day else 0
        return self.duration_min + end_bonus - giant_penalty


@dataclass(frozen=True)
class GapAlternative:
    type: GapAlternativeType
    title: str
    primary: bool = False

    def to_dict(self) -> Dict[str, Any]:
        payload = {"type": self.type.value, "title": self.title}
        if self.primary:
            payload["primary"] = True
        return payload


@dataclass(frozen=True)
class GapMeta:
    gap_key: str
    start: datetime
    end: datetime
    duration_min: int
    chair_id: int

    has_requests_now: bool
    has_recall_candidates: bool

    fill_probability: FillProbability
    recommendation: GapRecommendation

    rationale: str
    next_steps: Tuple[str, ...]
    alternatives: Tuple[GapAlternative, ...]

    status: GapStatus = GapStatus.OPEN
    contacted_count: int = 0
    responses_count: int = 0

    messages_count: int = 0
    calls_count: int = 0
    contacting_progress_pct: int = 0
    switch_requested: bool = False

    is_end_of_day: bool = False
    is_start_of_day: bool = False

    @property
    def primary_alternative(self) -> Optional[GapAlternativeType]:
        for alternative in self.alternatives:
            if alternative.primary:
                return alternative.type
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gapKey": self.gap_key,
            "start": to_local_iso(self.start),
            "end": to_local_iso(self.end),
            "durationMin": self.duration_min,
            "chairId": self.chair_id,
            "hasRequestsNow": self.has_requests_now,
            "hasRecallCandidates": self.has_recall_candidates,
            "fillProbability": self.fill_probability.value,
            "recommendation": self.recommendation.value,
            "rationale": self.rationale,
            "nextSteps": list(self.next_steps),
            "status": self.status.value,
            "contactedCount": self.contacted_count,
            "responsesCount": self.responses_count,
            "messagesCount": self.messages_count,
            "callsCount": self.calls_count,
            "contactingProgressPct": self.contacting_progress_pct,
            "switchRequested": self.switch_requested,
            "alternatives": [a.to_dict() for a in self.alternatives],
            "isEndOfDay": self.is_end_of_day,
            "isStartOfDay": self.is_start_of_day,
        }


@dataclass(frozen=True)
class ActionChange:
    appointment_id: str
    new_start: Optional[datetime] = None
    new_end: Optional[datetime] = None
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "appointmentId": self.appointment_id,
            "newStart": to_local_iso(self.new_start) if self.new_start else None,
            "newEnd": to_local_iso(self.new_end) if self.new_end else None,
        }
        if self.note is not None:
            payload["note"] = self.note
        return payload


@dataclass(frozen=True)
class AiAction:
    id: str
    title: str
    type: ActionType
    changes: Tuple[ActionChange, ...]
    minutes_saved: int = 0
    stress_delta: float = 0.0
    meta: Optional[GapMeta] = None

    def to_dict(self) -> Dict[str, Any]:
        payload = {
            "id": self.id,
            "title": self.title,
            "type": self.type.value,
            "impact": {"minutesSaved": self.minutes_saved, "stressDelta": self.stress_delta},
            "changes": [c.to_dict() for c in self.changes],
        }
        if self.meta is not None:
            payload["meta"] = self.meta.to_dict()
        return payload


@dataclass(frozen=True)
class AgendaBlock:
    """Buffer, break or reserved time on one chair."""
    id: str
    start: datetime
    end: datetime
    block_type: BlockType
    chair_id: int
    label: str
    note: str = ""

    @property
    def duration_min(self) -> int:
        return max(0, int((self.end - self.start).total_seconds() // 60))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": "AI_BLOCK",
            "id": self.id,
            "start": to_local_iso(self.start),
            "end": to_local_iso(self.end),
            "durationMin": self.duration_min,
            "label": self.label,
            "note": self.note,
            "blockType": self.block_type.value,
            "chairId": self.chair_id,
        }


@dataclass
class DayAgenda:
    """One day as the dashboard draws it: appointments, blocks and open time."""
    day: date
    appointments: List[Appointment]
    blocks: List[AgendaBlock]
    availability: List[GapMeta]

    def to_dict(self) -> Dict[str, Any]:
        items = [dict(a.to_dict(), kind="APPOINTMENT", durationMin=a.duration_min) for a in self.appointments]
        items.extend(b.to_dict() for b in self.blocks)
        items.extend(
            {
                "kind": "GAP",
                "id": m.gap_key,
                "start": to_local_iso(m.start),
                "end": to_local_iso(m.end),
                "durationMin": m.duration_min,
                "chairId": m.chair_id,
                "meta": m.to_dict(),
            }
            for m in self.availability
        )
        items.sort(key=lambda item: item["start"])
        return {"day": self.day.isoformat(), "items": items}


@dataclass(frozen=True)
class ImpactTotals:
    recovered_admin_min: float = 0.0
    time_available_used_min: float = 0.0
    internal_personal_min: float = 0.0
    operational_min: float = 0.0

    def __add__(self, other: "ImpactTotals") -> "ImpactTotals":
        return ImpactTotals(
            recovered_admin_min=self.recovered_admin_min + other.recovered_admin_min,
            time_available_used_min=self.time_available_used_min + other.time_available_used_min,
            internal_personal_min=self.internal_personal_min + other.internal_personal_min,
            operational_min=self.operational_min + other.operational_min,
        )

    def scaled(self, factor: float) -> "ImpactTotals":
        return ImpactTotals(
            recovered_admin_min=self.recovered_admin_min * factor,
            time_available_used_min=self.time_available_used_min * factor,
            internal_personal_min=self.internal_personal_min * factor,
            operational_min=self.operational_min * factor,
        )

    def averaged(self, count: int) -> "ImpactTotals":
        count = max(1, count)
        return ImpactTotals(
            recovered_admin_min=self.recovered_admin_min / count,
            time_available_used_min=self.time_available_used_min / count,
            internal_personal_min=self.internal_personal_min / count,
            operational_min=self.operational_min / count,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recoveredAdminMin": self.recovered_admin_min,
            "timeAvailableUsedMin": self.time_available_used_min,
            "internalPersonalMin": self.internal_personal_min,
            "operationalMin": self.operational_min,
        }


@dataclass(frozen=True)
class ImpactReport:
    daily: ImpactTotals
    monthly: ImpactTotals

    def to_dict(self) -> Dict[str, Any]:
        return {"daily": self.daily.to_dict(), "monthly": self.monthly.to_dict()}


@dataclass(frozen=True)
class DayUtilization:
    day: date
    appointments_count: int
    booked_min: int
    capacity_min: int

    @property
    def ratio(self) -> float:
        if self.capacity_min <= 0:
            return 0.0
        return self.booked_min / self.capacity_min

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "appointmentsCount": self.appointments_count,
            "bookedMin": self.booked_min,
            "capacityMin": self.capacity_min,
            "utilization": round(self.ratio, 3),
        }


@dataclass
class AiResult:
    summary: str
    stress_level: StressLevel
    insights: List[str]
    appointments: List[Appointment]
    actions: List[AiAction]
    metrics: List[DayUtilization] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "stressLevel": self.stress_level.value,
            "insights": list(self.insights),
            "appointments": [a.to_dict() for a in self.appointments],
            "actions": [a.to_dict() for a in self.actions],
            "metrics": [m.to_dict() for m in self.metrics],
        }
