"""
Tests for utilization and impact metrics
"""

from dataclasses import replace
from datetime import date, datetime

from clinic_agenda.models.agenda import (
    Appointment,
    DayAgenda,
    DayUtilization,
    GapAlternativeType,
    GapStatus,
    ImpactTotals,
    StressLevel,
)
from clinic_agenda.services.agenda.agenda_items import build_day_agenda
from clinic_agenda.services.agenda.gap_state import apply_alternative
from clinic_agenda.services.agenda.metrics import compute_impact, day_utilization, mean_utilization, stress_level_for
from clinic_agenda.services.agenda.rules import normalize_rules

DAY = date(2025, 12, 8)


def test_capacity_excludes_lunch():
    rules = normalize_rules({
        "dayStartTime": "09:00",
        "dayEndTime": "18:00",
        "chairsCount": 2,
        "lunchStartTime": "13:00",
        "lunchEndTime": "14:00",
    })
    appointments = [
        Appointment(id=1, patient_name="Ana López", start=datetime(2025, 12, 8, 9),
                    end=datetime(2025, 12, 8, 10), type="Limpieza", chair_id=1),
        Appointment(id=2, patient_name="Juan Vega", start=datetime(2025, 12, 8, 15),
                    end=datetime(2025, 12, 8, 16), type="Limpieza", chair_id=2),
    ]

    utilization = day_utilization(appointments, rules, DAY)

    assert utilization.capacity_min == 960
    assert utilization.booked_min == 120
    assert utilization.ratio == 0.125
    assert utilization.to_dict()["utilization"] == 0.125


def test_empty_day():
    utilization = day_utilization([], normalize_rules({}), DAY)
    assert utilization.appointments_count == 0
    assert utilization.ratio == 0.0


def test_inverted_day_has_no_capacity():
    rules = normalize_rules({"dayStartTime": "18:00", "dayEndTime": "09:00"})
    assert day_utilization([], rules, DAY).capacity_min == 0


def test_stress_levels():
    def days(ratio):
        return [DayUtilization(day=DAY, appointments_count=1, booked_min=int(ratio * 100), capacity_min=100)]

    assert stress_level_for(days(0.95)) == StressLevel.HIGH
    assert stress_level_for(days(0.8)) == StressLevel.MEDIUM
    assert stress_level_for(days(0.5)) == StressLevel.LOW
    assert stress_level_for([]) == StressLevel.LOW
    assert mean_utilization([]) == 0.0


def _appt(appointment_id, start, end, type_name="Limpieza", chair_id=1):
    return Appointment(id=appointment_id, patient_name="Ana López", start=datetime(2025, 12, 8, *start),
                       end=datetime(2025, 12, 8, *end), type=type_name, chair_id=chair_id)


def _worked_day():
    """Three appointments: one open window filled after contacts, the tail kept as personal time"""
    rules = normalize_rules({
        "dayStartTime": "09:00",
        "dayEndTime": "13:00",
        "bufferMin": 5,
        "treatments": [
            {"type": "Limpieza", "durationMin": 30, "bufferMin": 10},
            {"type": "Revisión", "durationMin": 20},
        ],
    })
    appointments = [
        _appt(1, (9, 0), (9, 30)),
        _appt(2, (9, 40), (10, 0), "Revisión"),
        _appt(3, (11, 0), (11, 30)),
    ]
    agenda = build_day_agenda(appointments, rules, DAY)
    middle, tail = agenda.availability
    agenda.availability = [
        replace(middle, status=GapStatus.FILLED, messages_count=6, calls_count=2),
        apply_alternative(tail, GapAlternativeType.PERSONAL_TIME),
    ]
    return agenda


class TestImpact:
    """Test time recovered and time reserved"""

    def test_single_day(self):
        impact = compute_impact([_worked_day()])

        assert impact.daily == ImpactTotals(
            recovered_admin_min=34,
            time_available_used_min=45,
            internal_personal_min=80,
            operational_min=40,
        )
        assert impact.monthly.operational_min == 40 * 18

    def test_averaged_over_days(self):
        empty_day = DayAgenda(day=date(2025, 12, 9), appointments=[], blocks=[], availability=[])

        impact = compute_impact([_worked_day(), empty_day])

        assert impact.daily.recovered_admin_min == 17
        assert impact.daily.time_available_used_min == 22.5
        assert impact.monthly.internal_personal_min == 720
        assert impact.monthly.operational_min == 360
        assert impact.to_dict()["daily"]["operationalMin"] == 20

    def test_custom_rates(self):
        impact = compute_impact([_worked_day()], workdays_per_month=20, min_per_contact=3)

        assert impact.daily.recovered_admin_min == 51
        assert impact.monthly.time_available_used_min == 900

    def test_breaks_count_as_internal_time(self):
        rules = normalize_rules({
            "dayStartTime": "09:00",
            "dayEndTime": "18:00",
            "chairsCount": 2,
            "enableBuffers": False,
            "lunchStartTime": "13:00",
            "lunchEndTime": "14:00",
        })
        appointments = [_appt(1, (12, 0), (12, 50)), _appt(2, (14, 10), (15, 0))]

        impact = compute_impact([build_day_agenda(appointments, rules, DAY)])

        assert impact.daily.internal_personal_min == 80 + 60
        assert impact.daily.operational_min == 0

    def test_no_days(self):
        impact = compute_impact([])
        assert impact.daily == ImpactTotals()
        assert impact.monthly == ImpactTotals()
