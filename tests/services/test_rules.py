"""
Tests for rule normalization
"""

import pytest

from clinic_agenda.models.agenda import ScheduleRules, TreatmentRule
from clinic_agenda.services.agenda.rules import buffer_for_treatment, normalize_rules


class TestDefaults:
    """Test defaults for missing or unusable input"""

    @pytest.mark.parametrize("raw", [None, {}, [], "rules", 42])
    def test_defaults(self, raw):
        rules = normalize_rules(raw)

        assert rules.day_start_time == "08:30"
        assert rules.day_end_time == "19:00"
        assert rules.chairs_count == 1
        assert rules.slot_granularity_min == 10
        assert rules.min_bookable_slot_min == 30
        assert rules.long_gap_threshold == 30
        assert rules.max_gap_panels == 3
        assert rules.buffer_min == 5
        assert rules.buffer_target == 5
        assert rules.enable_breaks is True
        assert rules.enable_buffers is True
        assert rules.has_lunch is False
        assert rules.treatments == ()
        assert rules.extra_rules_text == ""

    def test_long_gap_threshold_defaults_to_min_bookable(self):
        rules = normalize_rules({"minBookableSlotMin": 45})
        assert rules.long_gap_threshold == 45

    def test_buffer_target_defaults_to_buffer(self):
        rules = normalize_rules({"bufferMin": 12})
        assert rules.buffer_target == 12


class TestClamping:
    """Test numeric range enforcement"""

    @pytest.mark.parametrize("key,attr,value,expected", [
        ("chairsCount", "chairs_count", 0, 1),
        ("chairsCount", "chairs_count", 50, 12),
        ("slotGranularityMin", "slot_granularity_min", 1, 5),
        ("slotGranularityMin", "slot_granularity_min", 120, 60),
        ("minBookableSlotMin", "min_bookable_slot_min", 5, 10),
        ("longGapThreshold", "long_gap_threshold", 500, 240),
        ("maxGapPanels", "max_gap_panels", -3, 0),
        ("maxGapPanels", "max_gap_panels", 40, 12),
        ("bufferMin", "buffer_min", 99, 60),
        ("breakMax", "break_max", 500, 120),
    ])
    def test_clamped(self, key, attr, value, expected):
        assert getattr(normalize_rules({key: value}), attr) == expected

    def test_numeric_strings_are_accepted(self):
        rules = normalize_rules({"chairsCount": "3", "slotGranularityMin": "15.9"})
        assert rules.chairs_count == 3
        assert rules.slot_granularity_min == 15

    def test_non_numeric_values_fall_back(self):
        rules = normalize_rules({"chairsCount": "many", "slotGranularityMin": True, "maxGapPanels": None})
        assert rules.chairs_count == 1
        assert rules.slot_granularity_min == 10
        assert rules.max_gap_panels == 3

    def test_invalid_times_fall_back(self):
        rules = normalize_rules({"dayStartTime": "8:30", "dayEndTime": "25:00"})
        assert rules.day_start_time == "08:30"
        assert rules.day_end_time == "19:00"

    def test_non_boolean_flags_fall_back(self):
        rules = normalize_rules({"enableBuffers": "no", "enableBreaks": 0})
        assert rules.enable_buffers is True
        assert rules.enable_breaks is True
        assert normalize_rules({"enableBuffers": False}).enable_buffers is False


class TestLunch:
    """Test lunch window normalization"""

    def test_lunch_requires_both_ends(self):
        rules = normalize_rules({"lunchStartTime": "13:00"})
        assert rules.lunch_start_time is None
        assert rules.lunch_end_time is None

    def test_invalid_lunch_end_drops_lunch(self):
        rules = normalize_rules({"lunchStartTime": "13:00", "lunchEndTime": "14:75"})
        assert rules.has_lunch is False

    def test_valid_lunch_kept(self, rules):
        assert rules.lunch_start_time == "13:00"
        assert rules.lunch_end_time == "14:00"
        assert rules.to_dict()["lunchStartTime"] == "13:00"

    def test_missing_lunch_serialises_empty(self):
        assert normalize_rules({}).to_dict()["lunchEndTime"] == ""


class TestTreatments:
    """Test treatment list normalization"""

    def test_entries_are_normalized(self):
        rules = normalize_rules({
            "treatments": [
                {"type": "  Limpieza ", "durationMin": 5, "bufferMin": 90},
                {"durationMin": 400},
                "not a treatment",
                {"type": "   "},
                {"type": "Empaste", "durationMin": "45"},
            ]
        })

        assert rules.treatments == (
            TreatmentRule(type="Limpieza", duration_min=10, buffer_min=60),
            TreatmentRule(type="Tratamiento", duration_min=240, buffer_min=0),
            TreatmentRule(type="Empaste", duration_min=45, buffer_min=0),
        )

    def test_non_list_treatments_become_empty(self):
        assert normalize_rules({"treatments": {"type": "Limpieza"}}).treatments == ()

    def test_lookup_is_case_insensitive_first_wins(self):
        rules = normalize_rules({
            "treatments": [
                {"type": "Limpieza", "durationMin": 30},
                {"type": "limpieza", "durationMin": 60},
            ]
        })
        assert rules.treatment(" LIMPIEZA ").duration_min == 30
        assert rules.treatment("Ortodoncia") is None


class TestIdempotence:
    """Normalizing twice changes nothing"""

    def test_normalized_rules_pass_through(self, rules):
        assert normalize_rules(rules) is rules

    def test_wire_roundtrip_is_stable(self, rules):
        assert normalize_rules(rules.to_dict()) == rules

    def test_out_of_range_instance_is_clamped(self):
        raw = ScheduleRules(
            chairs_count=0,
            slot_granularity_min=0,
            max_gap_panels=99,
            day_start_time="8:30",
            treatments=(TreatmentRule(type="Limpieza", duration_min=500, buffer_min=-5),),
        )

        rules = normalize_rules(raw)

        assert rules is not raw
        assert rules.chairs_count == 1
        assert rules.slot_granularity_min == 5
        assert rules.max_gap_panels == 12
        assert rules.day_start_time == "08:30"
        assert rules.treatments == (TreatmentRule(type="Limpieza", duration_min=240, buffer_min=0),)
        assert normalize_rules(rules) is rules

    def test_defaults_roundtrip(self):
        defaults = normalize_rules(None)
        assert normalize_rules(defaults.to_dict()) == defaults
        assert defaults == ScheduleRules()


class TestBuffers:
    """Test per-treatment buffer resolution"""

    def test_treatment_buffer_wins(self, rules):
        assert buffer_for_treatment(rules, "Empaste") == 10

    def test_global_buffer_when_treatment_has_none(self, rules):
        assert buffer_for_treatment(rules, "Revisión") == 5
        assert buffer_for_treatment(rules, "Unknown") == 5

    def test_disabled_buffers(self, raw_rules):
        raw_rules["enableBuffers"] = False
        rules = normalize_rules(raw_rules)
        assert buffer_for_treatment(rules, "Empaste") == 0
