"""
Pytest configuration for the agenda tests
"""

import sys
from pathlib import Path

import pytest

# Add the project root to the path so clinic_agenda imports without an install
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

from clinic_agenda.config import reset_settings  # noqa: E402
from clinic_agenda.services.agenda.rules import normalize_rules  # noqa: E402


TREATMENTS = [
    {"type": "Limpieza", "durationMin": 30, "bufferMin": 5},
    {"type": "Empaste", "durationMin": 45, "bufferMin": 10},
    {"type": "Revisión", "durationMin": 20},
    {"type": "Endodoncia", "durationMin": 90, "bufferMin": 15},
]


@pytest.fixture
def raw_rules():
    """Wire-shaped rules for a two-chair clinic with lunch"""
    return {
        "dayStartTime": "08:30",
        "dayEndTime": "19:00",
        "chairsCount": 2,
        "slotGranularityMin": 10,
        "minBookableSlotMin": 30,
        "longGapThreshold": 30,
        "maxGapPanels": 3,
        "lunchStartTime": "13:00",
        "lunchEndTime": "14:00",
        "treatments": [dict(t) for t in TREATMENTS],
    }


@pytest.fixture
def rules(raw_rules):
    return normalize_rules(raw_rules)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are cached; every test starts from the current environment"""
    reset_settings()
    yield
    reset_settings()
