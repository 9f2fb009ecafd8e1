"""
Tests for gap follow-up state transitions
"""

from datetime import datetime

import pytest

from clinic_agenda.models.agenda import FillProbability, Gap, GapAlternativeType, GapStatus
from clinic_agenda.services.agenda.gap_state import (
    FINAL_STATUSES,
    apply_alternative,
    is_final,
    resolve_contacting,
    start_contacting,
    tick_contacting,
)
from clinic_agenda.services.agenda.gap_triage import triage_gap


@pytest.fixture
def meta():
    gap = Gap(
        start=datetime(2025, 12, 8, 16, 0),
        end=datetime(2025, 12, 8, 16, 40),
        duration_min=40,
        gap_key="W:2025-12-08:C1:4->5:2025-12-08T16:00:00__2025-12-08T16:40:00",
        chair_id=1,
    )
    return triage_gap(gap)


class TestContacting:
    """Test outreach start and progress"""

    def test_start_contacting_far_ahead_keeps_probability(self, meta):
        contacting = start_contacting(meta, now=datetime(2025, 12, 8, 9, 0))

        assert contacting.status == GapStatus.CONTACTING
        assert contacting.fill_probability == FillProbability.HIGH
        assert contacting.contacting_progress_pct == 0

    def test_probability_degrades_close_to_start(self, meta):
        assert start_contacting(meta, now=datetime(2025, 12, 8, 14, 45)).fill_probability == FillProbability.MEDIUM
        assert start_contacting(meta, now=datetime(2025, 12, 8, 15, 30)).fill_probability == FillProbability.LOW

    def test_tick_is_monotonic(self, meta):
        contacting = start_contacting(meta, now=datetime(2025, 12, 8, 9, 0))
        previous = contacting
        for pct in (10, 35, 60, 100):
            current = tick_contacting(previous, pct)
            assert current.messages_count >= previous.messages_count
            assert current.calls_count >= previous.calls_count
            assert current.contacting_progress_pct == pct
            previous = current

        assert previous.messages_count >= 6
        assert previous.calls_count >= 1

    def test_tick_ignored_unless_contacting(self, meta):
        assert tick_contacting(meta, 50) is meta

    def test_resolve_is_deterministic(self, meta):
        contacting = start_contacting(meta, now=datetime(2025, 12, 8, 9, 0))
        first = resolve_contacting(contacting, attempt=2)

        assert first == resolve_contacting(contacting, attempt=2)
        assert first.status in (GapStatus.FILLED, GapStatus.FAILED)
        assert first.contacting_progress_pct == 100

    def test_switch_request_is_a_failure(self, meta):
        contacting = start_contacting(meta, now=datetime(2025, 12, 8, 9, 0))
        outcomes = [resolve_contacting(contacting, attempt=i) for i in range(40)]

        for outcome in outcomes:
            if outcome.switch_requested:
                assert outcome.status == GapStatus.FAILED
            if outcome.status == GapStatus.FILLED:
                assert outcome.responses_count >= 1


class TestAlternatives:
    """Test running an alternative"""

    @pytest.mark.parametrize("alternative,status", [
        (GapAlternativeType.PERSONAL_TIME, GapStatus.BLOCKED_PERSONAL),
        (GapAlternativeType.INTERNAL_MEETING, GapStatus.BLOCKED_INTERNAL),
        (GapAlternativeType.RECALL_PATIENTS, GapStatus.CONTACTING),
        (GapAlternativeType.WAIT, GapStatus.OPEN),
        (GapAlternativeType.ADVANCE_APPOINTMENTS, GapStatus.OPEN),
    ])
    def test_status_after_alternative(self, meta, alternative, status):
        result = apply_alternative(meta, alternative)

        assert result.status == status
        assert result.primary_alternative == alternative
        assert sum(1 for a in result.alternatives if a.primary) == 1

    def test_recall_adds_outreach(self, meta):
        result = apply_alternative(meta, "RECALL_PATIENTS")
        assert result.messages_count == meta.messages_count + 3
        assert result.calls_count == meta.calls_count + 1


class TestFinalStates:
    """Final states absorb every transition"""

    @pytest.mark.parametrize("alternative", [
        GapAlternativeType.PERSONAL_TIME,
        GapAlternativeType.INTERNAL_MEETING,
    ])
    def test_blocked_is_final(self, meta, alternative):
        blocked = apply_alternative(meta, alternative)

        assert is_final(blocked)
        assert apply_alternative(blocked, GapAlternativeType.WAIT) is blocked
        assert start_contacting(blocked, now=datetime(2025, 12, 8, 9, 0)) is blocked
        assert resolve_contacting(blocked) is blocked
        assert tick_contacting(blocked, 80) is blocked

    def test_filled_is_final(self, meta):
        contacting = start_contacting(meta, now=datetime(2025, 12, 8, 9, 0))
        filled = next(
            outcome
            for outcome in (resolve_contacting(contacting, attempt=i) for i in range(200))
            if outcome.status == GapStatus.FILLED
        )

        assert is_final(filled)
        assert apply_alternative(filled, GapAlternativeType.RECALL_PATIENTS) is filled

    def test_final_statuses(self):
        assert FINAL_STATUSES == {GapStatus.FILLED, GapStatus.BLOCKED_INTERNAL, GapStatus.BLOCKED_PERSONAL}
