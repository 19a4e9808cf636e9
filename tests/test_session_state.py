"""
Tests for interview session state: timer, phases, buffers and the surprise
question.
"""

import pytest

from talent_match.agents.challenge_generator import default_interview_challenge
from talent_match.interview.schemas import IntegrityFlagType, InterviewChallenge
from talent_match.interview.session_state import InterviewSessionState, format_time


@pytest.fixture
def challenge() -> InterviewChallenge:
    return default_interview_challenge("session_test")


@pytest.fixture
def state(challenge: InterviewChallenge) -> InterviewSessionState:
    return InterviewSessionState(challenge, surprise_fraction=0.6, low_time_seconds=300)


class TestTimer:
    """Tests for the countdown timer."""

    def test_initial_time(self, state: InterviewSessionState) -> None:
        assert state.time_limit_seconds == 45 * 60
        assert state.time_remaining == 2700
        assert state.format_time() == "45:00"
        assert not state.is_expired()
        assert not state.is_low_time()

    def test_format_time(self) -> None:
        assert format_time(0) == "0:00"
        assert format_time(59) == "0:59"
        assert format_time(61) == "1:01"
        assert format_time(-5) == "0:00"

    def test_low_time_and_expiry(self, state: InterviewSessionState) -> None:
        state.tick(2700 - 300)
        assert not state.is_low_time()
        state.tick(1)
        assert state.is_low_time()
        state.tick(10_000)
        assert state.time_remaining == 0
        assert state.is_expired()


class TestSurpriseQuestion:
    """Tests for the one-time surprise question."""

    def test_threshold(self, state: InterviewSessionState) -> None:
        assert state.surprise_threshold == 1620

    def test_fires_exactly_once_at_threshold(self, state: InterviewSessionState) -> None:
        fired = []
        for _ in range(2700 - 1620 + 200):
            question = state.tick(1)
            if question:
                fired.append((state.time_remaining, question))

        assert fired == [(1620, "Quick question: What's the main bottleneck you've identified so far?")]
        assert state.surprise_question_shown
        assert state.surprise_question_pending

    def test_fires_when_tick_jumps_past_threshold(self, state: InterviewSessionState) -> None:
        assert state.tick(1000) is None
        assert state.tick(500) is not None
        assert state.tick(1) is None

    def test_answer_is_recorded(self, state: InterviewSessionState) -> None:
        state.tick(1080)
        state.answer_surprise_question("  Data loading on the CPU  ")

        assert not state.surprise_question_pending
        assert state.surprise_answer == "Data loading on the CPU"

    def test_answer_without_question_raises(self, state: InterviewSessionState) -> None:
        with pytest.raises(RuntimeError):
            state.answer_surprise_question("too early")


class TestPhasesAndBuffers:
    """Tests for phases and editor buffers."""

    def test_advance_phase_stops_at_last(self, state: InterviewSessionState) -> None:
        assert state.progress() == pytest.approx(1 / 3)
        assert state.advance_phase() == 2
        assert state.advance_phase() == 3
        assert state.advance_phase() is None
        assert state.current_phase == 3
        assert state.progress() == 1.0
        assert state.challenge.current_phase == 3

    def test_code_edits_go_through_monitor(self, state: InterviewSessionState) -> None:
        assert state.set_code("import torch\n") is None
        flag = state.set_code(state.code + "x" * 150)

        assert flag is not None
        assert flag.flag_type == IntegrityFlagType.UNUSUAL_TIMING
        assert state.integrity_score == pytest.approx(0.85)

    def test_explanation_checks_current_code(self, state: InterviewSessionState) -> None:
        flag = state.set_explanation("I would start by profiling the data loader and the GPU utilisation.")
        assert flag is not None
        assert flag.flag_type == IntegrityFlagType.INCONSISTENT_EXPLANATION

    def test_recording_toggle(self, state: InterviewSessionState) -> None:
        assert not state.is_recording
        assert state.toggle_recording()
        assert not state.toggle_recording()


def test_complete_builds_result(state: InterviewSessionState) -> None:
    state.set_code("loader = DataLoader(ds, num_workers=8, pin_memory=True)\n")
    state.paste("z" * 80)
    state.set_tab_hidden(True)
    state.advance_phase()
    state.tick(1200)
    state.answer_surprise_question("The data loader")

    data = state.to_session_data()
    result = state.complete()

    assert state.is_complete
    assert result.session_id == "session_test"
    assert result.phases_completed == 1
    assert result.time_taken_seconds == 1200
    assert result.paste_attempts == 1
    assert result.surprise_answer == "The data loader"
    assert result.integrity_score == pytest.approx(1 - (0.3 + 0.15))
    assert result.completed_at is not None

    assert data["paste_attempts"] == 1
    assert data["flag_counts"] == {"low": 0, "medium": 1, "high": 1}
    assert len(data["integrity_flags"]) == 2
    assert data["surprise_question"].startswith("Quick question")
    assert state.tick(10) is None
