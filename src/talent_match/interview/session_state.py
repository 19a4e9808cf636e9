"""
Interview session state management.

Tracks the mutable state of one timed coding interview: countdown timer,
phase progress, code and explanation buffers, tab activity, integrity
monitoring, and the one-time surprise question.
"""

import math
from datetime import datetime, timezone
from typing import Any

from talent_match.config import get_settings
from talent_match.interview.integrity import IntegrityMonitor
from talent_match.interview.schemas import (
    IntegrityAnalysis,
    IntegrityFlag,
    InterviewChallenge,
    SessionResult,
)


def format_time(seconds: int) -> str:
    """Format seconds as m:ss."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


class InterviewSessionState:
    """
    Manages the mutable state of an interview session.

    The timer counts down in whole seconds. Editor changes go through this
    class so the integrity monitor sees every transition.
    """

    def __init__(
        self,
        challenge: InterviewChallenge,
        monitor: IntegrityMonitor | None = None,
        surprise_fraction: float | None = None,
        low_time_seconds: int | None = None,
    ) -> None:
        """
        Initialize session state.

        Args:
            challenge: Challenge being run.
            monitor: Integrity monitor (a fresh one if None).
            surprise_fraction: Fraction of the time limit remaining when the
                surprise question fires.
            low_time_seconds: Remaining time below which the timer is low.
        """
        settings = get_settings()
        self._challenge = challenge
        self._monitor = monitor or IntegrityMonitor()
        self._surprise_fraction = (
            surprise_fraction if surprise_fraction is not None else settings.surprise_question_fraction
        )
        self._low_time_seconds = (
            low_time_seconds if low_time_seconds is not None else settings.low_time_warning_seconds
        )

        self._time_limit_seconds: int = challenge.time_limit_minutes * 60
        self._time_remaining: int = self._time_limit_seconds
        self._current_phase: int = challenge.current_phase
        self._code: str = ""
        self._explanation: str = ""
        self._is_recording: bool = False
        self._started_at: datetime = datetime.now(timezone.utc)
        self._last_activity: datetime = self._started_at
        self._is_complete: bool = False

        # Surprise question state
        self._surprise_shown: bool = False
        self._surprise_pending: bool = False
        self._surprise_answer: str | None = None

    @property
    def session_id(self) -> str:
        """Get the session identifier."""
        return self._challenge.challenge_id

    @property
    def challenge(self) -> InterviewChallenge:
        """Get the challenge with its current phase applied."""
        return self._challenge.model_copy(update={"current_phase": self._current_phase})

    @property
    def monitor(self) -> IntegrityMonitor:
        """Get the integrity monitor."""
        return self._monitor

    @property
    def flags(self) -> list[IntegrityFlag]:
        """Get all integrity flags raised so far."""
        return self._monitor.flags

    @property
    def integrity_score(self) -> float:
        """Get the current rule-based integrity score."""
        return self._monitor.score()

    # Timer
    @property
    def time_limit_seconds(self) -> int:
        """Get the session time limit in seconds."""
        return self._time_limit_seconds

    @property
    def time_remaining(self) -> int:
        """Get the remaining time in seconds."""
        return self._time_remaining

    @property
    def surprise_threshold(self) -> int:
        """Remaining seconds at which the surprise question fires."""
        return math.floor(self._time_limit_seconds * self._surprise_fraction)

    def is_expired(self) -> bool:
        """Check if the timer has run out."""
        return self._time_remaining <= 0

    def is_low_time(self) -> bool:
        """Check if the remaining time is below the warning threshold."""
        return self._time_remaining < self._low_time_seconds

    def format_time(self) -> str:
        """Get the remaining time as m:ss."""
        return format_time(self._time_remaining)

    def tick(self, seconds: int = 1) -> str | None:
        """
        Advance the countdown.

        Args:
            seconds: Elapsed seconds.

        Returns:
            The surprise question if it fires on this tick, else None.
        """
        if seconds <= 0 or self._is_complete:
            return None

        self._time_remaining = max(0, self._time_remaining - seconds)

        if not self._surprise_shown and self._time_remaining <= self.surprise_threshold:
            self._surprise_shown = True
            self._surprise_pending = True
            return self._challenge.surprise_question
        return None

    # Phases
    @property
    def current_phase(self) -> int:
        """Get the current phase (1-based)."""
        return self._current_phase

    @property
    def total_phases(self) -> int:
        """Get the number of phases."""
        return self._challenge.total_phases

    def progress(self) -> float:
        """Get phase progress as current / total."""
        return self._current_phase / self._challenge.total_phases

    def advance_phase(self) -> int | None:
        """
        Advance to the next phase.

        Returns:
            The new phase, or None if already on the last phase.
        """
        if self._current_phase < self._challenge.total_phases:
            self._current_phase += 1
            self._touch()
            return self._current_phase
        return None

    # Buffers
    @property
    def code(self) -> str:
        """Get the code buffer."""
        return self._code

    @property
    def explanation(self) -> str:
        """Get the explanation buffer."""
        return self._explanation

    @property
    def last_activity(self) -> datetime:
        """Get the time of the last code edit."""
        return self._last_activity

    def _touch(self) -> None:
        self._last_activity = datetime.now(timezone.utc)

    def set_code(self, value: str) -> IntegrityFlag | None:
        """
        Replace the code buffer.

        Args:
            value: New code.

        Returns:
            Integrity flag raised by the edit, if any.
        """
        previous = self._code
        self._code = value
        self._touch()
        return self._monitor.on_code_change(previous, value)

    def set_explanation(self, value: str) -> IntegrityFlag | None:
        """
        Replace the explanation buffer.

        Args:
            value: New explanation.

        Returns:
            Integrity flag raised by the edit, if any.
        """
        self._explanation = value
        return self._monitor.on_explanation_change(value, self._code)

    def paste(self, text: str, into_code: bool = True) -> IntegrityFlag | None:
        """Record a paste event. The buffer itself changes via set_code."""
        return self._monitor.on_paste(text, into_code=into_code)

    def set_tab_hidden(self, hidden: bool) -> IntegrityFlag | None:
        """Record a tab visibility change."""
        return self._monitor.on_visibility_change(hidden)

    @property
    def tab_active(self) -> bool:
        """Check whether the interview tab is visible."""
        return self._monitor.tab_active

    # Recording
    @property
    def is_recording(self) -> bool:
        """Check whether voice recording is on."""
        return self._is_recording

    def toggle_recording(self) -> bool:
        """
        Toggle voice recording.

        Returns:
            The new recording state.
        """
        self._is_recording = not self._is_recording
        return self._is_recording

    # Surprise question
    @property
    def surprise_question_pending(self) -> bool:
        """Check if the surprise question is shown and unanswered."""
        return self._surprise_pending

    @property
    def surprise_question_shown(self) -> bool:
        """Check if the surprise question has fired."""
        return self._surprise_shown

    @property
    def surprise_answer(self) -> str | None:
        """Get the answer to the surprise question."""
        return self._surprise_answer

    def answer_surprise_question(self, answer: str) -> None:
        """
        Record the answer to the surprise question.

        Args:
            answer: Candidate's answer. Empty text dismisses the question.

        Raises:
            RuntimeError: If the surprise question is not pending.
        """
        if not self._surprise_pending:
            raise RuntimeError("Surprise question is not pending")
        self._surprise_pending = False
        self._surprise_answer = answer.strip() or None

    @property
    def is_complete(self) -> bool:
        """Check if the session is complete."""
        return self._is_complete

    def to_session_data(self) -> dict[str, Any]:
        """
        Build the JSON document stored in interviews.session_data.

        Returns:
            A JSON-serializable dict.
        """
        counts = self._monitor.counts_by_severity()
        return {
            "session_id": self.session_id,
            "challenge_title": self._challenge.title,
            "time_limit_seconds": self._time_limit_seconds,
            "time_remaining": self._time_remaining,
            "current_phase": self._current_phase,
            "total_phases": self._challenge.total_phases,
            "code": self._code,
            "explanation": self._explanation,
            "paste_attempts": self._monitor.paste_attempts,
            "integrity_score": self.integrity_score,
            "flag_counts": {severity.value: n for severity, n in counts.items()},
            "integrity_flags": [flag.model_dump(mode="json") for flag in self._monitor.flags],
            "surprise_question": self._challenge.surprise_question if self._surprise_shown else None,
            "surprise_answer": self._surprise_answer,
            "started_at": self._started_at.isoformat(),
            "last_activity": self._last_activity.isoformat(),
        }

    def complete(self, analysis: IntegrityAnalysis | None = None) -> SessionResult:
        """
        Mark the session as complete and build the result.

        Args:
            analysis: Optional LLM integrity review.

        Returns:
            The SessionResult.
        """
        self._is_complete = True
        return SessionResult(
            session_id=self.session_id,
            challenge=self.challenge,
            code=self._code,
            explanation=self._explanation,
            flags=self._monitor.flags,
            integrity_score=self.integrity_score,
            paste_attempts=self._monitor.paste_attempts,
            surprise_answer=self._surprise_answer,
            phases_completed=self._current_phase - 1,
            time_taken_seconds=self._time_limit_seconds - self._time_remaining,
            analysis=analysis,
            started_at=self._started_at,
            completed_at=datetime.now(timezone.utc),
        )
