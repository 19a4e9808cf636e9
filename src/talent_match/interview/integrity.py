"""
Interview integrity monitoring.

Turns client-side session events into tagged integrity flags with fixed
severities and reduces them to an integrity score in [0, 1].
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from talent_match.config import get_settings
from talent_match.interview.schemas import IntegrityFlag, IntegrityFlagType, Severity

logger = logging.getLogger(__name__)

SEVERITY_PENALTIES: dict[Severity, float] = {
    Severity.HIGH: 0.3,
    Severity.MEDIUM: 0.15,
    Severity.LOW: 0.05,
}

FLAG_SEVERITIES: dict[IntegrityFlagType, Severity] = {
    IntegrityFlagType.PASTE_DETECTED: Severity.HIGH,
    IntegrityFlagType.TAB_SWITCH: Severity.MEDIUM,
    IntegrityFlagType.UNUSUAL_TIMING: Severity.MEDIUM,
    IntegrityFlagType.INCONSISTENT_EXPLANATION: Severity.LOW,
}

PASTE_NOTICE = "Large code pastes are flagged for review. Please type your solution."


def count_by_severity(flags: Iterable[IntegrityFlag]) -> dict[Severity, int]:
    """Count flags per severity."""
    counts = {severity: 0 for severity in Severity}
    for flag in flags:
        counts[flag.severity] += 1
    return counts


def integrity_score(flags: Iterable[IntegrityFlag]) -> float:
    """
    Integrity score for a set of flags.

    Computed as max(0, 1 - (0.3 * high + 0.15 * medium + 0.05 * low)).

    Args:
        flags: Flags observed so far.

    Returns:
        Score in [0, 1]; 1 means no flags.
    """
    counts = count_by_severity(flags)
    penalty = sum(SEVERITY_PENALTIES[severity] * n for severity, n in counts.items())
    return max(0.0, 1.0 - penalty)


class IntegrityMonitor:
    """
    Accumulates integrity flags for one interview session.

    Each handler inspects one kind of event and returns the flag it raised,
    or None.
    """

    def __init__(
        self,
        paste_min_chars: int | None = None,
        code_burst_min_chars: int | None = None,
        explanation_min_chars: int | None = None,
        explanation_code_max_chars: int | None = None,
    ) -> None:
        """
        Initialize the monitor.

        Args:
            paste_min_chars: Pastes longer than this are flagged.
            code_burst_min_chars: Code growth above this in one edit is flagged.
            explanation_min_chars: Explanation length that requires code.
            explanation_code_max_chars: Code length that counts as no code.
        """
        settings = get_settings()
        self._paste_min_chars = paste_min_chars if paste_min_chars is not None else settings.paste_flag_min_chars
        self._code_burst_min_chars = (
            code_burst_min_chars if code_burst_min_chars is not None else settings.code_burst_min_chars
        )
        self._explanation_min_chars = (
            explanation_min_chars if explanation_min_chars is not None else settings.explanation_min_chars
        )
        self._explanation_code_max_chars = (
            explanation_code_max_chars
            if explanation_code_max_chars is not None
            else settings.explanation_code_max_chars
        )

        self._flags: list[IntegrityFlag] = []
        self._paste_attempts: int = 0
        self._tab_active: bool = True

    @property
    def flags(self) -> list[IntegrityFlag]:
        """Get all flags raised so far."""
        return self._flags.copy()

    @property
    def paste_attempts(self) -> int:
        """Get the number of flagged pastes."""
        return self._paste_attempts

    @property
    def tab_active(self) -> bool:
        """Check whether the interview tab is currently visible."""
        return self._tab_active

    def score(self) -> float:
        """Get the current integrity score."""
        return integrity_score(self._flags)

    def counts_by_severity(self) -> dict[Severity, int]:
        """Get flag counts per severity."""
        return count_by_severity(self._flags)

    def recent(self, n: int = 3) -> list[IntegrityFlag]:
        """Get the n most recent flags, oldest first."""
        return self._flags[-n:] if n > 0 else []

    def _raise(self, flag_type: IntegrityFlagType, description: str, **metadata: object) -> IntegrityFlag:
        flag = IntegrityFlag(
            flag_type=flag_type,
            severity=FLAG_SEVERITIES[flag_type],
            description=description,
            metadata=dict(metadata),
        )
        self._flags.append(flag)
        logger.info(f"Integrity flag: {flag.flag_type.value} ({flag.severity.value}) - {description}")
        return flag

    def on_paste(self, pasted_text: str, into_code: bool = True) -> IntegrityFlag | None:
        """
        Handle a paste event.

        Args:
            pasted_text: Text that was pasted.
            into_code: Whether the paste landed in the code editor.

        Returns:
            A high-severity flag for large pastes into the code editor.
        """
        if not into_code or len(pasted_text) <= self._paste_min_chars:
            return None

        self._paste_attempts += 1
        return self._raise(
            IntegrityFlagType.PASTE_DETECTED,
            f"Large code paste detected ({len(pasted_text)} characters)",
            length=len(pasted_text),
        )

    def on_visibility_change(self, hidden: bool) -> IntegrityFlag | None:
        """
        Handle a tab visibility change.

        Args:
            hidden: Whether the interview tab is now hidden.

        Returns:
            A medium-severity flag when the tab goes from visible to hidden.
        """
        was_active = self._tab_active
        self._tab_active = not hidden
        if hidden and was_active:
            return self._raise(
                IntegrityFlagType.TAB_SWITCH,
                "Candidate switched away from interview tab",
            )
        return None

    def on_code_change(self, previous: str, current: str) -> IntegrityFlag | None:
        """
        Handle an edit of the code buffer.

        Args:
            previous: Code before the edit.
            current: Code after the edit.

        Returns:
            A medium-severity flag for a sudden large addition.
        """
        delta = len(current) - len(previous)
        if delta > self._code_burst_min_chars:
            return self._raise(
                IntegrityFlagType.UNUSUAL_TIMING,
                "Sudden large code addition detected",
                delta=delta,
            )
        return None

    def on_explanation_change(self, explanation: str, code: str) -> IntegrityFlag | None:
        """
        Handle an edit of the explanation buffer.

        Args:
            explanation: Explanation after the edit.
            code: Current code.

        Returns:
            A low-severity flag for an explanation without code.
        """
        if len(explanation) > self._explanation_min_chars and len(code) < self._explanation_code_max_chars:
            return self._raise(
                IntegrityFlagType.INCONSISTENT_EXPLANATION,
                "Explanation provided without corresponding code",
                explanation_length=len(explanation),
                code_length=len(code),
            )
        return None
