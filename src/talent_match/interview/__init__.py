"""
Interview module for timed coding sessions and integrity scoring.

The session orchestrator lives in talent_match.interview.orchestrator and is
imported from there, since it depends on the agents.
"""

from talent_match.interview.integrity import (
    PASTE_NOTICE,
    IntegrityMonitor,
    count_by_severity,
    integrity_score,
)
from talent_match.interview.schemas import (
    ApplicationStatus,
    EventOutcome,
    IntegrityAnalysis,
    IntegrityFlag,
    IntegrityFlagType,
    InterviewChallenge,
    InterviewStatus,
    SessionEvent,
    SessionResult,
    Severity,
)
from talent_match.interview.session_state import InterviewSessionState, format_time

__all__ = [
    "PASTE_NOTICE",
    "ApplicationStatus",
    "EventOutcome",
    "IntegrityAnalysis",
    "IntegrityFlag",
    "IntegrityFlagType",
    "IntegrityMonitor",
    "InterviewChallenge",
    "InterviewSessionState",
    "InterviewStatus",
    "SessionEvent",
    "SessionResult",
    "Severity",
    "count_by_severity",
    "format_time",
    "integrity_score",
]
