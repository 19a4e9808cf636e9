"""
Pydantic schemas for the interview module.

Defines data models for interview challenges, integrity flags, session
events, and session results.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _now_utc() -> datetime:
    """Get current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class ChallengeType(str, Enum):
    """Kinds of interview challenge."""

    CODING = "coding"
    SYSTEM_DESIGN = "system_design"
    ML_DEBUGGING = "ml_debugging"
    ETHICS = "ethics"
    COLLABORATION = "collaboration"


class Difficulty(str, Enum):
    """Challenge difficulty."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class InterviewStatus(str, Enum):
    """Status of an interview row."""

    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ApplicationStatus(str, Enum):
    """Status of an application row."""

    APPLIED = "applied"
    SHORTLISTED = "shortlisted"
    INTERVIEW = "interview"
    OFFER = "offer"
    HIRED = "hired"
    REJECTED = "rejected"


class IntegrityFlagType(str, Enum):
    """Kinds of suspicious behaviour observed during a session."""

    PASTE_DETECTED = "paste_detected"
    TAB_SWITCH = "tab_switch"
    UNUSUAL_TIMING = "unusual_timing"
    INCONSISTENT_EXPLANATION = "inconsistent_explanation"


class Severity(str, Enum):
    """Severity of an integrity flag."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class IntegrityFlag(BaseModel):
    """A tagged integrity observation."""

    flag_id: UUID = Field(default_factory=uuid4, description="Unique flag identifier")
    flag_type: IntegrityFlagType = Field(..., description="Kind of observation")
    severity: Severity = Field(..., description="Fixed severity of this kind")
    timestamp: datetime = Field(default_factory=_now_utc, description="When it was observed")
    description: str = Field(..., description="Human-readable description")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Additional details")


class InterviewChallenge(BaseModel):
    """A timed, multi-phase interview challenge."""

    challenge_id: str = Field(
        default_factory=lambda: f"session_{uuid4().hex[:12]}",
        description="Unique challenge/session identifier",
    )
    type: ChallengeType = Field(default=ChallengeType.CODING, description="Challenge type")
    title: str = Field(..., description="Challenge title")
    description: str = Field(default="", description="Short description")
    problem_statement: str = Field(..., description="Full problem statement")
    expected_approach: str = Field(default="", description="Approach the interviewer expects")
    evaluation_criteria: list[str] = Field(default_factory=list, description="Evaluation criteria")
    time_limit_minutes: int = Field(default=45, gt=0, description="Time limit in minutes")
    difficulty: Difficulty = Field(default=Difficulty.MEDIUM, description="Difficulty")
    current_phase: int = Field(default=1, ge=1, description="Current phase (1-based)")
    total_phases: int = Field(default=3, ge=1, description="Number of phases")
    anti_cheat_elements: list[str] = Field(default_factory=list, description="Active anti-cheat elements")
    surprise_question: str = Field(
        default="Quick question: What's the main bottleneck you've identified so far?",
        description="Question shown mid-session to verify understanding",
    )


class CodingChallenge(BaseModel):
    """A self-contained coding exercise."""

    title: str = Field(..., description="Challenge title")
    description: str = Field(..., description="Problem description")
    constraints: list[str] = Field(default_factory=list, description="Input constraints")
    examples: list[dict[str, str]] = Field(default_factory=list, description="Input/output examples")
    hints: list[str] = Field(default_factory=list, description="Hints")
    time_limit: int = Field(default=30, description="Time limit in minutes")


class InterviewQuestion(BaseModel):
    """A generated interview question."""

    question: str = Field(..., description="Question text")
    type: Literal["technical", "behavioral"] = Field(default="technical", description="Question type")
    expected_answer: str | None = Field(default=None, description="Answer guidelines")


class IntegrityAnalysis(BaseModel):
    """LLM review of a whole session's integrity."""

    score: float = Field(default=0.5, ge=0.0, le=1.0, description="Integrity (1 is highest)")
    flags: list[str] = Field(default_factory=list, description="Specific concerns found")
    recommendations: list[str] = Field(default_factory=list, description="Follow-up recommendations")


class ResponseAnalysis(BaseModel):
    """LLM review of a single interview answer."""

    integrity_score: float = Field(default=50.0, ge=0.0, le=100.0, description="Integrity (0-100)")
    technical_score: float = Field(default=50.0, ge=0.0, le=100.0, description="Technical accuracy (0-100)")
    feedback: str = Field(default="", description="Constructive feedback")
    red_flags: list[str] = Field(default_factory=list, description="Signs of cheating or misunderstanding")


class SessionEvent(BaseModel):
    """A single client-side event from an interview session."""

    kind: Literal["paste", "visibility", "code", "explanation", "tick", "next_phase", "surprise_answer"]
    text: str = Field(default="", description="Pasted text, editor value, or answer")
    hidden: bool = Field(default=False, description="For visibility events: tab is hidden")
    target: Literal["code", "explanation", "other"] = Field(
        default="code",
        description="For paste events: which input received the paste",
    )
    seconds: int = Field(default=1, ge=0, description="For tick events: elapsed seconds")
    timestamp: datetime = Field(default_factory=_now_utc, description="When the event occurred")


class EventOutcome(BaseModel):
    """What a session event produced, for display to the candidate."""

    flag: IntegrityFlag | None = Field(default=None, description="Integrity flag raised, if any")
    notice: str | None = Field(default=None, description="Notice to show the candidate")
    surprise_question: str | None = Field(default=None, description="Surprise question, when it fires")
    phase: int | None = Field(default=None, description="New phase after a phase advance")


class SessionResult(BaseModel):
    """Final result of an interview session."""

    session_id: str = Field(..., description="Challenge/session identifier")
    challenge: InterviewChallenge = Field(..., description="Challenge that was run")
    code: str = Field(default="", description="Final code")
    explanation: str = Field(default="", description="Final explanation")
    flags: list[IntegrityFlag] = Field(default_factory=list, description="All integrity flags")
    integrity_score: float = Field(..., ge=0.0, le=1.0, description="Rule-based integrity score")
    paste_attempts: int = Field(default=0, ge=0, description="Number of flagged pastes")
    surprise_answer: str | None = Field(default=None, description="Answer to the surprise question")
    phases_completed: int = Field(default=0, ge=0, description="Phases fully completed")
    time_taken_seconds: int = Field(default=0, ge=0, description="Timer seconds consumed")
    analysis: IntegrityAnalysis | None = Field(default=None, description="LLM integrity review")
    started_at: datetime = Field(default_factory=_now_utc, description="Session start time")
    completed_at: datetime | None = Field(default=None, description="Session completion time")
