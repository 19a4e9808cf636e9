"""
Interview session orchestrator.

Coordinates one timed interview session: challenge generation, event
handling, the surprise question, the closing integrity review and
persistence of the result.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from talent_match.agents import (
    ChallengeGenerationError,
    ChallengeGenerator,
    IntegrityAnalyzer,
    default_interview_challenge,
)
from talent_match.interview.integrity import PASTE_NOTICE
from talent_match.interview.schemas import (
    EventOutcome,
    IntegrityFlagType,
    InterviewChallenge,
    SessionEvent,
    SessionResult,
)
from talent_match.interview.session_state import InterviewSessionState
from talent_match.models.llm_client import InferenceError, LLMClient, LLMClientBase

if TYPE_CHECKING:
    from talent_match.db.repository import AuditLogRepository, InterviewRepository

logger = logging.getLogger(__name__)


class InterviewSessionOrchestrator:
    """
    Orchestrates a single interview session at a time.

    Client events arrive through apply_event; everything the candidate
    should see comes back as an EventOutcome.
    """

    def __init__(
        self,
        llm_client: LLMClientBase | None = None,
        challenge_generator: ChallengeGenerator | None = None,
        integrity_analyzer: IntegrityAnalyzer | None = None,
        interview_repository: InterviewRepository | None = None,
        audit_repository: AuditLogRepository | None = None,
    ) -> None:
        """
        Initialize the session orchestrator.

        Args:
            llm_client: Inference client shared by the agents. Creates default if None.
            challenge_generator: Challenge generator (built from llm_client if None).
            integrity_analyzer: Integrity analyzer (built from llm_client if None).
            interview_repository: Where finished sessions are stored, if anywhere.
            audit_repository: Where audit entries are written, if anywhere.
        """
        self._llm_client = llm_client or LLMClient()
        self._challenge_generator = challenge_generator or ChallengeGenerator(llm_client=self._llm_client)
        self._integrity_analyzer = integrity_analyzer or IntegrityAnalyzer(llm_client=self._llm_client)
        self._interview_repository = interview_repository
        self._audit_repository = audit_repository
        self._current_state: InterviewSessionState | None = None

    @property
    def current_state(self) -> InterviewSessionState | None:
        """Get the current session state, if any."""
        return self._current_state

    @property
    def is_active(self) -> bool:
        """Check if a session is currently in progress."""
        return self._current_state is not None and not self._current_state.is_complete

    def _require_state(self) -> InterviewSessionState:
        if not self.is_active or self._current_state is None:
            raise RuntimeError("No active interview session. Call start_session first.")
        return self._current_state

    async def start_session(
        self,
        candidate_skills: list | None = None,
        job_requirements: list[str] | None = None,
        session_id: str | None = None,
        generate: bool = True,
    ) -> InterviewChallenge:
        """
        Start a new interview session.

        Args:
            candidate_skills: Candidate skills used to tailor the challenge.
            job_requirements: Job requirements used to tailor the challenge.
            session_id: Session identifier (generated if None).
            generate: Whether to ask the model for a challenge at all.

        Returns:
            The challenge for this session.
        """
        challenge = default_interview_challenge(session_id)

        if generate:
            try:
                challenge = await self._challenge_generator.generate_interview_challenge(
                    candidate_skills or [],
                    job_requirements or [],
                    challenge.challenge_id,
                )
            except (InferenceError, ChallengeGenerationError) as e:
                logger.warning(f"Challenge generation failed, using built-in challenge: {e}")

        self._current_state = InterviewSessionState(challenge)
        logger.info(
            f"Started session {challenge.challenge_id}: '{challenge.title}' "
            f"({challenge.time_limit_minutes} min, {challenge.total_phases} phases)"
        )
        return challenge

    def apply_event(self, event: SessionEvent) -> EventOutcome:
        """
        Apply one client event to the active session.

        Args:
            event: The event.

        Returns:
            What the event produced.

        Raises:
            RuntimeError: If no session is active.
        """
        state = self._require_state()

        if event.kind == "paste":
            flag = state.paste(event.text, into_code=event.target == "code")
            notice = PASTE_NOTICE if flag and flag.flag_type == IntegrityFlagType.PASTE_DETECTED else None
            return EventOutcome(flag=flag, notice=notice)

        if event.kind == "visibility":
            return EventOutcome(flag=state.set_tab_hidden(event.hidden))

        if event.kind == "code":
            return EventOutcome(flag=state.set_code(event.text))

        if event.kind == "explanation":
            return EventOutcome(flag=state.set_explanation(event.text))

        if event.kind == "tick":
            question = state.tick(event.seconds)
            if question:
                logger.info(f"Surprise question shown at {state.format_time()} remaining")
            return EventOutcome(surprise_question=question)

        if event.kind == "next_phase":
            phase = state.advance_phase()
            if phase is not None:
                logger.info(f"Session {state.session_id} advanced to phase {phase}/{state.total_phases}")
            return EventOutcome(phase=phase)

        if event.kind == "surprise_answer":
            self.answer_surprise_question(event.text)
            return EventOutcome()

        raise ValueError(f"Unknown event kind: {event.kind}")

    def answer_surprise_question(self, answer: str) -> None:
        """
        Record the answer to the pending surprise question.

        Raises:
            RuntimeError: If no session is active or no question is pending.
        """
        state = self._require_state()
        state.answer_surprise_question(answer)

    async def end_session(
        self,
        interview_id: UUID | None = None,
        analyze: bool = True,
    ) -> SessionResult:
        """
        End the active session, review it and store the result.

        Args:
            interview_id: Interview row to store the result on.
            analyze: Whether to run the model integrity review.

        Returns:
            The session result.

        Raises:
            RuntimeError: If no session is active.
        """
        state = self._require_state()
        session_data = state.to_session_data()

        analysis = await self._integrity_analyzer.analyze_session(session_data) if analyze else None
        result = state.complete(analysis=analysis)
        if analysis is not None:
            session_data["ai_analysis"] = analysis.model_dump(mode="json")

        logger.info(
            f"Session {result.session_id} ended: integrity={result.integrity_score:.2f}, "
            f"flags={len(result.flags)}, pastes={result.paste_attempts}"
        )

        if interview_id is not None and self._interview_repository is not None:
            await self._interview_repository.save_session_result(interview_id, result, session_data)
            await self._interview_repository.save_challenge(interview_id, result.challenge, result)
            logger.info(f"Stored session {result.session_id} on interview {interview_id}")

        if self._audit_repository is not None:
            await self._audit_repository.record(
                action="interview_completed",
                resource_type="interview",
                resource_id=interview_id,
                metadata={
                    "session_id": result.session_id,
                    "integrity_score": result.integrity_score,
                    "flag_count": len(result.flags),
                },
            )

        return result
