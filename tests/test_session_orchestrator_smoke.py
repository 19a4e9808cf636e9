"""
Smoke tests for the interview session orchestrator.

Runs sessions end to end against fake inference clients and repositories.
"""

import json
from uuid import uuid4

import pytest

from talent_match.interview.integrity import PASTE_NOTICE
from talent_match.interview.orchestrator import InterviewSessionOrchestrator
from talent_match.interview.schemas import IntegrityFlagType, SessionEvent
from talent_match.models.llm_client import InferenceError


class FakeLLM:
    def __init__(self, generated: str | None = None, review: dict | None = None) -> None:
        self.generated = generated
        self.review = review if review is not None else {}
        self.prompts: list[str] = []

    async def generate(self, prompt, reasoning="medium", model_size="large", max_tokens=None, temperature=None, system_prompt=""):
        self.prompts.append(prompt)
        if self.generated is None:
            raise InferenceError("service unavailable", status_code=503)
        return self.generated

    async def chat_with_json(self, messages, schema=None, temperature=0.2, **kwargs):
        return self.review

    async def embed(self, text):
        return [0.0]


class FakeInterviewRepository:
    def __init__(self) -> None:
        self.results = []
        self.challenges = []

    async def save_session_result(self, interview_id, result, session_data):
        self.results.append((interview_id, result, session_data))

    async def save_challenge(self, interview_id, challenge, result=None):
        self.challenges.append((interview_id, challenge))


class FakeAuditRepository:
    def __init__(self) -> None:
        self.entries = []

    async def record(self, action, resource_type, resource_id=None, user_id=None, metadata=None):
        self.entries.append({"action": action, "resource_type": resource_type, "resource_id": resource_id, "metadata": metadata})


GENERATED_CHALLENGE = json.dumps(
    {
        "type": "ml_debugging",
        "title": "Flaky Feature Store",
        "description": "A feature pipeline returns stale values.",
        "problem_statement": "Find why the online store lags the offline store and fix it.",
        "expected_approach": "Trace the write path.",
        "evaluation_criteria": ["Diagnosis", "Fix"],
        "time_limit_minutes": 30,
        "difficulty": "hard",
        "anti_cheat_elements": ["Session-specific table names"],
        "surprise_question": "Which cache would you invalidate first?",
    }
)


async def _started() -> InterviewSessionOrchestrator:
    orchestrator = InterviewSessionOrchestrator(llm_client=FakeLLM())
    await orchestrator.start_session(generate=False)
    return orchestrator


class TestStartSession:
    """Tests for starting a session."""

    @pytest.mark.asyncio
    async def test_generated_challenge_is_used(self) -> None:
        llm = FakeLLM(generated=f"Here you go:\n```json\n{GENERATED_CHALLENGE}\n```")
        orchestrator = InterviewSessionOrchestrator(llm_client=llm)

        challenge = await orchestrator.start_session(["Python"], ["Feature stores"], session_id="session_abc")

        assert challenge.title == "Flaky Feature Store"
        assert challenge.challenge_id == "session_abc"
        assert challenge.time_limit_minutes == 30
        assert challenge.surprise_question == "Which cache would you invalidate first?"
        assert orchestrator.is_active
        assert "session_abc" in llm.prompts[0]

    @pytest.mark.asyncio
    async def test_inference_failure_falls_back_to_built_in(self) -> None:
        orchestrator = InterviewSessionOrchestrator(llm_client=FakeLLM(generated=None))

        challenge = await orchestrator.start_session(session_id="session_fallback")

        assert challenge.title == "AI Model Optimization Challenge"
        assert challenge.time_limit_minutes == 45
        assert challenge.total_phases == 3
        assert orchestrator.current_state is not None
        assert orchestrator.current_state.time_remaining == 2700

    @pytest.mark.asyncio
    async def test_unparsable_response_falls_back_to_built_in(self) -> None:
        orchestrator = InterviewSessionOrchestrator(llm_client=FakeLLM(generated="I cannot help with that."))

        challenge = await orchestrator.start_session()

        assert challenge.title == "AI Model Optimization Challenge"

    @pytest.mark.asyncio
    async def test_generation_can_be_skipped(self) -> None:
        llm = FakeLLM(generated=GENERATED_CHALLENGE)
        orchestrator = InterviewSessionOrchestrator(llm_client=llm)

        challenge = await orchestrator.start_session(generate=False)

        assert challenge.title == "AI Model Optimization Challenge"
        assert llm.prompts == []


class TestEvents:
    """Tests for applying client events."""

    def test_events_without_session_raise(self) -> None:
        orchestrator = InterviewSessionOrchestrator(llm_client=FakeLLM())

        with pytest.raises(RuntimeError, match="No active interview"):
            orchestrator.apply_event(SessionEvent(kind="code", text="x"))

    @pytest.mark.asyncio
    async def test_large_paste_returns_notice(self) -> None:
        orchestrator = await _started()
        outcome = orchestrator.apply_event(SessionEvent(kind="paste", text="p" * 120))

        assert outcome.flag is not None
        assert outcome.flag.flag_type == IntegrityFlagType.PASTE_DETECTED
        assert outcome.notice == PASTE_NOTICE

    @pytest.mark.asyncio
    async def test_paste_into_explanation_is_ignored(self) -> None:
        orchestrator = await _started()
        outcome = orchestrator.apply_event(SessionEvent(kind="paste", text="p" * 120, target="explanation"))

        assert outcome.flag is None
        assert outcome.notice is None

    @pytest.mark.asyncio
    async def test_tick_fires_surprise_question(self) -> None:
        orchestrator = await _started()
        assert orchestrator.apply_event(SessionEvent(kind="tick", seconds=600)).surprise_question is None

        outcome = orchestrator.apply_event(SessionEvent(kind="tick", seconds=600))

        assert outcome.surprise_question is not None
        assert orchestrator.current_state is not None
        assert orchestrator.current_state.surprise_question_pending

        orchestrator.apply_event(SessionEvent(kind="surprise_answer", text="GPU is idle"))
        assert orchestrator.current_state.surprise_answer == "GPU is idle"

    @pytest.mark.asyncio
    async def test_surprise_answer_before_question_raises(self) -> None:
        orchestrator = await _started()
        with pytest.raises(RuntimeError):
            orchestrator.apply_event(SessionEvent(kind="surprise_answer", text="early"))

    @pytest.mark.asyncio
    async def test_next_phase(self) -> None:
        orchestrator = await _started()
        assert orchestrator.apply_event(SessionEvent(kind="next_phase")).phase == 2
        assert orchestrator.apply_event(SessionEvent(kind="next_phase")).phase == 3
        assert orchestrator.apply_event(SessionEvent(kind="next_phase")).phase is None


class TestEndSession:
    """Tests for ending a session."""

    @pytest.mark.asyncio
    async def test_end_session_stores_result(self) -> None:
        review = {"score": 0.9, "flags": ["Steady progress"], "recommendations": []}
        interviews = FakeInterviewRepository()
        audit = FakeAuditRepository()
        orchestrator = InterviewSessionOrchestrator(
            llm_client=FakeLLM(review=review),
            interview_repository=interviews,
            audit_repository=audit,
        )
        interview_id = uuid4()

        await orchestrator.start_session(generate=False, session_id="session_end")
        orchestrator.apply_event(SessionEvent(kind="code", text="for batch in loader:\n    pass\n"))
        orchestrator.apply_event(SessionEvent(kind="visibility", hidden=True))
        orchestrator.apply_event(SessionEvent(kind="tick", seconds=300))

        result = await orchestrator.end_session(interview_id=interview_id)

        assert not orchestrator.is_active
        assert result.session_id == "session_end"
        assert result.integrity_score == pytest.approx(0.85)
        assert result.time_taken_seconds == 300
        assert result.analysis is not None
        assert result.analysis.score == pytest.approx(0.9)

        stored_id, stored_result, session_data = interviews.results[0]
        assert stored_id == interview_id
        assert stored_result is result
        assert session_data["ai_analysis"]["score"] == pytest.approx(0.9)
        assert interviews.challenges[0][1].title == "AI Model Optimization Challenge"

        assert audit.entries[0]["action"] == "interview_completed"
        assert audit.entries[0]["resource_id"] == interview_id
        assert audit.entries[0]["metadata"]["flag_count"] == 1

    @pytest.mark.asyncio
    async def test_failed_review_requires_manual_review(self) -> None:
        orchestrator = InterviewSessionOrchestrator(llm_client=FakeLLM(review={}))
        await orchestrator.start_session(generate=False)

        result = await orchestrator.end_session()

        assert result.analysis is not None
        assert result.analysis.score == 0.5
        assert result.analysis.flags == ["Analysis failed"]
        assert result.analysis.recommendations == ["Manual review required"]

    @pytest.mark.asyncio
    async def test_end_without_analysis(self) -> None:
        orchestrator = InterviewSessionOrchestrator(llm_client=FakeLLM())
        await orchestrator.start_session(generate=False)

        result = await orchestrator.end_session(analyze=False)

        assert result.analysis is None
        with pytest.raises(RuntimeError):
            await orchestrator.end_session()
