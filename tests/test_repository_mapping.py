"""
Tests for row-to-domain mapping and repository writes against a fake session.
"""

from uuid import uuid4

import numpy as np
import pytest

from talent_match.agents.challenge_generator import default_interview_challenge
from talent_match.db.models import CandidateModel, InterviewModel, JobModel, ProfileModel
from talent_match.db.repository import CandidateRepository, InterviewRepository, JobRepository
from talent_match.interview.schemas import IntegrityAnalysis, InterviewStatus
from talent_match.interview.session_state import InterviewSessionState


class FakeSession:
    """Enough of AsyncSession for get/add/flush/refresh."""

    def __init__(self, *rows) -> None:
        self.rows = {row.id: row for row in rows}
        self.added: list = []
        self.flushes = 0

    async def get(self, model_class, entity_id):
        row = self.rows.get(entity_id)
        return row if isinstance(row, model_class) else None

    def add(self, row) -> None:
        self.added.append(row)

    async def flush(self) -> None:
        self.flushes += 1

    async def refresh(self, row) -> None:
        return None


def test_candidate_to_record() -> None:
    model = CandidateModel(
        id=uuid4(),
        skills=[{"name": "Python", "proficiency": "expert"}, {"name": ""}, "SQL", None, {"level": 3}],
        experience_years=5,
        location=None,
        ai_score=None,
        embedding=np.array([0.5, 0.25], dtype=np.float32),
    )
    model.profile = ProfileModel(id=uuid4(), email="dev@example.com", full_name=None, role="candidate")

    record = CandidateRepository.to_record(model)

    assert record.candidate_id == model.id
    assert record.skill_names == ["Python", "SQL"]
    assert record.full_name == "N/A"
    assert record.email == "dev@example.com"
    assert record.location == "N/A"
    assert record.embedding == [0.5, 0.25]


def test_job_to_posting() -> None:
    model = JobModel(
        id=uuid4(),
        title="Platform Engineer",
        description=None,
        requirements=["Go", None, "Kubernetes"],
        is_active=True,
        embedding=None,
    )

    posting = JobRepository.to_posting(model)

    assert posting.job_id == model.id
    assert posting.description == ""
    assert posting.requirements == ["Go", "Kubernetes"]
    assert posting.embedding is None


@pytest.mark.asyncio
async def test_update_embedding_requires_existing_row() -> None:
    job = JobModel(id=uuid4(), title="Analyst", requirements=[])
    session = FakeSession(job)
    repository = JobRepository(session)  # type: ignore[arg-type]

    await repository.update_embedding(job.id, [0.1, 0.2])

    assert job.embedding == [0.1, 0.2]
    with pytest.raises(ValueError):
        await repository.update_embedding(uuid4(), [0.1])


@pytest.mark.asyncio
async def test_save_session_result_merges_session_data() -> None:
    interview = InterviewModel(
        id=uuid4(),
        application_id=uuid4(),
        status=InterviewStatus.SCHEDULED,
        session_data={"type": "technical", "notes": "Bring a laptop"},
    )
    session = FakeSession(interview)
    repository = InterviewRepository(session)  # type: ignore[arg-type]

    state = InterviewSessionState(default_interview_challenge("session_db"))
    state.set_tab_hidden(True)
    session_data = state.to_session_data()
    result = state.complete(
        analysis=IntegrityAnalysis(score=0.8, flags=[], recommendations=["Probe tab switch", "Check phase 2"])
    )

    await repository.save_session_result(interview.id, result, session_data)
    row = await repository.save_challenge(interview.id, result.challenge, result)

    assert interview.status == InterviewStatus.COMPLETED
    assert interview.session_data["notes"] == "Bring a laptop"
    assert interview.session_data["session_id"] == "session_db"
    assert interview.integrity_score == 0.85
    assert interview.feedback == "Probe tab switch\nCheck phase 2"

    assert session.added == [row]
    assert row.challenge_type == "coding"
    assert row.candidate_response is None
    assert row.integrity_flags[0]["flag_type"] == "tab_switch"
