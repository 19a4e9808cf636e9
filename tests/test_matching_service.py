from uuid import UUID, uuid4

import pytest
from sqlalchemy.exc import OperationalError

from talent_match.matching.ranking import CandidateRanker
from talent_match.matching.schemas import CandidateRecord, JobPosting
from talent_match.matching.scoring import MatchWeights
from talent_match.models.llm_client import InferenceError
from talent_match.services.matching_service import MatchingService


class FakeLLM:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.texts: list[str] = []

    async def embed(self, text):
        self.texts.append(text)
        if self.fail:
            raise InferenceError("embedding model unavailable", status_code=503)
        return [1.0, 0.0]


class FakeCandidateRepository:
    def __init__(self, records: list[CandidateRecord]) -> None:
        self.records = {r.candidate_id: r for r in records}
        self.embeddings: dict[UUID, list[float]] = {}

    async def get_record(self, candidate_id):
        return self.records.get(candidate_id)

    async def list_pool(self, limit=500, offset=0):
        return list(self.records.values())[offset : offset + limit]

    async def update_embedding(self, candidate_id, embedding):
        self.embeddings[candidate_id] = embedding


class FakeJobRepository:
    def __init__(self, jobs: list[JobPosting]) -> None:
        self.jobs = {j.job_id: j for j in jobs}
        self.embeddings: dict[UUID, list[float]] = {}

    async def get_posting(self, job_id):
        return self.jobs.get(job_id)

    async def update_embedding(self, job_id, embedding):
        self.embeddings[job_id] = embedding


@pytest.fixture
def job() -> JobPosting:
    return JobPosting(
        title="ML Engineer",
        description="Ship recommendation models",
        requirements=["Python", "PyTorch", "3 years experience"],
        embedding=[1.0, 0.0],
    )


def _service(candidates, jobs, llm=None) -> MatchingService:
    return MatchingService(
        candidate_repository=FakeCandidateRepository(candidates),
        job_repository=FakeJobRepository(jobs),
        llm_client=llm or FakeLLM(),
        ranker=CandidateRanker(weights=MatchWeights()),
    )


@pytest.mark.asyncio
async def test_index_job_embeds_title_description_and_requirements(job: JobPosting) -> None:
    llm = FakeLLM()
    service = _service([], [job], llm)

    embedding = await service.index_job(job.job_id)

    assert embedding == [1.0, 0.0]
    assert llm.texts == ["ML Engineer Ship recommendation models Python, PyTorch, 3 years experience"]
    assert service._jobs.embeddings[job.job_id] == [1.0, 0.0]


@pytest.mark.asyncio
async def test_index_candidate_requires_profile_text() -> None:
    blank = CandidateRecord()
    service = _service([blank], [])

    with pytest.raises(ValueError):
        await service.index_candidate(blank.candidate_id)
    with pytest.raises(ValueError):
        await service.index_candidate(uuid4())


@pytest.mark.asyncio
async def test_embedding_failure_propagates() -> None:
    candidate = CandidateRecord(skills=["Python"], experience_years=2)
    service = _service([candidate], [], FakeLLM(fail=True))

    with pytest.raises(InferenceError):
        await service.index_candidate(candidate.candidate_id)


@pytest.mark.asyncio
async def test_calculate_match_score(job: JobPosting) -> None:
    candidate = CandidateRecord(skills=["Python", "PyTorch"], experience_years=4, embedding=[1.0, 0.0])
    service = _service([candidate], [job])

    score = await service.calculate_match_score(candidate.candidate_id, job.job_id)

    assert score == pytest.approx(0.4 * 1.0 + 0.4 * 2 / 3 + 0.2 * 1.0)


@pytest.mark.asyncio
async def test_calculate_match_score_is_zero_on_failure(job: JobPosting) -> None:
    unembedded = CandidateRecord(skills=["Python"])
    service = _service([unembedded], [job])

    assert await service.calculate_match_score(unembedded.candidate_id, job.job_id) == 0.0
    assert await service.calculate_match_score(uuid4(), job.job_id) == 0.0


@pytest.mark.asyncio
async def test_rank_candidates_for_job(job: JobPosting) -> None:
    pool = [
        CandidateRecord(full_name="Ana", skills=["Excel"], experience_years=1, embedding=[0.0, 1.0]),
        CandidateRecord(full_name="Ben", skills=["Python", "PyTorch"], experience_years=5, embedding=[1.0, 0.1]),
        CandidateRecord(full_name="Cy", skills=["Python"]),
    ]
    service = _service(pool, [job])

    ranked = await service.rank_candidates_for_job(job.job_id)

    assert [r.candidate.full_name for r in ranked][0] == "Ben"
    assert ranked[-1].ai_match_score <= ranked[0].ai_match_score
    assert {r.candidate.full_name for r in ranked if r.ai_match_score == 0.0} == {"Cy"}

    with pytest.raises(ValueError):
        await service.rank_candidates_for_job(uuid4())


class UnreachableCandidateRepository(FakeCandidateRepository):
    async def get_record(self, candidate_id):
        raise OperationalError("SELECT", {}, ConnectionRefusedError("db down"))


@pytest.mark.asyncio
async def test_calculate_match_score_is_zero_when_database_fails(job: JobPosting) -> None:
    service = MatchingService(UnreachableCandidateRepository([]), FakeJobRepository([job]), llm_client=FakeLLM())

    assert await service.calculate_match_score(uuid4(), job.job_id) == 0.0
