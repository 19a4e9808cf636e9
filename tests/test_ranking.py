import logging

import pytest

from talent_match.matching.ranking import CandidateRanker
from talent_match.matching.schemas import CandidateRecord, JobPosting
from talent_match.matching.scoring import MatchWeights


@pytest.fixture
def job() -> JobPosting:
    return JobPosting(
        title="ML Engineer",
        description="Train and ship models",
        requirements=["Python", "PyTorch", "5 years experience"],
        embedding=[1.0, 0.0],
    )


@pytest.fixture
def ranker() -> CandidateRanker:
    return CandidateRanker(weights=MatchWeights())


def test_rank_orders_by_score_descending(ranker: CandidateRanker, job: JobPosting) -> None:
    weak = CandidateRecord(full_name="Weak", skills=["Excel"], experience_years=1, embedding=[0.0, 1.0])
    strong = CandidateRecord(full_name="Strong", skills=["Python", "PyTorch"], experience_years=6, embedding=[1.0, 0.0])
    middle = CandidateRecord(full_name="Middle", skills=["Python"], experience_years=3, embedding=[0.7, 0.7])

    ranked = ranker.rank(job, [weak, strong, middle])

    assert [r.candidate.full_name for r in ranked] == ["Strong", "Middle", "Weak"]
    scores = [r.ai_match_score for r in ranked]
    assert scores == sorted(scores, reverse=True)
    assert all(0.0 <= s <= 1.0 for s in scores)


def test_missing_candidate_embedding_scores_zero(
    ranker: CandidateRanker,
    job: JobPosting,
    caplog: pytest.LogCaptureFixture,
) -> None:
    candidate = CandidateRecord(full_name="No Embedding", skills=["Python", "PyTorch"], experience_years=10)

    with caplog.at_level(logging.WARNING):
        ranked = ranker.rank(job, [candidate])

    assert ranked[0].ai_match_score == 0.0
    assert ranked[0].breakdown is None
    assert "Missing embedding" in caplog.text


def test_missing_job_embedding_scores_everyone_zero(ranker: CandidateRanker) -> None:
    job = JobPosting(title="Unindexed", requirements=["Python"])
    pool = [CandidateRecord(skills=["Python"], embedding=[1.0, 0.0]) for _ in range(3)]

    ranked = ranker.rank(job, pool)

    assert [r.ai_match_score for r in ranked] == [0.0, 0.0, 0.0]


def test_dimension_mismatch_scores_zero(ranker: CandidateRanker, job: JobPosting) -> None:
    candidate = CandidateRecord(skills=["Python"], embedding=[1.0, 0.0, 0.0])

    assert ranker.score(candidate, job).ai_match_score == 0.0


def test_ties_keep_input_order(ranker: CandidateRanker, job: JobPosting) -> None:
    first = CandidateRecord(full_name="First", skills=["Python"], embedding=[1.0, 0.0])
    second = CandidateRecord(full_name="Second", skills=["Python"], embedding=[1.0, 0.0])

    ranked = ranker.rank(job, [first, second])

    assert ranked[0].ai_match_score == ranked[1].ai_match_score
    assert [r.candidate.full_name for r in ranked] == ["First", "Second"]


def test_empty_pool(ranker: CandidateRanker, job: JobPosting) -> None:
    assert ranker.rank(job, []) == []
