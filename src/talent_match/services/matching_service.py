"""
Matching service.

Embeds job postings and candidate profiles through the inference API and
scores candidates against jobs from stored rows.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from uuid import UUID

from talent_match.matching.ranking import CandidateRanker
from talent_match.matching.schemas import CandidateRecord, JobPosting, RankedCandidate
from talent_match.matching.scoring import score_candidate
from talent_match.models.llm_client import LLMClient, LLMClientBase

if TYPE_CHECKING:
    from talent_match.db.repository import CandidateRepository, JobRepository

logger = logging.getLogger(__name__)


class MatchingService:
    """Candidate-to-job matching over the stored candidate pool."""

    def __init__(
        self,
        candidate_repository: CandidateRepository,
        job_repository: JobRepository,
        llm_client: LLMClientBase | None = None,
        ranker: CandidateRanker | None = None,
    ) -> None:
        """
        Initialize the matching service.

        Args:
            candidate_repository: Candidate reads and embedding writes.
            job_repository: Job reads and embedding writes.
            llm_client: Inference client for embeddings. Creates default if None.
            ranker: Candidate ranker (configured weights if None).
        """
        self._candidates = candidate_repository
        self._jobs = job_repository
        self._llm_client = llm_client or LLMClient()
        self._ranker = ranker or CandidateRanker()

    async def embed_job_posting(self, title: str, description: str, requirements: list[str]) -> list[float]:
        """
        Embed a job posting from its title, description and requirements.

        Raises:
            InferenceError: If the embedding request fails.
        """
        posting = JobPosting(title=title, description=description, requirements=requirements)
        return await self._llm_client.embed(posting.embedding_text())

    async def embed_candidate(self, candidate: CandidateRecord) -> list[float]:
        """
        Embed a candidate profile.

        Raises:
            InferenceError: If the embedding request fails.
            ValueError: If the profile has nothing to embed.
        """
        text = candidate.embedding_text()
        if not text:
            raise ValueError(f"Candidate {candidate.candidate_id} has no profile text to embed")
        return await self._llm_client.embed(text)

    async def index_job(self, job_id: UUID) -> list[float]:
        """
        Embed a stored job posting and save the embedding.

        Raises:
            ValueError: If the job does not exist.
            InferenceError: If the embedding request fails.
        """
        job = await self._jobs.get_posting(job_id)
        if job is None:
            raise ValueError(f"Job not found: {job_id}")
        embedding = await self.embed_job_posting(job.title, job.description, job.requirements)
        await self._jobs.update_embedding(job_id, embedding)
        logger.info(f"Indexed job {job_id} ({len(embedding)} dimensions)")
        return embedding

    async def index_candidate(self, candidate_id: UUID) -> list[float]:
        """
        Embed a stored candidate profile and save the embedding.

        Raises:
            ValueError: If the candidate does not exist or has nothing to embed.
            InferenceError: If the embedding request fails.
        """
        candidate = await self._candidates.get_record(candidate_id)
        if candidate is None:
            raise ValueError(f"Candidate not found: {candidate_id}")
        embedding = await self.embed_candidate(candidate)
        await self._candidates.update_embedding(candidate_id, embedding)
        logger.info(f"Indexed candidate {candidate_id} ({len(embedding)} dimensions)")
        return embedding

    async def calculate_match_score(self, candidate_id: UUID, job_id: UUID) -> float:
        """
        Score a stored candidate against a stored job.

        Args:
            candidate_id: Candidate's UUID.
            job_id: Job's UUID.

        Returns:
            Match score in [0, 1]; 0.0 on any failure.
        """
        try:
            candidate = await self._candidates.get_record(candidate_id)
            job = await self._jobs.get_posting(job_id)
            if candidate is None or job is None:
                raise ValueError("Candidate or job not found")

            breakdown = score_candidate(candidate, job, self._ranker.weights)
        except Exception as e:
            logger.error(f"Error calculating match score for {candidate_id} / {job_id}: {e}")
            return 0.0

        logger.debug(
            f"Match {candidate_id} / {job_id}: similarity={breakdown.similarity:.3f}, "
            f"skills={breakdown.skill_overlap:.2f}, experience={breakdown.experience:.1f}"
        )
        return breakdown.score

    async def rank_candidates_for_job(self, job_id: UUID, limit: int = 500) -> list[RankedCandidate]:
        """
        Rank the stored candidate pool for a job.

        Args:
            job_id: Job's UUID.
            limit: Maximum pool size to load.

        Returns:
            Ranked candidates, best first.

        Raises:
            ValueError: If the job does not exist.
        """
        job = await self._jobs.get_posting(job_id)
        if job is None:
            raise ValueError(f"Job not found: {job_id}")

        pool = await self._candidates.list_pool(limit=limit)
        return self._ranker.rank(job, pool)
