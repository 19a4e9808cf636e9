"""
Candidate pool ranking.

Scores every candidate in a pool against one job and orders them by match
score, highest first.
"""

import logging
from collections.abc import Iterable

from talent_match.matching.schemas import CandidateRecord, JobPosting, RankedCandidate
from talent_match.matching.scoring import MatchWeights, score_candidate

logger = logging.getLogger(__name__)


class CandidateRanker:
    """Ranks a candidate pool for a job posting."""

    def __init__(self, weights: MatchWeights | None = None) -> None:
        """
        Initialize the ranker.

        Args:
            weights: Signal weights. Uses configured weights if None.
        """
        self._weights = weights or MatchWeights.from_settings()

    @property
    def weights(self) -> MatchWeights:
        """Get the signal weights in use."""
        return self._weights

    def score(self, candidate: CandidateRecord, job: JobPosting) -> RankedCandidate:
        """
        Score a single candidate, giving 0 when an embedding is missing.

        Args:
            candidate: Candidate to score.
            job: Job posting to score against.

        Returns:
            The ranked candidate entry.
        """
        if not candidate.embedding or not job.embedding:
            logger.warning(
                f"Missing embedding for candidate {candidate.candidate_id} or job {job.job_id}. "
                "Skipping AI score."
            )
            return RankedCandidate(candidate=candidate, ai_match_score=0.0)

        try:
            breakdown = score_candidate(candidate, job, self._weights)
        except ValueError as e:
            logger.warning(f"Could not score candidate {candidate.candidate_id}: {e}")
            return RankedCandidate(candidate=candidate, ai_match_score=0.0)

        return RankedCandidate(candidate=candidate, ai_match_score=breakdown.score, breakdown=breakdown)

    def rank(self, job: JobPosting, candidates: Iterable[CandidateRecord]) -> list[RankedCandidate]:
        """
        Rank candidates for a job by match score, descending.

        Args:
            job: Job posting.
            candidates: Candidate pool.

        Returns:
            Ranked candidates; ties keep their input order.
        """
        ranked = [self.score(candidate, job) for candidate in candidates]
        ranked.sort(key=lambda r: r.ai_match_score, reverse=True)
        logger.info(f"Ranked {len(ranked)} candidates for job {job.job_id}")
        return ranked
