"""
Match scoring.

Blends embedding similarity with heuristic skill-overlap and experience
signals into a single candidate-to-job match score in [0, 1].
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from typing import Any

from pydantic import BaseModel, Field

from talent_match.config import get_settings
from talent_match.matching.schemas import CandidateRecord, JobPosting, MatchBreakdown, Skill
from talent_match.matching.similarity import cosine_similarity

_YEARS_PATTERN = re.compile(r"\d+")


class MatchWeights(BaseModel):
    """Weights of the three match signals."""

    similarity: float = Field(default=0.4, ge=0.0)
    skills: float = Field(default=0.4, ge=0.0)
    experience: float = Field(default=0.2, ge=0.0)

    @classmethod
    def from_settings(cls) -> MatchWeights:
        """Build weights from application settings."""
        settings = get_settings()
        return cls(
            similarity=settings.match_weight_similarity,
            skills=settings.match_weight_skills,
            experience=settings.match_weight_experience,
        )


def _skill_name(skill: Skill | dict[str, Any] | str) -> str:
    if isinstance(skill, Skill):
        return skill.name
    if isinstance(skill, dict):
        return str(skill.get("name") or "")
    return str(skill)


def skill_overlap_ratio(
    candidate_skills: Iterable[Skill | dict[str, Any] | str],
    requirements: Sequence[str],
) -> float:
    """
    Fraction of job requirements covered by the candidate's skills.

    A requirement is covered when some skill name contains it or is contained
    in it, ignoring case.

    Args:
        candidate_skills: Skill objects, dicts with a "name", or plain names.
        requirements: Job requirement strings.

    Returns:
        Coverage ratio in [0, 1]; 0 when either side is empty.
    """
    names = [n.lower() for n in (_skill_name(s).strip() for s in candidate_skills or []) if n]
    required = [r.lower().strip() for r in requirements or [] if isinstance(r, str) and r.strip()]
    if not names or not required:
        return 0.0

    matches = [req for req in required if any(name in req or req in name for name in names)]
    return len(matches) / len(required)


def required_years(requirements: Sequence[Any]) -> int | None:
    """
    Years of experience demanded by the first requirement that mentions years.

    Args:
        requirements: Job requirement strings.

    Returns:
        The first integer in that requirement (0 if it has none), or None when
        no requirement mentions years.
    """
    for req in requirements or []:
        if isinstance(req, str) and "year" in req.lower():
            match = _YEARS_PATTERN.search(req)
            return int(match.group()) if match else 0
    return None


def experience_ratio(candidate_years: int | float | None, requirements: Sequence[Any]) -> float:
    """
    Score how well the candidate's experience meets the job's demand.

    Args:
        candidate_years: Candidate's years of experience.
        requirements: Job requirement strings.

    Returns:
        0.5 when either side is unknown, else 1.0 / 0.8 / 0.6 / 0.3 for meeting
        the requirement, 70% of it, 50% of it, or less.
    """
    req_years = required_years(requirements)
    if req_years is None or not candidate_years:
        return 0.5

    if candidate_years >= req_years:
        return 1.0
    if candidate_years >= req_years * 0.7:
        return 0.8
    if candidate_years >= req_years * 0.5:
        return 0.6
    return 0.3


def blend_match_score(
    similarity: float,
    skill_ratio: float,
    experience: float,
    weights: MatchWeights | None = None,
) -> float:
    """
    Weighted blend of the match signals, clamped to [0, 1].

    Args:
        similarity: Cosine similarity of the embeddings.
        skill_ratio: Skill overlap ratio.
        experience: Experience ratio.
        weights: Signal weights (defaults to configured weights).

    Returns:
        Match score in [0, 1].
    """
    w = weights or MatchWeights.from_settings()
    score = similarity * w.similarity + skill_ratio * w.skills + experience * w.experience
    return min(max(score, 0.0), 1.0)


def score_candidate(
    candidate: CandidateRecord,
    job: JobPosting,
    weights: MatchWeights | None = None,
) -> MatchBreakdown:
    """
    Score one candidate against one job.

    Args:
        candidate: Candidate with an embedding.
        job: Job posting with an embedding.
        weights: Signal weights (defaults to configured weights).

    Returns:
        The per-signal breakdown and blended score.

    Raises:
        ValueError: If either embedding is missing or their dimensions differ.
    """
    if not candidate.embedding or not job.embedding:
        raise ValueError("Candidate and job embeddings are required for scoring")

    similarity = cosine_similarity(candidate.embedding, job.embedding)
    skills = skill_overlap_ratio(candidate.skills, job.requirements)
    experience = experience_ratio(candidate.experience_years, job.requirements)

    return MatchBreakdown(
        similarity=similarity,
        skill_overlap=skills,
        experience=experience,
        score=blend_match_score(similarity, skills, experience, weights),
    )
