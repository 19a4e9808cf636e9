"""
Matching module for candidate-to-job scoring and pool ranking.
"""

from talent_match.matching.ranking import CandidateRanker
from talent_match.matching.schemas import (
    CandidateRecord,
    JobPosting,
    MatchBreakdown,
    RankedCandidate,
    Skill,
)
from talent_match.matching.scoring import (
    MatchWeights,
    blend_match_score,
    experience_ratio,
    score_candidate,
    skill_overlap_ratio,
)
from talent_match.matching.similarity import cosine_similarity, similarity_to_percentage

__all__ = [
    "CandidateRanker",
    "CandidateRecord",
    "JobPosting",
    "MatchBreakdown",
    "MatchWeights",
    "RankedCandidate",
    "Skill",
    "blend_match_score",
    "cosine_similarity",
    "experience_ratio",
    "score_candidate",
    "similarity_to_percentage",
    "skill_overlap_ratio",
]
