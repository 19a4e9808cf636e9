"""
Agents module containing the model-backed helpers.

Each agent wraps one inference task and turns its output into validated
domain models, with a safe fallback where the task allows one.
"""

from talent_match.agents.challenge_generator import (
    ChallengeGenerationError,
    ChallengeGenerator,
    default_interview_challenge,
    fallback_coding_challenge,
)
from talent_match.agents.integrity_analyzer import IntegrityAnalyzer
from talent_match.agents.question_generator import QuestionGenerator
from talent_match.agents.skill_extractor import SkillExtractor

__all__ = [
    "ChallengeGenerationError",
    "ChallengeGenerator",
    "IntegrityAnalyzer",
    "QuestionGenerator",
    "SkillExtractor",
    "default_interview_challenge",
    "fallback_coding_challenge",
]
