"""
Interview challenge generation agent.

Generates session-unique interview challenges and standalone coding
exercises, and provides the built-in challenges used when generation is
unavailable.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from talent_match.agents.sanitize import clamp_number, clean_dict_list, clean_str_list, first_str
from talent_match.interview.schemas import ChallengeType, CodingChallenge, Difficulty, InterviewChallenge
from talent_match.models.llm_client import InferenceError, LLMClient, LLMClientBase, extract_json

logger = logging.getLogger(__name__)


class ChallengeGenerationError(Exception):
    """Raised when a challenge cannot be generated."""


DEFAULT_PROBLEM_STATEMENT = """You are given a PyTorch training loop that is running slowly.
The model is a ResNet-50 training on ImageNet data.

Phase 1: Identify potential bottlenecks in the current implementation.
Phase 2: Implement optimizations while explaining your reasoning.
Phase 3: Handle a surprise requirement that will be revealed.

Current code:
```python
for epoch in range(num_epochs):
    for batch_idx, (data, target) in enumerate(train_loader):
        optimizer.zero_grad()
        output = model(data)
        loss = criterion(output, target)
        loss.backward()
        optimizer.step()
```

Explain your approach as you code."""

DEFAULT_ANTI_CHEAT_ELEMENTS = [
    "Progressive revelation",
    "Real-time explanation required",
    "Surprise elements",
    "Code evolution tracking",
]


def default_interview_challenge(session_id: str | None = None) -> InterviewChallenge:
    """
    Build the built-in model optimization challenge.

    Args:
        session_id: Identifier to use for the challenge (generated if None).

    Returns:
        A fresh InterviewChallenge.
    """
    fields: dict[str, Any] = {
        "type": ChallengeType.CODING,
        "title": "AI Model Optimization Challenge",
        "description": "Optimize a neural network training pipeline for better performance",
        "problem_statement": DEFAULT_PROBLEM_STATEMENT,
        "time_limit_minutes": 45,
        "difficulty": Difficulty.MEDIUM,
        "current_phase": 1,
        "total_phases": 3,
        "anti_cheat_elements": list(DEFAULT_ANTI_CHEAT_ELEMENTS),
    }
    if session_id:
        fields["challenge_id"] = session_id
    return InterviewChallenge(**fields)


def fallback_coding_challenge() -> CodingChallenge:
    """Build the fixed array-processing exercise."""
    return CodingChallenge(
        title="Array Processing Challenge",
        description=(
            "Write a function that processes an array of numbers and returns the sum of "
            "even numbers multiplied by their indices."
        ),
        constraints=["Array length: 1-1000", "Numbers: -1000 to 1000"],
        examples=[{"input": "[1, 2, 3, 4]", "output": "6 (2*1 + 4*3)"}],
        hints=["Consider using array iteration", "Remember to check for even numbers"],
        time_limit=30,
    )


class ChallengeGenerator:
    """
    Generates interview challenges with the large text model.

    Each challenge is seeded with the session identifier so no two sessions
    receive the same problem.
    """

    INTERVIEW_CHALLENGE_PROMPT = """Generate a unique, dynamic interview challenge for an AI/ML engineer.

Candidate Skills: {candidate_skills}
Job Requirements: {job_requirements}
Session ID: {session_id} (use this to ensure uniqueness)

ANTI-CHEATING REQUIREMENTS:
1. Make the problem unique to this session - incorporate session ID into the problem context
2. Include progressive revelation elements (candidate can't see full problem at once)
3. Add real-time adaptation requirements (problem evolves based on candidate responses)
4. Include verbal explanation requirements (candidate must explain while coding)
5. Add surprise elements that appear mid-challenge

Focus on practical AI/ML scenarios that test both technical skills and problem-solving approach.
Make it engaging and realistic to actual work scenarios.

Respond with a JSON object containing:
{{
    "type": "coding" | "system_design" | "ml_debugging" | "ethics" | "collaboration",
    "title": "string",
    "description": "string",
    "problem_statement": "string",
    "expected_approach": "string",
    "evaluation_criteria": ["string"],
    "time_limit_minutes": number,
    "difficulty": "easy" | "medium" | "hard",
    "anti_cheat_elements": ["string"],
    "surprise_question": "string"
}}

Only return valid JSON, no other text."""

    CODING_CHALLENGE_PROMPT = """Generate a unique coding challenge for session {session_id}.
Skills: {skills}
Difficulty: {difficulty}

Create a problem that tests practical programming skills relevant to the given technologies.
Make it unique and not easily searchable online.

Return JSON:
{{
    "title": "Challenge Title",
    "description": "Detailed problem description",
    "constraints": ["constraint1", "constraint2"],
    "examples": [{{"input": "example input", "output": "expected output"}}],
    "hints": ["hint1", "hint2"],
    "timeLimit": minutes
}}"""

    def __init__(self, llm_client: LLMClientBase | None = None) -> None:
        """
        Initialize the challenge generator.

        Args:
            llm_client: Inference client. Creates default if None.
        """
        self._llm_client = llm_client or LLMClient()

    @staticmethod
    def _skill_names(skills: list[Any]) -> list[str]:
        names: list[str] = []
        for skill in skills or []:
            if isinstance(skill, str):
                names.append(skill)
            elif isinstance(skill, dict) and isinstance(skill.get("name"), str):
                names.append(skill["name"])
            elif hasattr(skill, "name"):
                names.append(str(skill.name))
        return clean_str_list(names)

    @staticmethod
    def _build_interview_challenge(data: dict[str, Any], session_id: str) -> InterviewChallenge:
        """Sanitize parsed model output into an InterviewChallenge."""
        types = {t.value: t for t in ChallengeType}
        difficulties = {d.value: d for d in Difficulty}

        title = first_str(data, "title")
        problem = first_str(data, "problem_statement", "problemStatement", "description")
        if not title or not problem:
            raise ChallengeGenerationError("Challenge response is missing a title or problem statement")

        fields: dict[str, Any] = {
            "challenge_id": session_id,
            "type": types.get(str(data.get("type", "")).lower(), ChallengeType.CODING),
            "title": title,
            "description": first_str(data, "description"),
            "problem_statement": problem,
            "expected_approach": first_str(data, "expected_approach", "expectedApproach"),
            "evaluation_criteria": clean_str_list(data.get("evaluation_criteria")),
            "time_limit_minutes": int(clamp_number(data.get("time_limit_minutes"), 1, 240, 45)),
            "difficulty": difficulties.get(str(data.get("difficulty", "")).lower(), Difficulty.MEDIUM),
            "anti_cheat_elements": clean_str_list(data.get("anti_cheat_elements")),
        }
        surprise = first_str(data, "surprise_question", "surpriseQuestion")
        if surprise:
            fields["surprise_question"] = surprise
        return InterviewChallenge(**fields)

    async def generate_interview_challenge(
        self,
        candidate_skills: list[Any],
        job_requirements: list[str],
        session_id: str,
    ) -> InterviewChallenge:
        """
        Generate a session-unique interview challenge.

        Args:
            candidate_skills: Candidate skills (names, dicts or Skill objects).
            job_requirements: Job requirement strings.
            session_id: Session identifier used to seed uniqueness.

        Returns:
            The generated challenge, identified by session_id.

        Raises:
            InferenceError: If the inference call fails.
            ChallengeGenerationError: If the response cannot be parsed.
        """
        prompt = self.INTERVIEW_CHALLENGE_PROMPT.format(
            candidate_skills=json.dumps(self._skill_names(candidate_skills)),
            job_requirements=json.dumps(clean_str_list(list(job_requirements or []))),
            session_id=session_id,
        )

        try:
            content = await self._llm_client.generate(
                prompt,
                reasoning="high",
                model_size="large",
                max_tokens=1500,
                temperature=0.7,
            )
        except InferenceError as e:
            logger.error(f"Error generating interview challenge: {e}")
            raise

        parsed = extract_json(content)
        if not isinstance(parsed, dict):
            logger.error("Failed to parse challenge response")
            logger.debug(f"Response content: {content[:500]}")
            raise ChallengeGenerationError("Failed to parse challenge response")

        challenge = self._build_interview_challenge(parsed, session_id)
        logger.info(f"Generated challenge '{challenge.title}' for session {session_id}")
        return challenge

    async def generate_coding_challenge(
        self,
        skills: list[Any],
        difficulty: Difficulty | str = Difficulty.MEDIUM,
        session_id: str = "",
    ) -> CodingChallenge:
        """
        Generate a standalone coding exercise.

        Args:
            skills: Skills the exercise should exercise.
            difficulty: Exercise difficulty.
            session_id: Session identifier used to seed uniqueness.

        Returns:
            The generated exercise, or the fixed array-processing exercise
            when the response cannot be parsed.

        Raises:
            ChallengeGenerationError: If the inference call fails.
        """
        level = difficulty.value if isinstance(difficulty, Difficulty) else str(difficulty)
        prompt = self.CODING_CHALLENGE_PROMPT.format(
            session_id=session_id,
            skills=", ".join(self._skill_names(skills)),
            difficulty=level,
        )

        try:
            content = await self._llm_client.generate(
                prompt,
                reasoning="high",
                model_size="large",
                max_tokens=1200,
                temperature=0.9,
            )
        except InferenceError as e:
            logger.error(f"Error generating coding challenge: {e}")
            raise ChallengeGenerationError("Failed to generate coding challenge") from e

        parsed = extract_json(content)
        if not isinstance(parsed, dict) or not first_str(parsed, "title") or not first_str(parsed, "description"):
            logger.warning("Could not parse coding challenge, using fallback")
            return fallback_coding_challenge()

        examples = [
            {"input": str(ex.get("input", "")), "output": str(ex.get("output", ""))}
            for ex in clean_dict_list(parsed.get("examples"))
        ]
        return CodingChallenge(
            title=first_str(parsed, "title"),
            description=first_str(parsed, "description"),
            constraints=clean_str_list(parsed.get("constraints")),
            examples=examples,
            hints=clean_str_list(parsed.get("hints")),
            time_limit=int(clamp_number(parsed.get("timeLimit", parsed.get("time_limit")), 1, 240, 30)),
        )
