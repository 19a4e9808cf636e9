"""
Interview question generation agent.
"""

from __future__ import annotations

import logging
from typing import Literal

from talent_match.agents.sanitize import clean_dict_list, first_str
from talent_match.interview.schemas import InterviewQuestion
from talent_match.models.llm_client import InferenceError, LLMClient, LLMClientBase, extract_json

logger = logging.getLogger(__name__)

SeniorityLevel = Literal["junior", "mid", "senior"]


class QuestionGenerator:
    """Generates a mix of technical and behavioral questions for a job."""

    QUESTIONS_PROMPT = """Generate {count} interview questions for a {difficulty} level {job_title} position.
Requirements: {requirements}

Create a mix of technical and behavioral questions. For technical questions, provide expected answer guidelines.

Return as JSON array with format:
[{{"question": "...", "type": "technical|behavioral", "expectedAnswer": "..."}}]"""

    def __init__(self, llm_client: LLMClientBase | None = None) -> None:
        """
        Initialize the question generator.

        Args:
            llm_client: Inference client. Creates default if None.
        """
        self._llm_client = llm_client or LLMClient()

    @staticmethod
    def fallback_questions(requirements: list[str]) -> list[InterviewQuestion]:
        """Two generic questions used when the model output is unusable."""
        topic = requirements[0] if requirements else "the required technologies"
        return [
            InterviewQuestion(
                question=f"Tell me about your experience with {topic}.",
                type="technical",
            ),
            InterviewQuestion(
                question="Describe a challenging project you worked on and how you overcame obstacles.",
                type="behavioral",
            ),
        ]

    async def generate_questions(
        self,
        job_title: str,
        requirements: list[str],
        difficulty: SeniorityLevel = "mid",
        count: int = 5,
    ) -> list[InterviewQuestion]:
        """
        Generate interview questions for a position.

        Args:
            job_title: Position title.
            requirements: Job requirement strings.
            difficulty: Seniority of the position.
            count: Number of questions to ask for.

        Returns:
            Generated questions; two fallback questions when the output cannot
            be parsed; empty when inference fails.
        """
        requirements = [r for r in requirements or [] if isinstance(r, str) and r.strip()]
        prompt = self.QUESTIONS_PROMPT.format(
            count=count,
            difficulty=difficulty,
            job_title=job_title,
            requirements=", ".join(requirements),
        )

        try:
            content = await self._llm_client.generate(
                prompt,
                reasoning="high",
                model_size="large",
                max_tokens=1500,
                temperature=0.8,
            )
        except InferenceError as e:
            logger.error(f"Error generating interview questions: {e}")
            return []

        parsed = extract_json(content)
        if isinstance(parsed, dict):
            parsed = parsed.get("questions", parsed.get("items"))
        if not isinstance(parsed, list):
            logger.warning("Could not parse interview questions, using fallback questions")
            return self.fallback_questions(requirements)

        questions: list[InterviewQuestion] = []
        for item in clean_dict_list(parsed):
            text = first_str(item, "question")
            if not text:
                continue
            kind = str(item.get("type", "")).lower()
            questions.append(
                InterviewQuestion(
                    question=text,
                    type="behavioral" if kind == "behavioral" else "technical",
                    expected_answer=first_str(item, "expectedAnswer", "expected_answer") or None,
                )
            )

        logger.info(f"Generated {len(questions)} questions for {job_title}")
        return questions
