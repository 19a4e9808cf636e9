"""
Integrity analysis agent.

Reviews a finished interview session, or a single answer, for signs of
cheating or shallow understanding.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from talent_match.agents.sanitize import clamp_number, clean_str_list, first_str
from talent_match.interview.schemas import IntegrityAnalysis, ResponseAnalysis
from talent_match.models.llm_client import (
    InferenceError,
    LLMClient,
    LLMClientBase,
    Message,
    extract_json,
)

logger = logging.getLogger(__name__)


class IntegrityAnalyzer:
    """
    LLM-based integrity reviewer.

    Complements the rule-based integrity monitor with a holistic review of
    the session record.
    """

    SESSION_PROMPT = """Analyze this interview session data for potential integrity issues:

{session_data}

Look for:
1. Sudden solution jumps without logical progression
2. Copy-paste patterns in code
3. Inconsistency between verbal explanations and code
4. Unusual timing patterns
5. Generic or templated responses

Respond with a JSON object containing:
{{
    "score": number between 0 and 1 (where 1 is highest integrity),
    "flags": ["string array of specific flags found"],
    "recommendations": ["string array of follow-up recommendations"]
}}"""

    RESPONSE_PROMPT = """Analyze this interview response for integrity and technical accuracy:

Question: {question}
Response: {response}
{expected}

Evaluate:
1. Integrity (0-100): Does the response seem genuine and not copy-pasted?
2. Technical Score (0-100): How accurate and complete is the technical content?
3. Red flags: Any signs of cheating, inconsistency, or lack of understanding?

Return JSON:
{{
    "integrityScore": number,
    "technicalScore": number,
    "feedback": "constructive feedback",
    "redFlags": ["flag1", "flag2"]
}}"""

    MAX_SESSION_CHARS = 8000

    def __init__(self, llm_client: LLMClientBase | None = None) -> None:
        """
        Initialize the integrity analyzer.

        Args:
            llm_client: Inference client. Creates default if None.
        """
        self._llm_client = llm_client or LLMClient()

    @staticmethod
    def failed_analysis() -> IntegrityAnalysis:
        """Analysis returned when the review cannot be completed."""
        return IntegrityAnalysis(
            score=0.5,
            flags=["Analysis failed"],
            recommendations=["Manual review required"],
        )

    async def analyze_session(self, session_data: dict[str, Any]) -> IntegrityAnalysis:
        """
        Review a whole session record.

        Args:
            session_data: JSON-serializable session record.

        Returns:
            Integrity score in [0, 1] with flags and recommendations, or the
            failed analysis when the review cannot be completed.
        """
        serialized = json.dumps(session_data, default=str)[: self.MAX_SESSION_CHARS]
        prompt = self.SESSION_PROMPT.format(session_data=serialized)

        response = await self._llm_client.chat_with_json(
            messages=[Message(role="user", content=prompt)],
            temperature=0.3,
            max_tokens=800,
            reasoning="high",
        )

        if "score" not in response:
            logger.warning("Integrity analysis unavailable, manual review required")
            return self.failed_analysis()

        analysis = IntegrityAnalysis(
            score=clamp_number(response.get("score"), 0.0, 1.0, 0.5),
            flags=clean_str_list(response.get("flags")),
            recommendations=clean_str_list(response.get("recommendations")),
        )
        logger.info(f"Session integrity analysis: score={analysis.score:.2f}, {len(analysis.flags)} flags")
        return analysis

    async def analyze_response(
        self,
        question: str,
        response: str,
        expected_answer: str | None = None,
    ) -> ResponseAnalysis:
        """
        Review a single interview answer.

        Args:
            question: Question that was asked.
            response: Candidate's answer.
            expected_answer: Optional answer guidelines.

        Returns:
            Integrity and technical scores (0-100), feedback and red flags.
        """
        prompt = self.RESPONSE_PROMPT.format(
            question=question,
            response=response,
            expected=f"Expected Answer Guidelines: {expected_answer}" if expected_answer else "",
        )

        try:
            content = await self._llm_client.generate(
                prompt,
                reasoning="high",
                model_size="large",
                max_tokens=800,
                temperature=0.3,
            )
        except InferenceError as e:
            logger.error(f"Error analyzing interview response: {e}")
            return ResponseAnalysis(
                integrity_score=50,
                technical_score=50,
                feedback="Analysis failed. Manual review required.",
                red_flags=["Analysis error"],
            )

        parsed = extract_json(content)
        if not isinstance(parsed, dict):
            logger.warning("Could not parse response analysis, using default scores")
            return ResponseAnalysis(
                integrity_score=75,
                technical_score=70,
                feedback="Response analyzed. Please review manually for detailed assessment.",
                red_flags=[],
            )

        return ResponseAnalysis(
            integrity_score=clamp_number(
                parsed.get("integrityScore", parsed.get("integrity_score")), 0.0, 100.0, 75.0
            ),
            technical_score=clamp_number(
                parsed.get("technicalScore", parsed.get("technical_score")), 0.0, 100.0, 70.0
            ),
            feedback=first_str(parsed, "feedback"),
            red_flags=clean_str_list(parsed.get("redFlags", parsed.get("red_flags"))),
        )
