"""
Resume skill extraction agent.

Extracts structured skills with categories and proficiency levels from
free-form resume text.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

from docx import Document

from talent_match.agents.sanitize import clamp_number
from talent_match.matching.schemas import Proficiency, Skill, SkillCategory
from talent_match.models.llm_client import InferenceError, LLMClient, LLMClientBase, extract_json

logger = logging.getLogger(__name__)

_QUOTED = re.compile(r"[\"']([^\"']+)[\"']")


def _read_docx(file_path: Path) -> str:
    """
    Read text content from a .docx file.

    Args:
        file_path: Path to the .docx file.

    Returns:
        Extracted text content.
    """
    doc = Document(str(file_path))
    paragraphs = [para.text for para in doc.paragraphs if para.text.strip()]
    return "\n".join(paragraphs)


class SkillExtractor:
    """
    Extracts skills from resumes with the large text model.

    The model may answer with {"skills": [...]} objects or with a bare list of
    names; both are accepted.
    """

    EXTRACTION_PROMPT = """Analyze this resume and extract AI/ML engineering skills with proficiency levels.
Focus on: Programming languages, ML frameworks, cloud platforms, databases, and soft skills.

Resume text:
{resume_text}

Rate proficiency based on context clues like years of experience, project complexity, and explicit mentions.

Respond with a JSON object containing an array of skills, each with:
- name: string
- category: "programming" | "ml_framework" | "cloud" | "database" | "soft_skill"
- proficiency: "beginner" | "intermediate" | "advanced" | "expert"
- confidence: number between 0 and 1

Example format:
{{
    "skills": [
        {{
            "name": "Python",
            "category": "programming",
            "proficiency": "advanced",
            "confidence": 0.9
        }}
    ]
}}

Only return valid JSON, no other text."""

    MAX_RESUME_CHARS = 12000

    def __init__(self, llm_client: LLMClientBase | None = None) -> None:
        """
        Initialize the skill extractor.

        Args:
            llm_client: Inference client. Creates default if None.
        """
        self._llm_client = llm_client or LLMClient()

    @staticmethod
    def _to_skill(entry: Any) -> Skill | None:
        """Build a Skill from one model entry, or None if it is malformed."""
        if isinstance(entry, str):
            name = entry.strip()
            return Skill(name=name) if name else None
        if not isinstance(entry, dict):
            return None

        name = entry.get("name")
        if not isinstance(name, str) or not name.strip():
            return None

        category_map = {c.value: c for c in SkillCategory}
        proficiency_map = {p.value: p for p in Proficiency}
        category = str(entry.get("category") or "").strip().lower()
        proficiency = str(entry.get("proficiency") or "").strip().lower()

        return Skill(
            name=name.strip(),
            category=category_map.get(category, SkillCategory.UNKNOWN),
            proficiency=proficiency_map.get(proficiency, Proficiency.INTERMEDIATE),
            confidence=clamp_number(entry.get("confidence"), 0.0, 1.0, 0.5),
        )

    def _parse_skills(self, content: str) -> list[Skill]:
        parsed = extract_json(content)

        entries: list[Any]
        if isinstance(parsed, list):
            entries = parsed
        elif isinstance(parsed, dict):
            raw = parsed.get("skills", parsed.get("items", []))
            entries = raw if isinstance(raw, list) else []
        else:
            # No JSON at all; fall back to any quoted names in the text.
            entries = _QUOTED.findall(content)

        skills: list[Skill] = []
        seen: set[str] = set()
        for entry in entries:
            skill = self._to_skill(entry)
            if skill is None or skill.name.lower() in seen:
                continue
            seen.add(skill.name.lower())
            skills.append(skill)
        return skills

    async def extract_skills(self, resume_text: str) -> list[Skill]:
        """
        Extract skills from resume text.

        Args:
            resume_text: Plain resume text.

        Returns:
            Extracted skills; empty if the text is empty or inference fails.
        """
        text = (resume_text or "").strip()
        if not text:
            return []

        prompt = self.EXTRACTION_PROMPT.format(resume_text=text[: self.MAX_RESUME_CHARS])

        try:
            content = await self._llm_client.generate(
                prompt,
                reasoning="low",
                model_size="large",
                max_tokens=1000,
                temperature=0.3,
            )
        except InferenceError as e:
            logger.error(f"Skill extraction failed: {e}")
            return []

        skills = self._parse_skills(content)
        logger.info(f"Extracted {len(skills)} skills from resume")
        return skills

    async def extract_skills_from_file(self, file_path: str | Path) -> list[Skill]:
        """
        Extract skills from a resume file (.txt, .md or .docx).

        Args:
            file_path: Path to the resume.

        Returns:
            Extracted skills.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file is empty.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"Resume file not found: {path}")

        if path.suffix.lower() == ".docx":
            raw_text = _read_docx(path).strip()
        else:
            raw_text = path.read_text(encoding="utf-8").strip()

        if not raw_text:
            raise ValueError(f"Resume file is empty: {path}")

        logger.info(f"Extracting skills from file: {path}")
        return await self.extract_skills(raw_text)

    @staticmethod
    def to_payload(skills: list[Skill]) -> list[dict[str, Any]]:
        """Serialize skills for the candidates.skills JSON column."""
        return [skill.model_dump(mode="json") for skill in skills]
