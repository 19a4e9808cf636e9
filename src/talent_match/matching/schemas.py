"""
Pydantic schemas for candidate-to-job matching.

Mirrors the subset of the data platform's candidate and job rows that the
matching pipeline consumes.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator


def _now_utc() -> datetime:
    """Get current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class SkillCategory(str, Enum):
    """Categories of extracted skills."""

    PROGRAMMING = "programming"
    ML_FRAMEWORK = "ml_framework"
    CLOUD = "cloud"
    DATABASE = "database"
    SOFT_SKILL = "soft_skill"
    UNKNOWN = "unknown"


class Proficiency(str, Enum):
    """Proficiency levels for a skill."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


class Skill(BaseModel):
    """A candidate skill as stored in the candidates.skills JSON column."""

    name: str = Field(..., min_length=1, description="Skill name")
    category: SkillCategory = Field(default=SkillCategory.UNKNOWN, description="Skill category")
    proficiency: Proficiency = Field(default=Proficiency.INTERMEDIATE, description="Proficiency level")
    confidence: float = Field(default=0.5, ge=0.0, le=1.0, description="Extraction confidence (0-1)")


class CandidateRecord(BaseModel):
    """A candidate in the pool, joined with their profile."""

    candidate_id: UUID = Field(default_factory=uuid4, description="Unique candidate identifier")
    full_name: str = Field(default="N/A", description="Candidate's full name")
    email: str = Field(default="N/A", description="Candidate's email address")
    skills: list[Skill] = Field(default_factory=list, description="Candidate skills")
    experience_years: int | None = Field(default=None, ge=0, description="Years of experience")
    location: str = Field(default="N/A", description="Candidate location")
    ai_score: float = Field(default=0.0, description="Stored AI score")
    resume_url: str | None = Field(default=None, description="Resume location")
    github_url: str | None = Field(default=None, description="GitHub profile")
    linkedin_url: str | None = Field(default=None, description="LinkedIn profile")
    embedding: list[float] | None = Field(default=None, description="Profile embedding vector")

    @field_validator("skills", mode="before")
    @classmethod
    def _coerce_skills(cls, value: Any) -> Any:
        """Accept bare skill names alongside skill objects."""
        if not isinstance(value, list):
            return value
        return [{"name": item} if isinstance(item, str) else item for item in value]

    @property
    def skill_names(self) -> list[str]:
        """Get the candidate's skill names."""
        return [s.name for s in self.skills]

    def embedding_text(self) -> str:
        """Text used to embed this candidate's profile."""
        parts = [", ".join(self.skill_names)]
        if self.experience_years:
            parts.append(f"{self.experience_years} years of experience")
        if self.location and self.location != "N/A":
            parts.append(self.location)
        return " ".join(p for p in parts if p)


class JobPosting(BaseModel):
    """A job posting with its requirement list."""

    job_id: UUID = Field(default_factory=uuid4, description="Unique job identifier")
    title: str = Field(..., description="Job title")
    description: str = Field(default="", description="Job description")
    requirements: list[str] = Field(default_factory=list, description="Requirement strings")
    location: str | None = Field(default=None, description="Job location")
    salary_min: int | None = Field(default=None, description="Minimum salary")
    salary_max: int | None = Field(default=None, description="Maximum salary")
    is_active: bool = Field(default=True, description="Whether the posting is open")
    embedding: list[float] | None = Field(default=None, description="Posting embedding vector")
    created_at: datetime = Field(default_factory=_now_utc, description="When the job was created")

    @field_validator("requirements", mode="before")
    @classmethod
    def _split_requirements(cls, value: Any) -> Any:
        """Accept a comma-separated requirement string."""
        if isinstance(value, str):
            return [r.strip() for r in value.split(",") if r.strip()]
        return value

    def embedding_text(self) -> str:
        """Text used to embed this posting: title, description and requirements."""
        return f"{self.title} {self.description} {', '.join(self.requirements)}"


class MatchBreakdown(BaseModel):
    """The three signals behind a match score and their blend."""

    similarity: float = Field(default=0.0, ge=-1.0, le=1.0, description="Cosine similarity of embeddings")
    skill_overlap: float = Field(default=0.0, ge=0.0, le=1.0, description="Fraction of requirements covered")
    experience: float = Field(default=0.5, ge=0.0, le=1.0, description="Experience ratio")
    score: float = Field(default=0.0, ge=0.0, le=1.0, description="Blended match score")


class RankedCandidate(BaseModel):
    """A candidate with their match score for one job."""

    candidate: CandidateRecord = Field(..., description="The ranked candidate")
    ai_match_score: float = Field(default=0.0, ge=0.0, le=1.0, description="Blended match score")
    breakdown: MatchBreakdown | None = Field(
        default=None,
        description="Score breakdown; None when embeddings were missing",
    )
