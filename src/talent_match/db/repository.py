"""
Repository pattern for database operations.

Provides a clean abstraction over SQLAlchemy for the reads and writes this
service performs. Repositories flush but never commit; the caller owns the
transaction.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from talent_match.db.models import (
    ApplicationModel,
    AuditLogModel,
    Base,
    CandidateModel,
    InterviewChallengeModel,
    InterviewModel,
    JobModel,
)
from talent_match.interview.schemas import (
    ApplicationStatus,
    InterviewChallenge,
    InterviewStatus,
    SessionResult,
)
from talent_match.matching.schemas import CandidateRecord, JobPosting

T = TypeVar("T", bound=Base)


def _vector_to_list(value: Any) -> list[float] | None:
    """Convert a pgvector value (numpy array or list) to a list of floats."""
    if value is None:
        return None
    values = [float(v) for v in value]
    return values or None


class BaseRepository(ABC, Generic[T]):
    """Abstract base repository with common CRUD operations."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    @property
    @abstractmethod
    def _model_class(self) -> type[T]:
        """Get the model class for this repository."""
        ...

    async def get_by_id(self, entity_id: UUID) -> T | None:
        """
        Get an entity by its ID.

        Args:
            entity_id: The entity's UUID.

        Returns:
            The entity if found, None otherwise.
        """
        return await self._session.get(self._model_class, entity_id)

    async def create(self, entity: T) -> T:
        """
        Create a new entity.

        Args:
            entity: The entity to create.

        Returns:
            The created entity.
        """
        self._session.add(entity)
        await self._session.flush()
        await self._session.refresh(entity)
        return entity

    async def update(self, entity: T) -> T:
        """
        Flush pending changes to an entity.

        Args:
            entity: The entity to update.

        Returns:
            The updated entity.
        """
        await self._session.flush()
        await self._session.refresh(entity)
        return entity


class CandidateRepository(BaseRepository[CandidateModel]):
    """Repository for candidate operations."""

    @property
    def _model_class(self) -> type[CandidateModel]:
        """Get the model class."""
        return CandidateModel

    @staticmethod
    def to_record(model: CandidateModel) -> CandidateRecord:
        """
        Convert a CandidateModel (with its profile) to a CandidateRecord.

        Skill entries without a usable name are dropped.
        """
        skills = [
            s
            for s in (model.skills or [])
            if (isinstance(s, str) and s.strip())
            or (isinstance(s, dict) and isinstance(s.get("name"), str) and s["name"].strip())
        ]
        profile = model.profile
        return CandidateRecord(
            candidate_id=model.id,
            full_name=(profile.full_name if profile and profile.full_name else "N/A"),
            email=(profile.email if profile and profile.email else "N/A"),
            skills=skills,
            experience_years=model.experience_years if (model.experience_years or 0) >= 0 else None,
            location=model.location or "N/A",
            ai_score=float(model.ai_score or 0.0),
            resume_url=model.resume_url,
            github_url=model.github_url,
            linkedin_url=model.linkedin_url,
            embedding=_vector_to_list(model.embedding),
        )

    async def get_record(self, candidate_id: UUID) -> CandidateRecord | None:
        """
        Get a candidate as a domain record.

        Args:
            candidate_id: Candidate's UUID.

        Returns:
            The record if found, None otherwise.
        """
        model = await self.get_by_id(candidate_id)
        return self.to_record(model) if model else None

    async def list_pool(self, limit: int = 500, offset: int = 0) -> list[CandidateRecord]:
        """
        List the candidate pool, newest first.

        Args:
            limit: Maximum number to return.
            offset: Number to skip.

        Returns:
            Candidate records joined with their profiles.
        """
        stmt = (
            select(CandidateModel)
            .order_by(CandidateModel.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        return [self.to_record(m) for m in result.scalars().unique().all()]

    async def update_embedding(self, candidate_id: UUID, embedding: list[float]) -> None:
        """Store a candidate's profile embedding."""
        model = await self.get_by_id(candidate_id)
        if model is None:
            raise ValueError(f"Candidate not found: {candidate_id}")
        model.embedding = embedding
        await self._session.flush()

    async def update_skills(self, candidate_id: UUID, skills: list[dict[str, Any]]) -> None:
        """Store a candidate's extracted skills."""
        model = await self.get_by_id(candidate_id)
        if model is None:
            raise ValueError(f"Candidate not found: {candidate_id}")
        model.skills = skills
        await self._session.flush()


class JobRepository(BaseRepository[JobModel]):
    """Repository for job posting operations."""

    @property
    def _model_class(self) -> type[JobModel]:
        """Get the model class."""
        return JobModel

    @staticmethod
    def to_posting(model: JobModel) -> JobPosting:
        """Convert a JobModel to a JobPosting."""
        requirements = model.requirements
        if isinstance(requirements, list):
            requirements = [str(r) for r in requirements if r is not None]
        extra: dict[str, Any] = {}
        if model.created_at is not None:
            extra["created_at"] = model.created_at
        return JobPosting(
            job_id=model.id,
            title=model.title,
            description=model.description or "",
            requirements=requirements or [],
            location=model.location,
            salary_min=model.salary_min,
            salary_max=model.salary_max,
            is_active=bool(model.is_active),
            embedding=_vector_to_list(model.embedding),
            **extra,
        )

    async def get_posting(self, job_id: UUID) -> JobPosting | None:
        """
        Get a job as a domain posting.

        Args:
            job_id: Job's UUID.

        Returns:
            The posting if found, None otherwise.
        """
        model = await self.get_by_id(job_id)
        return self.to_posting(model) if model else None

    async def list_active(self, recruiter_id: UUID | None = None) -> list[JobPosting]:
        """
        List active job postings, newest first.

        Args:
            recruiter_id: Restrict to one recruiter's postings.

        Returns:
            Active postings.
        """
        stmt = select(JobModel).where(JobModel.is_active.is_(True))
        if recruiter_id is not None:
            stmt = stmt.where(JobModel.recruiter_id == recruiter_id)
        stmt = stmt.order_by(JobModel.created_at.desc())
        result = await self._session.execute(stmt)
        return [self.to_posting(m) for m in result.scalars().all()]

    async def update_embedding(self, job_id: UUID, embedding: list[float]) -> None:
        """Store a job posting's embedding."""
        model = await self.get_by_id(job_id)
        if model is None:
            raise ValueError(f"Job not found: {job_id}")
        model.embedding = embedding
        await self._session.flush()


class ApplicationRepository(BaseRepository[ApplicationModel]):
    """Repository for application operations."""

    @property
    def _model_class(self) -> type[ApplicationModel]:
        """Get the model class."""
        return ApplicationModel

    async def get_for(self, candidate_id: UUID, job_id: UUID) -> ApplicationModel | None:
        """Get the application of a candidate to a job."""
        stmt = select(ApplicationModel).where(
            ApplicationModel.candidate_id == candidate_id,
            ApplicationModel.job_id == job_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def set_status(self, application_id: UUID, status: ApplicationStatus) -> ApplicationModel:
        """
        Move an application to a new status.

        Raises:
            ValueError: If the application does not exist.
        """
        application = await self.get_by_id(application_id)
        if application is None:
            raise ValueError(f"Application not found: {application_id}")
        application.status = status
        return await self.update(application)

    async def set_match_score(self, application_id: UUID, score: float) -> ApplicationModel:
        """
        Store the AI match score of an application.

        Raises:
            ValueError: If the application does not exist.
        """
        application = await self.get_by_id(application_id)
        if application is None:
            raise ValueError(f"Application not found: {application_id}")
        application.ai_match_score = round(min(max(score, 0.0), 1.0), 2)
        return await self.update(application)

    async def list_shortlisted(self, recruiter_id: UUID | None = None) -> list[ApplicationModel]:
        """
        List shortlisted applications, optionally for one recruiter's jobs.

        Args:
            recruiter_id: Recruiter whose jobs to include.

        Returns:
            Applications with their candidate and job loaded.
        """
        stmt = (
            select(ApplicationModel)
            .join(JobModel, ApplicationModel.job_id == JobModel.id)
            .where(ApplicationModel.status == ApplicationStatus.SHORTLISTED)
            .options(selectinload(ApplicationModel.candidate), selectinload(ApplicationModel.job))
        )
        if recruiter_id is not None:
            stmt = stmt.where(JobModel.recruiter_id == recruiter_id)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())


class InterviewRepository(BaseRepository[InterviewModel]):
    """Repository for interview operations."""

    @property
    def _model_class(self) -> type[InterviewModel]:
        """Get the model class."""
        return InterviewModel

    async def schedule(
        self,
        application_id: UUID,
        interviewer_id: UUID | None,
        scheduled_at: datetime,
        session_data: dict[str, Any],
    ) -> InterviewModel:
        """
        Create a scheduled interview.

        Args:
            application_id: Application being interviewed.
            interviewer_id: Interviewer's profile id.
            scheduled_at: Interview date and time.
            session_data: Initial session data document.

        Returns:
            The created interview.
        """
        interview = InterviewModel(
            application_id=application_id,
            interviewer_id=interviewer_id,
            scheduled_at=scheduled_at,
            status=InterviewStatus.SCHEDULED,
            session_data=session_data,
        )
        return await self.create(interview)

    async def mark_in_progress(self, interview_id: UUID) -> InterviewModel | None:
        """Mark an interview as in progress, if it exists."""
        interview = await self.get_by_id(interview_id)
        if interview is None:
            return None
        interview.status = InterviewStatus.IN_PROGRESS
        return await self.update(interview)

    async def save_session_result(
        self,
        interview_id: UUID,
        result: SessionResult,
        session_data: dict[str, Any],
    ) -> InterviewModel:
        """
        Store a finished session on its interview row.

        Existing session data (such as scheduling notes) is kept and merged
        with the session record.

        Raises:
            ValueError: If the interview does not exist.
        """
        interview = await self.get_by_id(interview_id)
        if interview is None:
            raise ValueError(f"Interview not found: {interview_id}")

        interview.status = InterviewStatus.COMPLETED
        interview.session_data = {**(interview.session_data or {}), **session_data}
        interview.integrity_score = round(result.integrity_score, 2)
        if result.analysis is not None:
            interview.feedback = "\n".join(result.analysis.recommendations) or None
        return await self.update(interview)

    async def save_challenge(
        self,
        interview_id: UUID,
        challenge: InterviewChallenge,
        result: SessionResult,
    ) -> InterviewChallengeModel:
        """Store the challenge run during an interview with the candidate's work."""
        row = InterviewChallengeModel(
            interview_id=interview_id,
            challenge_type=challenge.type.value,
            problem_statement=challenge.problem_statement,
            candidate_response=result.code or None,
            time_taken=result.time_taken_seconds,
            integrity_flags=[flag.model_dump(mode="json") for flag in result.flags],
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def list_upcoming(self, interviewer_id: UUID | None = None, limit: int = 20) -> list[InterviewModel]:
        """List scheduled interviews, soonest first."""
        stmt = select(InterviewModel).where(InterviewModel.status == InterviewStatus.SCHEDULED)
        if interviewer_id is not None:
            stmt = stmt.where(InterviewModel.interviewer_id == interviewer_id)
        stmt = stmt.order_by(InterviewModel.scheduled_at.asc()).limit(limit)
        result = await self._session.execute(stmt)
        return list(result.scalars().all())


class AuditLogRepository(BaseRepository[AuditLogModel]):
    """Repository for audit log entries."""

    @property
    def _model_class(self) -> type[AuditLogModel]:
        """Get the model class."""
        return AuditLogModel

    async def record(
        self,
        action: str,
        resource_type: str | None = None,
        resource_id: UUID | None = None,
        user_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AuditLogModel:
        """
        Append an audit log entry.

        Args:
            action: Action name, e.g. "interview_scheduled".
            resource_type: Kind of resource acted on.
            resource_id: Resource's UUID.
            user_id: Acting user's profile id.
            metadata: Additional details.

        Returns:
            The created entry.
        """
        entry = AuditLogModel(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            metadata_=metadata or {},
        )
        self._session.add(entry)
        await self._session.flush()
        return entry
