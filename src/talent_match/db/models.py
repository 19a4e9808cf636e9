"""
SQLAlchemy models for database persistence.

Maps the subset of the data platform's tables this service reads and
writes. The schema itself is owned by the platform; nothing here creates
enum types or tables in production.
"""

from datetime import datetime
from typing import Any
from uuid import uuid4

from pgvector.sqlalchemy import Vector
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, Text, func
from sqlalchemy.dialects.postgresql import ENUM, JSONB, UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from talent_match.interview.schemas import ApplicationStatus, InterviewStatus

USER_ROLES = ("candidate", "recruiter", "talent_admin", "super_admin")


def _pg_enum(enum_cls: type, name: str) -> ENUM:
    """Reference an existing Postgres enum type by its values."""
    return ENUM(
        enum_cls,
        name=name,
        values_callable=lambda members: [m.value for m in members],
        create_type=False,
    )


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class ProfileModel(Base):
    """Database model for user profiles."""

    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    full_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(
        ENUM(*USER_ROLES, name="user_role", create_type=False),
        nullable=False,
        default="candidate",
    )
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )


class CandidateModel(Base):
    """Database model for candidates."""

    __tablename__ = "candidates"

    id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    profile_id: Mapped[UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=True,
    )
    skills: Mapped[list[Any]] = mapped_column(JSONB, default=list, nullable=False)
    experience_years: Mapped[int | None] = mapped_column(Integer, nullable=True)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    resume_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    github_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    linkedin_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_score: Mapped[float | None] = mapped_column(Numeric(3, 2, asdecimal=False), default=0.0)
    embedding: Mapped[Any | None] = mapped_column(Vector(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    profile: Mapped[ProfileModel | None] = relationship(lazy="joined")
    applications: Mapped[list["ApplicationModel"]] = relationship(back_populates="candidate")


class JobModel(Base):
    """Database model for job postings."""

    __tablename__ = "jobs"

    id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    company_id: Mapped[UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    recruiter_id: Mapped[UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id"),
        nullable=True,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    requirements: Mapped[list[Any]] = mapped_column(JSONB, default=list, nullable=False)
    location: Mapped[str | None] = mapped_column(Text, nullable=True)
    salary_min: Mapped[int | None] = mapped_column(Integer, nullable=True)
    salary_max: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    embedding: Mapped[Any | None] = mapped_column(Vector(), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    applications: Mapped[list["ApplicationModel"]] = relationship(back_populates="job")


class ApplicationModel(Base):
    """Database model for job applications."""

    __tablename__ = "applications"

    id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    candidate_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("candidates.id", ondelete="CASCADE"),
        nullable=False,
    )
    job_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[ApplicationStatus] = mapped_column(
        _pg_enum(ApplicationStatus, "application_status"),
        default=ApplicationStatus.APPLIED,
    )
    ai_match_score: Mapped[float | None] = mapped_column(Numeric(3, 2, asdecimal=False), nullable=True)
    recruiter_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    candidate: Mapped[CandidateModel] = relationship(back_populates="applications")
    job: Mapped[JobModel] = relationship(back_populates="applications")
    interviews: Mapped[list["InterviewModel"]] = relationship(back_populates="application")


class InterviewModel(Base):
    """Database model for interviews."""

    __tablename__ = "interviews"

    id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    application_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
    )
    interviewer_id: Mapped[UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id"),
        nullable=True,
    )
    scheduled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[InterviewStatus] = mapped_column(
        _pg_enum(InterviewStatus, "interview_status"),
        default=InterviewStatus.SCHEDULED,
    )
    session_data: Mapped[dict[str, Any]] = mapped_column(JSONB, default=dict, nullable=False)
    integrity_score: Mapped[float | None] = mapped_column(Numeric(3, 2, asdecimal=False), nullable=True)
    technical_score: Mapped[float | None] = mapped_column(Numeric(3, 2, asdecimal=False), nullable=True)
    soft_skills_score: Mapped[float | None] = mapped_column(Numeric(3, 2, asdecimal=False), nullable=True)
    feedback: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    # Relationships
    application: Mapped[ApplicationModel] = relationship(back_populates="interviews")
    challenges: Mapped[list["InterviewChallengeModel"]] = relationship(
        back_populates="interview",
        cascade="all, delete-orphan",
    )


class InterviewChallengeModel(Base):
    """Database model for challenges run during an interview."""

    __tablename__ = "interview_challenges"

    id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    interview_id: Mapped[UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("interviews.id", ondelete="CASCADE"),
        nullable=False,
    )
    challenge_type: Mapped[str] = mapped_column(Text, nullable=False)
    problem_statement: Mapped[str] = mapped_column(Text, nullable=False)
    solution: Mapped[str | None] = mapped_column(Text, nullable=True)
    candidate_response: Mapped[str | None] = mapped_column(Text, nullable=True)
    time_taken: Mapped[int | None] = mapped_column(Integer, nullable=True)
    integrity_flags: Mapped[list[Any]] = mapped_column(JSONB, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    interview: Mapped[InterviewModel] = relationship(back_populates="challenges")


class AuditLogModel(Base):
    """Database model for audit log entries."""

    __tablename__ = "audit_logs"

    id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id: Mapped[UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id"),
        nullable=True,
    )
    action: Mapped[str] = mapped_column(Text, nullable=False)
    resource_type: Mapped[str | None] = mapped_column(Text, nullable=True)
    resource_id: Mapped[UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata",
        JSONB,
        default=dict,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
