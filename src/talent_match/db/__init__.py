"""
Database module for persistence.

Provides SQLAlchemy models for the data platform's tables and the
repository pattern over them.
"""

from talent_match.db.models import (
    ApplicationModel,
    AuditLogModel,
    Base,
    CandidateModel,
    InterviewChallengeModel,
    InterviewModel,
    JobModel,
    ProfileModel,
)
from talent_match.db.repository import (
    ApplicationRepository,
    AuditLogRepository,
    CandidateRepository,
    InterviewRepository,
    JobRepository,
)
from talent_match.db.session import get_engine, get_session_factory

__all__ = [
    "ApplicationModel",
    "AuditLogModel",
    "Base",
    "CandidateModel",
    "InterviewChallengeModel",
    "InterviewModel",
    "JobModel",
    "ProfileModel",
    "ApplicationRepository",
    "AuditLogRepository",
    "CandidateRepository",
    "InterviewRepository",
    "JobRepository",
    "get_engine",
    "get_session_factory",
]
