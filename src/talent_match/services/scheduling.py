"""
Interview scheduling.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import TYPE_CHECKING
from uuid import UUID

from talent_match.interview.schemas import ApplicationStatus

if TYPE_CHECKING:
    from talent_match.db.models import InterviewModel
    from talent_match.db.repository import ApplicationRepository, AuditLogRepository, InterviewRepository

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Please fill in all required fields."


def combine_date_time(day: date | str, at: time | str) -> datetime:
    """
    Combine a date and a time of day into an aware UTC datetime.

    Naive values are taken to be in local time.

    Raises:
        ValueError: If either part cannot be parsed.
    """
    day_str = day.isoformat() if isinstance(day, date) else str(day).strip()
    time_str = at.isoformat() if isinstance(at, time) else str(at).strip()
    try:
        combined = datetime.fromisoformat(f"{day_str}T{time_str}")
    except ValueError as e:
        raise ValueError(f"Invalid interview date or time: {day_str} {time_str}") from e
    return combined.astimezone(timezone.utc)


class InterviewScheduler:
    """Schedules interviews for shortlisted applications."""

    def __init__(
        self,
        interview_repository: InterviewRepository,
        application_repository: ApplicationRepository,
        audit_repository: AuditLogRepository | None = None,
    ) -> None:
        self._interviews = interview_repository
        self._applications = application_repository
        self._audit = audit_repository

    async def schedule(
        self,
        application_id: UUID | None,
        interviewer_id: UUID | None,
        scheduled_date: date | str | None,
        scheduled_time: time | str | None,
        interview_type: str = "technical",
        notes: str = "",
    ) -> InterviewModel:
        """
        Schedule an interview and move the application to the interview stage.

        Args:
            application_id: Application to interview.
            interviewer_id: Interviewer's profile id.
            scheduled_date: Interview date (YYYY-MM-DD).
            scheduled_time: Interview time (HH:MM).
            interview_type: Kind of interview, e.g. "technical".
            notes: Free-form notes for the interviewer.

        Returns:
            The scheduled interview.

        Raises:
            ValueError: If a required field is missing or malformed, or the
                application does not exist.
        """
        if not application_id or not interviewer_id or not scheduled_date or not scheduled_time:
            raise ValueError(MISSING_FIELDS_MESSAGE)

        scheduled_at = combine_date_time(scheduled_date, scheduled_time)
        session_data = {
            "type": interview_type or "technical",
            "notes": notes or "",
            "created_at": datetime.now(timezone.utc).isoformat(),
        }

        interview = await self._interviews.schedule(
            application_id=application_id,
            interviewer_id=interviewer_id,
            scheduled_at=scheduled_at,
            session_data=session_data,
        )
        await self._applications.set_status(application_id, ApplicationStatus.INTERVIEW)

        if self._audit is not None:
            await self._audit.record(
                action="interview_scheduled",
                resource_type="interview",
                resource_id=interview.id,
                user_id=interviewer_id,
                metadata={"application_id": str(application_id), "type": session_data["type"]},
            )

        logger.info(f"Scheduled {session_data['type']} interview for application {application_id} at {scheduled_at}")
        return interview
