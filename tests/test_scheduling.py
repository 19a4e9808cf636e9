from datetime import date, datetime, time, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from talent_match.interview.schemas import ApplicationStatus
from talent_match.services.scheduling import MISSING_FIELDS_MESSAGE, InterviewScheduler, combine_date_time


class FakeInterviewRepository:
    def __init__(self) -> None:
        self.scheduled: list[dict] = []

    async def schedule(self, application_id, interviewer_id, scheduled_at, session_data):
        self.scheduled.append(
            {
                "application_id": application_id,
                "interviewer_id": interviewer_id,
                "scheduled_at": scheduled_at,
                "session_data": session_data,
            }
        )
        return SimpleNamespace(id=uuid4(), scheduled_at=scheduled_at, session_data=session_data)


class FakeApplicationRepository:
    def __init__(self) -> None:
        self.statuses: list[tuple] = []

    async def set_status(self, application_id, status):
        self.statuses.append((application_id, status))


class FakeAuditRepository:
    def __init__(self) -> None:
        self.entries: list[dict] = []

    async def record(self, action, resource_type, resource_id=None, user_id=None, metadata=None):
        self.entries.append({"action": action, "resource_id": resource_id, "user_id": user_id, "metadata": metadata})


def test_combine_date_time_keeps_explicit_offset() -> None:
    combined = combine_date_time("2026-11-02", "14:30+02:00")

    assert combined == datetime(2026, 11, 2, 12, 30, tzinfo=timezone.utc)


def test_combine_date_time_accepts_date_objects() -> None:
    combined = combine_date_time(date(2026, 11, 2), time(9, 0, tzinfo=timezone.utc))

    assert combined.tzinfo is not None
    assert combined.hour == 9


def test_combine_date_time_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        combine_date_time("next tuesday", "noon")


@pytest.mark.asyncio
async def test_schedule_creates_interview_and_moves_application() -> None:
    interviews = FakeInterviewRepository()
    applications = FakeApplicationRepository()
    audit = FakeAuditRepository()
    scheduler = InterviewScheduler(interviews, applications, audit)
    application_id, interviewer_id = uuid4(), uuid4()

    interview = await scheduler.schedule(
        application_id,
        interviewer_id,
        "2026-11-02",
        "10:00+00:00",
        interview_type="system_design",
        notes="Focus on feature stores",
    )

    stored = interviews.scheduled[0]
    assert stored["scheduled_at"] == datetime(2026, 11, 2, 10, 0, tzinfo=timezone.utc)
    assert stored["session_data"]["type"] == "system_design"
    assert stored["session_data"]["notes"] == "Focus on feature stores"
    assert "created_at" in stored["session_data"]
    assert applications.statuses == [(application_id, ApplicationStatus.INTERVIEW)]
    assert audit.entries[0]["action"] == "interview_scheduled"
    assert audit.entries[0]["resource_id"] == interview.id
    assert audit.entries[0]["user_id"] == interviewer_id


@pytest.mark.asyncio
async def test_schedule_defaults_type_and_notes() -> None:
    interviews = FakeInterviewRepository()
    scheduler = InterviewScheduler(interviews, FakeApplicationRepository())

    await scheduler.schedule(uuid4(), uuid4(), "2026-11-02", "10:00+00:00", interview_type="", notes="")

    assert interviews.scheduled[0]["session_data"]["type"] == "technical"
    assert interviews.scheduled[0]["session_data"]["notes"] == ""


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["application_id", "interviewer_id", "scheduled_date", "scheduled_time"])
async def test_schedule_requires_all_fields(missing: str) -> None:
    interviews = FakeInterviewRepository()
    applications = FakeApplicationRepository()
    scheduler = InterviewScheduler(interviews, applications)
    fields = {
        "application_id": uuid4(),
        "interviewer_id": uuid4(),
        "scheduled_date": "2026-11-02",
        "scheduled_time": "10:00",
    }
    fields[missing] = None

    with pytest.raises(ValueError, match=MISSING_FIELDS_MESSAGE):
        await scheduler.schedule(**fields)

    assert interviews.scheduled == []
    assert applications.statuses == []
