from __future__ import annotations

import datetime as dt
from uuid import uuid4

import pytest

import app.modules.advising.lifecycle as lifecycle_module
from app.core.enums import RoleEnum, SessionStatusEnum
from app.modules.identity.schemas import Caller
from app.shared.exceptions import (
    InvalidSlotException,
    InvalidTransitionException,
    MissingReasonException,
    NotFoundException,
    SlotTakenException,
    UnauthorizedException,
)
from tests.fakes import FIXED_NOW, Engine, FakeAdvisingSession, build_engine, make_caller

SESSION_DATE = dt.date(2025, 4, 1)


def make_session(
    student: Caller,
    advisor: Caller,
    status: SessionStatusEnum = SessionStatusEnum.SCHEDULED,
) -> FakeAdvisingSession:
    return FakeAdvisingSession(
        id=uuid4(),
        student_id=student.id,
        advisor_id=advisor.id,
        date=SESSION_DATE,
        start_time=dt.time(9, 0),
        end_time=dt.time(10, 0),
        location="Career Center, Room 203",
        status=status,
    )


@pytest.fixture(autouse=True)
def _freeze_clock(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(lifecycle_module, "utc_now", lambda: FIXED_NOW)


@pytest.mark.asyncio
async def test_create_sets_scheduled_and_derives_end_time(engine: Engine, student: Caller, advisor: Caller) -> None:
    created = await engine.lifecycle.create(
        student_id=student.id,
        advisor_id=advisor.id,
        date=SESSION_DATE,
        start_time=dt.time(9, 0),
        location="Online (Zoom)",
    )

    assert created.status == SessionStatusEnum.SCHEDULED
    assert created.end_time == dt.time(10, 0)
    assert engine.audit.events[-1]["event_type"] == "advising.session.created"


@pytest.mark.asyncio
async def test_create_rejects_lunch_slot(engine: Engine, student: Caller, advisor: Caller) -> None:
    with pytest.raises(InvalidSlotException):
        await engine.lifecycle.create(
            student_id=student.id,
            advisor_id=advisor.id,
            date=SESSION_DATE,
            start_time=dt.time(12, 0),
            location="Online (Zoom)",
        )
    assert engine.sessions.sessions == []


@pytest.mark.asyncio
async def test_create_maps_unique_violation_to_slot_taken(student: Caller, advisor: Caller) -> None:
    engine = build_engine([make_session(make_caller(RoleEnum.STUDENT), advisor)])

    with pytest.raises(SlotTakenException):
        await engine.lifecycle.create(
            student_id=student.id,
            advisor_id=advisor.id,
            date=SESSION_DATE,
            start_time=dt.time(9, 0),
            location="Online (Zoom)",
        )
    assert len(engine.sessions.sessions) == 1


@pytest.mark.asyncio
async def test_advisor_completes_scheduled_session_with_notes(student: Caller, advisor: Caller) -> None:
    existing = make_session(student, advisor)
    engine = build_engine([existing])

    completed = await engine.lifecycle.complete(existing.id, "Reviewed resume", advisor)

    assert completed.status == SessionStatusEnum.COMPLETED
    assert completed.notes == "Reviewed resume"
    assert completed.completed_at == FIXED_NOW
    assert engine.audit.events[-1]["event_type"] == "advising.session.completed"


@pytest.mark.asyncio
async def test_complete_without_notes_keeps_existing_notes(student: Caller, advisor: Caller) -> None:
    existing = make_session(student, advisor)
    existing.notes = "Bring transcript"
    engine = build_engine([existing])

    completed = await engine.lifecycle.complete(existing.id, None, advisor)

    assert completed.notes == "Bring transcript"


@pytest.mark.asyncio
async def test_student_cannot_complete(student: Caller, advisor: Caller) -> None:
    existing = make_session(student, advisor)
    engine = build_engine([existing])

    with pytest.raises(UnauthorizedException):
        await engine.lifecycle.complete(existing.id, "", student)
    assert existing.status == SessionStatusEnum.SCHEDULED


@pytest.mark.asyncio
async def test_participants_and_admin_can_cancel(student: Caller, advisor: Caller, admin: Caller) -> None:
    for actor in (student, advisor, admin):
        existing = make_session(student, advisor)
        engine = build_engine([existing])

        cancelled = await engine.lifecycle.cancel(existing.id, "  schedule conflict  ", actor)

        assert cancelled.status == SessionStatusEnum.CANCELLED
        assert cancelled.cancellation_reason == "schedule conflict"
        assert cancelled.cancelled_by == actor.id
        assert cancelled.cancelled_at == FIXED_NOW


@pytest.mark.asyncio
async def test_unrelated_users_cannot_cancel(student: Caller, advisor: Caller) -> None:
    existing = make_session(student, advisor)
    engine = build_engine([existing])

    for outsider in (make_caller(RoleEnum.STUDENT), make_caller(RoleEnum.ADVISOR)):
        with pytest.raises(UnauthorizedException):
            await engine.lifecycle.cancel(existing.id, "conflict", outsider)
    assert existing.status == SessionStatusEnum.SCHEDULED


@pytest.mark.asyncio
@pytest.mark.parametrize("reason", ["", "   ", None])
async def test_cancel_requires_reason(reason: str | None, student: Caller, advisor: Caller) -> None:
    existing = make_session(student, advisor)
    engine = build_engine([existing])

    with pytest.raises(MissingReasonException):
        await engine.lifecycle.cancel(existing.id, reason, student)
    assert existing.status == SessionStatusEnum.SCHEDULED


@pytest.mark.asyncio
@pytest.mark.parametrize("terminal", [SessionStatusEnum.COMPLETED, SessionStatusEnum.CANCELLED])
async def test_terminal_sessions_reject_further_transitions(
    terminal: SessionStatusEnum,
    student: Caller,
    advisor: Caller,
    admin: Caller,
) -> None:
    existing = make_session(student, advisor, status=terminal)
    existing.cancellation_reason = "original"
    engine = build_engine([existing])

    with pytest.raises(InvalidTransitionException):
        await engine.lifecycle.complete(existing.id, "late notes", admin)
    with pytest.raises(InvalidTransitionException):
        await engine.lifecycle.cancel(existing.id, "again", admin)

    assert existing.status == terminal
    assert existing.cancellation_reason == "original"
    assert existing.notes is None
    assert engine.audit.events == []


@pytest.mark.asyncio
async def test_annotate_allowed_on_scheduled_and_completed(student: Caller, advisor: Caller) -> None:
    scheduled = make_session(student, advisor)
    completed = make_session(student, advisor, status=SessionStatusEnum.COMPLETED)
    engine = build_engine([scheduled, completed])

    await engine.lifecycle.annotate(scheduled.id, "Agenda: internships", advisor)
    await engine.lifecycle.annotate(completed.id, "Follow up in May", advisor)

    assert scheduled.notes == "Agenda: internships"
    assert completed.notes == "Follow up in May"
    assert completed.status == SessionStatusEnum.COMPLETED


@pytest.mark.asyncio
async def test_annotate_rejected_on_cancelled_and_for_students(student: Caller, advisor: Caller) -> None:
    cancelled = make_session(student, advisor, status=SessionStatusEnum.CANCELLED)
    scheduled = make_session(student, advisor)
    engine = build_engine([cancelled, scheduled])

    with pytest.raises(InvalidTransitionException):
        await engine.lifecycle.annotate(cancelled.id, "notes", advisor)
    with pytest.raises(UnauthorizedException):
        await engine.lifecycle.annotate(scheduled.id, "notes", student)


@pytest.mark.asyncio
async def test_unknown_session_is_not_found(engine: Engine, admin: Caller) -> None:
    with pytest.raises(NotFoundException):
        await engine.lifecycle.cancel(uuid4(), "conflict", admin)
    with pytest.raises(NotFoundException):
        await engine.lifecycle.complete(uuid4(), None, admin)
    with pytest.raises(NotFoundException):
        await engine.lifecycle.annotate(uuid4(), "notes", admin)


@pytest.mark.asyncio
async def test_create_rejects_weekend_date(engine: Engine, student: Caller, advisor: Caller) -> None:
    with pytest.raises(InvalidSlotException):
        await engine.lifecycle.create(
            student_id=student.id,
            advisor_id=advisor.id,
            date=dt.date(2025, 4, 6),
            start_time=dt.time(9, 0),
            location="Online (Zoom)",
        )
    assert engine.sessions.sessions == []
