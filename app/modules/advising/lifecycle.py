"""Advising session state machine: scheduled -> completed | cancelled."""

from __future__ import annotations

import datetime as dt
import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import TERMINAL_SESSION_STATUSES, SessionStatusEnum
from app.core.metrics import record_session_transition
from app.modules.advising.models import AdvisingSession
from app.modules.advising.queries import SessionViewCache, get_session_view_cache
from app.modules.advising.repository import AdvisingSessionRepository
from app.modules.advising.slots import end_time_for, ensure_bookable_start, ensure_working_day
from app.modules.audit.repository import AuditRepository
from app.modules.identity.schemas import Caller
from app.shared.exceptions import (
    InvalidTransitionException,
    MissingReasonException,
    NotFoundException,
    SlotTakenException,
    UnauthorizedException,
)
from app.shared.utils import utc_now

logger = logging.getLogger(__name__)


class SessionLifecycleService:
    """Create sessions and apply role-gated transitions."""

    def __init__(
        self,
        repository: AdvisingSessionRepository,
        audit_repository: AuditRepository,
        view_cache: SessionViewCache,
    ) -> None:
        self.repository = repository
        self.audit_repository = audit_repository
        self.view_cache = view_cache

    async def _get_session(self, session_id: UUID) -> AdvisingSession:
        advising_session = await self.repository.get_session_by_id(session_id)
        if advising_session is None:
            raise NotFoundException("Session not found")
        return advising_session

    async def _publish(self, advising_session: AdvisingSession, event_type: str, **extra) -> None:
        payload = {
            "session_id": str(advising_session.id),
            "student_id": str(advising_session.student_id),
            "advisor_id": str(advising_session.advisor_id),
            "date": advising_session.date.isoformat(),
            "start_time": advising_session.start_time.strftime("%H:%M"),
            "status": str(advising_session.status),
        }
        payload.update(extra)
        await self.audit_repository.create_outbox_event(
            aggregate_type="advising_session",
            aggregate_id=str(advising_session.id),
            event_type=event_type,
            payload=payload,
        )
        self.view_cache.mark_stale(advising_session.student_id, advising_session.advisor_id)

    async def create(
        self,
        student_id: UUID,
        advisor_id: UUID,
        date: dt.date,
        start_time: dt.time,
        location: str,
    ) -> AdvisingSession:
        """Materialize a scheduled session in a bookable slot."""
        ensure_bookable_start(start_time)
        ensure_working_day(date)
        try:
            advising_session = await self.repository.create_session(
                student_id=student_id,
                advisor_id=advisor_id,
                date=date,
                start_time=start_time,
                end_time=end_time_for(start_time),
                location=location,
            )
        except IntegrityError as exc:
            logger.info(
                "Concurrent booking lost slot advisor=%s date=%s start=%s: %s",
                advisor_id,
                date,
                start_time,
                exc.orig,
            )
            raise SlotTakenException("This time slot is already booked") from exc

        await self._publish(advising_session, "advising.session.created", location=location)
        record_session_transition("created")
        logger.info(
            "Session %s scheduled for student %s with advisor %s on %s %s",
            advising_session.id,
            student_id,
            advisor_id,
            date,
            start_time,
        )
        return advising_session

    async def complete(self, session_id: UUID, notes: str | None, actor: Caller) -> AdvisingSession:
        """Mark a scheduled session completed (advisor or admin)."""
        advising_session = await self._get_session(session_id)
        if not actor.is_staff:
            raise UnauthorizedException("Only advisors or admins can complete sessions")
        if advising_session.status != SessionStatusEnum.SCHEDULED:
            raise InvalidTransitionException(
                f"Cannot complete a session that is {advising_session.status}",
            )

        advising_session.status = SessionStatusEnum.COMPLETED
        advising_session.completed_at = utc_now()
        if notes is not None:
            advising_session.notes = notes
        await self.repository.save(advising_session)

        await self._publish(advising_session, "advising.session.completed", completed_by=str(actor.id))
        record_session_transition("completed")
        logger.info("Session %s completed by %s", advising_session.id, actor.id)
        return advising_session

    async def cancel(self, session_id: UUID, reason: str | None, actor: Caller) -> AdvisingSession:
        """Cancel a scheduled session (participant or admin) with a reason."""
        advising_session = await self._get_session(session_id)
        if not actor.is_admin and actor.id not in (advising_session.student_id, advising_session.advisor_id):
            raise UnauthorizedException("You cannot cancel this session")

        reason = (reason or "").strip()
        if not reason:
            raise MissingReasonException("Cancellation reason is required")
        if advising_session.status in TERMINAL_SESSION_STATUSES:
            raise InvalidTransitionException(
                f"Cannot cancel a session that is {advising_session.status}",
            )

        advising_session.status = SessionStatusEnum.CANCELLED
        advising_session.cancellation_reason = reason
        advising_session.cancelled_by = actor.id
        advising_session.cancelled_at = utc_now()
        await self.repository.save(advising_session)

        await self._publish(
            advising_session,
            "advising.session.cancelled",
            cancelled_by=str(actor.id),
            reason=reason,
        )
        record_session_transition("cancelled")
        logger.info("Session %s cancelled by %s", advising_session.id, actor.id)
        return advising_session

    async def annotate(self, session_id: UUID, notes: str, actor: Caller) -> AdvisingSession:
        """Overwrite notes on a scheduled or completed session (advisor or admin)."""
        advising_session = await self._get_session(session_id)
        if not actor.is_staff:
            raise UnauthorizedException("Only advisors or admins can edit session notes")
        if advising_session.status == SessionStatusEnum.CANCELLED:
            raise InvalidTransitionException("Cannot add notes to a cancelled session")

        advising_session.notes = notes
        await self.repository.save(advising_session)

        await self._publish(advising_session, "advising.session.annotated", annotated_by=str(actor.id))
        record_session_transition("annotated")
        return advising_session


async def get_session_lifecycle_service(
    session: AsyncSession = Depends(get_db_session),
    view_cache: SessionViewCache = Depends(get_session_view_cache),
) -> SessionLifecycleService:
    """Dependency provider for session lifecycle service."""
    return SessionLifecycleService(
        repository=AdvisingSessionRepository(session),
        audit_repository=AuditRepository(session),
        view_cache=view_cache,
    )
