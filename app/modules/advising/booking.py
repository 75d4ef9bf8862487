"""Booking entry point shared by student and advisor flows."""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.database import get_db_session
from app.core.enums import RoleEnum
from app.core.metrics import record_booking_outcome
from app.modules.advising.conflicts import ConflictChecker
from app.modules.advising.lifecycle import SessionLifecycleService, get_session_lifecycle_service
from app.modules.advising.models import AdvisingSession
from app.modules.advising.repository import AdvisingSessionRepository
from app.modules.advising.schemas import SessionBookRequest
from app.modules.advising.slots import ensure_bookable_date, ensure_bookable_start
from app.modules.audit.repository import AuditRepository
from app.modules.availability.repository import AvailabilityRepository
from app.modules.availability.service import AvailabilityPolicyService
from app.modules.identity.schemas import Caller
from app.shared.exceptions import (
    AdvisorUnavailableException,
    AppException,
    BookingDisabledException,
    SlotTakenException,
    UnauthorizedException,
)
from app.shared.utils import institution_today

logger = logging.getLogger(__name__)
settings = get_settings()


class BookingCoordinator:
    """Check availability, then the slot, then create the session.

    The order is fixed: each step short-circuits with a more specific error
    than the ones after it.
    """

    def __init__(
        self,
        availability_service: AvailabilityPolicyService,
        conflict_checker: ConflictChecker,
        lifecycle: SessionLifecycleService,
        today_provider: Callable[[], dt.date] | None = None,
    ) -> None:
        self.availability_service = availability_service
        self.conflict_checker = conflict_checker
        self.lifecycle = lifecycle
        self._today = today_provider or (lambda: institution_today(settings.institution_timezone))

    @staticmethod
    def _authorize(payload: SessionBookRequest, actor: Caller) -> None:
        if actor.is_staff:
            return
        if actor.role == RoleEnum.STUDENT and actor.id == payload.student_id:
            return
        raise UnauthorizedException("Students can only book sessions for themselves")

    async def book(self, payload: SessionBookRequest, actor: Caller) -> AdvisingSession:
        """Book a one-hour session for a student with an advisor."""
        try:
            self._authorize(payload, actor)
            ensure_bookable_start(payload.start_time)
            ensure_bookable_date(payload.date, self._today())

            if not await self.availability_service.get_effective():
                raise BookingDisabledException("Booking is currently disabled by the career services team")
            if not await self.availability_service.get_effective(payload.advisor_id):
                raise AdvisorUnavailableException("This advisor is not accepting bookings right now")
            if await self.conflict_checker.has_conflict(payload.advisor_id, payload.date, payload.start_time):
                raise SlotTakenException("This time slot is already booked")

            advising_session = await self.lifecycle.create(
                student_id=payload.student_id,
                advisor_id=payload.advisor_id,
                date=payload.date,
                start_time=payload.start_time,
                location=payload.location,
            )
        except AppException as exc:
            record_booking_outcome(exc.code)
            logger.info(
                "Booking rejected (%s) for student %s advisor %s on %s %s requested by %s",
                exc.code,
                payload.student_id,
                payload.advisor_id,
                payload.date,
                payload.start_time,
                actor.id,
            )
            raise

        record_booking_outcome("created")
        return advising_session


async def get_booking_coordinator(
    session: AsyncSession = Depends(get_db_session),
    lifecycle: SessionLifecycleService = Depends(get_session_lifecycle_service),
) -> BookingCoordinator:
    """Dependency provider for booking coordinator."""
    return BookingCoordinator(
        availability_service=AvailabilityPolicyService(
            repository=AvailabilityRepository(session),
            audit_repository=AuditRepository(session),
        ),
        conflict_checker=ConflictChecker(AdvisingSessionRepository(session)),
        lifecycle=lifecycle,
    )
