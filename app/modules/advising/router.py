"""Advising sessions API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.core.enums import RoleEnum
from app.modules.advising.booking import BookingCoordinator, get_booking_coordinator
from app.modules.advising.lifecycle import SessionLifecycleService, get_session_lifecycle_service
from app.modules.advising.queries import SessionQueryService, get_session_query_service
from app.modules.advising.schemas import (
    AdvisingSessionRead,
    OnBehalfBookingRequest,
    SelfBookingRequest,
    SessionBookRequest,
    SessionCancelRequest,
    SessionCompleteRequest,
    SessionListRead,
    SessionNotesRequest,
    SlotCatalogRead,
)
from app.modules.advising.slots import BOOKABLE_START_TIMES, KNOWN_LOCATIONS, SESSION_LENGTH_HOURS
from app.modules.identity.service import get_current_caller, require_roles

router = APIRouter(prefix="/advising", tags=["advising"])


@router.get("/slots", response_model=SlotCatalogRead)
async def list_slots() -> SlotCatalogRead:
    """Return bookable start times and known locations."""
    return SlotCatalogRead(
        start_times=list(BOOKABLE_START_TIMES),
        session_length_minutes=SESSION_LENGTH_HOURS * 60,
        locations=list(KNOWN_LOCATIONS),
    )


@router.post("/sessions", response_model=AdvisingSessionRead, status_code=status.HTTP_201_CREATED)
async def book_session(
    payload: SelfBookingRequest,
    coordinator: BookingCoordinator = Depends(get_booking_coordinator),
    current_caller=Depends(get_current_caller),
) -> AdvisingSessionRead:
    """Book a session for the calling student."""
    request = SessionBookRequest(
        student_id=payload.student_id or current_caller.id,
        advisor_id=payload.advisor_id,
        date=payload.date,
        start_time=payload.start_time,
        location=payload.location,
    )
    advising_session = await coordinator.book(request, current_caller)
    return AdvisingSessionRead.model_validate(advising_session)


@router.post("/sessions/on-behalf", response_model=AdvisingSessionRead, status_code=status.HTTP_201_CREATED)
async def book_session_on_behalf(
    payload: OnBehalfBookingRequest,
    coordinator: BookingCoordinator = Depends(get_booking_coordinator),
    current_caller=Depends(require_roles(RoleEnum.ADVISOR, RoleEnum.ADMIN)),
) -> AdvisingSessionRead:
    """Book a session for a student chosen by an advisor or admin."""
    request = SessionBookRequest(
        student_id=payload.student_id,
        advisor_id=payload.advisor_id or current_caller.id,
        date=payload.date,
        start_time=payload.start_time,
        location=payload.location,
    )
    advising_session = await coordinator.book(request, current_caller)
    return AdvisingSessionRead.model_validate(advising_session)


@router.get("/sessions/my", response_model=SessionListRead)
async def list_my_sessions(
    service: SessionQueryService = Depends(get_session_query_service),
    current_caller=Depends(get_current_caller),
) -> SessionListRead:
    """List caller sessions split into upcoming and past."""
    return await service.list_for_user(current_caller)


@router.get("/sessions/{session_id}", response_model=AdvisingSessionRead)
async def get_session(
    session_id: UUID,
    service: SessionQueryService = Depends(get_session_query_service),
    current_caller=Depends(get_current_caller),
) -> AdvisingSessionRead:
    """Return one session."""
    return await service.get_session(session_id, current_caller)


@router.post("/sessions/{session_id}/cancel", response_model=AdvisingSessionRead)
async def cancel_session(
    session_id: UUID,
    payload: SessionCancelRequest,
    service: SessionLifecycleService = Depends(get_session_lifecycle_service),
    current_caller=Depends(get_current_caller),
) -> AdvisingSessionRead:
    """Cancel session with a reason."""
    advising_session = await service.cancel(session_id, payload.reason, current_caller)
    return AdvisingSessionRead.model_validate(advising_session)


@router.post("/sessions/{session_id}/complete", response_model=AdvisingSessionRead)
async def complete_session(
    session_id: UUID,
    payload: SessionCompleteRequest,
    service: SessionLifecycleService = Depends(get_session_lifecycle_service),
    current_caller=Depends(get_current_caller),
) -> AdvisingSessionRead:
    """Mark session completed."""
    advising_session = await service.complete(session_id, payload.notes, current_caller)
    return AdvisingSessionRead.model_validate(advising_session)


@router.post("/sessions/{session_id}/notes", response_model=AdvisingSessionRead)
async def annotate_session(
    session_id: UUID,
    payload: SessionNotesRequest,
    service: SessionLifecycleService = Depends(get_session_lifecycle_service),
    current_caller=Depends(get_current_caller),
) -> AdvisingSessionRead:
    """Overwrite session notes."""
    advising_session = await service.annotate(session_id, payload.notes, current_caller)
    return AdvisingSessionRead.model_validate(advising_session)
