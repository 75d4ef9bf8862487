"""Availability API router."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.modules.availability.schemas import (
    AvailabilityPolicyRead,
    AvailabilityStatusRead,
    AvailabilityUpdate,
)
from app.modules.availability.service import AvailabilityPolicyService, get_availability_service
from app.modules.identity.service import get_current_caller
from app.shared.pagination import Page, build_page, get_pagination_params

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("/status", response_model=AvailabilityStatusRead)
async def get_availability_status(
    advisor_id: UUID | None = Query(default=None),
    service: AvailabilityPolicyService = Depends(get_availability_service),
    current_caller=Depends(get_current_caller),
) -> AvailabilityStatusRead:
    """Resolve whether booking is open, optionally for one advisor."""
    return await service.get_status(advisor_id)


@router.put("/global", response_model=AvailabilityPolicyRead)
async def set_global_availability(
    payload: AvailabilityUpdate,
    service: AvailabilityPolicyService = Depends(get_availability_service),
    current_caller=Depends(get_current_caller),
) -> AvailabilityPolicyRead:
    """Switch booking on or off for all advisors."""
    policy = await service.set_effective(payload.enabled, current_caller)
    return AvailabilityPolicyRead.model_validate(policy)


@router.put("/advisors/{advisor_id}", response_model=AvailabilityPolicyRead)
async def set_advisor_availability(
    advisor_id: UUID,
    payload: AvailabilityUpdate,
    service: AvailabilityPolicyService = Depends(get_availability_service),
    current_caller=Depends(get_current_caller),
) -> AvailabilityPolicyRead:
    """Override booking availability for one advisor."""
    policy = await service.set_effective(payload.enabled, current_caller, advisor_id=advisor_id)
    return AvailabilityPolicyRead.model_validate(policy)


@router.get("/policies", response_model=Page[AvailabilityPolicyRead])
async def list_availability_policies(
    pagination=Depends(get_pagination_params),
    service: AvailabilityPolicyService = Depends(get_availability_service),
    current_caller=Depends(get_current_caller),
) -> Page[AvailabilityPolicyRead]:
    """List stored availability policies."""
    items, total = await service.list_policies(current_caller, pagination.limit, pagination.offset)
    serialized = [AvailabilityPolicyRead.model_validate(item) for item in items]
    return build_page(serialized, total, pagination)
