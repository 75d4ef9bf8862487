"""Availability schemas."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.core.enums import PolicyScopeEnum


class AvailabilityUpdate(BaseModel):
    """Toggle booking availability request."""

    enabled: bool


class AvailabilityPolicyRead(BaseModel):
    """Availability policy response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    scope: PolicyScopeEnum
    advisor_id: UUID | None
    enabled: bool
    updated_by: UUID | None
    version: int
    created_at: datetime
    updated_at: datetime


class AvailabilityStatusRead(BaseModel):
    """Resolved availability for the booking screen."""

    advisor_id: UUID | None
    global_enabled: bool
    advisor_override: bool | None
    advisor_effective: bool
    bookable: bool
