"""Advising session schemas."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.enums import SessionStatusEnum


class _BookingFields(BaseModel):
    date: dt.date
    start_time: dt.time
    location: str = Field(min_length=1, max_length=255)

    @field_validator("location")
    @classmethod
    def strip_location(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Location must not be blank")
        return value


class SessionBookRequest(_BookingFields):
    """Fully resolved booking request handled by the coordinator."""

    student_id: UUID
    advisor_id: UUID


class SelfBookingRequest(_BookingFields):
    """Student booking for themself."""

    advisor_id: UUID
    student_id: UUID | None = None


class OnBehalfBookingRequest(_BookingFields):
    """Advisor or admin booking for a student from the roster."""

    student_id: UUID
    advisor_id: UUID | None = None


class SessionCancelRequest(BaseModel):
    """Cancel session request."""

    reason: str = Field(default="", max_length=512)


class SessionCompleteRequest(BaseModel):
    """Complete session request."""

    notes: str | None = None


class SessionNotesRequest(BaseModel):
    """Overwrite session notes request."""

    notes: str


class AdvisingSessionRead(BaseModel):
    """Advising session response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: UUID
    advisor_id: UUID
    date: dt.date
    start_time: dt.time
    end_time: dt.time
    location: str
    status: SessionStatusEnum
    notes: str | None
    cancellation_reason: str | None
    cancelled_by: UUID | None
    cancelled_at: dt.datetime | None
    completed_at: dt.datetime | None
    created_at: dt.datetime
    updated_at: dt.datetime


class SessionListRead(BaseModel):
    """Caller sessions split for display."""

    upcoming: list[AdvisingSessionRead]
    past: list[AdvisingSessionRead]


class SlotCatalogRead(BaseModel):
    """Bookable start times and known locations."""

    start_times: list[dt.time]
    session_length_minutes: int
    locations: list[str]
