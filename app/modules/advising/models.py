"""Advising session ORM models."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from sqlalchemy import Date, DateTime, Enum as SAEnum, Index, String, Text, Time, text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BaseModelMixin
from app.core.enums import SessionStatusEnum


class AdvisingSession(BaseModelMixin, Base):
    """One-on-one advising appointment between a student and an advisor."""

    __tablename__ = "advising_sessions"
    __table_args__ = (
        # At most one live session per advisor slot; cancelled/completed rows free it.
        Index(
            "uq_advising_sessions_scheduled_slot",
            "advisor_id",
            "date",
            "start_time",
            unique=True,
            postgresql_where=text("status = 'scheduled'"),
        ),
    )

    student_id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), nullable=False, index=True)
    advisor_id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), nullable=False, index=True)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    end_time: Mapped[dt.time] = mapped_column(Time, nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[SessionStatusEnum] = mapped_column(
        SAEnum(SessionStatusEnum, name="session_status_enum", native_enum=False),
        default=SessionStatusEnum.SCHEDULED,
        nullable=False,
        index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(String(512), nullable=True)
    cancelled_by: Mapped[UUID | None] = mapped_column(PGUUID(as_uuid=True), nullable=True)
    cancelled_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
