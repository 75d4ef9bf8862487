"""Advising session repository layer."""

from __future__ import annotations

import datetime as dt
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import RoleEnum, SessionStatusEnum
from app.modules.advising.models import AdvisingSession


class AdvisingSessionRepository:
    """DB operations for advising sessions."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_session(
        self,
        student_id: UUID,
        advisor_id: UUID,
        date: dt.date,
        start_time: dt.time,
        end_time: dt.time,
        location: str,
    ) -> AdvisingSession:
        """Insert a scheduled session; raises IntegrityError if the slot is live."""
        advising_session = AdvisingSession(
            student_id=student_id,
            advisor_id=advisor_id,
            date=date,
            start_time=start_time,
            end_time=end_time,
            location=location,
            status=SessionStatusEnum.SCHEDULED,
        )
        async with self.session.begin_nested():
            self.session.add(advising_session)
            await self.session.flush()
        return advising_session

    async def get_session_by_id(self, session_id: UUID) -> AdvisingSession | None:
        stmt = select(AdvisingSession).where(AdvisingSession.id == session_id)
        return await self.session.scalar(stmt)

    async def has_scheduled_session(
        self,
        advisor_id: UUID,
        date: dt.date,
        start_time: dt.time,
    ) -> bool:
        stmt = (
            select(AdvisingSession.id)
            .where(
                AdvisingSession.advisor_id == advisor_id,
                AdvisingSession.date == date,
                AdvisingSession.start_time == start_time,
                AdvisingSession.status == SessionStatusEnum.SCHEDULED,
            )
            .limit(1)
        )
        return (await self.session.scalar(stmt)) is not None

    async def list_sessions_for_user(self, user_id: UUID, role_name: RoleEnum) -> list[AdvisingSession]:
        base_stmt: Select[tuple[AdvisingSession]] = select(AdvisingSession)

        if role_name == RoleEnum.STUDENT:
            base_stmt = base_stmt.where(AdvisingSession.student_id == user_id)
        else:
            base_stmt = base_stmt.where(AdvisingSession.advisor_id == user_id)

        stmt = base_stmt.order_by(AdvisingSession.date.asc(), AdvisingSession.start_time.asc())
        return list((await self.session.scalars(stmt)).all())

    async def save(self, advising_session: AdvisingSession) -> AdvisingSession:
        await self.session.flush()
        return advising_session
