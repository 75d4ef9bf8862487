"""Availability policy repository layer."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import PolicyScopeEnum
from app.modules.availability.models import AvailabilityPolicy


class AvailabilityRepository:
    """DB operations for availability policies."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_global_policy(self) -> AvailabilityPolicy | None:
        stmt = select(AvailabilityPolicy).where(
            AvailabilityPolicy.scope == PolicyScopeEnum.GLOBAL,
            AvailabilityPolicy.advisor_id.is_(None),
        )
        return await self.session.scalar(stmt)

    async def get_advisor_policy(self, advisor_id: UUID) -> AvailabilityPolicy | None:
        stmt = select(AvailabilityPolicy).where(
            AvailabilityPolicy.scope == PolicyScopeEnum.ADVISOR,
            AvailabilityPolicy.advisor_id == advisor_id,
        )
        return await self.session.scalar(stmt)

    async def create_policy(
        self,
        scope: PolicyScopeEnum,
        advisor_id: UUID | None,
        enabled: bool,
        updated_by: UUID | None,
    ) -> AvailabilityPolicy:
        """Insert the row for a scope; raises IntegrityError if it already exists."""
        policy = AvailabilityPolicy(
            scope=scope,
            advisor_id=advisor_id,
            enabled=enabled,
            updated_by=updated_by,
        )
        async with self.session.begin_nested():
            self.session.add(policy)
            await self.session.flush()
        return policy

    async def list_policies(self, limit: int, offset: int) -> tuple[list[AvailabilityPolicy], int]:
        base_stmt: Select[tuple[AvailabilityPolicy]] = select(AvailabilityPolicy)

        count_stmt = select(func.count()).select_from(base_stmt.subquery())
        total = int((await self.session.scalar(count_stmt)) or 0)

        stmt = (
            base_stmt.order_by(AvailabilityPolicy.scope.desc(), AvailabilityPolicy.updated_at.desc())
            .limit(limit)
            .offset(offset)
        )
        items = (await self.session.scalars(stmt)).all()
        return items, total

    async def save(self, policy: AvailabilityPolicy) -> AvailabilityPolicy:
        await self.session.flush()
        return policy
