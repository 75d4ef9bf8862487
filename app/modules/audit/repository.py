"""Audit trail and outbox writes."""

from __future__ import annotations

from typing import TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import OutboxStatusEnum
from app.modules.audit.models import AuditLog, OutboxEvent

RowT = TypeVar("RowT", AuditLog, OutboxEvent)


class AuditRepository:
    """Append-only rows written in the caller's transaction.

    Both tables are flushed immediately so a failing write aborts the
    booking or policy change that produced it.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _append(self, row: RowT) -> RowT:
        self.session.add(row)
        await self.session.flush()
        return row

    async def create_audit_log(
        self,
        actor_id: UUID | None,
        action: str,
        entity_type: str,
        entity_id: str | None,
        payload: dict,
    ) -> AuditLog:
        return await self._append(
            AuditLog(
                actor_id=actor_id,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                payload=payload,
            ),
        )

    async def create_outbox_event(
        self,
        aggregate_type: str,
        aggregate_id: str,
        event_type: str,
        payload: dict,
    ) -> OutboxEvent:
        # Relays pick up pending rows after commit; nothing is published inline.
        return await self._append(
            OutboxEvent(
                aggregate_type=aggregate_type,
                aggregate_id=aggregate_id,
                event_type=event_type,
                payload=payload,
                status=OutboxStatusEnum.PENDING,
            ),
        )
