"""Availability policy business logic layer."""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db_session
from app.core.enums import PolicyScopeEnum
from app.modules.audit.repository import AuditRepository
from app.modules.availability.models import AvailabilityPolicy
from app.modules.availability.repository import AvailabilityRepository
from app.modules.availability.schemas import AvailabilityStatusRead
from app.modules.identity.schemas import Caller
from app.shared.exceptions import StoreFailureException, UnauthorizedException

logger = logging.getLogger(__name__)

DEFAULT_AVAILABILITY = True


class AvailabilityPolicyService:
    """Resolve and update booking availability at global and advisor scope."""

    def __init__(
        self,
        repository: AvailabilityRepository,
        audit_repository: AuditRepository,
    ) -> None:
        self.repository = repository
        self.audit_repository = audit_repository

    async def _get_policy(self, advisor_id: UUID | None) -> AvailabilityPolicy | None:
        if advisor_id is None:
            return await self.repository.get_global_policy()
        return await self.repository.get_advisor_policy(advisor_id)

    async def get_effective(self, advisor_id: UUID | None = None) -> bool:
        """Resolve availability: advisor override, then global, then open."""
        policy = await self._get_policy(advisor_id)
        if policy is not None:
            return policy.enabled
        if advisor_id is not None:
            return await self.get_effective()
        return DEFAULT_AVAILABILITY

    async def get_status(self, advisor_id: UUID | None = None) -> AvailabilityStatusRead:
        """Return both scopes plus the combined bookable flag."""
        global_enabled = await self.get_effective()
        advisor_override: bool | None = None
        advisor_effective = global_enabled
        if advisor_id is not None:
            policy = await self.repository.get_advisor_policy(advisor_id)
            if policy is not None:
                advisor_override = policy.enabled
                advisor_effective = policy.enabled
        return AvailabilityStatusRead(
            advisor_id=advisor_id,
            global_enabled=global_enabled,
            advisor_override=advisor_override,
            advisor_effective=advisor_effective,
            bookable=global_enabled and advisor_effective,
        )

    async def set_effective(
        self,
        enabled: bool,
        actor: Caller,
        advisor_id: UUID | None = None,
    ) -> AvailabilityPolicy:
        """Set availability for the global scope or one advisor (staff only)."""
        if not actor.is_staff:
            raise UnauthorizedException("Only advisors or admins can change availability")

        scope = PolicyScopeEnum.GLOBAL if advisor_id is None else PolicyScopeEnum.ADVISOR
        policy = await self._get_policy(advisor_id)
        previous = policy.enabled if policy is not None else None

        if policy is None:
            try:
                policy = await self.repository.create_policy(
                    scope=scope,
                    advisor_id=advisor_id,
                    enabled=enabled,
                    updated_by=actor.id,
                )
            except IntegrityError:
                # Another request created the row first; update theirs instead.
                policy = await self._get_policy(advisor_id)
                if policy is None:
                    raise StoreFailureException("Availability policy could not be stored") from None
                previous = policy.enabled
                policy = await self._apply(policy, enabled, actor)
        else:
            policy = await self._apply(policy, enabled, actor)

        payload = {
            "scope": str(scope),
            "advisor_id": str(advisor_id) if advisor_id else None,
            "enabled": enabled,
            "previous": previous,
        }
        await self.audit_repository.create_audit_log(
            actor_id=actor.id,
            action="availability.policy.updated",
            entity_type="availability_policy",
            entity_id=str(policy.id),
            payload=payload,
        )
        await self.audit_repository.create_outbox_event(
            aggregate_type="availability_policy",
            aggregate_id=str(policy.id),
            event_type="availability.policy.updated",
            payload=payload,
        )
        logger.info(
            "Availability %s set to %s by %s (%s)",
            f"advisor:{advisor_id}" if advisor_id else "global",
            enabled,
            actor.id,
            actor.role,
        )
        return policy

    async def _apply(self, policy: AvailabilityPolicy, enabled: bool, actor: Caller) -> AvailabilityPolicy:
        policy.enabled = enabled
        policy.updated_by = actor.id
        return await self.repository.save(policy)

    async def list_policies(
        self,
        actor: Caller,
        limit: int,
        offset: int,
    ) -> tuple[list[AvailabilityPolicy], int]:
        """List stored policies (staff only)."""
        if not actor.is_staff:
            raise UnauthorizedException("Only advisors or admins can view availability policies")
        return await self.repository.list_policies(limit=limit, offset=offset)


async def get_availability_service(
    session: AsyncSession = Depends(get_db_session),
) -> AvailabilityPolicyService:
    """Dependency provider for availability service."""
    return AvailabilityPolicyService(
        repository=AvailabilityRepository(session),
        audit_repository=AuditRepository(session),
    )
