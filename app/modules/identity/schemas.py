"""Identity schemas."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.core.enums import STAFF_ROLES, RoleEnum


class Caller(BaseModel):
    """Authenticated caller as resolved from the identity provider."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    role: RoleEnum

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == RoleEnum.ADMIN


class CallerRead(BaseModel):
    """Caller output schema."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    role: RoleEnum
