"""Availability policy ORM models."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, Enum as SAEnum, Index, Integer, text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base, BaseModelMixin
from app.core.enums import PolicyScopeEnum


class AvailabilityPolicy(BaseModelMixin, Base):
    """Booking on/off switch for all advisors (global) or one advisor.

    There is a single row per scope. Writes update it in place and bump
    ``version``, so a concurrent writer holding a stale row fails instead of
    silently overwriting the newer value.
    """

    __tablename__ = "availability_policies"
    __table_args__ = (
        CheckConstraint(
            "(scope = 'global' AND advisor_id IS NULL) OR (scope = 'advisor' AND advisor_id IS NOT NULL)",
            name="scope_matches_advisor",
        ),
        Index(
            "uq_availability_policies_global_scope",
            "scope",
            unique=True,
            postgresql_where=text("advisor_id IS NULL"),
        ),
        Index(
            "uq_availability_policies_advisor_id",
            "advisor_id",
            unique=True,
            postgresql_where=text("advisor_id IS NOT NULL"),
        ),
    )

    scope: Mapped[PolicyScopeEnum] = mapped_column(
        SAEnum(PolicyScopeEnum, name="policy_scope_enum", native_enum=False),
        nullable=False,
    )
    advisor_id: Mapped[UUID | None] = mapped_column(PGUUID(as_uuid=True), nullable=True)
    enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    updated_by: Mapped[UUID | None] = mapped_column(PGUUID(as_uuid=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
