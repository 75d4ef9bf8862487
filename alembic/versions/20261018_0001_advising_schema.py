"""Advising sessions, availability policies, audit and outbox

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 09:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "20261018_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


session_status_enum = sa.Enum("scheduled", "completed", "cancelled", name="session_status_enum", native_enum=False)
policy_scope_enum = sa.Enum("global", "advisor", name="policy_scope_enum", native_enum=False)
outbox_status_enum = sa.Enum("pending", "processed", "failed", name="outbox_status_enum", native_enum=False)


def _id_col() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False)


def _created_col() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def _updated_col() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    op.create_table(
        "advising_sessions",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("student_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("advisor_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("status", session_status_enum, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("cancellation_reason", sa.String(length=512), nullable=True),
        sa.Column("cancelled_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_advising_sessions_student_id", "advising_sessions", ["student_id"], unique=False)
    op.create_index("ix_advising_sessions_advisor_id", "advising_sessions", ["advisor_id"], unique=False)
    op.create_index("ix_advising_sessions_date", "advising_sessions", ["date"], unique=False)
    op.create_index("ix_advising_sessions_status", "advising_sessions", ["status"], unique=False)
    op.create_index(
        "uq_advising_sessions_scheduled_slot",
        "advising_sessions",
        ["advisor_id", "date", "start_time"],
        unique=True,
        postgresql_where=sa.text("status = 'scheduled'"),
    )

    op.create_table(
        "availability_policies",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("scope", policy_scope_enum, nullable=False),
        sa.Column("advisor_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("enabled", sa.Boolean(), nullable=False),
        sa.Column("updated_by", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.CheckConstraint(
            "(scope = 'global' AND advisor_id IS NULL) OR (scope = 'advisor' AND advisor_id IS NOT NULL)",
            name="ck_availability_policies_scope_matches_advisor",
        ),
    )
    op.create_index(
        "uq_availability_policies_global_scope",
        "availability_policies",
        ["scope"],
        unique=True,
        postgresql_where=sa.text("advisor_id IS NULL"),
    )
    op.create_index(
        "uq_availability_policies_advisor_id",
        "availability_policies",
        ["advisor_id"],
        unique=True,
        postgresql_where=sa.text("advisor_id IS NOT NULL"),
    )

    op.create_table(
        "audit_logs",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("actor_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("action", sa.String(length=128), nullable=False),
        sa.Column("entity_type", sa.String(length=128), nullable=False),
        sa.Column("entity_id", sa.String(length=128), nullable=True),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
    )
    op.create_index("ix_audit_logs_actor_id", "audit_logs", ["actor_id"], unique=False)
    op.create_index("ix_audit_logs_action", "audit_logs", ["action"], unique=False)

    op.create_table(
        "outbox_events",
        _id_col(),
        _created_col(),
        _updated_col(),
        sa.Column("aggregate_type", sa.String(length=128), nullable=False),
        sa.Column("aggregate_id", sa.String(length=128), nullable=False),
        sa.Column("event_type", sa.String(length=128), nullable=False),
        sa.Column("payload", postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column("status", outbox_status_enum, nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("retries", sa.Integer(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
    )
    op.create_index("ix_outbox_events_aggregate_type", "outbox_events", ["aggregate_type"], unique=False)
    op.create_index("ix_outbox_events_aggregate_id", "outbox_events", ["aggregate_id"], unique=False)
    op.create_index("ix_outbox_events_event_type", "outbox_events", ["event_type"], unique=False)
    op.create_index("ix_outbox_events_status", "outbox_events", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_outbox_events_status", table_name="outbox_events")
    op.drop_index("ix_outbox_events_event_type", table_name="outbox_events")
    op.drop_index("ix_outbox_events_aggregate_id", table_name="outbox_events")
    op.drop_index("ix_outbox_events_aggregate_type", table_name="outbox_events")
    op.drop_table("outbox_events")

    op.drop_index("ix_audit_logs_action", table_name="audit_logs")
    op.drop_index("ix_audit_logs_actor_id", table_name="audit_logs")
    op.drop_table("audit_logs")

    op.drop_index("uq_availability_policies_advisor_id", table_name="availability_policies")
    op.drop_index("uq_availability_policies_global_scope", table_name="availability_policies")
    op.drop_table("availability_policies")

    op.drop_index("uq_advising_sessions_scheduled_slot", table_name="advising_sessions")
    op.drop_index("ix_advising_sessions_status", table_name="advising_sessions")
    op.drop_index("ix_advising_sessions_date", table_name="advising_sessions")
    op.drop_index("ix_advising_sessions_advisor_id", table_name="advising_sessions")
    op.drop_index("ix_advising_sessions_student_id", table_name="advising_sessions")
    op.drop_table("advising_sessions")
