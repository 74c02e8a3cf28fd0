# backend/alembic/versions/002_audit_events.py
"""Audit events - tenant-scoped audit trail

Revision ID: 002_audit_events
Revises: 001_sessions_foundation
Create Date: 2025-01-20 00:00:00.000000

Stores one row per audited action (for example ``sessions.generated``) with a
SUCCESS or FAILURE result and a small JSON metadata payload.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "002_audit_events"
down_revision: Union[str, None] = "001_sessions_foundation"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    is_postgres = bind.dialect.name == "postgresql"
    json_type = postgresql.JSONB(astext_type=sa.Text()) if is_postgres else sa.JSON()

    op.create_table(
        "audit_events",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("entity_type", sa.String(30), nullable=True),
        sa.Column("entity_id", sa.String(64), nullable=True),
        sa.Column("result", sa.String(10), nullable=False),
        sa.Column("metadata", json_type, nullable=True),
        sa.Column(
            "occurred_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        comment="Tenant-scoped audit trail of administrative actions",
    )
    op.create_index(
        "ix_audit_events_tenant_occurred", "audit_events", ["tenant_id", "occurred_at"]
    )
    op.create_index("ix_audit_events_tenant_action", "audit_events", ["tenant_id", "action"])


def downgrade() -> None:
    op.drop_index("ix_audit_events_tenant_action", table_name="audit_events")
    op.drop_index("ix_audit_events_tenant_occurred", table_name="audit_events")
    op.drop_table("audit_events")
