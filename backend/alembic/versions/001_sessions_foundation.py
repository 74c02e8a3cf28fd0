# backend/alembic/versions/001_sessions_foundation.py
"""Sessions foundation - centers, staffing, students, groups, sessions, rosters

Revision ID: 001_sessions_foundation
Revises:
Create Date: 2025-01-06 00:00:00.000000

Creates the scheduling schema used by recurring session generation. The
unique slot key on sessions (tenant_id, center_id, tutor_id, start_at) is
what skip-on-conflict inserts resolve against.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_sessions_foundation"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.func.now(),
        nullable=True,
    )


def upgrade() -> None:
    """Create scheduling tables."""
    print("Creating sessions foundation tables...")

    op.create_table(
        "centers",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_centers_tenant_id", "centers", ["tenant_id"])

    op.create_table(
        "tenant_memberships",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "user_id", "role", name="uq_tenant_memberships_user_role"),
    )

    op.create_table(
        "staff_centers",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("center_id", sa.String(26), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(["center_id"], ["centers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "user_id", "center_id", name="uq_staff_centers_assignment"),
    )
    op.create_index("ix_staff_centers_tenant_center", "staff_centers", ["tenant_id", "center_id"])

    op.create_table(
        "students",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False, server_default=""),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_students_tenant_id", "students", ["tenant_id"])

    op.create_table(
        "groups",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("center_id", sa.String(26), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="GROUP"),
        _created_at(),
        sa.ForeignKeyConstraint(["center_id"], ["centers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("type IN ('GROUP', 'CLASS')", name="ck_groups_type"),
    )
    op.create_index("ix_groups_tenant_id", "groups", ["tenant_id"])

    op.create_table(
        "group_students",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("group_id", sa.String(26), nullable=False),
        sa.Column("student_id", sa.String(26), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", "group_id", "student_id", name="uq_group_students_member"),
    )

    op.create_table(
        "sessions",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("center_id", sa.String(26), nullable=False),
        sa.Column("tutor_id", sa.String(64), nullable=False),
        sa.Column("session_type", sa.String(20), nullable=False),
        sa.Column("group_id", sa.String(26), nullable=True),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("timezone", sa.String(64), nullable=False),
        sa.Column("zoom_link", sa.Text(), nullable=True),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(["center_id"], ["centers.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["group_id"], ["groups.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "tenant_id",
            "center_id",
            "tutor_id",
            "start_at",
            name="uq_sessions_tenant_center_tutor_start",
        ),
        sa.CheckConstraint(
            "session_type IN ('ONE_ON_ONE', 'GROUP', 'CLASS')", name="ck_sessions_session_type"
        ),
        sa.CheckConstraint("end_at > start_at", name="ck_sessions_time_order"),
        comment="Concrete scheduled sessions; start/end are absolute UTC instants",
    )
    op.create_index("ix_sessions_tenant_start", "sessions", ["tenant_id", "start_at"])
    op.create_index(
        "ix_sessions_tenant_tutor_start", "sessions", ["tenant_id", "tutor_id", "start_at"]
    )

    op.create_table(
        "session_students",
        sa.Column("id", sa.String(26), nullable=False),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("session_id", sa.String(26), nullable=False),
        sa.Column("student_id", sa.String(26), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(["session_id"], ["sessions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint(
            "tenant_id", "session_id", "student_id", name="uq_session_students_member"
        ),
    )
    op.create_index(
        "ix_session_students_tenant_student", "session_students", ["tenant_id", "student_id"]
    )

    print("Sessions foundation tables created")


def downgrade() -> None:
    """Drop scheduling tables."""
    print("Dropping sessions foundation tables...")

    op.drop_index("ix_session_students_tenant_student", table_name="session_students")
    op.drop_table("session_students")
    op.drop_index("ix_sessions_tenant_tutor_start", table_name="sessions")
    op.drop_index("ix_sessions_tenant_start", table_name="sessions")
    op.drop_table("sessions")
    op.drop_table("group_students")
    op.drop_index("ix_groups_tenant_id", table_name="groups")
    op.drop_table("groups")
    op.drop_index("ix_students_tenant_id", table_name="students")
    op.drop_table("students")
    op.drop_index("ix_staff_centers_tenant_center", table_name="staff_centers")
    op.drop_table("staff_centers")
    op.drop_table("tenant_memberships")
    op.drop_index("ix_centers_tenant_id", table_name="centers")
    op.drop_table("centers")
