"""Initial schema - users, site roles, submission versions, jobs, activity

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False, server_default=""),
        sa.Column("system_role", sa.String(50), nullable=False, server_default="user"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "site_roles",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("site_name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "site_name", "role", name="uq_site_roles_user_site_role"),
    )
    op.create_index("ix_site_roles_user_id", "site_roles", ["user_id"])
    op.create_index("ix_site_roles_site_name", "site_roles", ["site_name"])

    op.create_table(
        "submission_versions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("site_name", sa.String(255), nullable=False),
        sa.Column("workflow_name", sa.String(100), nullable=False),
        sa.Column("title", sa.String(500), nullable=False, server_default=""),
        sa.Column("status", sa.String(100), nullable=False),
        sa.Column("cdn", sa.String(500), nullable=True),
        sa.Column("cdn_key", sa.String(500), nullable=True),
        sa.Column("transition", sa.JSON(), nullable=True),
        sa.Column("job_id", sa.Uuid(), nullable=True),
        sa.Column("date_published", sa.Date(), nullable=True),
        sa.Column("slug", sa.String(255), nullable=True),
        sa.Column("occ", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
    )
    op.create_index("ix_submission_versions_site_name", "submission_versions", ["site_name"])
    op.create_index("ix_submission_versions_site_status", "submission_versions", ["site_name", "status"])

    op.create_table(
        "jobs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("job_type", sa.String(50), nullable=False),
        sa.Column("status", sa.String(50), nullable=False, server_default="RUNNING"),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("results", sa.JSON(), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_jobs_job_type", "jobs", ["job_type"])
    op.create_index("ix_jobs_type_status", "jobs", ["job_type", "status"])

    # Append-only: no updated_at
    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("activity_type", sa.String(100), nullable=False),
        sa.Column("submission_version_id", sa.Uuid(), nullable=True),
        sa.Column("user_id", sa.Uuid(), nullable=True),
        sa.Column("status", sa.String(100), nullable=True),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_activity_logs_activity_type", "activity_logs", ["activity_type"])
    op.create_index("ix_activity_logs_submission_version_id", "activity_logs", ["submission_version_id"])
    op.create_index("ix_activity_logs_user_id", "activity_logs", ["user_id"])
    op.create_index("ix_activity_logs_created_at", "activity_logs", ["created_at"])
    op.create_index(
        "ix_activity_logs_version_time", "activity_logs", ["submission_version_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_table("activity_logs")
    op.drop_table("jobs")
    op.drop_table("submission_versions")
    op.drop_index("ix_site_roles_site_name", table_name="site_roles")
    op.drop_index("ix_site_roles_user_id", table_name="site_roles")
    op.drop_table("site_roles")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
