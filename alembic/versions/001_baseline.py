"""Baseline: the LoomeroFlow schema.

On the managed database these tables already exist, so stamp this revision
(``alembic stamp 001_baseline``) instead of running it. On a fresh database
``alembic upgrade head`` creates them.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()"))


def _ts(name: str, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.text("NOW()"))


def _profile_fk(name: str, nullable: bool = False, ondelete: str | None = None) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("profiles.id", ondelete=ondelete),
        nullable=nullable,
    )


def upgrade() -> None:
    """Create all application tables."""
    op.create_table(
        "profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("role", sa.String(16), server_default="intern", nullable=False),
        sa.Column("avatar_url", sa.Text(), nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        sa.CheckConstraint("role IN ('admin', 'mentor', 'intern')", name="ck_profiles_role"),
    )

    op.create_table(
        "pending_users",
        _id(),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("google_id", sa.String(255), nullable=True),
        _ts("created_at"),
    )

    op.create_table(
        "approved_users",
        _id(),
        sa.Column("email", sa.String(320), nullable=False, unique=True),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("google_id", sa.String(255), nullable=True),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("access_code", sa.String(16), nullable=False),
        _profile_fk("approved_by", nullable=True, ondelete="SET NULL"),
        _ts("approved_at"),
        _ts("last_login", nullable=True),
    )

    op.create_table(
        "access_codes",
        _id(),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("code", sa.String(16), nullable=False),
        sa.Column("role", sa.String(16), nullable=False),
        sa.Column("is_used", sa.Boolean(), server_default="false", nullable=False),
        _ts("used_at", nullable=True),
        _profile_fk("created_by", nullable=True, ondelete="SET NULL"),
        _ts("created_at"),
    )
    op.create_index("ix_access_codes_email", "access_codes", ["email"])

    op.create_table(
        "projects",
        _id(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("duration_weeks", sa.Integer(), server_default="12", nullable=False),
        _profile_fk("created_by"),
        _ts("created_at"),
        _ts("updated_at"),
    )

    op.create_table(
        "milestones",
        _id(),
        sa.Column(
            "project_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False),
        _ts("created_at"),
        _ts("updated_at"),
    )
    op.create_index("ix_milestones_project_id", "milestones", ["project_id"])

    op.create_table(
        "progress",
        _id(),
        _profile_fk("intern_id", ondelete="CASCADE"),
        sa.Column(
            "milestone_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("milestones.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _profile_fk("mentor_id", nullable=True),
        sa.Column("status", sa.String(16), server_default="pending", nullable=False),
        sa.Column("submission_notes", sa.Text(), nullable=True),
        sa.Column("mentor_feedback", sa.Text(), nullable=True),
        _ts("submitted_at", nullable=True),
        _ts("reviewed_at", nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        sa.CheckConstraint(
            "status IN ('pending', 'in_progress', 'submitted', 'approved', 'rejected')",
            name="ck_progress_status",
        ),
    )
    op.create_index("ix_progress_intern_id", "progress", ["intern_id"])
    op.create_index("ix_progress_milestone_id", "progress", ["milestone_id"])

    op.create_table(
        "badges",
        _id(),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("badge_type", sa.String(16), server_default="achievement", nullable=False),
        sa.Column("icon_url", sa.Text(), nullable=True),
        sa.Column("criteria", sa.Text(), nullable=True),
        _ts("created_at"),
    )

    op.create_table(
        "user_badges",
        _id(),
        _profile_fk("user_id", ondelete="CASCADE"),
        sa.Column(
            "badge_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("badges.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _profile_fk("awarded_by"),
        _ts("awarded_at"),
        sa.UniqueConstraint("user_id", "badge_id", name="user_badges_user_id_badge_id_key"),
    )
    op.create_index("ix_user_badges_user_id", "user_badges", ["user_id"])

    op.create_table(
        "certificates",
        _id(),
        _profile_fk("intern_id", ondelete="CASCADE"),
        sa.Column(
            "project_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("projects.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _profile_fk("mentor_id", nullable=True),
        sa.Column("status", sa.String(16), server_default="draft", nullable=False),
        sa.Column("certificate_data", postgresql.JSONB(), nullable=True),
        _ts("issued_at", nullable=True),
        _ts("created_at"),
        _ts("updated_at"),
        sa.UniqueConstraint("intern_id", "project_id", name="certificates_intern_id_project_id_key"),
    )

    op.create_table(
        "recommendations",
        _id(),
        _profile_fk("mentor_id", ondelete="CASCADE"),
        _profile_fk("intern_id", ondelete="CASCADE"),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("linkedin_template", sa.Text(), nullable=True),
        sa.Column("is_draft", sa.Boolean(), server_default="true", nullable=False),
        _ts("created_at"),
        _ts("updated_at"),
    )


def downgrade() -> None:
    """Drop all application tables."""
    op.drop_table("recommendations")
    op.drop_table("certificates")
    op.drop_table("user_badges")
    op.drop_table("badges")
    op.drop_table("progress")
    op.drop_table("milestones")
    op.drop_table("projects")
    op.drop_table("access_codes")
    op.drop_table("approved_users")
    op.drop_table("pending_users")
    op.drop_table("profiles")
