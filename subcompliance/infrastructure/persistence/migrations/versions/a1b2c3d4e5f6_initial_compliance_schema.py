"""initial compliance schema

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-18

Tables: subcontractor, requirement, requirement_history, reminder_job.
Requirement uniqueness is split into two partial indexes (subcontractor-wide
rows have a NULL project_assignment_id). At most one non-done reminder job
per requirement.
"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op

revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "subcontractor",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="inactive"),
        sa.Column("profile", sa.JSON(), nullable=False),
        sa.Column(
            "requirements_revision", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("compliance_status", sa.String(), nullable=True),
        sa.Column("compliance_revision", sa.Integer(), nullable=True),
        sa.Column("compliance_as_of", sa.Date(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('inactive', 'active', 'deactivated')",
            name="ck_subcontractor_status",
        ),
        sa.CheckConstraint(
            "compliance_status IN ('compliant', 'expiring_soon', 'non_compliant')",
            name="ck_subcontractor_compliance_status",
        ),
    )
    op.create_index(
        "ix_subcontractor_status", "subcontractor", ["status"], unique=False
    )

    op.create_table(
        "requirement",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("subcontractor_id", sa.String(), nullable=False),
        sa.Column("project_assignment_id", sa.String(), nullable=True),
        sa.Column("document_type_id", sa.String(), nullable=False),
        sa.Column("level", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="missing"),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("valid_to", sa.Date(), nullable=True),
        sa.Column("validity_source", sa.String(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("artifact_ref", sa.String(), nullable=True),
        sa.Column("custom_label", sa.String(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["subcontractor_id"], ["subcontractor.id"], ondelete="CASCADE"
        ),
        sa.CheckConstraint(
            "level IN ('required', 'optional', 'hidden')",
            name="ck_requirement_level",
        ),
        sa.CheckConstraint(
            "status IN ('missing', 'submitted', 'in_review', 'accepted', 'rejected')",
            name="ck_requirement_status",
        ),
        sa.CheckConstraint(
            "validity_source IN ('system', 'admin_override', 'user_declared_unknown')",
            name="ck_requirement_validity_source",
        ),
    )
    op.create_index(
        "ix_requirement_subcontractor_id",
        "requirement",
        ["subcontractor_id"],
        unique=False,
    )
    op.create_index(
        "uq_requirement_subcontractor_doc_type",
        "requirement",
        ["subcontractor_id", "document_type_id"],
        unique=True,
        postgresql_where=sa.text("project_assignment_id IS NULL"),
        sqlite_where=sa.text("project_assignment_id IS NULL"),
    )
    op.create_index(
        "uq_requirement_assignment_doc_type",
        "requirement",
        ["subcontractor_id", "project_assignment_id", "document_type_id"],
        unique=True,
        postgresql_where=sa.text("project_assignment_id IS NOT NULL"),
        sqlite_where=sa.text("project_assignment_id IS NOT NULL"),
    )

    op.create_table(
        "requirement_history",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("requirement_id", sa.String(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("occurred_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("actor", sa.String(), nullable=False),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["requirement_id"], ["requirement.id"], ondelete="CASCADE"
        ),
        sa.UniqueConstraint(
            "requirement_id", "position", name="uq_requirement_history_position"
        ),
        sa.CheckConstraint(
            "action IN ('submitted', 'replaced', 'review_started', 'accepted', "
            "'rejected', 're_requested')",
            name="ck_requirement_history_action",
        ),
    )
    op.create_index(
        "ix_requirement_history_requirement_id",
        "requirement_history",
        ["requirement_id"],
        unique=False,
    )

    op.create_table(
        "reminder_job",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("requirement_id", sa.String(), nullable=False),
        sa.Column("subcontractor_id", sa.String(), nullable=False),
        sa.Column("state", sa.String(), nullable=False, server_default="scheduled"),
        sa.Column("next_run_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_attempts", sa.Integer(), nullable=False),
        sa.Column(
            "escalated", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_error", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["requirement_id"], ["requirement.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["subcontractor_id"], ["subcontractor.id"], ondelete="CASCADE"
        ),
        sa.CheckConstraint(
            "state IN ('scheduled', 'sent', 'escalated', 'done')",
            name="ck_reminder_job_state",
        ),
    )
    op.create_index(
        "ix_reminder_job_requirement_id",
        "reminder_job",
        ["requirement_id"],
        unique=False,
    )
    op.create_index(
        "ix_reminder_job_subcontractor_id",
        "reminder_job",
        ["subcontractor_id"],
        unique=False,
    )
    op.create_index(
        "ix_reminder_job_state_next_run",
        "reminder_job",
        ["state", "next_run_at"],
        unique=False,
    )
    op.create_index(
        "uq_reminder_job_open_requirement",
        "reminder_job",
        ["requirement_id"],
        unique=True,
        postgresql_where=sa.text("state <> 'done'"),
        sqlite_where=sa.text("state <> 'done'"),
    )


def downgrade() -> None:
    op.drop_index("uq_reminder_job_open_requirement", table_name="reminder_job")
    op.drop_index("ix_reminder_job_state_next_run", table_name="reminder_job")
    op.drop_index("ix_reminder_job_subcontractor_id", table_name="reminder_job")
    op.drop_index("ix_reminder_job_requirement_id", table_name="reminder_job")
    op.drop_table("reminder_job")
    op.drop_index(
        "ix_requirement_history_requirement_id", table_name="requirement_history"
    )
    op.drop_table("requirement_history")
    op.drop_index("uq_requirement_assignment_doc_type", table_name="requirement")
    op.drop_index("uq_requirement_subcontractor_doc_type", table_name="requirement")
    op.drop_index("ix_requirement_subcontractor_id", table_name="requirement")
    op.drop_table("requirement")
    op.drop_index("ix_subcontractor_status", table_name="subcontractor")
    op.drop_table("subcontractor")
