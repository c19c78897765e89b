"""ReminderJob ORM model. At most one non-done job per requirement (partial unique index)."""

from datetime import datetime

import sqlalchemy as sa
from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from subcompliance.domain.enums import ReminderJobState
from subcompliance.infrastructure.persistence.database import Base
from subcompliance.infrastructure.persistence.models._constraints import in_values
from subcompliance.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
)


class ReminderJob(CuidMixin, TimestampMixin, Base):
    """Reminder/escalation job. Table: reminder_job."""

    __tablename__ = "reminder_job"

    requirement_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("requirement.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subcontractor_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("subcontractor.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    state: Mapped[str] = mapped_column(
        String, nullable=False, default=ReminderJobState.SCHEDULED.value
    )
    next_run_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )
    max_attempts: Mapped[int] = mapped_column(Integer, nullable=False)
    escalated: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.false()
    )
    claimed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index(
            "uq_reminder_job_open_requirement",
            "requirement_id",
            unique=True,
            postgresql_where=text("state <> 'done'"),
            sqlite_where=text("state <> 'done'"),
        ),
        Index("ix_reminder_job_state_next_run", "state", "next_run_at"),
        in_values("state", ReminderJobState.values(), "ck_reminder_job_state"),
    )
