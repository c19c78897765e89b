"""Requirement and RequirementHistory ORM models.

One row per (subcontractor, project assignment, document type); two partial
unique indexes cover the subcontractor-wide (NULL assignment) and the
assignment-scoped rows. History is append-only, ordered by position.
"""

from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from subcompliance.domain.enums import (
    RequirementLevel,
    RequirementStatus,
    ValiditySource,
)
from subcompliance.infrastructure.persistence.database import Base
from subcompliance.infrastructure.persistence.models._constraints import in_values
from subcompliance.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
    VersionedMixin,
)
from subcompliance.shared.enums import HistoryAction


class Requirement(CuidMixin, TimestampMixin, VersionedMixin, Base):
    """Document requirement of a subcontractor. Table: requirement."""

    __tablename__ = "requirement"

    subcontractor_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("subcontractor.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project_assignment_id: Mapped[str | None] = mapped_column(String, nullable=True)
    document_type_id: Mapped[str] = mapped_column(String, nullable=False)
    level: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String, nullable=False, default=RequirementStatus.MISSING.value
    )
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    valid_until: Mapped[date | None] = mapped_column("valid_to", Date, nullable=True)
    validity_source: Mapped[str | None] = mapped_column(String, nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    artifact_ref: Mapped[str | None] = mapped_column(String, nullable=True)
    custom_label: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        Index(
            "uq_requirement_subcontractor_doc_type",
            "subcontractor_id",
            "document_type_id",
            unique=True,
            postgresql_where=text("project_assignment_id IS NULL"),
            sqlite_where=text("project_assignment_id IS NULL"),
        ),
        Index(
            "uq_requirement_assignment_doc_type",
            "subcontractor_id",
            "project_assignment_id",
            "document_type_id",
            unique=True,
            postgresql_where=text("project_assignment_id IS NOT NULL"),
            sqlite_where=text("project_assignment_id IS NOT NULL"),
        ),
        in_values("level", RequirementLevel.values(), "ck_requirement_level"),
        in_values(
            "status", RequirementStatus.stored_values(), "ck_requirement_status"
        ),
        in_values(
            "validity_source",
            ValiditySource.values(),
            "ck_requirement_validity_source",
        ),
    )


class RequirementHistory(CuidMixin, Base):
    """Append-only review history entry. Table: requirement_history."""

    __tablename__ = "requirement_history"

    requirement_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("requirement.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    action: Mapped[str] = mapped_column(String, nullable=False)
    actor: Mapped[str] = mapped_column(String, nullable=False)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        UniqueConstraint(
            "requirement_id", "position", name="uq_requirement_history_position"
        ),
        in_values("action", HistoryAction.values(), "ck_requirement_history_action"),
    )
