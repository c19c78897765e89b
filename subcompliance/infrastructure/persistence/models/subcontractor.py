"""Subcontractor ORM model. Profile as JSON; cached compliance aggregate columns."""

from datetime import date
from typing import Any

import sqlalchemy as sa
from sqlalchemy import JSON, Date, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from subcompliance.domain.enums import ComplianceStatus, SubcontractorStatus
from subcompliance.infrastructure.persistence.database import Base
from subcompliance.infrastructure.persistence.models._constraints import in_values
from subcompliance.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
    VersionedMixin,
)


class Subcontractor(CuidMixin, TimestampMixin, VersionedMixin, Base):
    """Subcontractor. Table: subcontractor."""

    __tablename__ = "subcontractor"

    name: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(
        String,
        nullable=False,
        default=SubcontractorStatus.INACTIVE.value,
        index=True,
    )
    profile: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    requirements_revision: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=sa.text("0")
    )
    compliance_status: Mapped[str | None] = mapped_column(String, nullable=True)
    compliance_revision: Mapped[int | None] = mapped_column(Integer, nullable=True)
    compliance_as_of: Mapped[date | None] = mapped_column(Date, nullable=True)

    __table_args__ = (
        in_values("status", SubcontractorStatus.values(), "ck_subcontractor_status"),
        in_values(
            "compliance_status",
            ComplianceStatus.values(),
            "ck_subcontractor_compliance_status",
        ),
    )
