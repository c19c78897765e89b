"""Subcontractor domain entity.

Holds the organizational profile, lifecycle status and the cached
compliance aggregate with the revision it was computed from.
"""

from dataclasses import dataclass
from datetime import date

from subcompliance.domain.enums import ComplianceStatus, SubcontractorStatus
from subcompliance.domain.exceptions import (
    ComplianceNotSatisfiedException,
    ValidationException,
)
from subcompliance.domain.value_objects.profile import OrganizationalProfile


@dataclass
class SubcontractorEntity:
    """Domain entity for a subcontractor.

    requirements_revision increases on every requirement mutation. The
    cached compliance_status is only trusted when compliance_revision equals
    requirements_revision and compliance_as_of is the evaluation date.
    """

    id: str
    name: str
    profile: OrganizationalProfile
    status: SubcontractorStatus = SubcontractorStatus.INACTIVE
    requirements_revision: int = 0
    compliance_status: ComplianceStatus | None = None
    compliance_revision: int | None = None
    compliance_as_of: date | None = None
    version: int = 1

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate subcontractor business rules. Raises ValidationException if invalid."""
        if not self.id:
            raise ValidationException("Subcontractor ID is required", field="id")
        if not self.name or not self.name.strip():
            raise ValidationException("Subcontractor name is required", field="name")

    def receives_reminders(self) -> bool:
        """Return True unless the subcontractor is deactivated."""
        return self.status != SubcontractorStatus.DEACTIVATED

    def is_active(self) -> bool:
        return self.status == SubcontractorStatus.ACTIVE

    def cached_compliance(self, today: date) -> ComplianceStatus | None:
        """Return the cached aggregate if it is still valid for today, else None."""
        if self.compliance_status is None:
            return None
        if self.compliance_revision != self.requirements_revision:
            return None
        if self.compliance_as_of != today:
            return None
        return self.compliance_status

    def record_compliance(self, status: ComplianceStatus, today: date) -> None:
        """Store a freshly computed aggregate for the current revision."""
        self.compliance_status = status
        self.compliance_revision = self.requirements_revision
        self.compliance_as_of = today

    def bump_revision(self) -> None:
        """Mark requirement inputs as changed (invalidates the cached aggregate)."""
        self.requirements_revision += 1

    def activate(
        self, compliance: ComplianceStatus, missing_documents: list[str]
    ) -> None:
        """Set status to ACTIVE. Idempotent when already ACTIVE.

        Args:
            compliance: Aggregate recomputed synchronously by the caller.
            missing_documents: Unsatisfied required document type ids.

        Raises:
            ComplianceNotSatisfiedException: If compliance is not COMPLIANT.
        """
        if compliance != ComplianceStatus.COMPLIANT:
            raise ComplianceNotSatisfiedException(
                self.id, compliance.value, missing_documents
            )
        self.status = SubcontractorStatus.ACTIVE

    def deactivate(self) -> bool:
        """Set status to DEACTIVATED. Returns False if it already was."""
        if self.status == SubcontractorStatus.DEACTIVATED:
            return False
        self.status = SubcontractorStatus.DEACTIVATED
        return True
