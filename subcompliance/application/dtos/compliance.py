"""DTOs for compliance aggregation results."""

from dataclasses import dataclass, field
from datetime import date

from subcompliance.domain.enums import ComplianceStatus, ProfileQuestion


@dataclass(frozen=True)
class ComplianceSummary:
    """Aggregate status with the breakdown that produced it.

    Lists hold document type ids of REQUIRED rows only; optional_count
    counts OPTIONAL rows for display.
    """

    subcontractor_id: str
    status: ComplianceStatus
    evaluated_on: date
    missing_documents: list[str] = field(default_factory=list)
    expiring_documents: list[str] = field(default_factory=list)
    pending_documents: list[str] = field(default_factory=list)
    optional_count: int = 0


@dataclass(frozen=True)
class ProjectAssignmentValidation:
    """Whether a subcontractor may be assigned to a project right now."""

    subcontractor_id: str
    valid: bool
    compliance_status: ComplianceStatus
    missing_documents: list[str]
    reason: str | None  # e.g. "Subcontractor is not active"


@dataclass(frozen=True)
class CachedCompliance:
    """Aggregate as stored in the read cache, tagged with its inputs' revision."""

    status: ComplianceStatus
    revision: int
    as_of: date


@dataclass(frozen=True)
class ProfileUncertainty:
    """Profile answers still unknown and the document types they leave undecided."""

    subcontractor_id: str
    unknown_questions: list[ProfileQuestion]
    uncertain_documents: list[str]
