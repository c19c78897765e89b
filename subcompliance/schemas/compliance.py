"""Compliance status, summary, recomputation and assignment validation API schemas."""

from datetime import date

from pydantic import BaseModel, ConfigDict

from subcompliance.domain.enums import ComplianceStatus


class ComplianceStatusResponse(BaseModel):
    """Aggregate status of a subcontractor."""

    subcontractor_id: str
    status: ComplianceStatus
    strict: bool


class ComplianceSummaryResponse(BaseModel):
    """Aggregate status with the documents that determine it."""

    model_config = ConfigDict(from_attributes=True)

    subcontractor_id: str
    status: ComplianceStatus
    evaluated_on: date
    missing_documents: list[str]
    expiring_documents: list[str]
    pending_documents: list[str]
    optional_count: int


class ProjectAssignmentValidationResponse(BaseModel):
    """Whether the subcontractor may be assigned to a project now."""

    model_config = ConfigDict(from_attributes=True)

    subcontractor_id: str
    valid: bool
    compliance_status: ComplianceStatus
    missing_documents: list[str]
    reason: str | None


class RecomputeResponse(BaseModel):
    """Counts of requirement rows created, updated and left unchanged."""

    model_config = ConfigDict(from_attributes=True)

    subcontractor_id: str
    project_assignment_id: str | None
    created: int
    updated: int
    unchanged: int
