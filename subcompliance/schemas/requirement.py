"""Requirement, document lifecycle and custom document API schemas."""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from subcompliance.application.dtos.requirement import (
    AcceptDecision,
    RejectDecision,
    ReviewDecision,
)
from subcompliance.domain.enums import (
    RequirementLevel,
    RequirementStatus,
    ValiditySource,
)
from subcompliance.shared.enums import HistoryAction


class HistoryEntryResponse(BaseModel):
    """One review history entry."""

    model_config = ConfigDict(from_attributes=True)

    timestamp: datetime
    action: HistoryAction
    actor: str
    metadata: dict[str, Any]


class RequirementResponse(BaseModel):
    """Requirement with stored and effective (time-adjusted) status."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    subcontractor_id: str
    project_assignment_id: str | None
    document_type_id: str
    label: str | None = None
    is_custom: bool = False
    level: RequirementLevel
    status: RequirementStatus
    effective_status: RequirementStatus | None = None
    due_date: date | None
    valid_until: date | None
    validity_source: ValiditySource | None
    rejection_reason: str | None
    artifact_ref: str | None
    history: list[HistoryEntryResponse]
    version: int


class DocumentUploadedRequest(BaseModel):
    """Notification that a document file was stored for a requirement."""

    subcontractor_id: str = Field(..., min_length=1)
    document_type_id: str = Field(..., min_length=1)
    artifact_ref: str = Field(..., min_length=1, description="Opaque storage reference")
    uploaded_by: str = Field(..., min_length=1)
    project_assignment_id: str | None = None


class StartReviewRequest(BaseModel):
    """Request body for moving a submitted document into review."""

    subcontractor_id: str = Field(..., min_length=1)
    document_type_id: str = Field(..., min_length=1)
    reviewer: str = Field(..., min_length=1)
    project_assignment_id: str | None = None


class ReviewRequest(BaseModel):
    """Accept or reject a submitted document.

    Acceptance takes an optional explicit valid_until or validity_unknown;
    rejection requires a reason (length checked by the lifecycle).
    """

    subcontractor_id: str = Field(..., min_length=1)
    document_type_id: str = Field(..., min_length=1)
    reviewer: str = Field(..., min_length=1)
    decision: Literal["accept", "reject"]
    valid_until: date | None = None
    validity_unknown: bool = False
    reason: str | None = None
    project_assignment_id: str | None = None

    def to_decision(self) -> ReviewDecision:
        if self.decision == "accept":
            return AcceptDecision(
                valid_until=self.valid_until, validity_unknown=self.validity_unknown
            )
        return RejectDecision(reason=self.reason or "")


class ReRequestRequest(BaseModel):
    """Request body for re-requesting a rejected or expired document."""

    subcontractor_id: str = Field(..., min_length=1)
    document_type_id: str = Field(..., min_length=1)
    actor: str = Field(..., min_length=1)
    project_assignment_id: str | None = None


class CustomDocumentCreateRequest(BaseModel):
    """Request body for adding a custom document requirement."""

    label: str = Field(..., max_length=255)
    level: RequirementLevel = Field(
        default=RequirementLevel.REQUIRED, description="required or optional"
    )
    project_assignment_id: str | None = None
