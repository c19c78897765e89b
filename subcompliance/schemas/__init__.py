"""Pydantic request/response schemas for the API."""

from subcompliance.schemas.compliance import (
    ComplianceStatusResponse,
    ComplianceSummaryResponse,
    ProjectAssignmentValidationResponse,
    RecomputeResponse,
)
from subcompliance.schemas.health import HealthResponse, ReadinessResponse
from subcompliance.schemas.reminder import ReminderTickRequest, ReminderTickResponse
from subcompliance.schemas.requirement import (
    CustomDocumentCreateRequest,
    DocumentUploadedRequest,
    RequirementResponse,
    ReRequestRequest,
    ReviewRequest,
    StartReviewRequest,
)
from subcompliance.schemas.subcontractor import (
    LegacyProfileRequest,
    ProfileSchema,
    ProfileUncertaintyResponse,
    SubcontractorCreateRequest,
    SubcontractorResponse,
)

__all__ = [
    "ComplianceStatusResponse",
    "ComplianceSummaryResponse",
    "CustomDocumentCreateRequest",
    "DocumentUploadedRequest",
    "HealthResponse",
    "LegacyProfileRequest",
    "ProfileSchema",
    "ProfileUncertaintyResponse",
    "ProjectAssignmentValidationResponse",
    "ReadinessResponse",
    "RecomputeResponse",
    "ReminderTickRequest",
    "ReminderTickResponse",
    "ReRequestRequest",
    "RequirementResponse",
    "ReviewRequest",
    "StartReviewRequest",
    "SubcontractorCreateRequest",
    "SubcontractorResponse",
]
