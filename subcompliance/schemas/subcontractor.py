"""Subcontractor and organizational profile API schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from subcompliance.domain.enums import (
    Answer,
    CompanyType,
    ComplianceStatus,
    ProfileQuestion,
    SubcontractorStatus,
)
from subcompliance.domain.value_objects import OrganizationalProfile


class ProfileSchema(BaseModel):
    """Canonical organizational profile. Omitted answers are unknown."""

    model_config = ConfigDict(from_attributes=True)

    company_type: CompanyType
    has_employees: Answer = Answer.UNKNOWN
    does_construction_work: Answer = Answer.UNKNOWN
    soka_bau_subject: Answer | None = Field(
        default=None,
        description="Only meaningful for construction work; null leaves it undecided",
    )
    sends_workers_abroad: Answer = Answer.UNKNOWN
    processes_personal_data: Answer = Answer.UNKNOWN
    hr_registered: Answer = Answer.UNKNOWN
    non_eu_workers: Answer = Answer.UNKNOWN
    workers_not_employed_in_germany: Answer = Answer.UNKNOWN

    def to_profile(self) -> OrganizationalProfile:
        return OrganizationalProfile(**self.model_dump())


class SubcontractorCreateRequest(BaseModel):
    """Request body for creating a subcontractor."""

    name: str = Field(..., min_length=1, max_length=255)
    profile: ProfileSchema


class LegacyProfileRequest(BaseModel):
    """Legacy answer payload (camelCase answers, boolean flags, legacy company types)."""

    model_config = ConfigDict(extra="allow")

    company_type: Any = Field(..., description="Legacy (e.g. einzelunternehmen) or canonical company type")


class SubcontractorResponse(BaseModel):
    """Subcontractor response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    status: SubcontractorStatus
    profile: ProfileSchema
    requirements_revision: int
    compliance_status: ComplianceStatus | None
    version: int


class ProfileUncertaintyResponse(BaseModel):
    """Unknown profile answers and the document types they leave optional."""

    model_config = ConfigDict(from_attributes=True)

    subcontractor_id: str
    unknown_questions: list[ProfileQuestion]
    uncertain_documents: list[str]
