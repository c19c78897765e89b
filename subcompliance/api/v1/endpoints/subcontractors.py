"""Subcontractor API: lifecycle, profile, requirement derivation and compliance reads.

Thin routes delegating to use cases from subcompliance.api.v1.dependencies.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response

from subcompliance.api.v1.dependencies import (
    ContextDep,
    get_activate_use_case,
    get_add_custom_document_use_case,
    get_compliance_query_use_case,
    get_create_subcontractor_use_case,
    get_deactivate_use_case,
    get_delete_use_case,
    get_recompute_use_case,
    get_update_profile_use_case,
)
from subcompliance.api.v1.endpoints._responses import requirement_response
from subcompliance.application.services.profile_adapter import profile_from_legacy
from subcompliance.application.use_cases.compliance import ComplianceQueryUseCase
from subcompliance.application.use_cases.subcontractors import (
    ActivateSubcontractorUseCase,
    AddCustomDocumentUseCase,
    CreateSubcontractorUseCase,
    DeactivateSubcontractorUseCase,
    DeleteSubcontractorUseCase,
    RecomputeRequirementsUseCase,
    UpdateProfileUseCase,
)
from subcompliance.schemas.compliance import (
    ComplianceStatusResponse,
    ComplianceSummaryResponse,
    ProjectAssignmentValidationResponse,
    RecomputeResponse,
)
from subcompliance.schemas.requirement import (
    CustomDocumentCreateRequest,
    RequirementResponse,
)
from subcompliance.schemas.subcontractor import (
    LegacyProfileRequest,
    ProfileSchema,
    ProfileUncertaintyResponse,
    SubcontractorCreateRequest,
    SubcontractorResponse,
)

router = APIRouter()

QueryUseCase = Annotated[ComplianceQueryUseCase, Depends(get_compliance_query_use_case)]


@router.post("", response_model=SubcontractorResponse, status_code=201)
async def create_subcontractor(
    body: SubcontractorCreateRequest,
    use_case: Annotated[
        CreateSubcontractorUseCase, Depends(get_create_subcontractor_use_case)
    ],
):
    """Create an inactive subcontractor and derive its requirements."""
    subcontractor = await use_case.execute(body.name, body.profile.to_profile())
    return SubcontractorResponse.model_validate(subcontractor)


@router.get("/{subcontractor_id}", response_model=SubcontractorResponse)
async def get_subcontractor(subcontractor_id: str, queries: QueryUseCase):
    """Get subcontractor by id."""
    subcontractor = await queries.get_subcontractor(subcontractor_id)
    return SubcontractorResponse.model_validate(subcontractor)


@router.delete("/{subcontractor_id}", status_code=204)
async def delete_subcontractor(
    subcontractor_id: str,
    use_case: Annotated[DeleteSubcontractorUseCase, Depends(get_delete_use_case)],
) -> Response:
    """Delete subcontractor with its requirements, history and reminder jobs."""
    await use_case.execute(subcontractor_id)
    return Response(status_code=204)


@router.put("/{subcontractor_id}/profile", response_model=RecomputeResponse)
async def update_profile(
    subcontractor_id: str,
    body: ProfileSchema,
    use_case: Annotated[UpdateProfileUseCase, Depends(get_update_profile_use_case)],
):
    """Replace the profile and re-derive every requirement scope."""
    result = await use_case.execute(subcontractor_id, body.to_profile())
    return RecomputeResponse.model_validate(result)


@router.put("/{subcontractor_id}/profile/legacy", response_model=RecomputeResponse)
async def update_profile_legacy(
    subcontractor_id: str,
    body: LegacyProfileRequest,
    use_case: Annotated[UpdateProfileUseCase, Depends(get_update_profile_use_case)],
):
    """Replace the profile from a legacy answer payload."""
    profile = profile_from_legacy(body.model_dump())
    result = await use_case.execute(subcontractor_id, profile)
    return RecomputeResponse.model_validate(result)


@router.get(
    "/{subcontractor_id}/profile/uncertainties",
    response_model=ProfileUncertaintyResponse,
)
async def get_profile_uncertainties(subcontractor_id: str, queries: QueryUseCase):
    """Unknown profile answers and the document types they leave optional."""
    uncertainty = await queries.get_uncertainties(subcontractor_id)
    return ProfileUncertaintyResponse.model_validate(uncertainty)


@router.post(
    "/{subcontractor_id}/custom-documents",
    response_model=RequirementResponse,
    status_code=201,
)
async def add_custom_document(
    subcontractor_id: str,
    body: CustomDocumentCreateRequest,
    context: ContextDep,
    use_case: Annotated[
        AddCustomDocumentUseCase, Depends(get_add_custom_document_use_case)
    ],
):
    """Add a custom document requirement (required or optional)."""
    requirement = await use_case.execute(
        subcontractor_id,
        body.label,
        level=body.level,
        project_assignment_id=body.project_assignment_id,
    )
    return requirement_response(requirement, context)


@router.post("/{subcontractor_id}/recompute", response_model=RecomputeResponse)
async def recompute_requirements(
    subcontractor_id: str,
    use_case: Annotated[RecomputeRequirementsUseCase, Depends(get_recompute_use_case)],
    project_assignment_id: str | None = Query(None),
):
    """Re-derive requirements of one scope from the stored profile."""
    result = await use_case.execute(subcontractor_id, project_assignment_id)
    return RecomputeResponse.model_validate(result)


@router.post("/{subcontractor_id}/activate", response_model=SubcontractorResponse)
async def activate_subcontractor(
    subcontractor_id: str,
    use_case: Annotated[ActivateSubcontractorUseCase, Depends(get_activate_use_case)],
):
    """Activate; 409 NOT_COMPLIANT unless the recomputed aggregate is compliant."""
    subcontractor = await use_case.execute(subcontractor_id)
    return SubcontractorResponse.model_validate(subcontractor)


@router.post("/{subcontractor_id}/deactivate", response_model=SubcontractorResponse)
async def deactivate_subcontractor(
    subcontractor_id: str,
    use_case: Annotated[
        DeactivateSubcontractorUseCase, Depends(get_deactivate_use_case)
    ],
):
    """Deactivate and retire all open reminder jobs."""
    subcontractor = await use_case.execute(subcontractor_id)
    return SubcontractorResponse.model_validate(subcontractor)


@router.get(
    "/{subcontractor_id}/compliance", response_model=ComplianceStatusResponse
)
async def get_compliance_status(
    subcontractor_id: str,
    queries: QueryUseCase,
    strict: bool = Query(False, description="Skip caches and recompute"),
):
    """Aggregate compliance status (cached unless strict)."""
    status = await queries.get_compliance_status(subcontractor_id, strict=strict)
    return ComplianceStatusResponse(
        subcontractor_id=subcontractor_id, status=status, strict=strict
    )


@router.get(
    "/{subcontractor_id}/compliance/summary",
    response_model=ComplianceSummaryResponse,
)
async def get_compliance_summary(subcontractor_id: str, queries: QueryUseCase):
    """Aggregate status with missing, expiring and pending documents."""
    summary = await queries.get_compliance_summary(subcontractor_id)
    return ComplianceSummaryResponse.model_validate(summary)


@router.get(
    "/{subcontractor_id}/requirements", response_model=list[RequirementResponse]
)
async def list_requirements(
    subcontractor_id: str,
    queries: QueryUseCase,
    context: ContextDep,
    project_assignment_id: str | None = Query(None),
):
    """Requirements of one scope with effective status and history."""
    requirements = await queries.get_requirements(
        subcontractor_id, project_assignment_id
    )
    return [requirement_response(r, context) for r in requirements]


@router.get(
    "/{subcontractor_id}/project-assignment-validation",
    response_model=ProjectAssignmentValidationResponse,
)
async def validate_for_project_assignment(
    subcontractor_id: str, queries: QueryUseCase
):
    """Whether the subcontractor may be assigned to a project (strict recomputation)."""
    validation = await queries.validate_for_project_assignment(subcontractor_id)
    return ProjectAssignmentValidationResponse.model_validate(validation)
