"""Document API: upload notification and review lifecycle transitions.

File storage happens elsewhere; these routes only record the transition
and return the updated requirement.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from subcompliance.api.v1.dependencies import (
    ContextDep,
    get_document_lifecycle_use_case,
)
from subcompliance.api.v1.endpoints._responses import requirement_response
from subcompliance.application.use_cases.documents import DocumentLifecycleUseCase
from subcompliance.schemas.requirement import (
    DocumentUploadedRequest,
    RequirementResponse,
    ReRequestRequest,
    ReviewRequest,
    StartReviewRequest,
)

router = APIRouter()

LifecycleUseCase = Annotated[
    DocumentLifecycleUseCase, Depends(get_document_lifecycle_use_case)
]


@router.post("/uploaded", response_model=RequirementResponse)
async def document_uploaded(
    body: DocumentUploadedRequest, use_case: LifecycleUseCase, context: ContextDep
):
    """Record an uploaded document (missing/rejected/expired -> submitted)."""
    requirement = await use_case.on_document_uploaded(
        body.subcontractor_id,
        body.document_type_id,
        body.artifact_ref,
        body.uploaded_by,
        project_assignment_id=body.project_assignment_id,
    )
    return requirement_response(requirement, context)


@router.post("/start-review", response_model=RequirementResponse)
async def start_review(
    body: StartReviewRequest, use_case: LifecycleUseCase, context: ContextDep
):
    """Move a submitted document into review."""
    requirement = await use_case.start_review(
        body.subcontractor_id,
        body.document_type_id,
        body.reviewer,
        project_assignment_id=body.project_assignment_id,
    )
    return requirement_response(requirement, context)


@router.post("/review", response_model=RequirementResponse)
async def review_document(
    body: ReviewRequest, use_case: LifecycleUseCase, context: ContextDep
):
    """Accept or reject a submitted document."""
    requirement = await use_case.review_document(
        body.subcontractor_id,
        body.document_type_id,
        body.to_decision(),
        body.reviewer,
        project_assignment_id=body.project_assignment_id,
    )
    return requirement_response(requirement, context)


@router.post("/re-request", response_model=RequirementResponse)
async def re_request(
    body: ReRequestRequest, use_case: LifecycleUseCase, context: ContextDep
):
    """Re-request a rejected or expired document (reminders restart)."""
    requirement = await use_case.re_request(
        body.subcontractor_id,
        body.document_type_id,
        body.actor,
        project_assignment_id=body.project_assignment_id,
    )
    return requirement_response(requirement, context)
