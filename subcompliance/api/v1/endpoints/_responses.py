"""Mapping helpers shared by endpoint modules."""

from subcompliance.application.context import ComplianceContext
from subcompliance.domain.entities import RequirementEntity
from subcompliance.schemas.requirement import HistoryEntryResponse, RequirementResponse


def requirement_response(
    requirement: RequirementEntity, context: ComplianceContext
) -> RequirementResponse:
    """Build RequirementResponse with effective status and display label."""
    label = requirement.custom_label
    if label is None and requirement.document_type_id in context.catalog:
        label = context.catalog.label_for(requirement.document_type_id)
    return RequirementResponse(
        id=requirement.id,
        subcontractor_id=requirement.subcontractor_id,
        project_assignment_id=requirement.project_assignment_id,
        document_type_id=requirement.document_type_id,
        label=label,
        is_custom=requirement.is_custom,
        level=requirement.level,
        status=requirement.status,
        effective_status=requirement.effective_status(
            context.today(), context.expiring_window_days
        ),
        due_date=requirement.due_date,
        valid_until=requirement.valid_until,
        validity_source=requirement.validity_source,
        rejection_reason=requirement.rejection_reason,
        artifact_ref=requirement.artifact_ref,
        history=[HistoryEntryResponse.model_validate(h) for h in requirement.history],
        version=requirement.version,
    )
