"""Add custom document use case: admin-defined document type for one subcontractor."""

from __future__ import annotations

from subcompliance.application.context import ComplianceContext
from subcompliance.application.interfaces.repositories import (
    IRequirementRepository,
    ISubcontractorRepository,
)
from subcompliance.application.services.compliance_synchronizer import (
    ComplianceSynchronizer,
)
from subcompliance.core.constants import MIN_CUSTOM_LABEL_LENGTH
from subcompliance.domain.entities import RequirementEntity
from subcompliance.domain.enums import RequirementLevel
from subcompliance.domain.exceptions import (
    ResourceNotFoundException,
    ValidationException,
)
from subcompliance.domain.value_objects import CUSTOM_DOCUMENT_PREFIX
from subcompliance.shared.utils.generators import generate_cuid, slugify


class AddCustomDocumentUseCase:
    """Creates a custom:<slug> requirement; its level is fixed at creation."""

    def __init__(
        self,
        subcontractor_repo: ISubcontractorRepository,
        requirement_repo: IRequirementRepository,
        synchronizer: ComplianceSynchronizer,
        context: ComplianceContext,
    ) -> None:
        self._subcontractor_repo = subcontractor_repo
        self._requirement_repo = requirement_repo
        self._synchronizer = synchronizer
        self._context = context

    async def execute(
        self,
        subcontractor_id: str,
        label: str,
        level: RequirementLevel = RequirementLevel.REQUIRED,
        project_assignment_id: str | None = None,
    ) -> RequirementEntity:
        """Add a custom document requirement and refresh the aggregate.

        Args:
            subcontractor_id: Subcontractor id.
            label: Display name (at least 3 characters, unique per scope, case-insensitive).
            level: REQUIRED or OPTIONAL.
            project_assignment_id: Optional assignment scope.

        Returns:
            The created requirement.

        Raises:
            ResourceNotFoundException: If the subcontractor does not exist.
            ValidationException: If the label is too short, duplicated, or level is HIDDEN.
        """
        subcontractor = await self._subcontractor_repo.get_by_id(subcontractor_id)
        if subcontractor is None:
            raise ResourceNotFoundException("subcontractor", subcontractor_id)
        clean_label = (label or "").strip()
        if len(clean_label) < MIN_CUSTOM_LABEL_LENGTH:
            raise ValidationException(
                f"label must be at least {MIN_CUSTOM_LABEL_LENGTH} characters",
                field="label",
            )
        if level == RequirementLevel.HIDDEN:
            raise ValidationException(
                "custom documents must be required or optional", field="level"
            )
        slug = slugify(clean_label)
        if not slug:
            raise ValidationException(
                "label must contain letters or digits", field="label"
            )
        document_type_id = f"{CUSTOM_DOCUMENT_PREFIX}{slug}"
        existing = await self._requirement_repo.list_for_scope(
            subcontractor_id, project_assignment_id
        )
        for row in existing:
            same_label = (
                row.custom_label is not None
                and row.custom_label.casefold() == clean_label.casefold()
            )
            if row.document_type_id == document_type_id or same_label:
                raise ValidationException(
                    f"A document named '{clean_label}' already exists", field="label"
                )
        today = self._context.today()
        requirement = RequirementEntity(
            id=generate_cuid(),
            subcontractor_id=subcontractor_id,
            document_type_id=document_type_id,
            level=level,
            project_assignment_id=project_assignment_id,
            custom_label=clean_label,
            due_date=(
                self._context.due_date_from(today)
                if level == RequirementLevel.REQUIRED
                else None
            ),
        )
        stored = await self._synchronizer.record_requirement_change(
            subcontractor, requirement, is_new=True
        )
        await self._synchronizer.commit_aggregate(subcontractor)
        return stored
