"""Recompute requirements use case: apply derived levels to stored rows."""

from __future__ import annotations

from subcompliance.application.context import ComplianceContext
from subcompliance.application.dtos.requirement import RecomputeResult
from subcompliance.application.interfaces.repositories import (
    IRequirementRepository,
    ISubcontractorRepository,
)
from subcompliance.application.services.compliance_synchronizer import (
    ComplianceSynchronizer,
)
from subcompliance.application.services.requirement_rules import derive_requirements
from subcompliance.domain.entities import RequirementEntity, SubcontractorEntity
from subcompliance.domain.enums import RequirementLevel
from subcompliance.domain.exceptions import ResourceNotFoundException
from subcompliance.shared.telemetry.logging import get_logger
from subcompliance.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


class RecomputeRequirementsUseCase:
    """Derives levels from the profile and reconciles requirement rows (idempotent).

    A row is created the first time its document type is not hidden; later
    runs only change the level. Status, validity, artifacts and history of
    existing rows are never touched. Custom rows are left as they are.
    """

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
        project_assignment_id: str | None = None,
    ) -> RecomputeResult:
        """Recompute one scope of a subcontractor and refresh the aggregate.

        Args:
            subcontractor_id: Subcontractor id.
            project_assignment_id: Assignment scope; None for subcontractor-wide rows.

        Returns:
            Counts of created, updated and unchanged rows.

        Raises:
            ResourceNotFoundException: If the subcontractor does not exist.
        """
        subcontractor = await self._subcontractor_repo.get_by_id(subcontractor_id)
        if subcontractor is None:
            raise ResourceNotFoundException("subcontractor", subcontractor_id)
        result = await self.apply(subcontractor, project_assignment_id)
        await self._synchronizer.commit_aggregate(subcontractor)
        return result

    async def apply(
        self,
        subcontractor: SubcontractorEntity,
        project_assignment_id: str | None = None,
    ) -> RecomputeResult:
        """Reconcile rows of one scope without committing the aggregate."""
        levels = derive_requirements(subcontractor.profile, self._context.catalog)
        existing = {
            r.document_type_id: r
            for r in await self._requirement_repo.list_for_scope(
                subcontractor.id, project_assignment_id
            )
        }
        today = self._context.today()
        created = updated = unchanged = 0
        for document_type_id, level in levels.items():
            row = existing.get(document_type_id)
            if row is None:
                if level == RequirementLevel.HIDDEN:
                    continue
                requirement = RequirementEntity(
                    id=generate_cuid(),
                    subcontractor_id=subcontractor.id,
                    document_type_id=document_type_id,
                    level=level,
                    project_assignment_id=project_assignment_id,
                    due_date=(
                        self._context.due_date_from(today)
                        if level == RequirementLevel.REQUIRED
                        else None
                    ),
                )
                await self._synchronizer.record_requirement_change(
                    subcontractor, requirement, is_new=True
                )
                created += 1
            elif row.change_level(level):
                if level == RequirementLevel.REQUIRED and row.due_date is None:
                    row.due_date = self._context.due_date_from(today)
                await self._synchronizer.record_requirement_change(subcontractor, row)
                updated += 1
            else:
                unchanged += 1
        logger.info(
            "Requirements recomputed for subcontractor %s (scope %s): created=%s updated=%s unchanged=%s",
            subcontractor.id,
            project_assignment_id or "-",
            created,
            updated,
            unchanged,
        )
        return RecomputeResult(
            subcontractor_id=subcontractor.id,
            project_assignment_id=project_assignment_id,
            created=created,
            updated=updated,
            unchanged=unchanged,
        )
