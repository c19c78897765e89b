"""Subcontractor lifecycle use cases: create, activate, deactivate, delete."""

from __future__ import annotations

from subcompliance.application.context import ComplianceContext
from subcompliance.application.interfaces.repositories import (
    IReminderJobRepository,
    IRequirementRepository,
    ISubcontractorRepository,
)
from subcompliance.application.services.compliance_aggregator import summarize
from subcompliance.application.services.compliance_synchronizer import (
    ComplianceSynchronizer,
)
from subcompliance.application.use_cases.subcontractors.recompute_requirements import (
    RecomputeRequirementsUseCase,
)
from subcompliance.domain.entities import SubcontractorEntity
from subcompliance.domain.enums import SubcontractorStatus
from subcompliance.domain.exceptions import ResourceNotFoundException
from subcompliance.domain.value_objects import OrganizationalProfile
from subcompliance.shared.telemetry.logging import get_logger
from subcompliance.shared.utils.generators import generate_cuid

logger = get_logger(__name__)


class CreateSubcontractorUseCase:
    """Creates an inactive subcontractor and derives its initial requirements."""

    def __init__(
        self,
        subcontractor_repo: ISubcontractorRepository,
        recompute: RecomputeRequirementsUseCase,
        synchronizer: ComplianceSynchronizer,
    ) -> None:
        self._subcontractor_repo = subcontractor_repo
        self._recompute = recompute
        self._synchronizer = synchronizer

    async def execute(
        self, name: str, profile: OrganizationalProfile
    ) -> SubcontractorEntity:
        """Create the subcontractor, its requirement rows and reminder jobs.

        Returns:
            The stored subcontractor with its initial compliance status.

        Raises:
            ValidationException: If the name is empty.
        """
        subcontractor = SubcontractorEntity(
            id=generate_cuid(),
            name=name.strip() if name else name,
            profile=profile,
            status=SubcontractorStatus.INACTIVE,
        )
        subcontractor = await self._subcontractor_repo.create_subcontractor(
            subcontractor
        )
        await self._recompute.apply(subcontractor)
        await self._synchronizer.commit_aggregate(subcontractor)
        logger.info("Subcontractor created: %s", subcontractor.id)
        return subcontractor


class ActivateSubcontractorUseCase:
    """Activates a subcontractor only if a synchronous recomputation is COMPLIANT."""

    def __init__(
        self,
        subcontractor_repo: ISubcontractorRepository,
        requirement_repo: IRequirementRepository,
        context: ComplianceContext,
    ) -> None:
        self._subcontractor_repo = subcontractor_repo
        self._requirement_repo = requirement_repo
        self._context = context

    async def execute(self, subcontractor_id: str) -> SubcontractorEntity:
        """Recompute the aggregate from current rows and activate.

        Raises:
            ResourceNotFoundException: If the subcontractor does not exist.
            ComplianceNotSatisfiedException: If the aggregate is not COMPLIANT.
        """
        subcontractor = await self._subcontractor_repo.get_by_id(subcontractor_id)
        if subcontractor is None:
            raise ResourceNotFoundException("subcontractor", subcontractor_id)
        today = self._context.today()
        rows = await self._requirement_repo.list_for_subcontractor(subcontractor_id)
        summary = summarize(
            subcontractor_id, rows, today, self._context.expiring_window_days
        )
        subcontractor.activate(
            summary.status, summary.missing_documents + summary.pending_documents
        )
        subcontractor.record_compliance(summary.status, today)
        subcontractor = await self._subcontractor_repo.save(subcontractor)
        logger.info("Subcontractor activated: %s", subcontractor_id)
        return subcontractor


class DeactivateSubcontractorUseCase:
    """Deactivates a subcontractor and retires its reminder jobs in the same transaction."""

    def __init__(
        self,
        subcontractor_repo: ISubcontractorRepository,
        reminder_job_repo: IReminderJobRepository,
    ) -> None:
        self._subcontractor_repo = subcontractor_repo
        self._reminder_job_repo = reminder_job_repo

    async def execute(self, subcontractor_id: str) -> SubcontractorEntity:
        """Set status DEACTIVATED (idempotent) and retire all open jobs.

        Raises:
            ResourceNotFoundException: If the subcontractor does not exist.
        """
        subcontractor = await self._subcontractor_repo.get_by_id(subcontractor_id)
        if subcontractor is None:
            raise ResourceNotFoundException("subcontractor", subcontractor_id)
        retired = await self._reminder_job_repo.retire_for_subcontractor(
            subcontractor_id
        )
        if subcontractor.deactivate():
            subcontractor = await self._subcontractor_repo.save(subcontractor)
        logger.info(
            "Subcontractor deactivated: %s (%s reminder jobs retired)",
            subcontractor_id,
            retired,
        )
        return subcontractor


class DeleteSubcontractorUseCase:
    """Deletes a subcontractor; requirements, history and jobs cascade."""

    def __init__(
        self,
        subcontractor_repo: ISubcontractorRepository,
        synchronizer: ComplianceSynchronizer,
    ) -> None:
        self._subcontractor_repo = subcontractor_repo
        self._synchronizer = synchronizer

    async def execute(self, subcontractor_id: str) -> None:
        """Delete the subcontractor and drop its cached aggregate.

        Raises:
            ResourceNotFoundException: If the subcontractor does not exist.
        """
        deleted = await self._subcontractor_repo.delete_subcontractor(subcontractor_id)
        if not deleted:
            raise ResourceNotFoundException("subcontractor", subcontractor_id)
        await self._synchronizer.invalidate_cache(subcontractor_id)
        logger.info("Subcontractor deleted: %s", subcontractor_id)
