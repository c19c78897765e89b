"""Compliance queries: cached reads for dashboards, strict reads for gating decisions."""

from __future__ import annotations

from datetime import date

from subcompliance.application.context import ComplianceContext
from subcompliance.application.dtos.compliance import (
    CachedCompliance,
    ComplianceSummary,
    ProfileUncertainty,
    ProjectAssignmentValidation,
)
from subcompliance.application.interfaces.repositories import (
    IRequirementRepository,
    ISubcontractorRepository,
)
from subcompliance.application.interfaces.services import IComplianceCache
from subcompliance.application.services.compliance_aggregator import summarize
from subcompliance.application.services.requirement_rules import (
    uncertain_document_types,
)
from subcompliance.domain.entities import RequirementEntity, SubcontractorEntity
from subcompliance.domain.enums import ComplianceStatus
from subcompliance.domain.exceptions import (
    ResourceNotFoundException,
    StaleAggregateWarning,
)
from subcompliance.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class ComplianceQueryUseCase:
    """Read side of the aggregator.

    Non-strict reads may use the cache (Redis, then the subcontractor row)
    when it matches the current revision and date. Strict reads always
    recompute from requirement rows.
    """

    def __init__(
        self,
        subcontractor_repo: ISubcontractorRepository,
        requirement_repo: IRequirementRepository,
        context: ComplianceContext,
        cache: IComplianceCache | None = None,
    ) -> None:
        self._subcontractor_repo = subcontractor_repo
        self._requirement_repo = requirement_repo
        self._context = context
        self._cache = cache

    async def get_subcontractor(self, subcontractor_id: str) -> SubcontractorEntity:
        """Return the subcontractor.

        Raises:
            ResourceNotFoundException: If the subcontractor does not exist.
        """
        return await self._load(subcontractor_id)

    async def get_uncertainties(self, subcontractor_id: str) -> ProfileUncertainty:
        """Return unknown profile answers and the document types they leave optional."""
        subcontractor = await self._load(subcontractor_id)
        return ProfileUncertainty(
            subcontractor_id=subcontractor_id,
            unknown_questions=subcontractor.profile.unknown_questions(),
            uncertain_documents=uncertain_document_types(
                subcontractor.profile, self._context.catalog
            ),
        )

    async def get_compliance_status(
        self, subcontractor_id: str, strict: bool = False
    ) -> ComplianceStatus:
        """Return the aggregate compliance status.

        Args:
            subcontractor_id: Subcontractor id.
            strict: Skip caches and recompute synchronously.

        Returns:
            ComplianceStatus.

        Raises:
            ResourceNotFoundException: If the subcontractor does not exist.
        """
        subcontractor = await self._load(subcontractor_id)
        today = self._context.today()
        if not strict:
            try:
                cached = await self._cached_status(subcontractor, today)
            except StaleAggregateWarning as warning:
                logger.warning("%s; recomputing", warning.message)
                cached = None
            if cached is not None:
                return cached
        summary = await self._compute(subcontractor, today)
        return summary.status

    async def get_compliance_summary(
        self, subcontractor_id: str
    ) -> ComplianceSummary:
        """Return the aggregate with its breakdown (always computed from rows).

        Raises:
            ResourceNotFoundException: If the subcontractor does not exist.
        """
        subcontractor = await self._load(subcontractor_id)
        return await self._compute(subcontractor, self._context.today())

    async def get_requirements(
        self,
        subcontractor_id: str,
        project_assignment_id: str | None = None,
    ) -> list[RequirementEntity]:
        """Return requirement rows of one scope (None = subcontractor-wide).

        Raises:
            ResourceNotFoundException: If the subcontractor does not exist.
        """
        await self._load(subcontractor_id)
        return await self._requirement_repo.list_for_scope(
            subcontractor_id, project_assignment_id
        )

    async def validate_for_project_assignment(
        self, subcontractor_id: str
    ) -> ProjectAssignmentValidation:
        """Check whether the subcontractor may be assigned to a project now.

        Valid when the subcontractor is ACTIVE and a strict recomputation is
        not NON_COMPLIANT (EXPIRING_SOON is still assignable).

        Raises:
            ResourceNotFoundException: If the subcontractor does not exist.
        """
        subcontractor = await self._load(subcontractor_id)
        summary = await self._compute(subcontractor, self._context.today())
        missing = summary.missing_documents + summary.pending_documents
        reason: str | None = None
        if not subcontractor.is_active():
            reason = f"Subcontractor is {subcontractor.status.value}"
        elif summary.status == ComplianceStatus.NON_COMPLIANT:
            reason = f"Missing or unapproved documents: {', '.join(missing)}"
        return ProjectAssignmentValidation(
            subcontractor_id=subcontractor_id,
            valid=reason is None,
            compliance_status=summary.status,
            missing_documents=missing,
            reason=reason,
        )

    async def _load(self, subcontractor_id: str) -> SubcontractorEntity:
        subcontractor = await self._subcontractor_repo.get_by_id(subcontractor_id)
        if subcontractor is None:
            raise ResourceNotFoundException("subcontractor", subcontractor_id)
        return subcontractor

    async def _cached_status(
        self, subcontractor: SubcontractorEntity, today: date
    ) -> ComplianceStatus | None:
        """Return a still-valid cached status, None on miss.

        Raises:
            StaleAggregateWarning: If a cached value exists but is out of date.
        """
        if self._cache is not None:
            entry = await self._cache.get(subcontractor.id)
            if entry is not None:
                if (
                    entry.revision == subcontractor.requirements_revision
                    and entry.as_of == today
                ):
                    return entry.status
                raise StaleAggregateWarning(
                    subcontractor.id, entry.revision, subcontractor.requirements_revision
                )
        row_status = subcontractor.cached_compliance(today)
        if row_status is not None:
            return row_status
        if subcontractor.compliance_status is not None:
            raise StaleAggregateWarning(
                subcontractor.id,
                subcontractor.compliance_revision,
                subcontractor.requirements_revision,
            )
        return None

    async def _compute(
        self, subcontractor: SubcontractorEntity, today: date
    ) -> ComplianceSummary:
        rows = await self._requirement_repo.list_for_subcontractor(subcontractor.id)
        summary = summarize(
            subcontractor.id, rows, today, self._context.expiring_window_days
        )
        if self._cache is not None:
            await self._cache.store(
                subcontractor.id,
                CachedCompliance(
                    status=summary.status,
                    revision=subcontractor.requirements_revision,
                    as_of=today,
                ),
            )
        return summary
