"""Update organizational profile use case (always re-derives requirements)."""

from __future__ import annotations

from subcompliance.application.dtos.requirement import RecomputeResult
from subcompliance.application.interfaces.repositories import (
    IRequirementRepository,
    ISubcontractorRepository,
)
from subcompliance.application.services.compliance_synchronizer import (
    ComplianceSynchronizer,
)
from subcompliance.application.use_cases.subcontractors.recompute_requirements import (
    RecomputeRequirementsUseCase,
)
from subcompliance.domain.exceptions import ResourceNotFoundException
from subcompliance.domain.value_objects import OrganizationalProfile


class UpdateProfileUseCase:
    """Replaces the profile and recomputes every requirement scope of the subcontractor."""

    def __init__(
        self,
        subcontractor_repo: ISubcontractorRepository,
        requirement_repo: IRequirementRepository,
        recompute: RecomputeRequirementsUseCase,
        synchronizer: ComplianceSynchronizer,
    ) -> None:
        self._subcontractor_repo = subcontractor_repo
        self._requirement_repo = requirement_repo
        self._recompute = recompute
        self._synchronizer = synchronizer

    async def execute(
        self, subcontractor_id: str, profile: OrganizationalProfile
    ) -> RecomputeResult:
        """Store the new profile, re-derive all scopes and refresh the aggregate.

        Args:
            subcontractor_id: Subcontractor id.
            profile: New canonical profile.

        Returns:
            Summed counts over all scopes (project_assignment_id is None).

        Raises:
            ResourceNotFoundException: If the subcontractor does not exist.
        """
        subcontractor = await self._subcontractor_repo.get_by_id(subcontractor_id)
        if subcontractor is None:
            raise ResourceNotFoundException("subcontractor", subcontractor_id)
        subcontractor.profile = profile
        rows = await self._requirement_repo.list_for_subcontractor(subcontractor_id)
        scopes: list[str | None] = [None]
        scopes.extend(
            sorted({r.project_assignment_id for r in rows if r.project_assignment_id})
        )
        created = updated = unchanged = 0
        for scope in scopes:
            result = await self._recompute.apply(subcontractor, scope)
            created += result.created
            updated += result.updated
            unchanged += result.unchanged
        await self._synchronizer.commit_aggregate(subcontractor)
        return RecomputeResult(
            subcontractor_id=subcontractor_id,
            project_assignment_id=None,
            created=created,
            updated=updated,
            unchanged=unchanged,
        )
