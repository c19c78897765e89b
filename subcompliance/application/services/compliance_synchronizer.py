"""Write-path synchronizer: keeps reminder jobs and the cached aggregate in step.

Every requirement mutation goes through record_requirement_change() and
ends with commit_aggregate(), inside the caller's transaction. The
subcontractor row's version check serializes concurrent mutations of one
subcontractor, so the stored aggregate always reflects the latest rows.
"""

from __future__ import annotations

from datetime import datetime

from subcompliance.application.context import ComplianceContext
from subcompliance.application.dtos.compliance import ComplianceSummary
from subcompliance.application.interfaces.repositories import (
    IReminderJobRepository,
    IRequirementRepository,
    ISubcontractorRepository,
)
from subcompliance.application.interfaces.services import IComplianceCache
from subcompliance.application.services.compliance_aggregator import summarize
from subcompliance.domain.entities import (
    ReminderJobEntity,
    RequirementEntity,
    SubcontractorEntity,
)
from subcompliance.domain.value_objects import HistoryEntry
from subcompliance.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class ComplianceSynchronizer:
    """Persists requirement changes with their reminder and aggregate side effects."""

    def __init__(
        self,
        subcontractor_repo: ISubcontractorRepository,
        requirement_repo: IRequirementRepository,
        reminder_job_repo: IReminderJobRepository,
        context: ComplianceContext,
        cache: IComplianceCache | None = None,
    ) -> None:
        self._subcontractor_repo = subcontractor_repo
        self._requirement_repo = requirement_repo
        self._reminder_job_repo = reminder_job_repo
        self._context = context
        self._cache = cache

    async def record_requirement_change(
        self,
        subcontractor: SubcontractorEntity,
        requirement: RequirementEntity,
        entry: HistoryEntry | None = None,
        *,
        is_new: bool = False,
    ) -> RequirementEntity:
        """Persist a requirement (insert or version-checked update) and sync its job.

        Args:
            subcontractor: Owner of the requirement.
            requirement: Mutated or new requirement.
            entry: History entry produced by the transition, if any.
            is_new: Insert instead of update.

        Returns:
            The stored requirement (version bumped on update).
        """
        if is_new:
            stored = await self._requirement_repo.add(requirement)
        else:
            stored = await self._requirement_repo.save(requirement)
        if entry is not None:
            await self._requirement_repo.append_history(stored.id, entry)
        await self.sync_reminder(subcontractor, stored, self._context.now())
        return stored

    async def sync_reminder(
        self,
        subcontractor: SubcontractorEntity,
        requirement: RequirementEntity,
        now: datetime,
    ) -> None:
        """Ensure exactly one open job while the requirement needs reminders; retire otherwise."""
        wants_job = subcontractor.receives_reminders() and requirement.needs_reminder(
            now.date(), self._context.expiring_window_days
        )
        existing = await self._reminder_job_repo.get_open_for_requirement(
            requirement.id
        )
        if wants_job and existing is None:
            await self._reminder_job_repo.add(
                ReminderJobEntity.schedule(
                    requirement.id, subcontractor.id, now, self._context.max_attempts
                )
            )
            logger.debug(
                "Reminder job scheduled for requirement %s (%s)",
                requirement.id,
                requirement.document_type_id,
            )
        elif not wants_job and existing is not None:
            await self._reminder_job_repo.retire(existing.id)
            logger.debug(
                "Reminder job %s retired for requirement %s",
                existing.id,
                requirement.id,
            )

    async def commit_aggregate(
        self, subcontractor: SubcontractorEntity
    ) -> ComplianceSummary:
        """Bump the revision, recompute the aggregate and store it on the subcontractor.

        Raises:
            ConcurrentModificationException: If another transaction changed the
                subcontractor since it was loaded.
        """
        subcontractor.bump_revision()
        requirements = await self._requirement_repo.list_for_subcontractor(
            subcontractor.id
        )
        today = self._context.today()
        summary = summarize(
            subcontractor.id,
            requirements,
            today,
            self._context.expiring_window_days,
        )
        subcontractor.record_compliance(summary.status, today)
        await self._subcontractor_repo.save(subcontractor)
        await self.invalidate_cache(subcontractor.id)
        logger.info(
            "Compliance recomputed for subcontractor %s: %s (revision %s)",
            subcontractor.id,
            summary.status.value,
            subcontractor.requirements_revision,
        )
        return summary

    async def invalidate_cache(self, subcontractor_id: str) -> None:
        if self._cache is not None:
            await self._cache.invalidate(subcontractor_id)
