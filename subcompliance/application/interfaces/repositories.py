"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference domain entities only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from datetime import date, datetime
from typing import TYPE_CHECKING, Protocol

from subcompliance.domain.enums import ReminderJobState

if TYPE_CHECKING:
    from subcompliance.domain.entities import (
        ReminderJobEntity,
        RequirementEntity,
        SubcontractorEntity,
    )
    from subcompliance.domain.value_objects import HistoryEntry


# Subcontractor repository interface
class ISubcontractorRepository(Protocol):
    """Protocol for subcontractor repository (DIP)."""

    async def get_by_id(self, subcontractor_id: str) -> SubcontractorEntity | None:
        """Return subcontractor by id, or None."""

    async def create_subcontractor(
        self, subcontractor: SubcontractorEntity
    ) -> SubcontractorEntity:
        """Insert a new subcontractor."""

    async def save(self, subcontractor: SubcontractorEntity) -> SubcontractorEntity:
        """Persist changes if the stored version still matches; bumps version.

        Raises ConcurrentModificationException when the row changed since it was read.
        """

    async def delete_subcontractor(self, subcontractor_id: str) -> bool:
        """Delete subcontractor with its requirements and jobs. Returns True if deleted."""


# Requirement repository interface
class IRequirementRepository(Protocol):
    """Protocol for requirement repository (DIP)."""

    async def get_by_id(self, requirement_id: str) -> RequirementEntity | None:
        """Return requirement by id (with history), or None."""

    async def get_for_document_type(
        self,
        subcontractor_id: str,
        document_type_id: str,
        project_assignment_id: str | None = None,
    ) -> RequirementEntity | None:
        """Return the requirement row for (subcontractor, assignment, document type)."""

    async def list_for_subcontractor(
        self, subcontractor_id: str
    ) -> list[RequirementEntity]:
        """Return all requirement rows of a subcontractor across scopes."""

    async def list_for_scope(
        self, subcontractor_id: str, project_assignment_id: str | None = None
    ) -> list[RequirementEntity]:
        """Return rows of one scope (None = subcontractor-wide rows)."""

    async def add(self, requirement: RequirementEntity) -> RequirementEntity:
        """Insert a new requirement row."""

    async def save(self, requirement: RequirementEntity) -> RequirementEntity:
        """Persist changes if the stored version still matches; bumps version.

        Raises ConcurrentModificationException when the row changed since it was read.
        """

    async def append_history(self, requirement_id: str, entry: HistoryEntry) -> None:
        """Append one history entry (never updates or deletes history)."""

    async def list_lapsing(self, until: date, limit: int) -> list[RequirementEntity]:
        """Return accepted required rows with valid_until <= until and no open job.

        Rows of deactivated subcontractors are left out. Soonest expiry first.
        """


# Reminder job repository interface
class IReminderJobRepository(Protocol):
    """Protocol for reminder job repository (DIP)."""

    async def get_by_id(self, job_id: str) -> ReminderJobEntity | None:
        """Return job by id, or None."""

    async def get_open_for_requirement(
        self, requirement_id: str
    ) -> ReminderJobEntity | None:
        """Return the non-done job of a requirement, or None."""

    async def add(self, job: ReminderJobEntity) -> ReminderJobEntity:
        """Insert a new job.

        Raises ConcurrentModificationException when the requirement already
        has an open job.
        """

    async def list_due(self, now: datetime, limit: int) -> list[ReminderJobEntity]:
        """Return open jobs with next_run_at <= now, oldest first."""

    async def claim(
        self,
        job_id: str,
        expected_attempts: int,
        now: datetime,
        next_run_at: datetime,
    ) -> bool:
        """Atomically take one attempt of a due job.

        Succeeds only if the job is open, due and still has expected_attempts;
        sets state SENT, increments attempts, stores next_run_at and claimed_at.
        Returns True if this caller won the claim.
        """

    async def release(
        self,
        job_id: str,
        state: ReminderJobState,
        escalated: bool,
        last_error: str | None,
    ) -> bool:
        """Move a claimed (SENT) job to state; returns False if it is no longer SENT."""

    async def retire(self, job_id: str) -> bool:
        """Set a job to DONE. Returns True if it was open."""

    async def retire_for_subcontractor(self, subcontractor_id: str) -> int:
        """Set all open jobs of a subcontractor to DONE. Returns number retired."""


# Scheduler unit of work
class IReminderUnitOfWork(Protocol):
    """Repositories bound to one short transaction.

    The transaction commits when the context block exits normally and rolls
    back when it raises.
    """

    subcontractors: ISubcontractorRepository
    requirements: IRequirementRepository
    reminder_jobs: IReminderJobRepository


ReminderUnitOfWorkFactory = Callable[
    [], AbstractAsyncContextManager[IReminderUnitOfWork]
]
