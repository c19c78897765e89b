"""Reminder job repository. Claims and releases are conditional updates (no row locks)."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from subcompliance.domain.entities import ReminderJobEntity
from subcompliance.domain.enums import ReminderJobState
from subcompliance.domain.exceptions import ConcurrentModificationException
from subcompliance.infrastructure.persistence.models.reminder_job import ReminderJob
from subcompliance.infrastructure.persistence.repositories.base import BaseRepository
from subcompliance.shared.utils.datetime import ensure_utc

_DONE = ReminderJobState.DONE.value


def _to_entity(j: ReminderJob) -> ReminderJobEntity:
    """Map ORM ReminderJob to ReminderJobEntity."""
    return ReminderJobEntity(
        id=j.id,
        requirement_id=j.requirement_id,
        subcontractor_id=j.subcontractor_id,
        next_run_at=ensure_utc(j.next_run_at),
        state=ReminderJobState(j.state),
        attempts=j.attempts,
        max_attempts=j.max_attempts,
        escalated=j.escalated,
        claimed_at=ensure_utc(j.claimed_at),
        last_error=j.last_error,
    )


class ReminderJobRepository(BaseRepository[ReminderJob]):
    """Reminder job repository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, ReminderJob)

    async def _update_where(self, *criteria: Any, **values: Any) -> int:
        # Criteria compare datetimes, which cannot be evaluated in Python
        result = await self.db.execute(
            update(ReminderJob)
            .where(*criteria)
            .values(**values)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    async def get_by_id(self, job_id: str) -> ReminderJobEntity | None:
        row = await self._get_model(job_id)
        return _to_entity(row) if row else None

    async def get_open_for_requirement(
        self, requirement_id: str
    ) -> ReminderJobEntity | None:
        result = await self.db.execute(
            select(ReminderJob).where(
                ReminderJob.requirement_id == requirement_id,
                ReminderJob.state != _DONE,
            )
        )
        row = result.scalar_one_or_none()
        return _to_entity(row) if row else None

    async def add(self, job: ReminderJobEntity) -> ReminderJobEntity:
        row = ReminderJob(
            id=job.id,
            requirement_id=job.requirement_id,
            subcontractor_id=job.subcontractor_id,
            state=job.state.value,
            next_run_at=job.next_run_at,
            attempts=job.attempts,
            max_attempts=job.max_attempts,
            escalated=job.escalated,
            claimed_at=job.claimed_at,
            last_error=job.last_error,
        )
        try:
            await self._insert(row)
        except IntegrityError as e:
            # uq_reminder_job_open_requirement: another writer scheduled it first
            raise ConcurrentModificationException(
                "reminder_job", job.requirement_id
            ) from e
        return job

    async def list_due(self, now: datetime, limit: int) -> list[ReminderJobEntity]:
        result = await self.db.execute(
            select(ReminderJob)
            .where(ReminderJob.state != _DONE, ReminderJob.next_run_at <= now)
            .order_by(ReminderJob.next_run_at, ReminderJob.id)
            .limit(limit)
        )
        return [_to_entity(j) for j in result.scalars().all()]

    async def claim(
        self,
        job_id: str,
        expected_attempts: int,
        now: datetime,
        next_run_at: datetime,
    ) -> bool:
        """Take one attempt of a due job. Returns True if exactly one row was updated."""
        updated = await self._update_where(
            ReminderJob.id == job_id,
            ReminderJob.state != _DONE,
            ReminderJob.attempts == expected_attempts,
            ReminderJob.next_run_at <= now,
            state=ReminderJobState.SENT.value,
            attempts=expected_attempts + 1,
            next_run_at=next_run_at,
            claimed_at=now,
        )
        return updated == 1

    async def release(
        self,
        job_id: str,
        state: ReminderJobState,
        escalated: bool,
        last_error: str | None,
    ) -> bool:
        updated = await self._update_where(
            ReminderJob.id == job_id,
            ReminderJob.state == ReminderJobState.SENT.value,
            state=state.value,
            escalated=escalated,
            last_error=last_error,
        )
        return updated == 1

    async def retire(self, job_id: str) -> bool:
        updated = await self._update_where(
            ReminderJob.id == job_id, ReminderJob.state != _DONE, state=_DONE
        )
        return updated == 1

    async def retire_for_subcontractor(self, subcontractor_id: str) -> int:
        return await self._update_where(
            ReminderJob.subcontractor_id == subcontractor_id,
            ReminderJob.state != _DONE,
            state=_DONE,
        )
