"""Run one reminder scheduler tick: schedule lapsing documents, claim due jobs, dispatch."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any

from subcompliance.application.context import ComplianceContext
from subcompliance.application.dtos.notification import NotificationRequest
from subcompliance.application.dtos.reminder import TickResult
from subcompliance.application.interfaces.repositories import (
    ReminderUnitOfWorkFactory,
)
from subcompliance.application.interfaces.services import INotificationService
from subcompliance.application.services.reminder_policy import template_for_attempt
from subcompliance.core.constants import URGENT_EXPIRY_DAYS
from subcompliance.domain.entities import ReminderJobEntity, RequirementEntity
from subcompliance.domain.enums import ReminderJobState, RequirementStatus
from subcompliance.domain.exceptions import ConcurrentModificationException
from subcompliance.shared.enums import NotificationKind
from subcompliance.shared.telemetry.logging import get_logger
from subcompliance.shared.utils.datetime import ensure_utc

logger = get_logger(__name__)

_LAPSING = frozenset({RequirementStatus.EXPIRING, RequirementStatus.EXPIRED})


class RunReminderTickUseCase:
    """Processes due reminder jobs in bounded batches.

    Every step runs in its own short transaction: the claim of an attempt is
    committed before its notification is sent, and the release after the
    send is a separate commit. A rollback or crash after the send therefore
    never re-opens an attempt that already went out.

    Each attempt is claimed with a conditional update keyed on the job's
    current attempt count, so concurrent ticks never send the same attempt
    twice. The job is re-validated against its requirement and subcontractor
    before sending; jobs that no longer qualify are retired.
    """

    def __init__(
        self,
        unit_of_work: ReminderUnitOfWorkFactory,
        notification_service: INotificationService,
        context: ComplianceContext,
    ) -> None:
        self._unit_of_work = unit_of_work
        self._notification_service = notification_service
        self._context = context

    async def tick(self, now: datetime | None = None) -> TickResult:
        """Run one tick.

        Args:
            now: Evaluation time (defaults to the context clock).

        Returns:
            Counters for scheduled, due, sent, escalated, skipped, failed and
            retired jobs.
        """
        now = ensure_utc(now) or self._context.now()
        result = TickResult()
        await self._schedule_lapsing(now, result)
        async with self._unit_of_work() as uow:
            jobs = await uow.reminder_jobs.list_due(now, self._context.batch_size)
        result.due = len(jobs)
        for job in jobs:
            await self._process(job, now, result)
        logger.info(
            "Reminder tick at %s: scheduled=%s due=%s sent=%s escalated=%s "
            "skipped=%s failed=%s retired=%s",
            now.isoformat(),
            result.scheduled,
            result.due,
            result.sent,
            result.escalated,
            result.skipped,
            result.failed,
            result.retired,
        )
        return result

    async def _schedule_lapsing(self, now: datetime, result: TickResult) -> None:
        """Open a job for every accepted required document inside the expiring window."""
        until = now.date() + timedelta(days=self._context.expiring_window_days)
        async with self._unit_of_work() as uow:
            requirements = await uow.requirements.list_lapsing(
                until, self._context.batch_size
            )
        for requirement in requirements:
            job = ReminderJobEntity.schedule(
                requirement.id,
                requirement.subcontractor_id,
                now,
                self._context.max_attempts,
            )
            try:
                async with self._unit_of_work() as uow:
                    await uow.reminder_jobs.add(job)
            except ConcurrentModificationException:
                logger.debug(
                    "Reminder job for requirement %s already scheduled", requirement.id
                )
                continue
            result.scheduled += 1
            logger.info(
                "Scheduled expiry reminder for requirement %s (valid until %s)",
                requirement.id,
                requirement.valid_until,
            )

    async def _process(
        self, job: ReminderJobEntity, now: datetime, result: TickResult
    ) -> None:
        today = now.date()
        attempt = job.attempts + 1
        async with self._unit_of_work() as uow:
            subcontractor = await uow.subcontractors.get_by_id(job.subcontractor_id)
            requirement = await uow.requirements.get_by_id(job.requirement_id)
            if (
                subcontractor is None
                or requirement is None
                or not subcontractor.receives_reminders()
                or not requirement.needs_reminder(
                    today, self._context.expiring_window_days
                )
            ):
                if await uow.reminder_jobs.retire(job.id):
                    result.retired += 1
                    logger.info("Reminder job %s retired (no longer needed)", job.id)
                return
            claimed = await uow.reminder_jobs.claim(
                job.id,
                job.attempts,
                now,
                self._context.reminder_policy.next_run_at(attempt, now),
            )
        if not claimed:
            result.skipped += 1
            logger.debug("Reminder job %s claimed by another tick", job.id)
            return

        escalate = job.should_escalate_after(attempt)
        request = self._build_request(job, requirement, attempt, escalate, today)
        try:
            await self._notification_service.send(request)
        except Exception as e:
            # Attempt stays counted; next_run_at from the claim schedules the retry
            logger.exception(
                "Reminder dispatch failed for job %s (attempt %s)", job.id, attempt
            )
            result.failed += 1
            async with self._unit_of_work() as uow:
                await uow.reminder_jobs.release(
                    job.id, _state_for(job.escalated), job.escalated, str(e)
                )
            return

        escalated = job.escalated or escalate
        async with self._unit_of_work() as uow:
            await uow.reminder_jobs.release(
                job.id, _state_for(escalated), escalated, None
            )
        if escalate:
            result.escalated += 1
            logger.warning(
                "Escalated %s document %s for subcontractor %s after %s attempts",
                requirement.effective_status(
                    today, self._context.expiring_window_days
                ).value,
                requirement.document_type_id,
                requirement.subcontractor_id,
                attempt,
            )
        else:
            result.sent += 1

    def _build_request(
        self,
        job: ReminderJobEntity,
        requirement: RequirementEntity,
        attempt: int,
        escalate: bool,
        today: date,
    ) -> NotificationRequest:
        status = requirement.effective_status(today, self._context.expiring_window_days)
        lapsing = status in _LAPSING
        metadata: dict[str, Any] = {
            "requirement_id": requirement.id,
            "job_id": job.id,
            "attempt": attempt,
            "max_attempts": job.max_attempts,
            "template": template_for_attempt(attempt).value,
            "status": status.value,
            "due_date": (
                requirement.due_date.isoformat() if requirement.due_date else None
            ),
        }
        if lapsing:
            days = requirement.days_until_expiry(today)
            metadata["valid_until"] = (
                requirement.valid_until.isoformat() if requirement.valid_until else None
            )
            metadata["days_until_expiry"] = days
            metadata["urgent"] = days is not None and days <= URGENT_EXPIRY_DAYS
        if escalate:
            kind = NotificationKind.ESCALATION
        elif lapsing:
            kind = NotificationKind.REMINDER_EXPIRING
        else:
            kind = NotificationKind.REMINDER_MISSING
        return NotificationRequest(
            kind=kind,
            subcontractor_id=requirement.subcontractor_id,
            document_type_ids=[requirement.document_type_id],
            metadata=metadata,
        )


def _state_for(escalated: bool) -> ReminderJobState:
    return ReminderJobState.ESCALATED if escalated else ReminderJobState.SCHEDULED
