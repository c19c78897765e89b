"""Reminder tick over SQLite: claims commit before sends, failures never resend an attempt."""

from datetime import date, timedelta

import pytest

from fakes import FIXED_NOW, RecordingNotificationService, firm_profile
from subcompliance.application.use_cases.reminders import RunReminderTickUseCase
from subcompliance.domain.entities import (
    ReminderJobEntity,
    RequirementEntity,
    SubcontractorEntity,
)
from subcompliance.domain.enums import ReminderJobState, RequirementLevel
from subcompliance.infrastructure.persistence.repositories import (
    ReminderJobRepository,
    RequirementRepository,
    SubcontractorRepository,
)
from subcompliance.infrastructure.persistence.unit_of_work import reminder_unit_of_work


@pytest.fixture
async def seeded(session_factory):
    """One subcontractor with a missing required document and a due job."""
    async with session_factory() as session:
        async with session.begin():
            await SubcontractorRepository(session).create_subcontractor(
                SubcontractorEntity(id="sub1", name="Bau GmbH", profile=firm_profile())
            )
            await RequirementRepository(session).add(
                RequirementEntity(
                    id="req1",
                    subcontractor_id="sub1",
                    document_type_id="haftpflicht",
                    level=RequirementLevel.REQUIRED,
                    due_date=date(2026, 3, 16),
                )
            )
            await ReminderJobRepository(session).add(
                ReminderJobEntity(
                    id="job1",
                    requirement_id="req1",
                    subcontractor_id="sub1",
                    next_run_at=FIXED_NOW,
                    max_attempts=3,
                )
            )
    return session_factory


async def _stored_job(session_factory) -> ReminderJobEntity:
    async with session_factory() as session:
        return await ReminderJobRepository(session).get_by_id("job1")


class SnapshotNotificationService(RecordingNotificationService):
    """Records what another connection sees of the job at send time."""

    def __init__(self, session_factory) -> None:
        super().__init__()
        self.session_factory = session_factory
        self.seen: list[tuple[ReminderJobState, int]] = []

    async def send(self, request) -> None:
        job = await _stored_job(self.session_factory)
        self.seen.append((job.state, job.attempts))
        await super().send(request)


async def test_claim_is_committed_before_send(seeded, context) -> None:
    notifier = SnapshotNotificationService(seeded)
    tick = RunReminderTickUseCase(reminder_unit_of_work(seeded), notifier, context)
    result = await tick.tick()
    assert (result.due, result.sent) == (1, 1)
    assert notifier.seen == [(ReminderJobState.SENT, 1)]
    job = await _stored_job(seeded)
    assert (job.state, job.attempts) == (ReminderJobState.SCHEDULED, 1)


async def test_failure_after_send_does_not_resend_attempt(
    seeded, context, monkeypatch
) -> None:
    """A tick that dies after sending leaves the attempt counted."""
    notifier = RecordingNotificationService()
    tick = RunReminderTickUseCase(reminder_unit_of_work(seeded), notifier, context)

    async def broken_release(self, *args, **kwargs):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(ReminderJobRepository, "release", broken_release)
    with pytest.raises(RuntimeError):
        await tick.tick()
    monkeypatch.undo()

    result = await tick.tick()
    assert result.due == 0
    assert len(notifier.sent) == 1
    job = await _stored_job(seeded)
    assert (job.state, job.attempts) == (ReminderJobState.SENT, 1)

    result = await tick.tick(FIXED_NOW + timedelta(hours=72))
    assert (result.due, result.sent) == (1, 1)
    assert [n.metadata["attempt"] for n in notifier.sent] == [1, 2]
    job = await _stored_job(seeded)
    assert (job.state, job.attempts) == (ReminderJobState.SCHEDULED, 2)


async def test_rolled_back_claim_sends_nothing(seeded, context, monkeypatch) -> None:
    """A claim whose transaction rolls back is retried by the next tick."""
    notifier = RecordingNotificationService()
    tick = RunReminderTickUseCase(reminder_unit_of_work(seeded), notifier, context)
    claim = ReminderJobRepository.claim

    async def claim_then_fail(self, *args, **kwargs):
        await claim(self, *args, **kwargs)
        raise RuntimeError("commit failed")

    monkeypatch.setattr(ReminderJobRepository, "claim", claim_then_fail)
    with pytest.raises(RuntimeError):
        await tick.tick()
    monkeypatch.undo()

    assert notifier.sent == []
    job = await _stored_job(seeded)
    assert (job.state, job.attempts) == (ReminderJobState.SCHEDULED, 0)

    result = await tick.tick()
    assert (result.due, result.sent) == (1, 1)
    assert notifier.sent[0].metadata["attempt"] == 1
