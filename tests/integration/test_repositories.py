"""Tests for the SQLAlchemy repositories against in-memory SQLite."""

from datetime import date, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from fakes import FIXED_NOW, firm_profile
from subcompliance.domain.entities import (
    ReminderJobEntity,
    RequirementEntity,
    SubcontractorEntity,
)
from subcompliance.domain.enums import (
    ComplianceStatus,
    ReminderJobState,
    RequirementLevel,
    RequirementStatus,
    ValiditySource,
)
from subcompliance.domain.exceptions import ConcurrentModificationException
from subcompliance.domain.value_objects import HistoryEntry
from subcompliance.infrastructure.persistence.models import Requirement
from subcompliance.infrastructure.persistence.repositories import (
    ReminderJobRepository,
    RequirementRepository,
    SubcontractorRepository,
)
from subcompliance.shared.enums import HistoryAction


async def _subcontractor(db_session, sub_id: str = "sub1") -> SubcontractorEntity:
    repo = SubcontractorRepository(db_session)
    return await repo.create_subcontractor(
        SubcontractorEntity(id=sub_id, name="Bau GmbH", profile=firm_profile())
    )


async def _requirement(
    db_session, req_id: str = "req1", doc: str = "haftpflicht", scope: str | None = None
) -> RequirementEntity:
    repo = RequirementRepository(db_session)
    return await repo.add(
        RequirementEntity(
            id=req_id,
            subcontractor_id="sub1",
            document_type_id=doc,
            level=RequirementLevel.REQUIRED,
            project_assignment_id=scope,
            due_date=date(2026, 3, 16),
        )
    )


def _job(job_id: str = "job1", req_id: str = "req1", **kwargs) -> ReminderJobEntity:
    return ReminderJobEntity(
        id=job_id,
        requirement_id=req_id,
        subcontractor_id="sub1",
        next_run_at=kwargs.pop("next_run_at", FIXED_NOW),
        max_attempts=3,
        **kwargs,
    )


async def test_subcontractor_round_trip(db_session) -> None:
    """Profile, status and aggregate columns map back to the entity."""
    created = await _subcontractor(db_session)
    repo = SubcontractorRepository(db_session)
    created.bump_revision()
    created.record_compliance(ComplianceStatus.NON_COMPLIANT, date(2026, 3, 2))
    await repo.save(created)

    loaded = await repo.get_by_id("sub1")
    assert loaded.profile == firm_profile()
    assert loaded.version == 2
    assert loaded.requirements_revision == 1
    assert loaded.cached_compliance(date(2026, 3, 2)) == ComplianceStatus.NON_COMPLIANT
    assert await repo.get_by_id("missing") is None


async def test_subcontractor_save_detects_stale_version(db_session) -> None:
    """A save with an outdated version raises ConcurrentModificationException."""
    await _subcontractor(db_session)
    repo = SubcontractorRepository(db_session)
    first = await repo.get_by_id("sub1")
    second = await repo.get_by_id("sub1")
    first.name = "Bau AG"
    await repo.save(first)
    second.name = "Bau KG"
    with pytest.raises(ConcurrentModificationException):
        await repo.save(second)


async def test_requirement_history_is_ordered(db_session) -> None:
    """History rows come back in append order with metadata."""
    await _subcontractor(db_session)
    await _requirement(db_session)
    repo = RequirementRepository(db_session)
    for offset, action in enumerate(
        (HistoryAction.SUBMITTED, HistoryAction.REVIEW_STARTED, HistoryAction.REJECTED)
    ):
        await repo.append_history(
            "req1",
            HistoryEntry(
                FIXED_NOW + timedelta(minutes=offset), action, "reviewer", {"n": offset}
            ),
        )
    loaded = await repo.get_by_id("req1")
    assert [h.action for h in loaded.history] == [
        HistoryAction.SUBMITTED,
        HistoryAction.REVIEW_STARTED,
        HistoryAction.REJECTED,
    ]
    assert loaded.history[2].metadata == {"n": 2}
    assert loaded.history[0].timestamp == FIXED_NOW


async def test_requirement_save_and_valid_to_column(db_session) -> None:
    """valid_until is stored in the valid_to column; saves are version-checked."""
    await _subcontractor(db_session)
    await _requirement(db_session)
    repo = RequirementRepository(db_session)
    req = await repo.get_by_id("req1")
    req.status = RequirementStatus.ACCEPTED
    req.valid_until = date(2027, 3, 2)
    req.validity_source = ValiditySource.SYSTEM
    await repo.save(req)

    raw = await db_session.execute(
        select(Requirement.__table__.c.valid_to).where(Requirement.id == "req1")
    )
    assert raw.scalar_one() == date(2027, 3, 2)
    stale = await repo.get_by_id("req1")
    stale.version = 1
    with pytest.raises(ConcurrentModificationException):
        await repo.save(stale)


async def test_requirement_scopes(db_session) -> None:
    """Subcontractor-wide and assignment rows are looked up separately."""
    await _subcontractor(db_session)
    await _requirement(db_session, "req1")
    await _requirement(db_session, "req2", scope="proj-1")
    repo = RequirementRepository(db_session)
    assert (await repo.get_for_document_type("sub1", "haftpflicht")).id == "req1"
    assert (
        await repo.get_for_document_type("sub1", "haftpflicht", "proj-1")
    ).id == "req2"
    assert [r.id for r in await repo.list_for_scope("sub1")] == ["req1"]
    assert len(await repo.list_for_subcontractor("sub1")) == 2


async def test_duplicate_requirement_row_is_rejected(db_session) -> None:
    """One row per subcontractor, scope and document type."""
    await _subcontractor(db_session)
    await _requirement(db_session, "req1")
    with pytest.raises(IntegrityError):
        await _requirement(db_session, "req2")


async def test_job_claim_release_cycle(db_session) -> None:
    """A due job is claimed once per attempt and released back to scheduled."""
    await _subcontractor(db_session)
    await _requirement(db_session)
    repo = ReminderJobRepository(db_session)
    await repo.add(_job())
    later = FIXED_NOW + timedelta(hours=72)

    assert [j.id for j in await repo.list_due(FIXED_NOW, 10)] == ["job1"]
    assert await repo.claim("job1", 0, FIXED_NOW, later) is True
    assert await repo.claim("job1", 0, FIXED_NOW, later) is False

    claimed = await repo.get_by_id("job1")
    assert claimed.state == ReminderJobState.SENT
    assert claimed.attempts == 1
    assert claimed.next_run_at == later
    assert claimed.claimed_at == FIXED_NOW
    assert await repo.list_due(FIXED_NOW, 10) == []

    assert await repo.release("job1", ReminderJobState.SCHEDULED, False, "smtp down")
    released = await repo.get_by_id("job1")
    assert released.state == ReminderJobState.SCHEDULED
    assert released.last_error == "smtp down"
    assert await repo.release("job1", ReminderJobState.SCHEDULED, False, None) is False


async def test_job_retire(db_session) -> None:
    """Retired jobs are no longer open or due."""
    await _subcontractor(db_session)
    await _requirement(db_session)
    repo = ReminderJobRepository(db_session)
    await repo.add(_job())
    assert await repo.retire("job1") is True
    assert await repo.retire("job1") is False
    assert await repo.get_open_for_requirement("req1") is None
    assert await repo.list_due(FIXED_NOW, 10) == []
    await repo.add(_job("job2"))
    assert await repo.retire_for_subcontractor("sub1") == 1


async def test_list_due_orders_and_limits(db_session) -> None:
    """Due jobs come oldest first, bounded by the limit."""
    await _subcontractor(db_session)
    await _requirement(db_session, "req1")
    await _requirement(db_session, "req2", doc="gewerbeanmeldung")
    await _requirement(db_session, "req3", doc="avv")
    repo = ReminderJobRepository(db_session)
    await repo.add(_job("a", "req1", next_run_at=FIXED_NOW))
    await repo.add(_job("b", "req2", next_run_at=FIXED_NOW - timedelta(hours=1)))
    await repo.add(_job("c", "req3", next_run_at=FIXED_NOW + timedelta(hours=1)))
    assert [j.id for j in await repo.list_due(FIXED_NOW, 10)] == ["b", "a"]
    assert [j.id for j in await repo.list_due(FIXED_NOW, 1)] == ["b"]
    assert await repo.retire_for_subcontractor("sub1") == 3
    assert await repo.list_due(FIXED_NOW + timedelta(hours=2), 10) == []


async def test_delete_subcontractor_removes_dependents(db_session) -> None:
    """Requirements, history and jobs go with the subcontractor."""
    await _subcontractor(db_session)
    await _requirement(db_session)
    requirements = RequirementRepository(db_session)
    await requirements.append_history(
        "req1", HistoryEntry(FIXED_NOW, HistoryAction.SUBMITTED, "u")
    )
    jobs = ReminderJobRepository(db_session)
    await jobs.add(_job())

    assert await SubcontractorRepository(db_session).delete_subcontractor("sub1")
    assert await requirements.list_for_subcontractor("sub1") == []
    assert await jobs.get_by_id("job1") is None
    assert not await SubcontractorRepository(db_session).delete_subcontractor("sub1")


async def test_second_open_job_for_requirement_conflicts(db_session) -> None:
    """Only one open job per requirement; the loser gets a concurrency error."""
    await _subcontractor(db_session)
    await _requirement(db_session)
    repo = ReminderJobRepository(db_session)
    await repo.add(_job("job1"))
    with pytest.raises(ConcurrentModificationException):
        await repo.add(_job("job2"))


async def _accepted(db_session, req_id: str, doc: str, valid_until: date) -> None:
    await _requirement(db_session, req_id, doc=doc)
    repo = RequirementRepository(db_session)
    req = await repo.get_by_id(req_id)
    req.status = RequirementStatus.ACCEPTED
    req.valid_until = valid_until
    req.validity_source = ValiditySource.SYSTEM
    await repo.save(req)


async def test_list_lapsing_finds_accepted_rows_without_open_job(db_session) -> None:
    """Accepted required rows up to the cutoff, soonest first, skipping open jobs."""
    await _subcontractor(db_session)
    until = date(2026, 4, 1)
    await _accepted(db_session, "soon", "haftpflicht", date(2026, 3, 20))
    await _accepted(db_session, "gone", "soka_bau", date(2026, 2, 1))
    await _accepted(db_session, "later", "gewerbeanmeldung", date(2026, 6, 1))
    await _accepted(db_session, "tracked", "avv", date(2026, 3, 10))
    await _requirement(db_session, "missing", doc="bg_mitgliedschaft")
    jobs = ReminderJobRepository(db_session)
    await jobs.add(_job("job1", "tracked"))

    repo = RequirementRepository(db_session)
    assert [r.id for r in await repo.list_lapsing(until, 10)] == ["gone", "soon"]
    assert [r.id for r in await repo.list_lapsing(until, 1)] == ["gone"]

    await jobs.retire("job1")
    assert [r.id for r in await repo.list_lapsing(until, 10)] == [
        "gone",
        "tracked",
        "soon",
    ]


async def test_list_lapsing_skips_optional_and_deactivated(db_session) -> None:
    sub = await _subcontractor(db_session)
    await _accepted(db_session, "req1", "haftpflicht", date(2026, 3, 20))
    repo = RequirementRepository(db_session)
    req = await repo.get_by_id("req1")
    req.change_level(RequirementLevel.OPTIONAL)
    await repo.save(req)
    assert await repo.list_lapsing(date(2026, 4, 1), 10) == []

    req = await repo.get_by_id("req1")
    req.change_level(RequirementLevel.REQUIRED)
    await repo.save(req)
    sub.deactivate()
    await SubcontractorRepository(db_session).save(sub)
    assert await repo.list_lapsing(date(2026, 4, 1), 10) == []
