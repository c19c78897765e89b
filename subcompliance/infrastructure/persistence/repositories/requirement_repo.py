"""Requirement repository. Returns RequirementEntity with its history loaded."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Any

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from subcompliance.domain.entities import RequirementEntity
from subcompliance.domain.enums import (
    ReminderJobState,
    RequirementLevel,
    RequirementStatus,
    SubcontractorStatus,
    ValiditySource,
)
from subcompliance.domain.exceptions import ConcurrentModificationException
from subcompliance.domain.value_objects import HistoryEntry
from subcompliance.infrastructure.persistence.models.reminder_job import ReminderJob
from subcompliance.infrastructure.persistence.models.requirement import (
    Requirement,
    RequirementHistory,
)
from subcompliance.infrastructure.persistence.models.subcontractor import Subcontractor
from subcompliance.infrastructure.persistence.repositories.base import BaseRepository
from subcompliance.shared.enums import HistoryAction
from subcompliance.shared.utils.datetime import ensure_utc


def _history_to_entry(h: RequirementHistory) -> HistoryEntry:
    """Map ORM RequirementHistory to HistoryEntry."""
    return HistoryEntry(
        timestamp=ensure_utc(h.occurred_at),
        action=HistoryAction(h.action),
        actor=h.actor,
        metadata=dict(h.details or {}),
    )


def _to_entity(
    r: Requirement, history: list[RequirementHistory] | None = None
) -> RequirementEntity:
    """Map ORM Requirement (and its history rows) to RequirementEntity."""
    return RequirementEntity(
        id=r.id,
        subcontractor_id=r.subcontractor_id,
        document_type_id=r.document_type_id,
        level=RequirementLevel(r.level),
        status=RequirementStatus(r.status),
        project_assignment_id=r.project_assignment_id,
        due_date=r.due_date,
        valid_until=r.valid_until,
        validity_source=(
            ValiditySource(r.validity_source) if r.validity_source else None
        ),
        rejection_reason=r.rejection_reason,
        artifact_ref=r.artifact_ref,
        custom_label=r.custom_label,
        history=[_history_to_entry(h) for h in history or []],
        version=r.version,
    )


def _to_values(entity: RequirementEntity) -> dict[str, Any]:
    """Mutable column values (identity columns and version excluded)."""
    return {
        "level": entity.level.value,
        "status": entity.status.value,
        "due_date": entity.due_date,
        "valid_until": entity.valid_until,
        "validity_source": (
            entity.validity_source.value if entity.validity_source else None
        ),
        "rejection_reason": entity.rejection_reason,
        "artifact_ref": entity.artifact_ref,
        "custom_label": entity.custom_label,
    }


def _scope_filter(project_assignment_id: str | None):
    if project_assignment_id is None:
        return Requirement.project_assignment_id.is_(None)
    return Requirement.project_assignment_id == project_assignment_id


class RequirementRepository(BaseRepository[Requirement]):
    """Requirement repository. History rows are only ever inserted."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Requirement)

    async def _with_history(self, rows: list[Requirement]) -> list[RequirementEntity]:
        """Load history of all rows with one IN query and map to entities."""
        if not rows:
            return []
        result = await self.db.execute(
            select(RequirementHistory)
            .where(RequirementHistory.requirement_id.in_([r.id for r in rows]))
            .order_by(RequirementHistory.requirement_id, RequirementHistory.position)
        )
        by_requirement: dict[str, list[RequirementHistory]] = defaultdict(list)
        for h in result.scalars().all():
            by_requirement[h.requirement_id].append(h)
        return [_to_entity(r, by_requirement.get(r.id)) for r in rows]

    async def get_by_id(self, requirement_id: str) -> RequirementEntity | None:
        row = await self._get_model(requirement_id)
        if row is None:
            return None
        return (await self._with_history([row]))[0]

    async def get_for_document_type(
        self,
        subcontractor_id: str,
        document_type_id: str,
        project_assignment_id: str | None = None,
    ) -> RequirementEntity | None:
        result = await self.db.execute(
            select(Requirement).where(
                Requirement.subcontractor_id == subcontractor_id,
                Requirement.document_type_id == document_type_id,
                _scope_filter(project_assignment_id),
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return (await self._with_history([row]))[0]

    async def list_for_subcontractor(
        self, subcontractor_id: str
    ) -> list[RequirementEntity]:
        result = await self.db.execute(
            select(Requirement)
            .where(Requirement.subcontractor_id == subcontractor_id)
            .order_by(Requirement.project_assignment_id, Requirement.document_type_id)
        )
        return await self._with_history(list(result.scalars().all()))

    async def list_for_scope(
        self, subcontractor_id: str, project_assignment_id: str | None = None
    ) -> list[RequirementEntity]:
        result = await self.db.execute(
            select(Requirement)
            .where(
                Requirement.subcontractor_id == subcontractor_id,
                _scope_filter(project_assignment_id),
            )
            .order_by(Requirement.document_type_id)
        )
        return await self._with_history(list(result.scalars().all()))

    async def add(self, requirement: RequirementEntity) -> RequirementEntity:
        """Insert requirement row. History entries are appended separately."""
        row = Requirement(
            id=requirement.id,
            subcontractor_id=requirement.subcontractor_id,
            project_assignment_id=requirement.project_assignment_id,
            document_type_id=requirement.document_type_id,
            version=requirement.version,
            **_to_values(requirement),
        )
        await self._insert(row)
        return requirement

    async def save(self, requirement: RequirementEntity) -> RequirementEntity:
        """Persist changes under optimistic lock; bumps requirement.version in place."""
        updated = await self._conditional_update(
            requirement.id, requirement.version, _to_values(requirement)
        )
        if not updated:
            raise ConcurrentModificationException("requirement", requirement.id)
        requirement.version += 1
        return requirement

    async def append_history(self, requirement_id: str, entry: HistoryEntry) -> None:
        """Insert one history row at the next position of the requirement."""
        result = await self.db.execute(
            select(func.max(RequirementHistory.position)).where(
                RequirementHistory.requirement_id == requirement_id
            )
        )
        last = result.scalar()
        row = RequirementHistory(
            requirement_id=requirement_id,
            position=(last + 1) if last is not None else 0,
            occurred_at=entry.timestamp,
            action=entry.action.value,
            actor=entry.actor,
            details=dict(entry.metadata),
        )
        self.db.add(row)
        await self.db.flush()

    async def list_lapsing(self, until: date, limit: int) -> list[RequirementEntity]:
        """Accepted required rows expiring by `until` that have no open reminder job."""
        open_job = exists().where(
            ReminderJob.requirement_id == Requirement.id,
            ReminderJob.state != ReminderJobState.DONE.value,
        )
        result = await self.db.execute(
            select(Requirement)
            .join(Subcontractor, Subcontractor.id == Requirement.subcontractor_id)
            .where(
                Requirement.level == RequirementLevel.REQUIRED.value,
                Requirement.status == RequirementStatus.ACCEPTED.value,
                Requirement.valid_until.is_not(None),
                Requirement.valid_until <= until,
                Subcontractor.status != SubcontractorStatus.DEACTIVATED.value,
                ~open_job,
            )
            .order_by(Requirement.valid_until, Requirement.id)
            .limit(limit)
        )
        return await self._with_history(list(result.scalars().all()))
