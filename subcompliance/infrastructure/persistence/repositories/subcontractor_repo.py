"""Subcontractor repository. Returns SubcontractorEntity."""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from subcompliance.domain.entities import SubcontractorEntity
from subcompliance.domain.enums import ComplianceStatus, SubcontractorStatus
from subcompliance.domain.exceptions import ConcurrentModificationException
from subcompliance.domain.value_objects import OrganizationalProfile
from subcompliance.infrastructure.persistence.models.reminder_job import ReminderJob
from subcompliance.infrastructure.persistence.models.requirement import (
    Requirement,
    RequirementHistory,
)
from subcompliance.infrastructure.persistence.models.subcontractor import (
    Subcontractor,
)
from subcompliance.infrastructure.persistence.repositories.base import BaseRepository


def _to_entity(s: Subcontractor) -> SubcontractorEntity:
    """Map ORM Subcontractor to SubcontractorEntity."""
    return SubcontractorEntity(
        id=s.id,
        name=s.name,
        profile=OrganizationalProfile.from_dict(s.profile or {}),
        status=SubcontractorStatus(s.status),
        requirements_revision=s.requirements_revision,
        compliance_status=(
            ComplianceStatus(s.compliance_status) if s.compliance_status else None
        ),
        compliance_revision=s.compliance_revision,
        compliance_as_of=s.compliance_as_of,
        version=s.version,
    )


def _to_values(entity: SubcontractorEntity) -> dict[str, Any]:
    """Column values for insert and update (version handled separately)."""
    return {
        "name": entity.name,
        "status": entity.status.value,
        "profile": entity.profile.to_dict(),
        "requirements_revision": entity.requirements_revision,
        "compliance_status": (
            entity.compliance_status.value if entity.compliance_status else None
        ),
        "compliance_revision": entity.compliance_revision,
        "compliance_as_of": entity.compliance_as_of,
    }


class SubcontractorRepository(BaseRepository[Subcontractor]):
    """Subcontractor repository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Subcontractor)

    async def get_by_id(self, subcontractor_id: str) -> SubcontractorEntity | None:
        row = await self._get_model(subcontractor_id)
        return _to_entity(row) if row else None

    async def create_subcontractor(
        self, subcontractor: SubcontractorEntity
    ) -> SubcontractorEntity:
        """Insert subcontractor; return the stored entity."""
        row = Subcontractor(
            id=subcontractor.id, version=subcontractor.version, **_to_values(subcontractor)
        )
        created = await self._insert(row)
        return _to_entity(created)

    async def save(self, subcontractor: SubcontractorEntity) -> SubcontractorEntity:
        """Persist changes under optimistic lock; bumps subcontractor.version in place."""
        updated = await self._conditional_update(
            subcontractor.id, subcontractor.version, _to_values(subcontractor)
        )
        if not updated:
            raise ConcurrentModificationException("subcontractor", subcontractor.id)
        subcontractor.version += 1
        return subcontractor

    async def delete_subcontractor(self, subcontractor_id: str) -> bool:
        """Delete subcontractor, its requirements with history and its reminder jobs."""
        requirement_ids = select(Requirement.id).where(
            Requirement.subcontractor_id == subcontractor_id
        )
        await self.db.execute(
            delete(ReminderJob).where(ReminderJob.subcontractor_id == subcontractor_id)
        )
        await self.db.execute(
            delete(RequirementHistory).where(
                RequirementHistory.requirement_id.in_(requirement_ids)
            )
        )
        await self.db.execute(
            delete(Requirement).where(Requirement.subcontractor_id == subcontractor_id)
        )
        return await self._delete(subcontractor_id)
