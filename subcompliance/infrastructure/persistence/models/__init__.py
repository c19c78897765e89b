"""Persistence models: ORM entities and mixins."""

from subcompliance.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
    VersionedMixin,
)
from subcompliance.infrastructure.persistence.models.reminder_job import ReminderJob
from subcompliance.infrastructure.persistence.models.requirement import (
    Requirement,
    RequirementHistory,
)
from subcompliance.infrastructure.persistence.models.subcontractor import (
    Subcontractor,
)

__all__ = [
    "CuidMixin",
    "ReminderJob",
    "Requirement",
    "RequirementHistory",
    "Subcontractor",
    "TimestampMixin",
    "VersionedMixin",
]
