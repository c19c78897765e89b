"""Repository implementations. Return domain entities; never leak ORM objects."""

from subcompliance.infrastructure.persistence.repositories.reminder_job_repo import (
    ReminderJobRepository,
)
from subcompliance.infrastructure.persistence.repositories.requirement_repo import (
    RequirementRepository,
)
from subcompliance.infrastructure.persistence.repositories.subcontractor_repo import (
    SubcontractorRepository,
)

__all__ = [
    "ReminderJobRepository",
    "RequirementRepository",
    "SubcontractorRepository",
]
