"""Domain entities: requirement (lifecycle state machine), subcontractor, reminder job."""

from subcompliance.domain.entities.reminder_job import ReminderJobEntity
from subcompliance.domain.entities.requirement import RequirementEntity
from subcompliance.domain.entities.subcontractor import SubcontractorEntity

__all__ = [
    "ReminderJobEntity",
    "RequirementEntity",
    "SubcontractorEntity",
]
