"""Domain enumerations for the compliance engine.

One exhaustive enum per concept. Every layer (rule engine, aggregator,
scheduler, API) uses these types; there are no per-screen variants.
"""

from enum import Enum

from subcompliance.shared.enums import _ValuesMixin


class RequirementLevel(_ValuesMixin, str, Enum):
    """Applicability of a document type for one subcontractor."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    HIDDEN = "hidden"


class RequirementStatus(_ValuesMixin, str, Enum):
    """Lifecycle status of a requirement.

    MISSING through REJECTED are stored. EXPIRING and EXPIRED are derived
    from valid_until and the evaluation date and never persisted.
    """

    MISSING = "missing"
    SUBMITTED = "submitted"
    IN_REVIEW = "in_review"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRING = "expiring"
    EXPIRED = "expired"

    @classmethod
    def stored_values(cls) -> list[str]:
        """Return values that may appear in the requirement.status column."""
        return [
            s.value
            for s in cls
            if s not in (RequirementStatus.EXPIRING, RequirementStatus.EXPIRED)
        ]


class ComplianceStatus(_ValuesMixin, str, Enum):
    """Aggregate compliance status of a subcontractor."""

    COMPLIANT = "compliant"
    EXPIRING_SOON = "expiring_soon"
    NON_COMPLIANT = "non_compliant"


class CompanyType(_ValuesMixin, str, Enum):
    """Legal form of the subcontractor."""

    SOLE_PROPRIETOR = "sole_proprietor"
    PARTNERSHIP_GBR = "partnership_gbr"
    CONSTRUCTION_FIRM = "construction_firm"


class Answer(_ValuesMixin, str, Enum):
    """Tri-state answer to an organizational profile question."""

    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"


class ProfileQuestion(_ValuesMixin, str, Enum):
    """Organizational profile questions that requirement rules can reference.

    Values match the OrganizationalProfile attribute names.
    """

    HAS_EMPLOYEES = "has_employees"
    DOES_CONSTRUCTION_WORK = "does_construction_work"
    SOKA_BAU_SUBJECT = "soka_bau_subject"
    SENDS_WORKERS_ABROAD = "sends_workers_abroad"
    PROCESSES_PERSONAL_DATA = "processes_personal_data"
    HR_REGISTERED = "hr_registered"
    NON_EU_WORKERS = "non_eu_workers"
    WORKERS_NOT_EMPLOYED_IN_GERMANY = "workers_not_employed_in_germany"


class ValiditySource(_ValuesMixin, str, Enum):
    """Where an accepted document's valid_until came from."""

    SYSTEM = "system"
    ADMIN_OVERRIDE = "admin_override"
    USER_DECLARED_UNKNOWN = "user_declared_unknown"


class ReminderJobState(_ValuesMixin, str, Enum):
    """Reminder job state. DONE jobs are retired and never run again."""

    SCHEDULED = "scheduled"
    SENT = "sent"
    ESCALATED = "escalated"
    DONE = "done"


class SubcontractorStatus(_ValuesMixin, str, Enum):
    """Subcontractor lifecycle status.

    INACTIVE is the onboarding state (reminders run). ACTIVE requires a
    compliant aggregate at activation time. DEACTIVATED stops reminders.
    """

    INACTIVE = "inactive"
    ACTIVE = "active"
    DEACTIVATED = "deactivated"
