"""Shared enumerations for the compliance engine.

Cross-cutting enums used by application and infrastructure (notification
kinds, history actions). Domain-specific enums (e.g. RequirementStatus)
live in subcompliance.domain.enums.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class NotificationKind(_ValuesMixin, str, Enum):
    """Outbound notification kinds handed to the notification port."""

    REMINDER_MISSING = "reminder_missing"
    REMINDER_EXPIRING = "reminder_expiring"
    ESCALATION = "escalation"
    STATUS_CHANGED = "status_changed"


class HistoryAction(_ValuesMixin, str, Enum):
    """Actions recorded in a requirement's append-only review history."""

    SUBMITTED = "submitted"
    REPLACED = "replaced"
    REVIEW_STARTED = "review_started"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    RE_REQUESTED = "re_requested"


class ReminderBackoff(_ValuesMixin, str, Enum):
    """Reminder backoff strategy selected in settings."""

    FIXED = "fixed"
    EXPONENTIAL = "exponential"
    SCHEDULE = "schedule"


class ReminderTemplate(_ValuesMixin, str, Enum):
    """Message tier of a reminder, by attempt number."""

    INVITE_INITIAL = "invite_initial"
    REMINDER_SOFT = "reminder_soft"
    REMINDER_HARD = "reminder_hard"
