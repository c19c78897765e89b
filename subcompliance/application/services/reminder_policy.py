"""Reminder backoff policies (when the next attempt is due) and message tiers.

The policy is chosen by Settings.reminder_backoff and built once into the
ComplianceContext.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol

from subcompliance.core.constants import HARD_REMINDER_FROM_ATTEMPT
from subcompliance.shared.enums import ReminderBackoff, ReminderTemplate

# Days between reminders after attempt 1, 2, 3, ...; the last value repeats
DEFAULT_REMINDER_SCHEDULE_DAYS: tuple[int, ...] = (3, 4, 7, 4, 7)


class ReminderPolicy(Protocol):
    """Computes the next run time after an attempt."""

    def next_run_at(self, attempts: int, now: datetime) -> datetime:
        """Return when to run again after attempt number `attempts` (1-based)."""
        ...


@dataclass(frozen=True)
class FixedIntervalPolicy:
    """Same interval after every attempt."""

    interval: timedelta

    def next_run_at(self, attempts: int, now: datetime) -> datetime:
        return now + self.interval


@dataclass(frozen=True)
class ExponentialBackoffPolicy:
    """interval * 2^(attempts-1), capped at max_interval."""

    interval: timedelta
    max_interval: timedelta

    def next_run_at(self, attempts: int, now: datetime) -> datetime:
        exponent = max(attempts - 1, 0)
        # Cap the exponent so the multiplication cannot overflow timedelta
        delay = self.interval * (2 ** min(exponent, 16))
        return now + min(delay, self.max_interval)


@dataclass(frozen=True)
class ScheduleBackoffPolicy:
    """Fixed day offsets per attempt; the last offset repeats."""

    days: tuple[int, ...] = DEFAULT_REMINDER_SCHEDULE_DAYS

    def __post_init__(self) -> None:
        if not self.days or any(d <= 0 for d in self.days):
            raise ValueError("ScheduleBackoffPolicy.days must be non-empty and positive")

    def next_run_at(self, attempts: int, now: datetime) -> datetime:
        index = min(max(attempts, 1), len(self.days)) - 1
        return now + timedelta(days=self.days[index])


def build_reminder_policy(
    backoff: ReminderBackoff,
    interval_hours: int,
    max_interval_hours: int,
) -> ReminderPolicy:
    """Return the policy for a backoff kind.

    Args:
        backoff: Strategy from settings.
        interval_hours: Base interval (fixed and exponential).
        max_interval_hours: Upper bound for exponential backoff.

    Returns:
        A ReminderPolicy instance.
    """
    interval = timedelta(hours=interval_hours)
    if backoff == ReminderBackoff.EXPONENTIAL:
        return ExponentialBackoffPolicy(interval, timedelta(hours=max_interval_hours))
    if backoff == ReminderBackoff.SCHEDULE:
        return ScheduleBackoffPolicy()
    return FixedIntervalPolicy(interval)


def template_for_attempt(attempt: int) -> ReminderTemplate:
    """Return the message tier for a 1-based attempt number."""
    if attempt <= 1:
        return ReminderTemplate.INVITE_INITIAL
    if attempt >= HARD_REMINDER_FROM_ATTEMPT:
        return ReminderTemplate.REMINDER_HARD
    return ReminderTemplate.REMINDER_SOFT
