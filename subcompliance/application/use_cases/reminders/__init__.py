"""Reminder use cases: scheduler tick."""

from subcompliance.application.use_cases.reminders.run_reminder_tick import (
    RunReminderTickUseCase,
)

__all__ = ["RunReminderTickUseCase"]
