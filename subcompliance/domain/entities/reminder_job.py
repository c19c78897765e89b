"""Reminder job domain entity."""

from dataclasses import dataclass
from datetime import datetime

from subcompliance.domain.enums import ReminderJobState
from subcompliance.shared.utils.generators import generate_cuid


@dataclass
class ReminderJobEntity:
    """Scheduled follow-up for one open requirement.

    attempts counts delivered or attempted reminders. escalated flips once,
    after the escalation notification was dispatched successfully.
    """

    id: str
    requirement_id: str
    subcontractor_id: str
    next_run_at: datetime
    state: ReminderJobState = ReminderJobState.SCHEDULED
    attempts: int = 0
    max_attempts: int = 5
    escalated: bool = False
    claimed_at: datetime | None = None
    last_error: str | None = None

    @classmethod
    def schedule(
        cls,
        requirement_id: str,
        subcontractor_id: str,
        now: datetime,
        max_attempts: int,
    ) -> "ReminderJobEntity":
        """New job with its first attempt due immediately."""
        return cls(
            id=generate_cuid(),
            requirement_id=requirement_id,
            subcontractor_id=subcontractor_id,
            next_run_at=now,
            max_attempts=max_attempts,
        )

    def should_escalate_after(self, attempts: int) -> bool:
        """Return True if the attempt with this number must be an escalation."""
        return not self.escalated and attempts >= self.max_attempts
