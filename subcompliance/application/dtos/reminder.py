"""DTOs for reminder scheduler runs."""

from dataclasses import dataclass


@dataclass
class TickResult:
    """Counters of one scheduler tick."""

    due: int = 0
    sent: int = 0
    escalated: int = 0
    skipped: int = 0  # lost the claim to a concurrent tick
    failed: int = 0  # notification dispatch raised
    retired: int = 0  # requirement or subcontractor no longer needs reminders
    scheduled: int = 0  # jobs opened for expiring or expired documents
