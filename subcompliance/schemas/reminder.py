"""Reminder scheduler API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ReminderTickRequest(BaseModel):
    """Optional evaluation time for a scheduler tick (defaults to now)."""

    now: datetime | None = Field(default=None, description="Timezone-aware UTC time")


class ReminderTickResponse(BaseModel):
    """Outcome counts of one scheduler tick."""

    model_config = ConfigDict(from_attributes=True)

    due: int
    sent: int
    escalated: int
    skipped: int
    failed: int
    retired: int
    scheduled: int
