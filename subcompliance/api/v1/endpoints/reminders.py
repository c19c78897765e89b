"""Reminder API: trigger one scheduler tick (for cron-style external schedulers)."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends

from subcompliance.api.v1.dependencies import get_reminder_tick_use_case
from subcompliance.application.use_cases.reminders import RunReminderTickUseCase
from subcompliance.schemas.reminder import ReminderTickRequest, ReminderTickResponse

router = APIRouter()


@router.post("/tick", response_model=ReminderTickResponse)
async def run_tick(
    use_case: Annotated[RunReminderTickUseCase, Depends(get_reminder_tick_use_case)],
    body: Annotated[ReminderTickRequest | None, Body()] = None,
):
    """Process due reminder jobs once and return the outcome counts."""
    result = await use_case.tick(body.now if body else None)
    return ReminderTickResponse.model_validate(result)
