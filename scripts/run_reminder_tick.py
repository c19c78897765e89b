"""Run the reminder/escalation scheduler.

Usage:
    python -m scripts.run_reminder_tick [interval_seconds]
Without an interval, runs one tick and exits (for cron). With an interval,
ticks repeatedly until interrupted. Each step of a tick commits on its own;
several processes may run concurrently (claims are conditional updates).
Requires DATABASE_URL.
"""

import asyncio
import sys

import subcompliance.infrastructure.persistence.database as database
from subcompliance.application.context import build_compliance_context
from subcompliance.application.use_cases.reminders import RunReminderTickUseCase
from subcompliance.core.config import get_settings
from subcompliance.infrastructure.persistence.unit_of_work import reminder_unit_of_work
from subcompliance.infrastructure.services import LogOnlyNotificationService
from subcompliance.shared.telemetry.logging import get_logger, setup_logging

logger = get_logger("scripts.run_reminder_tick")


async def run_once(context) -> None:
    """Process one batch of due jobs; claims and releases commit per job."""
    use_case = RunReminderTickUseCase(
        reminder_unit_of_work(database.get_session_factory()),
        LogOnlyNotificationService(),
        context,
    )
    result = await use_case.tick()
    print(
        f"Tick done: scheduled={result.scheduled} due={result.due} sent={result.sent} "
        f"escalated={result.escalated} "
        f"skipped={result.skipped} failed={result.failed} retired={result.retired}"
    )


async def main() -> None:
    """Run one tick, or loop with the given interval."""
    settings = get_settings()
    setup_logging()
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        print("AsyncSessionLocal not configured", file=sys.stderr)
        sys.exit(1)
    context = build_compliance_context(settings)

    interval = float(sys.argv[1]) if len(sys.argv) > 1 else None
    if interval is not None and interval <= 0:
        print("interval_seconds must be > 0", file=sys.stderr)
        sys.exit(1)

    try:
        while True:
            try:
                await run_once(context)
            except Exception:
                if interval is None:
                    raise
                logger.exception("Reminder tick failed; retrying in %ss", interval)
            if interval is None:
                break
            await asyncio.sleep(interval)
    finally:
        if database.engine is not None:
            await database.engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
