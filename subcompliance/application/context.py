"""Explicit, immutable engine context built once at startup.

Replaces global settings lookups inside engine code: catalog, windows,
reminder policy and clock are passed to every use case.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from subcompliance.application.services.document_catalog import (
    DocumentCatalog,
    default_catalog,
    load_catalog_file,
)
from subcompliance.application.services.reminder_policy import (
    FixedIntervalPolicy,
    ReminderPolicy,
    build_reminder_policy,
)
from subcompliance.core.constants import (
    DEFAULT_DUE_DAYS,
    DEFAULT_EXPIRING_WINDOW_DAYS,
    DEFAULT_REMINDER_BATCH_SIZE,
    DEFAULT_REMINDER_INTERVAL_HOURS,
    DEFAULT_REMINDER_MAX_ATTEMPTS,
)
from subcompliance.domain.exceptions import ConfigurationException
from subcompliance.shared.utils.datetime import ensure_utc, utc_now

if TYPE_CHECKING:
    from subcompliance.core.config import Settings


@dataclass(frozen=True)
class ComplianceContext:
    """Configuration and clock shared by rule engine, aggregator and scheduler."""

    catalog: DocumentCatalog = field(default_factory=default_catalog)
    reminder_policy: ReminderPolicy = field(
        default_factory=lambda: FixedIntervalPolicy(
            timedelta(hours=DEFAULT_REMINDER_INTERVAL_HOURS)
        )
    )
    expiring_window_days: int = DEFAULT_EXPIRING_WINDOW_DAYS
    default_due_days: int = DEFAULT_DUE_DAYS
    max_attempts: int = DEFAULT_REMINDER_MAX_ATTEMPTS
    batch_size: int = DEFAULT_REMINDER_BATCH_SIZE
    clock: Callable[[], datetime] = utc_now

    def now(self) -> datetime:
        """Return the current time (UTC-aware) from the configured clock."""
        current = ensure_utc(self.clock())
        if current is None:
            raise ConfigurationException("clock returned no time")
        return current

    def today(self) -> date:
        return self.now().date()

    def due_date_from(self, today: date) -> date:
        """Return the due date for a newly requested document."""
        return today + timedelta(days=self.default_due_days)


def build_compliance_context(settings: Settings) -> ComplianceContext:
    """Build the context from validated settings.

    Raises:
        ConfigurationException: If the catalog file is invalid.
    """
    catalog = (
        load_catalog_file(settings.catalog_file)
        if settings.catalog_file
        else default_catalog()
    )
    return ComplianceContext(
        catalog=catalog,
        reminder_policy=build_reminder_policy(
            settings.reminder_backoff,
            settings.reminder_interval_hours,
            settings.reminder_max_interval_hours,
        ),
        expiring_window_days=settings.expiring_window_days,
        default_due_days=settings.default_due_days,
        max_attempts=settings.reminder_max_attempts,
        batch_size=settings.reminder_batch_size,
    )
