"""Tests for Settings validation and building the compliance context from settings."""

import json
from datetime import timedelta

import pytest
from pydantic import ValidationError

from subcompliance.application.context import ComplianceContext, build_compliance_context
from subcompliance.application.services.reminder_policy import (
    ExponentialBackoffPolicy,
    FixedIntervalPolicy,
)
from subcompliance.core.config import Settings
from subcompliance.domain.exceptions import ConfigurationException
from subcompliance.shared.enums import ReminderBackoff


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_defaults_are_valid() -> None:
    """Default settings pass validation."""
    settings = _settings()
    assert settings.expiring_window_days == 30
    assert settings.reminder_backoff == ReminderBackoff.FIXED


@pytest.mark.parametrize(
    "overrides",
    [
        {"expiring_window_days": -1},
        {"default_due_days": 0},
        {"reminder_interval_hours": 0},
        {"reminder_interval_hours": 48, "reminder_max_interval_hours": 24},
        {"reminder_max_attempts": 0},
        {"reminder_batch_size": 0},
    ],
)
def test_invalid_engine_parameters_are_rejected(overrides) -> None:
    """Out-of-range engine parameters fail at load time."""
    with pytest.raises(ValidationError):
        _settings(**overrides)


def test_context_copies_engine_parameters() -> None:
    """build_compliance_context carries windows, attempts and backoff policy."""
    context = build_compliance_context(
        _settings(
            expiring_window_days=14,
            default_due_days=7,
            reminder_max_attempts=4,
            reminder_batch_size=10,
            reminder_interval_hours=24,
        )
    )
    assert context.expiring_window_days == 14
    assert context.default_due_days == 7
    assert context.max_attempts == 4
    assert context.batch_size == 10
    assert context.reminder_policy == FixedIntervalPolicy(timedelta(hours=24))
    assert len(context.catalog) == 14


def test_context_uses_exponential_backoff() -> None:
    """reminder_backoff=exponential builds an exponential policy."""
    context = build_compliance_context(
        _settings(reminder_backoff="exponential", reminder_interval_hours=12)
    )
    assert isinstance(context.reminder_policy, ExponentialBackoffPolicy)


def test_context_loads_catalog_file(tmp_path) -> None:
    """catalog_file replaces the built-in catalog."""
    path = tmp_path / "catalog.json"
    path.write_text(
        json.dumps({"document_types": [{"id": "only", "label": "Only"}]}),
        encoding="utf-8",
    )
    context = build_compliance_context(_settings(catalog_file=str(path)))
    assert [d.id for d in context.catalog] == ["only"]


def test_context_with_broken_catalog_file_fails(tmp_path) -> None:
    """An invalid catalog file is a configuration error at startup."""
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"document_types": "nope"}), encoding="utf-8")
    with pytest.raises(ConfigurationException):
        build_compliance_context(_settings(catalog_file=str(path)))


def test_context_due_date_and_today(context, clock) -> None:
    """The context derives today and due dates from its clock."""
    assert context.today() == clock.now.date()
    assert context.due_date_from(context.today()) == clock.now.date() + timedelta(
        days=14
    )


def test_context_clock_returning_none_is_a_configuration_error() -> None:
    """A clock that yields no time fails loudly instead of passing None on."""
    context = ComplianceContext(clock=lambda: None)
    with pytest.raises(ConfigurationException):
        context.now()
