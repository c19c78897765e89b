"""Tests for validity policies, valid_until resolution and calendar helpers."""

from datetime import date

import pytest

from subcompliance.domain.enums import ValiditySource
from subcompliance.domain.exceptions import ValidationException
from subcompliance.domain.value_objects import (
    FixedCalendarDate,
    FixedMonths,
    NoExpiry,
    UserDeclaredUnknown,
    resolve_valid_until,
)
from subcompliance.shared.utils.datetime import add_months, next_calendar_date


def test_no_expiry_resolves_to_none() -> None:
    """NoExpiry stores no valid_until."""
    assert resolve_valid_until(NoExpiry(), date(2026, 3, 2)) == (
        None,
        ValiditySource.SYSTEM,
    )


def test_fixed_months_adds_calendar_months() -> None:
    """FixedMonths counts calendar months from the acceptance date."""
    assert resolve_valid_until(FixedMonths(12), date(2026, 3, 2)) == (
        date(2027, 3, 2),
        ValiditySource.SYSTEM,
    )


def test_fixed_months_clamps_to_month_end() -> None:
    """31 Jan + 1 month is the last day of February."""
    valid_until, _ = resolve_valid_until(FixedMonths(1), date(2026, 1, 31))
    assert valid_until == date(2026, 2, 28)


def test_fixed_calendar_date_uses_next_occurrence() -> None:
    """FixedCalendarDate(12, 31) resolves to 31 Dec of the acceptance year."""
    valid_until, _ = resolve_valid_until(FixedCalendarDate(12, 31), date(2026, 3, 2))
    assert valid_until == date(2026, 12, 31)


def test_fixed_calendar_date_on_the_day_itself_rolls_over() -> None:
    """Accepting on the calendar date itself resolves to next year's occurrence."""
    assert next_calendar_date(date(2026, 12, 31), 12, 31) == date(2027, 12, 31)
    valid_until, _ = resolve_valid_until(FixedCalendarDate(12, 31), date(2026, 12, 31))
    assert valid_until == date(2027, 12, 31)
    assert next_calendar_date(date(2026, 6, 1), 3, 31) == date(2027, 3, 31)


def test_leap_day_falls_back_in_common_years() -> None:
    """29 Feb resolves to 28 Feb in non-leap years."""
    assert next_calendar_date(date(2026, 3, 1), 2, 29) == date(2027, 2, 28)
    assert add_months(date(2028, 2, 29), 12) == date(2029, 2, 28)


def test_explicit_date_overrides_policy() -> None:
    """A reviewer-entered date wins and is marked as admin override."""
    assert resolve_valid_until(
        FixedMonths(12), date(2026, 3, 2), explicit_valid_until=date(2026, 9, 30)
    ) == (date(2026, 9, 30), ValiditySource.ADMIN_OVERRIDE)


def test_explicit_date_before_acceptance_is_rejected() -> None:
    """valid_until must not lie before the acceptance date."""
    with pytest.raises(ValidationException) as exc_info:
        resolve_valid_until(
            NoExpiry(), date(2026, 3, 2), explicit_valid_until=date(2026, 3, 1)
        )
    assert exc_info.value.details == {"field": "valid_until"}


def test_explicit_date_on_acceptance_day_is_rejected() -> None:
    """A document that would expire on the day it is accepted is refused."""
    with pytest.raises(ValidationException) as exc_info:
        resolve_valid_until(
            FixedMonths(12), date(2026, 3, 2), explicit_valid_until=date(2026, 3, 2)
        )
    assert exc_info.value.details == {"field": "valid_until"}


def test_explicit_date_and_unknown_are_exclusive() -> None:
    """A date and the unknown flag cannot both be given."""
    with pytest.raises(ValidationException):
        resolve_valid_until(
            UserDeclaredUnknown(),
            date(2026, 3, 2),
            explicit_valid_until=date(2026, 9, 30),
            validity_unknown=True,
        )


def test_unknown_flag_only_for_user_declared_policy() -> None:
    """validity_unknown is refused for system-computed policies."""
    with pytest.raises(ValidationException):
        resolve_valid_until(FixedMonths(12), date(2026, 3, 2), validity_unknown=True)


def test_user_declared_without_default_requires_decision() -> None:
    """UserDeclaredUnknown without default_months needs a date or the flag."""
    with pytest.raises(ValidationException):
        resolve_valid_until(UserDeclaredUnknown(), date(2026, 3, 2))


def test_user_declared_with_default_months() -> None:
    """default_months applies when the reviewer gives nothing."""
    assert resolve_valid_until(UserDeclaredUnknown(6), date(2026, 3, 2)) == (
        date(2026, 9, 2),
        ValiditySource.SYSTEM,
    )


@pytest.mark.parametrize(
    "factory",
    [
        lambda: FixedMonths(0),
        lambda: FixedCalendarDate(13, 1),
        lambda: FixedCalendarDate(4, 31),
        lambda: UserDeclaredUnknown(0),
    ],
)
def test_invalid_policies_raise_value_error(factory) -> None:
    """Policies validate their parameters on construction."""
    with pytest.raises(ValueError):
        factory()
