"""Validity policies and valid_until resolution on acceptance.

A policy describes how long an accepted document stays valid. Policies are
immutable and self-validating (ValueError on construction).
"""

from dataclasses import dataclass
from datetime import date

from subcompliance.domain.enums import ValiditySource
from subcompliance.domain.exceptions import ValidationException
from subcompliance.shared.utils.datetime import add_months, next_calendar_date


@dataclass(frozen=True)
class NoExpiry:
    """Document never expires once accepted (e.g. trade registration)."""


@dataclass(frozen=True)
class FixedMonths:
    """Document is valid for a fixed number of months after acceptance."""

    months: int

    def __post_init__(self) -> None:
        if self.months <= 0:
            raise ValueError("FixedMonths.months must be a positive integer")


@dataclass(frozen=True)
class FixedCalendarDate:
    """Document is valid until the next occurrence of a calendar day (e.g. 31 Dec)."""

    month: int
    day: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError("FixedCalendarDate.month must be between 1 and 12")
        try:
            # 2000 is a leap year, so 29 Feb is accepted here
            date(2000, self.month, self.day)
        except ValueError as e:
            raise ValueError(f"FixedCalendarDate day is invalid: {e}") from e


@dataclass(frozen=True)
class UserDeclaredUnknown:
    """The reviewer states validity per document; it may be declared unknown.

    default_months is applied when the reviewer gives neither a date nor the
    unknown flag; None means a decision is mandatory.
    """

    default_months: int | None = None

    def __post_init__(self) -> None:
        if self.default_months is not None and self.default_months <= 0:
            raise ValueError("UserDeclaredUnknown.default_months must be positive")


ValidityPolicy = NoExpiry | FixedMonths | FixedCalendarDate | UserDeclaredUnknown


def resolve_valid_until(
    policy: ValidityPolicy,
    accepted_on: date,
    explicit_valid_until: date | None = None,
    validity_unknown: bool = False,
) -> tuple[date | None, ValiditySource]:
    """Compute valid_until and its source for an acceptance.

    Args:
        policy: Validity policy of the document type.
        accepted_on: Acceptance date.
        explicit_valid_until: Date entered by the reviewer; overrides the policy.
        validity_unknown: Reviewer marks validity as unknown or never-expiring.

    Returns:
        Tuple of (valid_until or None, validity source).

    Raises:
        ValidationException: If the explicit date is not after the acceptance
            date, if both a date and the unknown flag are given, or if the
            policy needs a reviewer decision that was not supplied.
    """
    if explicit_valid_until is not None:
        if validity_unknown:
            raise ValidationException(
                "valid_until and validity_unknown are mutually exclusive",
                field="validity_unknown",
            )
        if explicit_valid_until <= accepted_on:
            raise ValidationException(
                "valid_until must be after the acceptance date",
                field="valid_until",
            )
        return explicit_valid_until, ValiditySource.ADMIN_OVERRIDE

    if validity_unknown:
        if not isinstance(policy, UserDeclaredUnknown):
            raise ValidationException(
                "validity_unknown is only allowed for document types with reviewer-declared validity",
                field="validity_unknown",
            )
        return None, ValiditySource.USER_DECLARED_UNKNOWN

    match policy:
        case NoExpiry():
            return None, ValiditySource.SYSTEM
        case FixedMonths(months=months):
            return add_months(accepted_on, months), ValiditySource.SYSTEM
        case FixedCalendarDate(month=month, day=day):
            return next_calendar_date(accepted_on, month, day), ValiditySource.SYSTEM
        case UserDeclaredUnknown(default_months=None):
            raise ValidationException(
                "valid_until is required for this document type (or set validity_unknown)",
                field="valid_until",
            )
        case UserDeclaredUnknown(default_months=months):
            return add_months(accepted_on, months), ValiditySource.SYSTEM
    raise ValidationException(f"Unsupported validity policy: {policy!r}")
