"""Helpers for CHECK constraints built from enum values."""

from sqlalchemy import CheckConstraint


def in_values(column: str, values: list[str], name: str) -> CheckConstraint:
    """Return CHECK (column IN (...)) with quoted literal values."""
    return CheckConstraint(
        "{} IN ({})".format(
            column,
            ", ".join("'{}'".format(v.replace("'", "''")) for v in values),
        ),
        name=name,
    )
