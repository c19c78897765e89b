"""Domain value objects: validity policies, organizational profile, history entries."""

from subcompliance.domain.value_objects.document_type import (
    CUSTOM_DOCUMENT_PREFIX,
    DocumentType,
    is_custom_document_type,
)
from subcompliance.domain.value_objects.history import HistoryEntry
from subcompliance.domain.value_objects.profile import OrganizationalProfile
from subcompliance.domain.value_objects.validity import (
    FixedCalendarDate,
    FixedMonths,
    NoExpiry,
    UserDeclaredUnknown,
    ValidityPolicy,
    resolve_valid_until,
)

__all__ = [
    "CUSTOM_DOCUMENT_PREFIX",
    "DocumentType",
    "FixedCalendarDate",
    "FixedMonths",
    "HistoryEntry",
    "NoExpiry",
    "OrganizationalProfile",
    "UserDeclaredUnknown",
    "ValidityPolicy",
    "is_custom_document_type",
    "resolve_valid_until",
]
