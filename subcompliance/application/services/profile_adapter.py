"""Adapter from legacy profile payloads to the canonical OrganizationalProfile.

Older clients send answers in several shapes: camelCase "yes"/"no"/"unknown"
answers, an orgFlags.hrRegistered boolean, nullable boolean flags
(requires_employees, has_non_eu_workers, employees_not_employed_in_germany)
and German company type codes. They are converted once, at the API boundary.
"""

from collections.abc import Mapping
from typing import Any

from subcompliance.domain.enums import Answer, CompanyType
from subcompliance.domain.exceptions import ValidationException
from subcompliance.domain.value_objects import OrganizationalProfile

LEGACY_COMPANY_TYPES: dict[str, CompanyType] = {
    "einzelunternehmen": CompanyType.SOLE_PROPRIETOR,
    "gbr": CompanyType.PARTNERSHIP_GBR,
    "baubetrieb": CompanyType.CONSTRUCTION_FIRM,
}

# camelCase answer key -> canonical profile field
_ANSWER_KEYS: dict[str, str] = {
    "hasEmployees": "has_employees",
    "doesConstructionWork": "does_construction_work",
    "sokaBauSubject": "soka_bau_subject",
    "sendsAbroad": "sends_workers_abroad",
    "processesPersonalData": "processes_personal_data",
}

# nullable boolean flag -> canonical profile field
_FLAG_KEYS: dict[str, str] = {
    "requires_employees": "has_employees",
    "has_non_eu_workers": "non_eu_workers",
    "employees_not_employed_in_germany": "workers_not_employed_in_germany",
}


def answer_from_bool(value: bool | None) -> Answer:
    """Map a nullable boolean flag to a tri-state answer (None -> UNKNOWN)."""
    if value is None:
        return Answer.UNKNOWN
    return Answer.YES if value else Answer.NO


def _parse_answer(key: str, value: Any) -> Answer:
    if value is None:
        return Answer.UNKNOWN
    if isinstance(value, bool):
        return answer_from_bool(value)
    try:
        return Answer(str(value).strip().lower())
    except ValueError:
        raise ValidationException(
            f"Invalid answer for {key}: {value!r} (expected yes, no or unknown)",
            field=key,
        ) from None


def _parse_company_type(value: Any) -> CompanyType:
    raw = str(value or "").strip().lower()
    if raw in LEGACY_COMPANY_TYPES:
        return LEGACY_COMPANY_TYPES[raw]
    try:
        return CompanyType(raw)
    except ValueError:
        raise ValidationException(
            f"Unknown company type: {value!r}", field="company_type"
        ) from None


def profile_from_legacy(payload: Mapping[str, Any]) -> OrganizationalProfile:
    """Convert a legacy profile payload to an OrganizationalProfile.

    Explicit camelCase answers win over boolean flags for the same question.
    soka_bau_subject stays None unless it was answered.

    Args:
        payload: Dict with company_type, optional answers, orgFlags and flags.

    Returns:
        Canonical profile.

    Raises:
        ValidationException: If the company type or an answer value is invalid.
    """
    fields: dict[str, Any] = {}
    for flag_key, field_name in _FLAG_KEYS.items():
        if flag_key in payload:
            fields[field_name] = answer_from_bool(payload[flag_key])
    answers = payload.get("answers") or {}
    for answer_key, field_name in _ANSWER_KEYS.items():
        if answer_key in answers:
            fields[field_name] = _parse_answer(answer_key, answers[answer_key])
    org_flags = payload.get("orgFlags") or {}
    if "hrRegistered" in org_flags:
        fields["hr_registered"] = answer_from_bool(org_flags["hrRegistered"])
    return OrganizationalProfile(
        company_type=_parse_company_type(payload.get("company_type")),
        **fields,
    )
