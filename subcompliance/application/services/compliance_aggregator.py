"""Compliance aggregator: per-requirement states -> one status per subcontractor.

Only REQUIRED rows count. Any missing, rejected, expired or not yet
accepted (submitted, in_review) row makes the subcontractor non-compliant;
otherwise any expiring row gives expiring_soon; otherwise compliant. An
empty required set is compliant.
"""

from collections.abc import Iterable
from datetime import date

from subcompliance.application.dtos.compliance import ComplianceSummary
from subcompliance.core.constants import DEFAULT_EXPIRING_WINDOW_DAYS
from subcompliance.domain.entities import RequirementEntity
from subcompliance.domain.enums import (
    ComplianceStatus,
    RequirementLevel,
    RequirementStatus,
)

_MISSING_STATES = frozenset(
    {
        RequirementStatus.MISSING,
        RequirementStatus.REJECTED,
        RequirementStatus.EXPIRED,
    }
)
_PENDING_STATES = frozenset({RequirementStatus.SUBMITTED, RequirementStatus.IN_REVIEW})


def aggregate(
    requirements: Iterable[RequirementEntity],
    today: date,
    expiring_window_days: int = DEFAULT_EXPIRING_WINDOW_DAYS,
) -> ComplianceStatus:
    """Return the aggregate compliance status for a set of requirement rows."""
    expiring = False
    for requirement in requirements:
        if requirement.level != RequirementLevel.REQUIRED:
            continue
        status = requirement.effective_status(today, expiring_window_days)
        if status in _MISSING_STATES or status in _PENDING_STATES:
            return ComplianceStatus.NON_COMPLIANT
        if status == RequirementStatus.EXPIRING:
            expiring = True
    return ComplianceStatus.EXPIRING_SOON if expiring else ComplianceStatus.COMPLIANT


def summarize(
    subcontractor_id: str,
    requirements: Iterable[RequirementEntity],
    today: date,
    expiring_window_days: int = DEFAULT_EXPIRING_WINDOW_DAYS,
) -> ComplianceSummary:
    """Return the aggregate status plus the per-document breakdown behind it.

    Args:
        subcontractor_id: Subcontractor the rows belong to.
        requirements: All requirement rows of the subcontractor.
        today: Evaluation date.
        expiring_window_days: Expiring window in days.

    Returns:
        ComplianceSummary; its status always equals aggregate() for the same input.
    """
    rows = list(requirements)
    missing: list[str] = []
    expiring: list[str] = []
    pending: list[str] = []
    optional_count = 0
    for requirement in rows:
        if requirement.level == RequirementLevel.OPTIONAL:
            optional_count += 1
            continue
        if requirement.level != RequirementLevel.REQUIRED:
            continue
        status = requirement.effective_status(today, expiring_window_days)
        if status in _MISSING_STATES:
            missing.append(requirement.document_type_id)
        elif status in _PENDING_STATES:
            pending.append(requirement.document_type_id)
        elif status == RequirementStatus.EXPIRING:
            expiring.append(requirement.document_type_id)
    return ComplianceSummary(
        subcontractor_id=subcontractor_id,
        status=aggregate(rows, today, expiring_window_days),
        evaluated_on=today,
        missing_documents=missing,
        expiring_documents=expiring,
        pending_documents=pending,
        optional_count=optional_count,
    )
