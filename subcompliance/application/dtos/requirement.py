"""DTOs for requirement derivation and review decisions."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class RecomputeResult:
    """Outcome of applying derived levels to stored requirement rows."""

    subcontractor_id: str
    project_assignment_id: str | None
    created: int
    updated: int
    unchanged: int


@dataclass(frozen=True)
class AcceptDecision:
    """Reviewer accepts the document; validity input is optional."""

    valid_until: date | None = None
    validity_unknown: bool = False


@dataclass(frozen=True)
class RejectDecision:
    """Reviewer rejects the document with a mandatory reason."""

    reason: str


ReviewDecision = AcceptDecision | RejectDecision
