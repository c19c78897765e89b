"""Requirement domain entity: the document lifecycle state machine.

Represents one (subcontractor, assignment, document type) obligation,
independent of persistence. Transition methods validate first and only
then mutate, so a rejected operation leaves the entity unchanged.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

from subcompliance.core.constants import (
    DEFAULT_EXPIRING_WINDOW_DAYS,
    MIN_REJECTION_REASON_LENGTH,
)
from subcompliance.domain.enums import (
    RequirementLevel,
    RequirementStatus,
    ValiditySource,
)
from subcompliance.domain.exceptions import (
    InvalidTransitionException,
    ValidationException,
)
from subcompliance.domain.value_objects.document_type import is_custom_document_type
from subcompliance.domain.value_objects.history import HistoryEntry
from subcompliance.domain.value_objects.validity import (
    ValidityPolicy,
    resolve_valid_until,
)
from subcompliance.shared.enums import HistoryAction

_SUBMITTABLE = frozenset(
    {RequirementStatus.MISSING, RequirementStatus.REJECTED, RequirementStatus.EXPIRED}
)
_REVIEWABLE = frozenset({RequirementStatus.SUBMITTED, RequirementStatus.IN_REVIEW})
_RE_REQUESTABLE = frozenset({RequirementStatus.REJECTED, RequirementStatus.EXPIRED})
_REMINDABLE = frozenset({RequirementStatus.MISSING, RequirementStatus.REJECTED})
_LAPSING = frozenset({RequirementStatus.EXPIRING, RequirementStatus.EXPIRED})


@dataclass
class RequirementEntity:
    """Domain entity for a document requirement.

    status holds the stored lifecycle state (missing, submitted, in_review,
    accepted, rejected). Expiring and expired are derived on read via
    effective_status(). history is append-only; level changes never touch
    status, validity or history.
    """

    id: str
    subcontractor_id: str
    document_type_id: str
    level: RequirementLevel
    status: RequirementStatus = RequirementStatus.MISSING
    project_assignment_id: str | None = None
    due_date: date | None = None
    valid_until: date | None = None
    validity_source: ValiditySource | None = None
    rejection_reason: str | None = None
    artifact_ref: str | None = None
    custom_label: str | None = None
    history: list[HistoryEntry] = field(default_factory=list)
    version: int = 1

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Validate requirement fields. Raises ValidationException if invalid."""
        if not self.subcontractor_id:
            raise ValidationException(
                "Subcontractor ID is required", field="subcontractor_id"
            )
        if not self.document_type_id:
            raise ValidationException(
                "Document type ID is required", field="document_type_id"
            )
        if self.status.value not in RequirementStatus.stored_values():
            raise ValidationException(
                f"Status '{self.status.value}' is derived and cannot be stored",
                field="status",
            )

    @property
    def is_custom(self) -> bool:
        return is_custom_document_type(self.document_type_id)

    def effective_status(
        self,
        today: date,
        expiring_window_days: int = DEFAULT_EXPIRING_WINDOW_DAYS,
    ) -> RequirementStatus:
        """Return the status including the time-driven expiring/expired overlay.

        Args:
            today: Evaluation date.
            expiring_window_days: Days before valid_until that count as expiring.

        Returns:
            EXPIRED when today >= valid_until, EXPIRING when valid_until is
            within the window, otherwise the stored status.
        """
        if self.status != RequirementStatus.ACCEPTED or self.valid_until is None:
            return self.status
        if today >= self.valid_until:
            return RequirementStatus.EXPIRED
        if today + timedelta(days=expiring_window_days) >= self.valid_until:
            return RequirementStatus.EXPIRING
        return RequirementStatus.ACCEPTED

    def needs_reminder(
        self,
        today: date,
        expiring_window_days: int = DEFAULT_EXPIRING_WINDOW_DAYS,
    ) -> bool:
        """Return True when this requirement should have an open reminder job.

        Required rows are followed up while missing or rejected, and while an
        accepted document is expiring or has expired.
        """
        if self.level != RequirementLevel.REQUIRED:
            return False
        if self.status in _REMINDABLE:
            return True
        return self.effective_status(today, expiring_window_days) in _LAPSING

    def days_until_expiry(self, today: date) -> int | None:
        """Days from today to valid_until (negative once expired), or None."""
        if self.valid_until is None:
            return None
        return (self.valid_until - today).days

    def change_level(self, level: RequirementLevel) -> bool:
        """Apply a re-derived level. Returns True if it changed."""
        if self.level == level:
            return False
        self.level = level
        return True

    def submit(self, artifact_ref: str, actor: str, at: datetime) -> HistoryEntry:
        """Record an uploaded document: missing/rejected/expired -> submitted.

        Raises:
            ValidationException: If artifact_ref is empty.
            InvalidTransitionException: If the effective status does not allow submission.
        """
        if not artifact_ref or not artifact_ref.strip():
            raise ValidationException("artifact_ref is required", field="artifact_ref")
        self._ensure_allowed("submit", _SUBMITTABLE, at.date())
        previous = self.artifact_ref
        metadata: dict[str, Any] = {"artifact_ref": artifact_ref}
        action = HistoryAction.SUBMITTED
        if previous and previous != artifact_ref:
            action = HistoryAction.REPLACED
            metadata["replaced_artifact_ref"] = previous
        self.status = RequirementStatus.SUBMITTED
        self.artifact_ref = artifact_ref
        self.rejection_reason = None
        return self._record(action, actor, at, metadata)

    def start_review(self, actor: str, at: datetime) -> HistoryEntry:
        """submitted -> in_review."""
        self._ensure_allowed(
            "start_review", frozenset({RequirementStatus.SUBMITTED}), at.date()
        )
        self.status = RequirementStatus.IN_REVIEW
        return self._record(HistoryAction.REVIEW_STARTED, actor, at, {})

    def accept(
        self,
        actor: str,
        at: datetime,
        policy: ValidityPolicy,
        valid_until: date | None = None,
        validity_unknown: bool = False,
    ) -> HistoryEntry:
        """submitted/in_review -> accepted, resolving valid_until from the policy.

        Args:
            actor: Reviewer id.
            at: Acceptance timestamp (its date is the acceptance date).
            policy: Validity policy of the document type.
            valid_until: Explicit expiry entered by the reviewer.
            validity_unknown: Reviewer declares validity unknown/never-expiring.

        Returns:
            The appended history entry.

        Raises:
            InvalidTransitionException: If not submitted or in review.
            ValidationException: If validity input is inconsistent with the policy.
        """
        self._ensure_allowed("accept", _REVIEWABLE, at.date())
        resolved, source = resolve_valid_until(
            policy,
            accepted_on=at.date(),
            explicit_valid_until=valid_until,
            validity_unknown=validity_unknown,
        )
        self.status = RequirementStatus.ACCEPTED
        self.valid_until = resolved
        self.validity_source = source
        self.rejection_reason = None
        return self._record(
            HistoryAction.ACCEPTED,
            actor,
            at,
            {
                "valid_until": resolved.isoformat() if resolved else None,
                "validity_source": source.value,
            },
        )

    def reject(self, reason: str, actor: str, at: datetime) -> HistoryEntry:
        """submitted/in_review -> rejected with a mandatory reason.

        Raises:
            ValidationException: If the stripped reason is shorter than the minimum.
            InvalidTransitionException: If not submitted or in review.
        """
        stripped = (reason or "").strip()
        if len(stripped) < MIN_REJECTION_REASON_LENGTH:
            raise ValidationException(
                f"reason must be at least {MIN_REJECTION_REASON_LENGTH} characters",
                field="reason",
            )
        self._ensure_allowed("reject", _REVIEWABLE, at.date())
        self.status = RequirementStatus.REJECTED
        self.rejection_reason = stripped
        return self._record(HistoryAction.REJECTED, actor, at, {"reason": stripped})

    def re_request(self, actor: str, at: datetime, due_date: date) -> HistoryEntry:
        """rejected/expired -> missing with a new due date."""
        self._ensure_allowed("re_request", _RE_REQUESTABLE, at.date())
        self.status = RequirementStatus.MISSING
        self.due_date = due_date
        self.valid_until = None
        self.validity_source = None
        self.rejection_reason = None
        return self._record(
            HistoryAction.RE_REQUESTED, actor, at, {"due_date": due_date.isoformat()}
        )

    def _ensure_allowed(
        self,
        operation: str,
        allowed: frozenset[RequirementStatus],
        today: date,
    ) -> None:
        current = self.effective_status(today)
        # Expiring documents are still accepted for transition purposes
        if current == RequirementStatus.EXPIRING:
            current = RequirementStatus.ACCEPTED
        if current not in allowed:
            raise InvalidTransitionException(operation, current.value, self.id)

    def _record(
        self,
        action: HistoryAction,
        actor: str,
        at: datetime,
        metadata: dict[str, Any],
    ) -> HistoryEntry:
        entry = HistoryEntry(timestamp=at, action=action, actor=actor, metadata=metadata)
        self.history.append(entry)
        return entry
