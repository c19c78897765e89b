"""Document lifecycle use case: drives requirement transitions on the write path.

Each operation loads the requirement, applies one state machine transition,
persists it with its history entry, syncs the reminder job and recomputes
the aggregate in the caller's transaction, then queues a STATUS_CHANGED
notification in the outbox. The caller flushes the outbox only after the
transaction commits; notification failures never fail the transition.
"""

from __future__ import annotations

from subcompliance.application.context import ComplianceContext
from subcompliance.application.dtos.compliance import ComplianceSummary
from subcompliance.application.dtos.notification import NotificationRequest
from subcompliance.application.dtos.requirement import (
    AcceptDecision,
    RejectDecision,
    ReviewDecision,
)
from subcompliance.application.interfaces.repositories import (
    IRequirementRepository,
    ISubcontractorRepository,
)
from subcompliance.application.services.compliance_synchronizer import (
    ComplianceSynchronizer,
)
from subcompliance.application.services.notification_outbox import NotificationOutbox
from subcompliance.domain.entities import RequirementEntity, SubcontractorEntity
from subcompliance.domain.enums import RequirementLevel
from subcompliance.domain.exceptions import (
    ResourceNotFoundException,
    ValidationException,
)
from subcompliance.domain.value_objects import HistoryEntry
from subcompliance.shared.enums import NotificationKind
from subcompliance.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class DocumentLifecycleUseCase:
    """Upload, review and re-request operations on a subcontractor's requirements."""

    def __init__(
        self,
        subcontractor_repo: ISubcontractorRepository,
        requirement_repo: IRequirementRepository,
        synchronizer: ComplianceSynchronizer,
        outbox: NotificationOutbox,
        context: ComplianceContext,
    ) -> None:
        self._subcontractor_repo = subcontractor_repo
        self._requirement_repo = requirement_repo
        self._synchronizer = synchronizer
        self._outbox = outbox
        self._context = context

    async def on_document_uploaded(
        self,
        subcontractor_id: str,
        document_type_id: str,
        artifact_ref: str,
        uploaded_by: str,
        project_assignment_id: str | None = None,
    ) -> RequirementEntity:
        """Record an upload: missing/rejected/expired -> submitted.

        Args:
            subcontractor_id: Subcontractor id.
            document_type_id: Catalog or custom document type id.
            artifact_ref: Opaque reference to the stored file.
            uploaded_by: Actor id.
            project_assignment_id: Optional assignment scope.

        Returns:
            The updated requirement.

        Raises:
            ResourceNotFoundException: If subcontractor or requirement is missing.
            ValidationException: If the document type is not applicable (hidden).
            InvalidTransitionException: If the requirement cannot accept an upload.
        """
        subcontractor, requirement = await self._load(
            subcontractor_id, document_type_id, project_assignment_id
        )
        if requirement.level == RequirementLevel.HIDDEN:
            raise ValidationException(
                f"Document type {document_type_id} is not applicable to this subcontractor",
                field="document_type_id",
            )
        entry = requirement.submit(artifact_ref, uploaded_by, self._context.now())
        return await self._apply(subcontractor, requirement, entry)

    async def start_review(
        self,
        subcontractor_id: str,
        document_type_id: str,
        reviewer: str,
        project_assignment_id: str | None = None,
    ) -> RequirementEntity:
        """submitted -> in_review.

        Raises:
            ResourceNotFoundException: If subcontractor or requirement is missing.
            InvalidTransitionException: If the requirement is not submitted.
        """
        subcontractor, requirement = await self._load(
            subcontractor_id, document_type_id, project_assignment_id
        )
        entry = requirement.start_review(reviewer, self._context.now())
        return await self._apply(subcontractor, requirement, entry)

    async def review_document(
        self,
        subcontractor_id: str,
        document_type_id: str,
        decision: ReviewDecision,
        reviewer: str,
        project_assignment_id: str | None = None,
    ) -> RequirementEntity:
        """Accept or reject a submitted/in-review document.

        Acceptance resolves valid_until from the decision and the document
        type's validity policy. Rejection requires a reason of at least 10
        characters; a short reason persists nothing.

        Raises:
            ResourceNotFoundException: If subcontractor or requirement is missing.
            ValidationException: If the reason or validity input is invalid.
            InvalidTransitionException: If the requirement is not under review.
        """
        subcontractor, requirement = await self._load(
            subcontractor_id, document_type_id, project_assignment_id
        )
        now = self._context.now()
        if isinstance(decision, AcceptDecision):
            policy = self._context.catalog.validity_policy_for(document_type_id)
            entry = requirement.accept(
                reviewer,
                now,
                policy,
                valid_until=decision.valid_until,
                validity_unknown=decision.validity_unknown,
            )
        elif isinstance(decision, RejectDecision):
            entry = requirement.reject(decision.reason, reviewer, now)
        else:
            raise ValidationException("Unknown review decision", field="decision")
        return await self._apply(subcontractor, requirement, entry)

    async def re_request(
        self,
        subcontractor_id: str,
        document_type_id: str,
        actor: str,
        project_assignment_id: str | None = None,
    ) -> RequirementEntity:
        """rejected/expired -> missing with a fresh due date (reminders restart).

        Raises:
            ResourceNotFoundException: If subcontractor or requirement is missing.
            InvalidTransitionException: If the requirement is not rejected or expired.
        """
        subcontractor, requirement = await self._load(
            subcontractor_id, document_type_id, project_assignment_id
        )
        now = self._context.now()
        entry = requirement.re_request(
            actor, now, self._context.due_date_from(now.date())
        )
        return await self._apply(subcontractor, requirement, entry)

    async def _load(
        self,
        subcontractor_id: str,
        document_type_id: str,
        project_assignment_id: str | None,
    ) -> tuple[SubcontractorEntity, RequirementEntity]:
        subcontractor = await self._subcontractor_repo.get_by_id(subcontractor_id)
        if subcontractor is None:
            raise ResourceNotFoundException("subcontractor", subcontractor_id)
        requirement = await self._requirement_repo.get_for_document_type(
            subcontractor_id, document_type_id, project_assignment_id
        )
        if requirement is None:
            raise ResourceNotFoundException(
                "requirement", f"{subcontractor_id}/{document_type_id}"
            )
        return subcontractor, requirement

    async def _apply(
        self,
        subcontractor: SubcontractorEntity,
        requirement: RequirementEntity,
        entry: HistoryEntry,
    ) -> RequirementEntity:
        stored = await self._synchronizer.record_requirement_change(
            subcontractor, requirement, entry
        )
        summary = await self._synchronizer.commit_aggregate(subcontractor)
        logger.info(
            "Requirement %s (%s) %s by %s; status now %s",
            stored.id,
            stored.document_type_id,
            entry.action.value,
            entry.actor,
            stored.status.value,
        )
        self._queue_status_changed(stored, entry, summary)
        return stored

    def _queue_status_changed(
        self,
        requirement: RequirementEntity,
        entry: HistoryEntry,
        summary: ComplianceSummary,
    ) -> None:
        request = NotificationRequest(
            kind=NotificationKind.STATUS_CHANGED,
            subcontractor_id=requirement.subcontractor_id,
            document_type_ids=[requirement.document_type_id],
            metadata={
                "requirement_id": requirement.id,
                "action": entry.action.value,
                "status": requirement.status.value,
                "compliance_status": summary.status.value,
                **entry.metadata,
            },
        )
        self._outbox.add(request)
