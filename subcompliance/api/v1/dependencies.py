"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions and application use cases.
All use cases are built from infrastructure implementations here;
routes depend only on these dependencies, not on infra directly.

Read dependencies use get_db; write dependencies share one
get_db_transactional session per request so a requirement change, its
reminder job and the recomputed aggregate commit together. Notifications
raised by a write wait in the request outbox until that commit succeeded.
The reminder tick gets the session factory and commits step by step.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subcompliance.application.context import ComplianceContext
from subcompliance.application.interfaces.services import (
    IComplianceCache,
    INotificationService,
)
from subcompliance.application.services.compliance_synchronizer import (
    ComplianceSynchronizer,
)
from subcompliance.application.services.notification_outbox import NotificationOutbox
from subcompliance.application.use_cases.compliance import ComplianceQueryUseCase
from subcompliance.application.use_cases.documents import DocumentLifecycleUseCase
from subcompliance.application.use_cases.reminders import RunReminderTickUseCase
from subcompliance.application.use_cases.subcontractors import (
    ActivateSubcontractorUseCase,
    AddCustomDocumentUseCase,
    CreateSubcontractorUseCase,
    DeactivateSubcontractorUseCase,
    DeleteSubcontractorUseCase,
    RecomputeRequirementsUseCase,
    UpdateProfileUseCase,
)
from subcompliance.core.config import get_settings
from subcompliance.domain.exceptions import ConfigurationException
from subcompliance.infrastructure.cache import RedisComplianceCache
from subcompliance.infrastructure.persistence.database import (
    get_db,
    get_db_transactional,
    get_session_factory,
)
from subcompliance.infrastructure.persistence.repositories import (
    ReminderJobRepository,
    RequirementRepository,
    SubcontractorRepository,
)
from subcompliance.infrastructure.persistence.unit_of_work import reminder_unit_of_work
from subcompliance.infrastructure.services import LogOnlyNotificationService


# ---- Shared ----


def get_compliance_context(request: Request) -> ComplianceContext:
    """Compliance context built at startup (see core.lifespan)."""
    context = getattr(request.app.state, "compliance_context", None)
    if context is None:
        raise ConfigurationException("Compliance context not initialized")
    return context


def get_compliance_cache(request: Request) -> IComplianceCache | None:
    """Redis-backed aggregate cache, or None when Redis is disabled."""
    cache = getattr(request.app.state, "cache", None)
    if cache is None:
        return None
    return RedisComplianceCache(cache, ttl=get_settings().cache_ttl_compliance)


def get_notification_service() -> INotificationService:
    """Notification sender (log-only; delivery is outside this service)."""
    return LogOnlyNotificationService()


async def get_notification_outbox(
    notification_service: Annotated[
        INotificationService, Depends(get_notification_service)
    ],
) -> AsyncIterator[NotificationOutbox]:
    """Request outbox: flushed after the request succeeded, dropped on error.

    Dependants list it before their transactional session so this exit
    runs after get_db_transactional has committed.
    """
    outbox = NotificationOutbox(notification_service)
    try:
        yield outbox
    except Exception:
        outbox.discard()
        raise
    await outbox.flush()


ContextDep = Annotated[ComplianceContext, Depends(get_compliance_context)]
CacheDep = Annotated[IComplianceCache | None, Depends(get_compliance_cache)]


# ---- Read path ----


async def get_compliance_query_use_case(
    db: Annotated[AsyncSession, Depends(get_db)],
    context: ContextDep,
    cache: CacheDep,
) -> ComplianceQueryUseCase:
    """Compliance reads (status, summary, requirements, assignment validation)."""
    return ComplianceQueryUseCase(
        SubcontractorRepository(db),
        RequirementRepository(db),
        context,
        cache=cache,
    )


# ---- Write path ----


async def get_compliance_synchronizer(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    context: ContextDep,
    cache: CacheDep,
) -> ComplianceSynchronizer:
    """Synchronizer over the request's transactional session."""
    return ComplianceSynchronizer(
        SubcontractorRepository(db),
        RequirementRepository(db),
        ReminderJobRepository(db),
        context,
        cache=cache,
    )


async def get_recompute_use_case(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    synchronizer: Annotated[ComplianceSynchronizer, Depends(get_compliance_synchronizer)],
    context: ContextDep,
) -> RecomputeRequirementsUseCase:
    return RecomputeRequirementsUseCase(
        SubcontractorRepository(db), RequirementRepository(db), synchronizer, context
    )


async def get_create_subcontractor_use_case(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    recompute: Annotated[RecomputeRequirementsUseCase, Depends(get_recompute_use_case)],
    synchronizer: Annotated[ComplianceSynchronizer, Depends(get_compliance_synchronizer)],
) -> CreateSubcontractorUseCase:
    return CreateSubcontractorUseCase(
        SubcontractorRepository(db), recompute, synchronizer
    )


async def get_update_profile_use_case(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    recompute: Annotated[RecomputeRequirementsUseCase, Depends(get_recompute_use_case)],
    synchronizer: Annotated[ComplianceSynchronizer, Depends(get_compliance_synchronizer)],
) -> UpdateProfileUseCase:
    return UpdateProfileUseCase(
        SubcontractorRepository(db), RequirementRepository(db), recompute, synchronizer
    )


async def get_add_custom_document_use_case(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    synchronizer: Annotated[ComplianceSynchronizer, Depends(get_compliance_synchronizer)],
    context: ContextDep,
) -> AddCustomDocumentUseCase:
    return AddCustomDocumentUseCase(
        SubcontractorRepository(db), RequirementRepository(db), synchronizer, context
    )


async def get_activate_use_case(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    context: ContextDep,
) -> ActivateSubcontractorUseCase:
    return ActivateSubcontractorUseCase(
        SubcontractorRepository(db), RequirementRepository(db), context
    )


async def get_deactivate_use_case(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> DeactivateSubcontractorUseCase:
    return DeactivateSubcontractorUseCase(
        SubcontractorRepository(db), ReminderJobRepository(db)
    )


async def get_delete_use_case(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    synchronizer: Annotated[ComplianceSynchronizer, Depends(get_compliance_synchronizer)],
) -> DeleteSubcontractorUseCase:
    return DeleteSubcontractorUseCase(SubcontractorRepository(db), synchronizer)


async def get_document_lifecycle_use_case(
    outbox: Annotated[NotificationOutbox, Depends(get_notification_outbox)],
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
    synchronizer: Annotated[ComplianceSynchronizer, Depends(get_compliance_synchronizer)],
    context: ContextDep,
) -> DocumentLifecycleUseCase:
    """Upload/review/re-request transitions (transactional, notifications after commit)."""
    return DocumentLifecycleUseCase(
        SubcontractorRepository(db),
        RequirementRepository(db),
        synchronizer,
        outbox,
        context,
    )


async def get_reminder_tick_use_case(
    session_factory: Annotated[
        async_sessionmaker[AsyncSession], Depends(get_session_factory)
    ],
    notification_service: Annotated[
        INotificationService, Depends(get_notification_service)
    ],
    context: ContextDep,
) -> RunReminderTickUseCase:
    """Scheduler tick; each claim commits before its notification is sent."""
    return RunReminderTickUseCase(
        reminder_unit_of_work(session_factory), notification_service, context
    )
