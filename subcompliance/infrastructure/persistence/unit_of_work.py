"""Short-lived transactions for the reminder scheduler.

Each `async with` block opens its own session and transaction, so a claim is
committed before the notification it guards is sent.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from subcompliance.application.interfaces.repositories import (
    ReminderUnitOfWorkFactory,
)
from subcompliance.infrastructure.persistence.repositories import (
    ReminderJobRepository,
    RequirementRepository,
    SubcontractorRepository,
)


@dataclass
class SqlAlchemyReminderUnitOfWork:
    """Repositories sharing one session."""

    subcontractors: SubcontractorRepository
    requirements: RequirementRepository
    reminder_jobs: ReminderJobRepository


def reminder_unit_of_work(
    session_factory: async_sessionmaker[AsyncSession],
) -> ReminderUnitOfWorkFactory:
    """Return a factory of transactional blocks over session_factory.

    Commits when the block exits normally; rolls back when it raises.
    """

    @asynccontextmanager
    async def unit_of_work() -> AsyncIterator[SqlAlchemyReminderUnitOfWork]:
        async with session_factory() as session:
            async with session.begin():
                yield SqlAlchemyReminderUnitOfWork(
                    SubcontractorRepository(session),
                    RequirementRepository(session),
                    ReminderJobRepository(session),
                )

    return unit_of_work
