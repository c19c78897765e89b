"""Base repository: primary-key lookup, insert, delete and version-checked updates."""

from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from subcompliance.infrastructure.persistence.database import Base


ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository shared by the compliance repositories.

    Subclasses map between ORM rows and domain entities; this class only
    deals with ORM rows and raw column values.
    """

    def __init__(self, db: AsyncSession, model: type[ModelType]) -> None:
        self.db = db
        self.model = model

    async def _get_model(self, entity_id: str) -> ModelType | None:
        """Return a single ORM row by primary key, or None."""
        model: Any = self.model
        result = await self.db.execute(select(self.model).where(model.id == entity_id))
        return result.scalar_one_or_none()

    async def _insert(self, obj: ModelType) -> ModelType:
        """Persist a new row and flush so constraint violations surface here."""
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def _delete(self, entity_id: str) -> bool:
        """Delete a row by primary key. Returns True if a row was deleted."""
        model: Any = self.model
        result = await self.db.execute(delete(self.model).where(model.id == entity_id))
        return result.rowcount == 1

    async def _conditional_update(
        self, entity_id: str, expected_version: int, values: dict[str, Any]
    ) -> bool:
        """Update a versioned row only if it still has expected_version (optimistic lock).

        Increments version. Returns True if exactly one row was updated; False if
        another writer won the race or the row is gone.
        """
        model: Any = self.model
        stmt = (
            update(self.model)
            .where(model.id == entity_id, model.version == expected_version)
            .values(**values, version=expected_version + 1)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1
