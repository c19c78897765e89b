"""Compliance aggregate cache adapter over CacheService (implements IComplianceCache)."""

from __future__ import annotations

from datetime import date

from subcompliance.application.dtos.compliance import CachedCompliance
from subcompliance.domain.enums import ComplianceStatus
from subcompliance.infrastructure.cache.keys import compliance_key
from subcompliance.infrastructure.cache.redis_cache import CacheService
from subcompliance.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class RedisComplianceCache:
    """Stores {status, revision, as_of} per subcontractor with a TTL.

    Entries are only trusted by callers when revision and as_of match the
    subcontractor row, so a lost invalidation cannot serve a stale status.
    """

    def __init__(self, cache: CacheService, ttl: int) -> None:
        self._cache = cache
        self._ttl = ttl

    async def get(self, subcontractor_id: str) -> CachedCompliance | None:
        raw = await self._cache.get(compliance_key(subcontractor_id))
        if not isinstance(raw, dict):
            return None
        try:
            return CachedCompliance(
                status=ComplianceStatus(raw["status"]),
                revision=int(raw["revision"]),
                as_of=date.fromisoformat(raw["as_of"]),
            )
        except (KeyError, TypeError, ValueError):
            logger.warning(
                "Discarding malformed compliance cache entry for %s", subcontractor_id
            )
            await self.invalidate(subcontractor_id)
            return None

    async def store(self, subcontractor_id: str, cached: CachedCompliance) -> None:
        await self._cache.set(
            compliance_key(subcontractor_id),
            {
                "status": cached.status.value,
                "revision": cached.revision,
                "as_of": cached.as_of.isoformat(),
            },
            ttl=self._ttl,
        )

    async def invalidate(self, subcontractor_id: str) -> None:
        await self._cache.delete(compliance_key(subcontractor_id))
