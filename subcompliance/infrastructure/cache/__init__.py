"""Cache layer: Redis cache service and the compliance aggregate cache adapter."""

from subcompliance.infrastructure.cache.compliance_cache import RedisComplianceCache
from subcompliance.infrastructure.cache.redis_cache import CacheService

__all__ = ["CacheService", "RedisComplianceCache"]
