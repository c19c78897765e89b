"""Cache key builders. Single place for key format (DRY).

Key components must not contain CACHE_KEY_SEP to avoid colliding keys.
"""

from subcompliance.core.constants import CACHE_KEY_SEP, CACHE_PREFIX_COMPLIANCE


def _validate_key_component(value: str, name: str) -> None:
    """Raise ValueError if value is empty or contains the cache key separator."""
    if not value:
        raise ValueError(f"Cache key component {name!r} must not be empty")
    if CACHE_KEY_SEP in value:
        raise ValueError(
            f"Cache key component {name!r} must not contain separator {CACHE_KEY_SEP!r}"
        )


def compliance_key(subcontractor_id: str) -> str:
    """Cache key for the compliance aggregate of a subcontractor."""
    _validate_key_component(subcontractor_id, "subcontractor_id")
    return f"{CACHE_PREFIX_COMPLIANCE}{CACHE_KEY_SEP}{subcontractor_id}"
