"""ID and value generators (CUID, document type slugs)."""

import re
import unicodedata

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()

_UMLAUTS = str.maketrans({"ä": "ae", "ö": "oe", "ü": "ue", "ß": "ss"})
_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def slugify(value: str) -> str:
    """Return a lowercase, underscore-separated slug for a free-text label.

    German umlauts are transliterated (ä -> ae); other accents are dropped.

    Args:
        value: Human-readable label (e.g. "Meisterbrief Elektro").

    Returns:
        Slug such as "meisterbrief_elektro"; empty string if nothing remains.
    """
    lowered = value.strip().lower().translate(_UMLAUTS)
    ascii_only = (
        unicodedata.normalize("NFKD", lowered).encode("ascii", "ignore").decode()
    )
    return _NON_SLUG_RE.sub("_", ascii_only).strip("_")
