"""Document type value object (catalog entry)."""

from dataclasses import dataclass, field

from subcompliance.domain.value_objects.validity import NoExpiry, ValidityPolicy

# Prefix of subcontractor-specific document types added by an admin
CUSTOM_DOCUMENT_PREFIX = "custom:"


def is_custom_document_type(document_type_id: str) -> bool:
    """Return True for custom (non-catalog) document type ids."""
    return document_type_id.startswith(CUSTOM_DOCUMENT_PREFIX)


@dataclass(frozen=True)
class DocumentType:
    """A kind of compliance document (e.g. liability insurance).

    required_by_default applies when no conditional rule exists for the
    type. optional_for_sole_proprietor downgrades REQUIRED to OPTIONAL for
    sole proprietors.
    """

    id: str
    label: str
    required_by_default: bool = True
    validity_policy: ValidityPolicy = field(default_factory=NoExpiry)
    optional_for_sole_proprietor: bool = False

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("DocumentType.id must be a non-empty string")
        if not self.label or not self.label.strip():
            raise ValueError("DocumentType.label must be a non-empty string")
