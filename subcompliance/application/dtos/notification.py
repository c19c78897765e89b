"""DTOs for outbound notifications."""

from dataclasses import dataclass, field
from typing import Any

from subcompliance.shared.enums import NotificationKind


@dataclass(frozen=True)
class NotificationRequest:
    """Request handed to the notification port (delivery is out of scope)."""

    kind: NotificationKind
    subcontractor_id: str
    document_type_ids: list[str]
    metadata: dict[str, Any] = field(default_factory=dict)
