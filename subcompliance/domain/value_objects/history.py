"""Review history entry value object."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from subcompliance.shared.enums import HistoryAction


@dataclass(frozen=True)
class HistoryEntry:
    """One append-only history record of a requirement transition.

    metadata carries transition specifics (new valid_until, rejection
    reason, replaced artifact reference).
    """

    timestamp: datetime
    action: HistoryAction
    actor: str
    metadata: dict[str, Any] = field(default_factory=dict)
