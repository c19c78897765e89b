"""Service interfaces (ports) for the application layer.

Protocols define contracts for notification delivery and the compliance
cache (DIP). No runtime imports from subcompliance.infrastructure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from subcompliance.application.dtos.compliance import CachedCompliance
    from subcompliance.application.dtos.notification import NotificationRequest


# Notification service interface
class INotificationService(Protocol):
    """Protocol for dispatching reminder, escalation and status notifications.

    Implementations raise on delivery failure; callers decide whether the
    failure is retried (scheduler) or only logged (lifecycle transitions).
    """

    async def send(self, request: NotificationRequest) -> None:
        """Dispatch one notification."""


# Compliance cache interface
class IComplianceCache(Protocol):
    """Protocol for the read-side compliance cache. Failures degrade to misses."""

    async def get(self, subcontractor_id: str) -> CachedCompliance | None:
        """Return the cached aggregate, or None on miss or cache outage."""

    async def store(self, subcontractor_id: str, cached: CachedCompliance) -> None:
        """Cache an aggregate together with the revision it was computed from."""

    async def invalidate(self, subcontractor_id: str) -> None:
        """Drop the cached aggregate of a subcontractor."""
