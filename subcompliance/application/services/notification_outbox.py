"""Notifications collected during a write and sent once it has committed."""

from __future__ import annotations

from subcompliance.application.dtos.notification import NotificationRequest
from subcompliance.application.interfaces.services import INotificationService
from subcompliance.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class NotificationOutbox:
    """Holds notification requests until the owner of the transaction flushes them.

    The owner calls flush() after a successful commit and discard() after a
    rollback, so nothing is announced for a change that was never stored.
    A failing send is logged and does not stop the remaining ones.
    """

    def __init__(self, notification_service: INotificationService) -> None:
        self._notification_service = notification_service
        self._pending: list[NotificationRequest] = []

    @property
    def pending(self) -> list[NotificationRequest]:
        return list(self._pending)

    def add(self, request: NotificationRequest) -> None:
        self._pending.append(request)

    def discard(self) -> None:
        if self._pending:
            logger.info(
                "Dropping %s notification(s) of a rolled back write", len(self._pending)
            )
        self._pending.clear()

    async def flush(self) -> int:
        """Send every pending request in order.

        Returns:
            Number of requests sent without error.
        """
        pending, self._pending = self._pending, []
        sent = 0
        for request in pending:
            try:
                await self._notification_service.send(request)
            except Exception:
                logger.exception(
                    "Notification %s failed for subcontractor %s",
                    request.kind.value,
                    request.subcontractor_id,
                )
                continue
            sent += 1
        return sent
