"""Log-only notification sender for reminders, escalations and status changes."""

from __future__ import annotations

import logging

from subcompliance.application.dtos.notification import NotificationRequest
from subcompliance.shared.enums import NotificationKind
from subcompliance.shared.telemetry.logging import get_logger
from subcompliance.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class LogOnlyNotificationService:
    """INotificationService implementation that logs instead of delivering.

    Use when no delivery channel is configured. Production can swap in an
    email or queue-based implementation behind the same port.
    """

    async def send(self, request: NotificationRequest) -> None:
        """Log the notification; nothing is delivered."""
        if not request.document_type_ids:
            logger.info(
                "Notify %s: no documents, skipping send (subcontractor=%s)",
                request.kind.value,
                request.subcontractor_id,
            )
            return
        level = (
            logging.WARNING
            if request.kind == NotificationKind.ESCALATION
            else logging.INFO
        )
        logger.log(
            level,
            "Notify %s: subcontractor=%s documents=%s",
            request.kind.value,
            request.subcontractor_id,
            ",".join(request.document_type_ids),
        )
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Notify %s metadata: %s (at %s)",
                request.kind.value,
                request.metadata,
                utc_now().isoformat(),
            )
