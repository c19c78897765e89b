"""Infrastructure service adapters behind application ports."""

from subcompliance.infrastructure.services.notification_service import (
    LogOnlyNotificationService,
)

__all__ = ["LogOnlyNotificationService"]
