from __future__ import annotations

import logging

from onboarding.domain.ports.notification_port import NotificationPort

logger = logging.getLogger("onboarding.notifications")


class LoggingNotifier(NotificationPort):
    """Notification sink that writes toasts to the log."""

    def success(self, title: str, message: str | None = None) -> None:
        logger.info(title, extra={"toast": "success", "detail": message})

    def error(self, title: str, message: str | None = None) -> None:
        logger.warning(title, extra={"toast": "error", "detail": message})
