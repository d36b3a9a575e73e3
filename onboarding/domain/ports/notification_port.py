from __future__ import annotations

from typing import Protocol


class NotificationPort(Protocol):
    """Toast-style sink. Calls are fire-and-forget and never awaited."""

    def success(self, title: str, message: str | None = None) -> None:
        """Report a completed step."""

    def error(self, title: str, message: str | None = None) -> None:
        """Report a failed step."""
