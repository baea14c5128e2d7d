"""
User notifications.

The console equivalent of toasts: every notification is kept in memory
(so callers and tests can inspect them) and printed through rich.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from rich.console import Console
from rich.markup import escape

from tenderadmin.core.api.base import DEFAULT_ERROR_MESSAGE, ApiError
from tenderadmin.core.logging import get_logger

logger = get_logger("notify")

SUCCESS_DURATION_MS = 5000
ERROR_DURATION_MS = 8000


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


_STYLES = {
    NotificationKind.SUCCESS: ("green", "✓"),
    NotificationKind.ERROR: ("red", "✗"),
    NotificationKind.WARNING: ("yellow", "!"),
    NotificationKind.INFO: ("blue", "i"),
}


@dataclass
class Notification:
    kind: NotificationKind
    title: str
    message: str = ""
    duration_ms: int = SUCCESS_DURATION_MS


class Notifier:
    """Collects notifications and renders them to a console."""

    def __init__(self, console: Console | None = None, echo: bool = True):
        self.console = console or Console(stderr=True)
        self.echo = echo
        self.history: list[Notification] = []

    def notify(
        self,
        kind: NotificationKind,
        title: str,
        message: str = "",
        duration_ms: int | None = None,
    ) -> Notification:
        if duration_ms is None:
            duration_ms = ERROR_DURATION_MS if kind == NotificationKind.ERROR else SUCCESS_DURATION_MS
        notification = Notification(kind=kind, title=title, message=message, duration_ms=duration_ms)
        self.history.append(notification)
        if self.echo:
            color, icon = _STYLES[kind]
            text = f"[{color}]{icon}[/{color}] [bold]{escape(title)}[/bold]"
            if message:
                text += f": {escape(message)}"
            self.console.print(text)
        return notification

    def success(self, title: str, message: str = "") -> Notification:
        return self.notify(NotificationKind.SUCCESS, title, message)

    def error(self, title: str, message: str = "") -> Notification:
        return self.notify(NotificationKind.ERROR, title, message)

    def warning(self, title: str, message: str = "") -> Notification:
        return self.notify(NotificationKind.WARNING, title, message)

    def info(self, title: str, message: str = "") -> Notification:
        return self.notify(NotificationKind.INFO, title, message)

    @property
    def last(self) -> Notification | None:
        return self.history[-1] if self.history else None

    def clear(self) -> None:
        self.history.clear()


def error_title(error: ApiError, action: str, label: str) -> str:
    """Title for an API error raised while performing ``action`` on ``label``."""
    if error.status == 401:
        return "Authentication Required"
    if error.status == 403:
        return "Permission Denied"
    if error.status == 404:
        return f"{label} Not Found"
    return f"{action} Failed"


def error_message(error: ApiError, label: str) -> str:
    if error.status == 401:
        return "Please log in again to continue."
    if error.status == 403:
        return f"You do not have permission to change this {label.lower()}."
    if error.status == 404:
        return f"The {label.lower()} you are trying to reach no longer exists."
    return error.message or DEFAULT_ERROR_MESSAGE


def notify_api_error(notifier: Notifier, error: ApiError, action: str, label: str) -> Notification:
    """Report an API failure with a status-specific title."""
    logger.debug("%s %s failed: %r", action, label, error)
    error.reported = True
    return notifier.error(error_title(error, action, label), error_message(error, label))
