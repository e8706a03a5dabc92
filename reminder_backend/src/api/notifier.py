from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from plyer import notification

from .errors import NotificationSinkError
from .settings import get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class Notifier(ABC):
    """Sink for user-visible reminder notifications."""

    @abstractmethod
    def notify(self, title: str, message: str) -> None:
        """
        Show a notification.

        Raises:
            NotificationSinkError if the notification could not be shown.
        """


class PlyerNotifier(Notifier):
    """
    Native desktop notifications through plyer.
    """

    def __init__(self, app_name: str, app_icon: str = "", timeout: int = 6) -> None:
        self._app_name = app_name
        self._app_icon = app_icon
        self._timeout = timeout

    def notify(self, title: str, message: str) -> None:
        try:
            notification.notify(
                title=title,
                message=message,
                app_name=self._app_name,
                app_icon=self._app_icon,
                timeout=self._timeout,
            )
        except Exception as e:  # noqa: BLE001 - backend errors vary per platform
            raise NotificationSinkError(f"Desktop notification failed: {e}") from e


class LogNotifier(Notifier):
    """Writes notifications to the application log (headless hosts)."""

    def notify(self, title: str, message: str) -> None:
        logger.info("Reminder: %s | %s", title, message.replace("\n", " | "))


# PUBLIC_INTERFACE
def get_notifier() -> Notifier:
    """
    Factory to return the configured notifier based on settings.
    - desktop: PlyerNotifier
    - log: LogNotifier
    """
    settings = get_settings()
    if settings.notify_backend == "log":
        return LogNotifier()
    return PlyerNotifier(
        app_name=settings.notify_app_name,
        app_icon=settings.notify_icon,
        timeout=settings.notify_timeout_seconds,
    )
