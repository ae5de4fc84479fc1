"""User-visible notifications (toasts) raised by the portal."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATION_TIMEOUT = 10.0


class Intent(Enum):
    """Visual intent of a notification."""

    NONE = "none"
    PRIMARY = "primary"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


@dataclass(frozen=True)
class Notification:
    """A transient message shown to the user, dismissed after timeout seconds."""

    message: str
    intent: Intent = Intent.NONE
    timeout: float = DEFAULT_NOTIFICATION_TIMEOUT
    essid: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "message": self.message,
            "intent": self.intent.value,
            "timeout": self.timeout,
            "essid": self.essid,
        }


def connect_rejected(essid: str, timeout: float = DEFAULT_NOTIFICATION_TIMEOUT) -> Notification:
    """Build the warning shown when a network refused the credentials.

    Args:
        essid: Network that rejected the attempt
        timeout: Seconds before the notification is dismissed

    Returns:
        Warning notification naming the network
    """
    return Notification(
        message=(
            f'Could not connect to "{essid}". '
            "Please check that the password is correct. "
            "If the problem persists, please contact the network administrator."
        ),
        intent=Intent.WARNING,
        timeout=timeout,
        essid=essid,
    )


Notifier = Callable[[Notification], None]


class NotificationLog:
    """Notifier that keeps what it was given.

    Useful as a sink when nothing displays notifications, and in tests.
    """

    def __init__(self) -> None:
        self.notifications: List[Notification] = []

    def __call__(self, notification: Notification) -> None:
        logger.info("Notification (%s): %s", notification.intent.value, notification.message)
        self.notifications.append(notification)
