"""WebSocket event models and types."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class EventType(str, Enum):
    """WebSocket event types."""

    PORTAL_STATE_CHANGED = "portal_state_changed"
    NOTIFICATION = "notification"
    CONNECTED = "connected"
    ACCESS_POINT_STARTED = "access_point_started"


class WebSocketEvent(BaseModel):
    """Base WebSocket event."""

    type: EventType
    timestamp: str = Field(default_factory=_utc_timestamp)
    data: Dict[str, Any] = Field(default_factory=dict)


class PortalStateChangedEvent(WebSocketEvent):
    """Portal state changed event, carrying the rendered screen."""

    type: EventType = EventType.PORTAL_STATE_CHANGED

    def __init__(self, screen: Dict[str, Any], **kwargs: Any):
        """Initialize portal state changed event.

        Args:
            screen: Rendered screen (overlay, entries, buttons, state)
            **kwargs: Additional fields
        """
        super().__init__(data=screen, **kwargs)


class NotificationEvent(WebSocketEvent):
    """Toast to show on the client."""

    type: EventType = EventType.NOTIFICATION

    def __init__(
        self,
        message: str,
        intent: str,
        timeout: float,
        **kwargs: Any,
    ):
        """Initialize notification event.

        Args:
            message: Text to show
            intent: Visual intent (warning, danger, ...)
            timeout: Seconds before the toast is dismissed
            **kwargs: Additional fields
        """
        super().__init__(
            data={
                "message": message,
                "intent": intent,
                "timeout": timeout,
            },
            **kwargs,
        )


class ConnectedEvent(WebSocketEvent):
    """Device joined a network."""

    type: EventType = EventType.CONNECTED

    def __init__(self, essid: str, **kwargs: Any):
        """Initialize connected event.

        Args:
            essid: Network the device joined
            **kwargs: Additional fields
        """
        super().__init__(data={"essid": essid}, **kwargs)


class AccessPointStartedEvent(WebSocketEvent):
    """Device is switching to its own access point."""

    type: EventType = EventType.ACCESS_POINT_STARTED
