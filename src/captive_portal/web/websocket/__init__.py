"""WebSocket support for real-time portal updates."""

from .events import (
    AccessPointStartedEvent,
    ConnectedEvent,
    EventType,
    NotificationEvent,
    PortalStateChangedEvent,
    WebSocketEvent,
)
from .manager import BroadcastManager

__all__ = [
    "AccessPointStartedEvent",
    "BroadcastManager",
    "ConnectedEvent",
    "EventType",
    "NotificationEvent",
    "PortalStateChangedEvent",
    "WebSocketEvent",
]
