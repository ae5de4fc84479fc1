"""Network selection and connection state machine."""

from captive_portal.portal.access_point_trigger import AccessPointTrigger
from captive_portal.portal.credential_prompt import HiddenNetworkPrompt, PasswordPrompt
from captive_portal.portal.list_view import ListEntry, NetworkListView, render_entries
from captive_portal.portal.notifications import Intent, Notification, NotificationLog
from captive_portal.portal.orchestrator import ConnectionOrchestrator
from captive_portal.portal.state import ConnectState, PortalSnapshot, ScanState

__all__ = [
    "AccessPointTrigger",
    "ConnectionOrchestrator",
    "ConnectState",
    "HiddenNetworkPrompt",
    "Intent",
    "ListEntry",
    "NetworkListView",
    "Notification",
    "NotificationLog",
    "PasswordPrompt",
    "PortalSnapshot",
    "ScanState",
    "render_entries",
]
