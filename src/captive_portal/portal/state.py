"""Scan and connect states owned by the connection orchestrator."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from captive_portal.network.service import Network


class ScanState(Enum):
    """Network discovery states."""

    IDLE = "idle"  # No scan issued yet
    LOADING = "loading"  # Scan in flight
    LOADED = "loaded"  # Networks available
    FAILED = "failed"  # Scan call failed


class ConnectState(Enum):
    """Connect attempt states."""

    NOT_CONNECTING = "not_connecting"
    CONNECTING = "connecting"  # Connect call in flight, list locked
    SUCCEEDED = "succeeded"  # Terminal
    FAILED = "failed"  # Connect call itself failed


@dataclass(frozen=True)
class PortalSnapshot:
    """Immutable view of the portal state at one point in time."""

    scan_state: ScanState = ScanState.IDLE
    networks: Tuple[Network, ...] = ()
    error: bool = False
    connect_state: ConnectState = ConnectState.NOT_CONNECTING
    connected_essid: Optional[str] = None

    @property
    def busy(self) -> bool:
        """Whether the blocking busy overlay is shown."""
        return self.connect_state == ConnectState.CONNECTING

    @property
    def interactive(self) -> bool:
        """Whether the user may act on the list and buttons."""
        return self.connect_state not in (ConnectState.CONNECTING, ConnectState.SUCCEEDED)

    @property
    def can_use_access_point(self) -> bool:
        """Whether the access point fallback may be requested."""
        return not self.busy

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "scan_state": self.scan_state.value,
            "networks": [n.to_dict() for n in self.networks],
            "error": self.error,
            "connect_state": self.connect_state.value,
            "connected_essid": self.connected_essid,
            "busy": self.busy,
        }
