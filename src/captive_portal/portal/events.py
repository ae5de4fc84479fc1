"""Events consumed by the connection orchestrator's queue."""

from dataclasses import dataclass
from typing import Optional, Tuple

from captive_portal.network.service import ConnectResult, Network


class PortalEvent:
    """Base class for everything posted to the orchestrator."""


@dataclass(frozen=True)
class RefreshRequested(PortalEvent):
    """User (or recovery) asked for a new scan."""


@dataclass(frozen=True)
class NetworkSelected(PortalEvent):
    """User picked an open network from the list."""

    essid: str


@dataclass(frozen=True)
class CredentialsConfirmed(PortalEvent):
    """User confirmed a password (listed network) or essid+password (hidden)."""

    essid: str
    password: str


@dataclass(frozen=True)
class AccessPointRequested(PortalEvent):
    """User chose to fall back to access point mode."""


@dataclass(frozen=True)
class ScanCompleted(PortalEvent):
    """A scan call settled. error is set when the call itself failed."""

    sequence: int
    networks: Tuple[Network, ...] = ()
    error: Optional[Exception] = None


@dataclass(frozen=True)
class ConnectCompleted(PortalEvent):
    """A connect call settled. error is set when the call itself failed."""

    essid: str
    result: Optional[ConnectResult] = None
    error: Optional[Exception] = None
