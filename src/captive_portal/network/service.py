"""Abstract network service interface for scanning and joining WiFi networks.

This module provides the three-call boundary the captive portal talks to:
scan, connect and start access point. Implementations (NetworkManager,
in-memory, etc.) live in sibling modules.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Raised when a network service call itself fails.

    A rejected connect attempt is not a ServiceError; it is reported
    as a ConnectResult with success=False.
    """


@dataclass(frozen=True)
class Network:
    """A wireless network visible in a scan."""

    essid: str
    is_protected: bool
    signal: Optional[int] = None  # 0-100, informational only
    security: str = ""  # "WPA2", "WPA3", "" for open networks

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "essid": self.essid,
            "is_protected": self.is_protected,
            "signal": self.signal,
            "security": self.security,
        }


@dataclass(frozen=True)
class ConnectResult:
    """Outcome of a connect call that reached the network stack."""

    success: bool
    message: str = ""


class NetworkService(ABC):
    """Abstract base class for network service implementations.

    All calls are coroutines so the portal can keep serving while a scan
    or connect is in flight. Timeouts are the implementation's business.
    """

    @abstractmethod
    async def scan_networks(self) -> List[Network]:
        """Scan for visible networks.

        Returns:
            Networks in the order the implementation reports them

        Raises:
            ServiceError: If the scan could not be performed
        """

    @abstractmethod
    async def connect(self, essid: str, password: str) -> ConnectResult:
        """Join a network.

        Args:
            essid: Network name
            password: Network password (empty for open networks)

        Returns:
            ConnectResult, success=False when the network rejected the attempt

        Raises:
            ServiceError: If the connect call itself failed
        """

    @abstractmethod
    async def start_access_point(self) -> None:
        """Switch the device into self-hosted access point mode.

        Raises:
            ServiceError: If the access point could not be started
        """
