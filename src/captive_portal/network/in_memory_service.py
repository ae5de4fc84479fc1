"""In-memory network service implementation for testing.

This module provides a scriptable network service that simulates scans,
connect attempts and access point start-up without touching the device's
wireless stack.
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional, Tuple

from captive_portal.network.service import ConnectResult, Network, NetworkService, ServiceError

logger = logging.getLogger(__name__)


class InMemoryNetworkService(NetworkService):
    """In-memory network service for testing and demos.

    Scan results and accepted passwords are set up front; failures can be
    switched on to exercise the portal's error paths.
    """

    def __init__(
        self,
        networks: Optional[Iterable[Network]] = None,
        passwords: Optional[Dict[str, str]] = None,
        *,
        delay: float = 0.0,
    ) -> None:
        """Initialize the in-memory service.

        Args:
            networks: Networks returned by every scan, in order
            passwords: Accepted password per essid. An essid missing here
                accepts any password if it is open, and none if protected.
            delay: Simulated latency of every call (seconds)
        """
        self._networks: List[Network] = list(networks or [])
        self._passwords: Dict[str, str] = dict(passwords or {})
        self._delay = delay

        self.fail_scan = False
        self.fail_connect = False
        self.fail_access_point = False

        self.scan_count = 0
        self.connect_attempts: List[Tuple[str, str]] = []
        self.access_point_started = False
        self.connected_essid: Optional[str] = None

    def set_networks(self, networks: Iterable[Network]) -> None:
        """Replace the networks returned by subsequent scans.

        Args:
            networks: New scan result
        """
        self._networks = list(networks)

    def set_password(self, essid: str, password: str) -> None:
        """Accept a password for an essid.

        Args:
            essid: Network name (may be a hidden network)
            password: Password to accept
        """
        self._passwords[essid] = password

    async def _simulate_latency(self) -> None:
        if self._delay > 0:
            await asyncio.sleep(self._delay)

    async def scan_networks(self) -> List[Network]:
        """Return the scripted scan result (simulated)."""
        self.scan_count += 1
        await self._simulate_latency()

        if self.fail_scan:
            logger.warning("Simulated scan failure")
            raise ServiceError("Simulated scan failure")

        logger.info("Scan found %d networks", len(self._networks))
        return list(self._networks)

    async def connect(self, essid: str, password: str) -> ConnectResult:
        """Check the password against the scripted ones (simulated).

        Args:
            essid: Network name
            password: Network password
        """
        self.connect_attempts.append((essid, password))
        await self._simulate_latency()

        if self.fail_connect:
            logger.warning("Simulated connect failure for %s", essid)
            raise ServiceError(f"Simulated connect failure for {essid}")

        if essid in self._passwords:
            accepted = self._passwords[essid] == password
        else:
            listed = next((n for n in self._networks if n.essid == essid), None)
            accepted = listed is not None and not listed.is_protected

        if not accepted:
            logger.info("Connection to %s rejected", essid)
            return ConnectResult(success=False, message=f"Could not join {essid}")

        self.connected_essid = essid
        logger.info("Connected to %s", essid)
        return ConnectResult(success=True)

    async def start_access_point(self) -> None:
        """Mark the access point as started (simulated)."""
        await self._simulate_latency()

        if self.fail_access_point:
            logger.warning("Simulated access point failure")
            raise ServiceError("Simulated access point failure")

        self.access_point_started = True
        logger.info("Access point started")
