"""Network service backed by NetworkManager (nmcli)."""

from __future__ import annotations

import asyncio
import logging
import subprocess
from typing import List, Optional, Set

from captive_portal.network.access_point import AccessPoint
from captive_portal.network.service import ConnectResult, Network, NetworkService, ServiceError

logger = logging.getLogger(__name__)

# nmcli exit codes for a connect that the network refused:
# 4 (activation failed) and 10 (network not found). Anything else means
# nmcli or NetworkManager itself failed.
REFUSED_EXIT_CODES = (4, 10)


def split_terse_fields(line: str) -> List[str]:
    """Split one line of `nmcli -t` output into unescaped fields.

    Fields are separated by ':', and literal ':' and '\\' are escaped with
    a backslash.

    Args:
        line: One line of terse output

    Returns:
        Field values
    """
    fields = []
    current: List[str] = []
    chars = iter(line)
    for char in chars:
        if char == "\\":
            current.append(next(chars, "\\"))
        elif char == ":":
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    fields.append("".join(current))
    return fields


def parse_wifi_list(output: str) -> List[Network]:
    """Parse `nmcli -t -f SSID,SIGNAL,SECURITY device wifi list` output.

    Hidden networks are skipped and duplicate SSIDs (one per access point)
    collapse into the strongest entry.

    Args:
        output: Raw nmcli stdout

    Returns:
        Networks, strongest first
    """
    networks = []
    for line in output.strip().split("\n"):
        if not line:
            continue

        parts = split_terse_fields(line)
        if len(parts) < 3:
            continue

        essid = parts[0].strip()
        if not essid or essid == "--":
            continue

        try:
            signal = int(parts[1].strip())
        except ValueError:
            signal = 0

        security = parts[2].strip()
        if security == "--":
            security = ""

        networks.append(
            Network(essid=essid, is_protected=bool(security), signal=signal, security=security)
        )

    networks.sort(key=lambda n: n.signal or 0, reverse=True)

    seen: Set[str] = set()
    unique = []
    for network in networks:
        if network.essid in seen:
            continue
        seen.add(network.essid)
        unique.append(network)
    return unique


class NmcliNetworkService(NetworkService):
    """Scans and joins networks with nmcli, hosts the fallback AP with hostapd.

    nmcli blocks, so every call runs in a worker thread and the event loop
    stays free while the radio is busy.
    """

    def __init__(
        self,
        interface: str = "wlan0",
        access_point: Optional[AccessPoint] = None,
        scan_timeout: float = 10.0,
        connect_timeout: float = 30.0,
    ) -> None:
        """Initialize the nmcli service.

        Args:
            interface: WiFi interface to scan and connect with
            access_point: Access point to start for the fallback
            scan_timeout: Seconds to wait for nmcli scan commands
            connect_timeout: Seconds to wait for nmcli to join a network
        """
        self._interface = interface
        self._access_point = access_point
        self._scan_timeout = scan_timeout
        self._connect_timeout = connect_timeout
        self._last_scan: Set[str] = set()

    def _nmcli(self, args: List[str], timeout: float) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                ["nmcli", *args],
                check=False,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            logger.error("nmcli %s timed out: %s", args[:3], e)
            raise ServiceError(f"nmcli {' '.join(args[:3])} timed out") from e
        except FileNotFoundError as e:
            raise ServiceError("NetworkManager (nmcli) is not available") from e
        except OSError as e:
            raise ServiceError(f"nmcli error: {e}") from e

    def _scan_blocking(self) -> List[Network]:
        # A failed rescan still leaves the cached list usable
        self._nmcli(["device", "wifi", "rescan", "ifname", self._interface], self._scan_timeout)

        result = self._nmcli(
            [
                "-t",
                "-f",
                "SSID,SIGNAL,SECURITY",
                "device",
                "wifi",
                "list",
                "ifname",
                self._interface,
            ],
            self._scan_timeout,
        )
        if result.returncode != 0:
            logger.error("WiFi scan failed: %s", result.stderr.strip())
            raise ServiceError(f"WiFi scan failed: {result.stderr.strip()}")

        networks = parse_wifi_list(result.stdout)
        self._last_scan = {n.essid for n in networks}
        logger.info("Found %d WiFi networks", len(networks))
        return networks

    def _connect_blocking(self, essid: str, password: str) -> ConnectResult:
        logger.info("Connecting to WiFi network: %s", essid)

        cmd = ["device", "wifi", "connect", essid, "ifname", self._interface]
        if password:
            cmd.extend(["password", password])
        if essid not in self._last_scan:
            cmd.extend(["hidden", "yes"])

        result = self._nmcli(cmd, self._connect_timeout)
        if result.returncode != 0:
            error_msg = result.stderr.strip() or result.stdout.strip()
            if result.returncode not in REFUSED_EXIT_CODES:
                logger.error("nmcli connect failed (exit %d): %s", result.returncode, error_msg)
                raise ServiceError(f"nmcli connect failed (exit {result.returncode}): {error_msg}")
            logger.warning("Failed to connect to %s: %s", essid, error_msg)
            return ConnectResult(success=False, message=error_msg)

        logger.info("Successfully connected to %s", essid)
        return ConnectResult(success=True)

    def _start_access_point_blocking(self) -> None:
        if self._access_point is None:
            raise ServiceError("No access point configured")
        self._access_point.start()

    async def scan_networks(self) -> List[Network]:
        return await asyncio.to_thread(self._scan_blocking)

    async def connect(self, essid: str, password: str) -> ConnectResult:
        return await asyncio.to_thread(self._connect_blocking, essid, password)

    async def start_access_point(self) -> None:
        await asyncio.to_thread(self._start_access_point_blocking)
