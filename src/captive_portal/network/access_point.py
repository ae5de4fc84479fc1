"""Access Point mode management using hostapd and dnsmasq."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from captive_portal.network.service import ServiceError

logger = logging.getLogger(__name__)


@dataclass
class APConfig:
    """Access Point configuration."""

    ssid: str
    password: str = ""  # empty for an open access point
    channel: int = 6
    interface: str = "wlan0"
    ip_address: str = "192.168.4.1"
    dhcp_range_start: str = "192.168.4.2"
    dhcp_range_end: str = "192.168.4.20"
    conf_dir: str = "/tmp/captive-portal-ap"


class AccessPoint:
    """Hosts the device's own WiFi network so a phone can reach the portal.

    DNS answers every name with the device address, which is what makes
    client operating systems pop up the captive portal page.
    """

    def __init__(self, config: APConfig) -> None:
        """Initialize Access Point manager.

        Args:
            config: AP configuration
        """
        self.config = config
        self._hostapd_conf_path: Optional[Path] = None
        self._dnsmasq_conf_path: Optional[Path] = None
        self._running = False

    def _run(self, cmd: List[str], timeout: float = 10) -> None:
        """Run a privileged command, raising ServiceError on failure."""
        try:
            subprocess.run(["sudo", *cmd], check=True, capture_output=True, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            logger.error("Timeout running %s: %s", cmd[0], e)
            raise ServiceError(f"'{cmd[0]}' timed out") from e
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode(errors="replace").strip() if e.stderr else ""
            logger.error("%s failed: %s", cmd[0], stderr or e)
            raise ServiceError(f"'{cmd[0]}' failed: {stderr or e}") from e
        except FileNotFoundError as e:
            raise ServiceError(f"Required command '{cmd[0]}' not found") from e

    def _conf_dir(self) -> Path:
        conf_dir = Path(self.config.conf_dir)
        conf_dir.mkdir(parents=True, exist_ok=True, mode=0o755)
        return conf_dir

    def hostapd_config(self) -> str:
        """Render the hostapd configuration.

        Returns:
            hostapd.conf contents
        """
        lines = [
            f"interface={self.config.interface}",
            "driver=nl80211",
            f"ssid={self.config.ssid}",
            "hw_mode=g",
            f"channel={self.config.channel}",
            "wmm_enabled=0",
            "macaddr_acl=0",
            "auth_algs=1",
            "ignore_broadcast_ssid=0",
        ]
        if self.config.password:
            lines += [
                "wpa=2",
                f"wpa_passphrase={self.config.password}",
                "wpa_key_mgmt=WPA-PSK",
                "rsn_pairwise=CCMP",
            ]
        return "\n".join(lines) + "\n"

    def dnsmasq_config(self) -> str:
        """Render the dnsmasq configuration.

        Returns:
            dnsmasq.conf contents
        """
        return (
            f"interface={self.config.interface}\n"
            f"dhcp-range={self.config.dhcp_range_start},{self.config.dhcp_range_end},"
            "255.255.255.0,24h\n"
            f"address=/#/{self.config.ip_address}\n"
        )

    def _write_configs(self) -> None:
        conf_dir = self._conf_dir()

        self._hostapd_conf_path = conf_dir / "hostapd.conf"
        self._hostapd_conf_path.write_text(self.hostapd_config(), encoding="utf-8")
        os.chmod(self._hostapd_conf_path, 0o600)  # holds the passphrase

        self._dnsmasq_conf_path = conf_dir / "dnsmasq.conf"
        self._dnsmasq_conf_path.write_text(self.dnsmasq_config(), encoding="utf-8")
        logger.debug("Wrote AP configuration to %s", conf_dir)

    def start(self) -> None:
        """Start Access Point mode.

        Raises:
            ServiceError: If AP fails to start
        """
        if self._running:
            logger.warning("Access Point already running")
            return

        iface = self.config.interface
        logger.info("Starting Access Point: %s", self.config.ssid)

        try:
            self._run(["nmcli", "device", "set", iface, "managed", "no"])
        except ServiceError as e:
            logger.warning("Could not unmanage interface via NetworkManager: %s", e)

        try:
            self._run(["ip", "link", "set", iface, "down"])
            self._run(["ip", "addr", "flush", "dev", iface])
            self._run(["ip", "addr", "add", f"{self.config.ip_address}/24", "dev", iface])
            self._run(["ip", "link", "set", iface, "up"])
            self._write_configs()
            self._run(["dnsmasq", "-C", str(self._dnsmasq_conf_path)])
            self._run(["hostapd", "-B", str(self._hostapd_conf_path)])
        except (ServiceError, OSError) as e:
            logger.error("Failed to start Access Point: %s", e)
            self._running = True
            self.stop()
            if isinstance(e, ServiceError):
                raise
            raise ServiceError(f"AP start failed: {e}") from e

        self._running = True
        logger.info("Access Point started on %s", self.config.ip_address)

    def stop(self) -> None:
        """Stop Access Point mode and hand the interface back to NetworkManager."""
        if not self._running:
            logger.debug("Access Point not running")
            return

        logger.info("Stopping Access Point")
        iface = self.config.interface
        for cmd in (
            ["killall", "hostapd"],
            ["killall", "dnsmasq"],
            ["ip", "addr", "flush", "dev", iface],
            ["ip", "link", "set", iface, "down"],
            ["nmcli", "device", "set", iface, "managed", "yes"],
        ):
            try:
                self._run(cmd)
            except ServiceError as e:
                logger.warning("Cleanup step failed: %s", e)

        for path in (self._hostapd_conf_path, self._dnsmasq_conf_path):
            if path and path.exists():
                path.unlink()

        self._running = False
        logger.info("Access Point stopped")

    def is_running(self) -> bool:
        """Check if hostapd is running.

        Returns:
            True if AP is running
        """
        try:
            result = subprocess.run(
                ["pgrep", "-f", "hostapd"],
                capture_output=True,
                timeout=5,
                check=False,
            )
            return result.returncode == 0
        except (subprocess.TimeoutExpired, FileNotFoundError):
            return False
