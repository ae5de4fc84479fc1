"""Tests for the hostapd/dnsmasq access point."""

import subprocess
from unittest.mock import patch

import pytest

from captive_portal.network import AccessPoint, APConfig, ServiceError


@pytest.fixture
def ap_config(tmp_path):
    """Create an AP config writing into a temporary directory."""
    return APConfig(ssid="Portal-Setup", password="setup-pass", conf_dir=str(tmp_path / "ap"))


def _commands(run):
    return [c.args[0][1:] for c in run.call_args_list]


class TestConfigRendering:
    """Tests for the rendered daemon configuration."""

    def test_hostapd_protected(self, ap_config) -> None:
        """Test a password turns on WPA2."""
        conf = AccessPoint(ap_config).hostapd_config()

        assert "ssid=Portal-Setup\n" in conf
        assert "channel=6\n" in conf
        assert "wpa=2\n" in conf
        assert "wpa_passphrase=setup-pass\n" in conf

    def test_hostapd_open(self, tmp_path) -> None:
        """Test no password gives an open network."""
        conf = AccessPoint(APConfig(ssid="Open", conf_dir=str(tmp_path))).hostapd_config()

        assert "wpa" not in conf

    def test_dnsmasq_resolves_everything_to_device(self, ap_config) -> None:
        """Test every DNS name points at the device address."""
        conf = AccessPoint(ap_config).dnsmasq_config()

        assert "dhcp-range=192.168.4.2,192.168.4.20,255.255.255.0,24h\n" in conf
        assert "address=/#/192.168.4.1\n" in conf


class TestAccessPoint:
    """Tests for starting and stopping the access point."""

    def test_start(self, ap_config, tmp_path) -> None:
        """Test start configures the interface and launches both daemons."""
        access_point = AccessPoint(ap_config)

        with patch("subprocess.run") as run:
            access_point.start()

        commands = _commands(run)
        assert commands[0] == ["nmcli", "device", "set", "wlan0", "managed", "no"]
        assert ["ip", "addr", "add", "192.168.4.1/24", "dev", "wlan0"] in commands
        assert commands[-2][0] == "dnsmasq"
        assert commands[-1][:2] == ["hostapd", "-B"]
        assert all(c.args[0][0] == "sudo" for c in run.call_args_list)
        assert (tmp_path / "ap" / "hostapd.conf").read_text().startswith("interface=wlan0")

    def test_start_twice_is_noop(self, ap_config) -> None:
        """Test a running access point is not started again."""
        access_point = AccessPoint(ap_config)

        with patch("subprocess.run") as run:
            access_point.start()
            count = run.call_count
            access_point.start()

        assert run.call_count == count

    def test_start_failure_cleans_up(self, ap_config, tmp_path) -> None:
        """Test a failing daemon raises ServiceError and tears down."""
        access_point = AccessPoint(ap_config)

        def fake_run(cmd, **kwargs):
            if cmd[1] == "hostapd":
                raise subprocess.CalledProcessError(1, cmd, stderr=b"nl80211 not found")
            return subprocess.CompletedProcess(cmd, 0)

        with patch("subprocess.run", side_effect=fake_run) as run:
            with pytest.raises(ServiceError, match="nl80211"):
                access_point.start()

        assert ["killall", "dnsmasq"] in _commands(run)
        assert not (tmp_path / "ap" / "hostapd.conf").exists()

    def test_missing_binary(self, ap_config) -> None:
        """Test a missing command raises ServiceError."""
        access_point = AccessPoint(ap_config)

        with patch("subprocess.run", side_effect=FileNotFoundError("sudo")):
            with pytest.raises(ServiceError, match="not found"):
                access_point.start()

    def test_stop(self, ap_config) -> None:
        """Test stop hands the interface back to NetworkManager."""
        access_point = AccessPoint(ap_config)
        with patch("subprocess.run"):
            access_point.start()

        with patch("subprocess.run") as run:
            access_point.stop()

        assert _commands(run)[-1] == ["nmcli", "device", "set", "wlan0", "managed", "yes"]

    def test_is_running(self, ap_config) -> None:
        """Test liveness follows pgrep for hostapd."""
        access_point = AccessPoint(ap_config)

        with patch("subprocess.run", return_value=subprocess.CompletedProcess([], 0)) as run:
            assert access_point.is_running() is True
        assert run.call_args.args[0] == ["pgrep", "-f", "hostapd"]

        with patch("subprocess.run", return_value=subprocess.CompletedProcess([], 1)):
            assert access_point.is_running() is False
