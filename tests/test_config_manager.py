"""Tests for configuration manager."""

from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

from captive_portal.config import ConfigManager
from captive_portal.config.config_manager import ConfigError


def _write_config(tmp_path: Path, config: Dict[str, Any]) -> str:
    path = tmp_path / "config.yml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return str(path)


BASE_CONFIG = {
    "network": {"backend": "memory", "interface": "wlan1", "scan_timeout": 5},
    "access_point": {"ssid": "Portal-Setup", "password": "setup-pass", "channel": 11},
    "portal": {"notification_timeout": 8},
    "web": {"host": "0.0.0.0", "port": 8080},
}


def test_load_config(tmp_path) -> None:
    """Test a valid config can be loaded."""
    config = ConfigManager(_write_config(tmp_path, BASE_CONFIG))

    assert config.get("network") is not None
    assert config.get("access_point") is not None


def test_get_with_dot_notation(tmp_path) -> None:
    """Test getting nested config values with dot notation."""
    config = ConfigManager(_write_config(tmp_path, BASE_CONFIG))

    assert config.get("network.interface") == "wlan1"
    assert config.get("portal.notification_timeout") == 8
    assert config.get("web.port") == 8080


def test_get_with_default(tmp_path) -> None:
    """Test that get() returns default when key not found."""
    config = ConfigManager(_write_config(tmp_path, BASE_CONFIG))

    assert config.get("nonexistent.key", "default") == "default"
    assert config.get("network.connect_timeout", 30.0) == 30.0
    # Dot notation does not descend into scalars
    assert config.get("web.port.number", 1) == 1


def test_missing_file_raises_error(tmp_path) -> None:
    """Test that a missing config file raises ConfigError."""
    with pytest.raises(ConfigError, match="Configuration file not found"):
        ConfigManager(str(tmp_path / "missing.yml"))


def test_invalid_yaml_raises_error(tmp_path) -> None:
    """Test that invalid YAML raises ConfigError."""
    path = tmp_path / "config.yml"
    path.write_text("invalid: yaml: content: [[[", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse YAML"):
        ConfigManager(str(path))


def test_empty_file_raises_error(tmp_path) -> None:
    """Test that an empty file is missing the network section."""
    path = tmp_path / "config.yml"
    path.write_text("", encoding="utf-8")

    with pytest.raises(ConfigError, match="Missing required config section: network"):
        ConfigManager(str(path))


@pytest.mark.parametrize(
    "override, message",
    [
        ({"network": {"backend": "wicd"}}, "'network.backend' must be one of"),
        ({"network": {"scan_timeout": -1}}, "must be positive"),
        ({"network": {"connect_timeout": "slow"}}, "must be a number"),
        ({"network": ["wlan0"]}, "'network' section must be a dictionary"),
        ({"access_point": {"password": "short"}}, "8-63 characters"),
        ({"access_point": {"password": 12345678}}, "must be a string"),
        ({"access_point": {"channel": 15}}, "between 1 and 14"),
        ({"portal": {"notification_timeout": 0}}, "must be positive"),
        ({"web": {"port": 70000}}, "between 1 and 65535"),
    ],
)
def test_invalid_values_raise_error(tmp_path, override, message) -> None:
    """Test that invalid values raise ConfigError."""
    config = {**BASE_CONFIG, **override}

    with pytest.raises(ConfigError, match=message):
        ConfigManager(_write_config(tmp_path, config))


def test_open_access_point_allowed(tmp_path) -> None:
    """Test an empty access point password is valid."""
    config = {**BASE_CONFIG, "access_point": {"ssid": "Portal-Setup", "password": ""}}

    manager = ConfigManager(_write_config(tmp_path, config))

    assert manager.get("access_point.password") == ""


def test_get_section_configs(tmp_path) -> None:
    """Test helper methods for getting config sections."""
    config = ConfigManager(_write_config(tmp_path, BASE_CONFIG))

    assert config.get_network_config()["backend"] == "memory"
    assert config.get_access_point_config()["ssid"] == "Portal-Setup"


def test_to_dict_is_a_copy(tmp_path) -> None:
    """Test getting entire config as dictionary."""
    config = ConfigManager(_write_config(tmp_path, BASE_CONFIG))

    config_dict = config.to_dict()
    config_dict["network"]["backend"] = "nmcli"

    assert config_dict["access_point"]["password"] == "setup-pass"
    assert config.get("network.backend") == "memory"


def test_to_dict_safe_masks_password(tmp_path) -> None:
    """Test the access point password is masked."""
    config = ConfigManager(_write_config(tmp_path, BASE_CONFIG))

    safe = config.to_dict_safe()

    assert safe["access_point"]["password"] == "***MASKED***"
    assert config.get("access_point.password") == "setup-pass"
