"""Configuration manager for loading and validating config files."""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional, TypeVar, Union

import yaml

T = TypeVar("T")


logger = logging.getLogger(__name__)

NETWORK_BACKENDS = ("nmcli", "memory")


class ConfigError(Exception):
    """Raised when configuration is invalid."""


class ConfigManager:
    """Manages loading and accessing configuration from YAML files."""

    def __init__(self, user_config_path: str) -> None:
        """Initialize the configuration manager.

        Args:
            user_config_path: Path to user config file (required)

        Raises:
            ConfigError: If config file doesn't exist or is invalid
        """
        self._config: Dict[str, Any] = {}
        self._user_config_path = user_config_path
        self._load_config()

    def _load_yaml_file(self, path: Path) -> Dict[str, Any]:
        """Load a YAML file and return its contents.

        Args:
            path: Path to YAML file

        Returns:
            Dictionary containing the YAML contents

        Raises:
            ConfigError: If file cannot be read or parsed
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
                return content if content is not None else {}
        except FileNotFoundError as e:
            raise ConfigError(f"Config file not found: {path}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML file {path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load config file {path}: {e}") from e

    @staticmethod
    def _check_positive(section: Dict[str, Any], name: str, prefix: str) -> None:
        if name not in section:
            return
        value = section[name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"'{prefix}.{name}' must be a number")
        if value <= 0:
            raise ConfigError(f"'{prefix}.{name}' must be positive")

    def _section(self, name: str) -> Dict[str, Any]:
        section = self._config.get(name, {})
        if not isinstance(section, dict):
            raise ConfigError(f"'{name}' section must be a dictionary")
        return section

    def _validate_config(self) -> None:
        """Validate the loaded configuration.

        Raises:
            ConfigError: If configuration is invalid
        """
        if not isinstance(self._config, dict):
            raise ConfigError("Configuration must be a dictionary")

        if "network" not in self._config:
            raise ConfigError("Missing required config section: network")

        network = self._section("network")
        backend = network.get("backend", "nmcli")
        if backend not in NETWORK_BACKENDS:
            raise ConfigError(
                f"'network.backend' must be one of: {', '.join(NETWORK_BACKENDS)}"
            )
        for name in ("scan_timeout", "connect_timeout"):
            self._check_positive(network, name, "network")

        access_point = self._section("access_point")
        password = access_point.get("password", "")
        if not isinstance(password, str):
            raise ConfigError("'access_point.password' must be a string")
        # WPA2 passphrases are 8-63 characters
        if password and not 8 <= len(password) <= 63:
            raise ConfigError("'access_point.password' must be empty or 8-63 characters")
        channel = access_point.get("channel", 6)
        if isinstance(channel, bool) or not isinstance(channel, int) or not 1 <= channel <= 14:
            raise ConfigError("'access_point.channel' must be an integer between 1 and 14")

        portal = self._section("portal")
        self._check_positive(portal, "notification_timeout", "portal")

        web = self._section("web")
        port = web.get("port", 8080)
        if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
            raise ConfigError("'web.port' must be an integer between 1 and 65535")

    def _load_config(self) -> None:
        """Load configuration from user config file.

        Raises:
            ConfigError: If config file doesn't exist or is invalid
        """
        config_path = Path(self._user_config_path)

        if not config_path.exists():
            raise ConfigError(
                f"Configuration file not found: {config_path}\n"
                f"Please create a config file. See config.yml.example for reference."
            )

        logger.info("Loading configuration from: %s", config_path)
        self._config = self._load_yaml_file(config_path)

        self._validate_config()
        logger.info("Configuration loaded and validated successfully")

    def get(self, key: str, default: Optional[T] = None) -> Union[Any, T]:
        """Get a configuration value by key.

        Supports dot notation for nested values (e.g., 'web.port')

        Args:
            key: Configuration key (supports dot notation)
            default: Default value if key not found

        Returns:
            Configuration value or default (type matches default when provided)
        """
        keys = key.split(".")
        value: Any = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default  # type: ignore[return-value]

        return value

    def get_network_config(self) -> Dict[str, Any]:
        """Get network service configuration."""
        return self.get("network", {})

    def get_access_point_config(self) -> Dict[str, Any]:
        """Get access point configuration."""
        return self.get("access_point", {})

    def to_dict(self) -> Dict[str, Any]:
        """Get the entire configuration as a dictionary.

        Returns:
            Complete configuration dictionary
        """
        return copy.deepcopy(self._config)

    def to_dict_safe(self) -> Dict[str, Any]:
        """Export config with sensitive data masked.

        Returns:
            Config dict with the access point password masked
        """
        config = copy.deepcopy(self._config)
        if config.get("access_point", {}).get("password"):
            config["access_point"]["password"] = "***MASKED***"
        return config
