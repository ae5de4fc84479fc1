"""Configuration loading and validation."""

from captive_portal.config.config_manager import ConfigError, ConfigManager

__all__ = ["ConfigError", "ConfigManager"]
