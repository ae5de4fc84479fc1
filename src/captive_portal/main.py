"""Main entry point for the captive portal."""

import argparse
import logging
import sys
from typing import NoReturn

import uvicorn

from captive_portal import __version__
from captive_portal.config import ConfigError, ConfigManager
from captive_portal.network import (
    AccessPoint,
    APConfig,
    InMemoryNetworkService,
    Network,
    NetworkService,
    NmcliNetworkService,
)
from captive_portal.portal.notifications import DEFAULT_NOTIFICATION_TIMEOUT
from captive_portal.portal.orchestrator import ConnectionOrchestrator
from captive_portal.web.app import create_app

logger = logging.getLogger(__name__)

DEMO_NETWORKS = [
    Network(essid="Home-5G", is_protected=True, signal=82, security="WPA2"),
    Network(essid="Cafe Guest", is_protected=False, signal=64),
    Network(essid="Neighbour", is_protected=True, signal=31, security="WPA3"),
]


def setup_logging(debug: bool = False) -> None:
    """Configure logging for the application.

    Args:
        debug: If True, set log level to DEBUG, otherwise INFO
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed command-line arguments
    """
    parser = argparse.ArgumentParser(
        description="Captive Portal - Put a headless device on a WiFi network"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--mock-network",
        action="store_true",
        help="Use an in-memory network service with demo networks (for testing)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config.yml",
        help="Path to configuration file (default: config.yml)",
    )
    return parser.parse_args()


def _load_config(config_path: str) -> ConfigManager:
    """Load and validate configuration.

    Args:
        config_path: Path to configuration file

    Returns:
        Initialized ConfigManager

    Raises:
        SystemExit: If configuration is invalid
    """
    try:
        config = ConfigManager(user_config_path=config_path)
        logger.info("Network backend: %s", config.get("network.backend", "nmcli"))
        return config
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)


def _init_service(config: ConfigManager, mock_mode: bool) -> NetworkService:
    """Build the network service.

    Args:
        config: Configuration manager
        mock_mode: If True, use the in-memory service

    Returns:
        NetworkService for the orchestrator
    """
    network = config.get_network_config()

    if mock_mode or network.get("backend", "nmcli") == "memory":
        logger.info("  - Using InMemoryNetworkService (mock mode)")
        return InMemoryNetworkService(
            DEMO_NETWORKS,
            passwords={"Home-5G": "correct horse"},
            delay=1.0,
        )

    interface = network.get("interface", "wlan0")
    ap = config.get_access_point_config()
    access_point = AccessPoint(
        APConfig(
            ssid=ap.get("ssid", "Device-Setup"),
            password=ap.get("password", ""),
            channel=ap.get("channel", 6),
            interface=interface,
            ip_address=ap.get("ip_address", "192.168.4.1"),
            dhcp_range_start=ap.get("dhcp_range_start", "192.168.4.2"),
            dhcp_range_end=ap.get("dhcp_range_end", "192.168.4.20"),
        )
    )
    logger.info("  - Using NmcliNetworkService on %s", interface)
    return NmcliNetworkService(
        interface=interface,
        access_point=access_point,
        scan_timeout=network.get("scan_timeout", 10.0),
        connect_timeout=network.get("connect_timeout", 30.0),
    )


def _on_connected(essid: str) -> None:
    logger.info("Device joined %s - setup complete", essid)


def _on_access_point_started() -> None:
    logger.info("Device switching to access point mode")


def main() -> NoReturn:
    """Main application entry point."""
    args = parse_args()
    setup_logging(args.debug)

    logger.info("=" * 60)
    logger.info("Captive Portal v%s", __version__)
    logger.info("=" * 60)

    config = _load_config(args.config)

    logger.info("Initializing network service...")
    try:
        service = _init_service(config, args.mock_network)
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("Failed to initialize network service: %s", e)
        sys.exit(1)

    orchestrator = ConnectionOrchestrator(
        service,
        notification_timeout=config.get(
            "portal.notification_timeout", DEFAULT_NOTIFICATION_TIMEOUT
        ),
    )
    app = create_app(
        orchestrator,
        config_manager=config,
        on_connected=_on_connected,
        on_access_point_started=_on_access_point_started,
    )

    host = config.get("web.host", "0.0.0.0")
    port = config.get("web.port", 8080)
    logger.info("Portal available at http://%s:%d", host, port)

    try:
        uvicorn.run(app, host=host, port=port, log_level="warning")
    except KeyboardInterrupt:
        logger.info("\nShutting down...")

    logger.info("Goodbye!")
    sys.exit(0)


if __name__ == "__main__":
    main()
