"""Shared pytest fixtures for all tests."""

from unittest.mock import Mock

import pytest

from captive_portal.network import InMemoryNetworkService, Network
from captive_portal.portal.notifications import NotificationLog
from captive_portal.portal.orchestrator import ConnectionOrchestrator


@pytest.fixture
def networks():
    """Scan result in the order the service reports it (not sorted)."""
    return [
        Network(essid="Cafe Guest", is_protected=False, signal=40),
        Network(essid="Home-5G", is_protected=True, signal=90, security="WPA2"),
        Network(essid="Library", is_protected=False, signal=70),
    ]


@pytest.fixture
def service(networks) -> InMemoryNetworkService:
    """In-memory service that accepts 'hunter22' for Home-5G."""
    return InMemoryNetworkService(networks, passwords={"Home-5G": "hunter22"})


@pytest.fixture
def notifications() -> NotificationLog:
    """Notification sink that records what it receives."""
    return NotificationLog()


@pytest.fixture
def on_connected() -> Mock:
    """Host callback for a successful connect."""
    return Mock()


@pytest.fixture
def on_access_point_started() -> Mock:
    """Host callback for the access point fallback."""
    return Mock()


@pytest.fixture
def orchestrator(service, notifications, on_connected, on_access_point_started):
    """Orchestrator wired to the in-memory service and recording callbacks."""
    return ConnectionOrchestrator(
        service,
        notify=notifications,
        on_connected=on_connected,
        on_access_point_started=on_access_point_started,
    )
