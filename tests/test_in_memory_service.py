"""Tests for the in-memory network service."""

import pytest

from captive_portal.network import InMemoryNetworkService, Network, ServiceError


@pytest.mark.asyncio
async def test_scan_returns_copy_in_order(service, networks):
    """Test scans return the scripted networks in order."""
    result = await service.scan_networks()

    assert result == networks
    result.clear()
    assert await service.scan_networks() == networks
    assert service.scan_count == 2


@pytest.mark.asyncio
async def test_scan_failure(service):
    """Test fail_scan makes scans raise ServiceError."""
    service.fail_scan = True

    with pytest.raises(ServiceError):
        await service.scan_networks()


@pytest.mark.asyncio
async def test_connect_open_network(service):
    """Test open networks accept any password."""
    result = await service.connect("Library", "")

    assert result.success is True
    assert service.connected_essid == "Library"


@pytest.mark.asyncio
async def test_connect_protected_network(service):
    """Test protected networks need the scripted password."""
    rejected = await service.connect("Home-5G", "nope")
    accepted = await service.connect("Home-5G", "hunter22")

    assert rejected.success is False
    assert "Home-5G" in rejected.message
    assert accepted.success is True
    assert service.connect_attempts == [("Home-5G", "nope"), ("Home-5G", "hunter22")]


@pytest.mark.asyncio
async def test_connect_unknown_network_rejected(service):
    """Test networks that are neither listed nor scripted are rejected."""
    result = await service.connect("Ghost", "")

    assert result.success is False


@pytest.mark.asyncio
async def test_connect_failure(service):
    """Test fail_connect makes connect raise ServiceError."""
    service.fail_connect = True

    with pytest.raises(ServiceError):
        await service.connect("Library", "")
    assert service.connected_essid is None


@pytest.mark.asyncio
async def test_start_access_point(service):
    """Test starting the access point (and failing to)."""
    service.fail_access_point = True
    with pytest.raises(ServiceError):
        await service.start_access_point()
    assert service.access_point_started is False

    service.fail_access_point = False
    await service.start_access_point()
    assert service.access_point_started is True


@pytest.mark.asyncio
async def test_delay():
    """Test calls still complete with a simulated delay."""
    service = InMemoryNetworkService([Network(essid="Slow", is_protected=False)], delay=0.01)

    assert [n.essid for n in await service.scan_networks()] == ["Slow"]
