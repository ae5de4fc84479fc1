"""Network service boundary and its implementations."""

from captive_portal.network.access_point import AccessPoint, APConfig
from captive_portal.network.in_memory_service import InMemoryNetworkService
from captive_portal.network.nmcli_service import NmcliNetworkService
from captive_portal.network.service import ConnectResult, Network, NetworkService, ServiceError

__all__ = [
    "AccessPoint",
    "APConfig",
    "ConnectResult",
    "InMemoryNetworkService",
    "Network",
    "NetworkService",
    "NmcliNetworkService",
    "ServiceError",
]
