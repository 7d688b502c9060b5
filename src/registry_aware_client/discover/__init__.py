"""Service registry model and registry clients.

This module provides:
- The ServiceIdentifier callers use to name the service they want
- The ServiceInstance entities a registry returns
- The RegistryClient contract plus in-memory, no-op and Consul implementations

Example:
    from registry_aware_client.discover import InMemoryRegistryClient
    from registry_aware_client.discover.entities import Port, ServiceInstance
    from registry_aware_client.utils.constant import PortType, Security

    registry_client = InMemoryRegistryClient()
    registry_client.register(ServiceInstance(
        service_name="orders",
        host_name="10.0.0.12",
        ports=[Port.of(8080, PortType.APPLICATION, Security.SECURE)],
    ))
"""

from __future__ import annotations

from registry_aware_client.discover.entities import (
    Port,
    ServiceIdentifier,
    ServiceInstance,
    ServicePaths,
)
from registry_aware_client.discover.registry import (
    ConsulRegistryClient,
    InMemoryRegistryClient,
    InstanceQuery,
    NoOpRegistryClient,
    RegistryClient,
    RegistryClientFactory,
)

__all__ = [
    "ConsulRegistryClient",
    "InMemoryRegistryClient",
    "InstanceQuery",
    "NoOpRegistryClient",
    "Port",
    "RegistryClient",
    "RegistryClientFactory",
    "ServiceIdentifier",
    "ServiceInstance",
    "ServicePaths",
]
