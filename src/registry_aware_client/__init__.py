"""Public API for registry_aware_client.

This module re-exports the stable, supported surface area of the library. Import
from here when possible.
"""

from registry_aware_client.client import (
    AddHeadersRequestHook,
    ClientBuilders,
    ClientConfig,
    RegistryAwareClient,
    RegistryAwareClientBuilder,
    ResolvedService,
    ServiceResolver,
    WebTarget,
)
from registry_aware_client.config import (
    ConfigError,
    RegistryAwareClientConfig,
    load_config,
    load_config_with_overrides,
)
from registry_aware_client.discover import (
    ConsulRegistryClient,
    InMemoryRegistryClient,
    InstanceQuery,
    NoOpRegistryClient,
    Port,
    RegistryClient,
    RegistryClientFactory,
    ServiceIdentifier,
    ServiceInstance,
    ServicePaths,
)
from registry_aware_client.exceptions import MissingPortError, MissingServiceError, RegistryAwareClientError
from registry_aware_client.utils.constant import PortType, Security

__all__ = [
    # client
    "AddHeadersRequestHook",
    "ClientBuilders",
    "ClientConfig",
    "RegistryAwareClient",
    "RegistryAwareClientBuilder",
    "ResolvedService",
    "ServiceResolver",
    "WebTarget",
    # config
    "ConfigError",
    "RegistryAwareClientConfig",
    "load_config",
    "load_config_with_overrides",
    # discovery
    "ConsulRegistryClient",
    "InMemoryRegistryClient",
    "InstanceQuery",
    "NoOpRegistryClient",
    "Port",
    "PortType",
    "RegistryClient",
    "RegistryClientFactory",
    "Security",
    "ServiceIdentifier",
    "ServiceInstance",
    "ServicePaths",
    # errors
    "MissingPortError",
    "MissingServiceError",
    "RegistryAwareClientError",
]
