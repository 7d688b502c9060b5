from .registry_client import InstanceQuery, RegistryClient, filter_instances
from .registry_factory import RegistryClientFactory, registry
from .in_memory import InMemoryRegistryClient
from .noop import NoOpRegistryClient
from .consul import ConsulRegistryClient

__all__ = [
    "ConsulRegistryClient",
    "InMemoryRegistryClient",
    "InstanceQuery",
    "NoOpRegistryClient",
    "RegistryClient",
    "RegistryClientFactory",
    "filter_instances",
    "registry",
]
