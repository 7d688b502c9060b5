from .config import ClientConfig
from .headers import AddHeadersRequestHook
from .web_target import WebTarget
from .service_resolver import ResolvedService, ServiceResolver
from .registry_aware_client import RegistryAwareClient
from .client_builder import ClientBuilders, RegistryAwareClientBuilder

__all__ = [
    "AddHeadersRequestHook",
    "ClientBuilders",
    "ClientConfig",
    "RegistryAwareClient",
    "RegistryAwareClientBuilder",
    "ResolvedService",
    "ServiceResolver",
    "WebTarget",
]
