from .loader import ConfigError, load_config, load_config_with_overrides
from .models import RegistryAwareClientConfig, RegistryConfig, client_config_from_dict

__all__ = [
    "ConfigError",
    "RegistryAwareClientConfig",
    "RegistryConfig",
    "client_config_from_dict",
    "load_config",
    "load_config_with_overrides",
]
