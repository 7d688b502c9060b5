from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping
from typing import Any

from registry_aware_client.client import ClientBuilders, ClientConfig, RegistryAwareClient
from registry_aware_client.discover.entities import ServiceIdentifier
from registry_aware_client.discover.registry import RegistryClient, RegistryClientFactory

_TRUTHY = frozenset({"true", "yes", "on", "1"})
_FALSY = frozenset({"false", "no", "off", "0"})


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return value
    raise TypeError(f"'{key}' must be a mapping, not {type(value).__name__}")


def _as_bool(value: Any, setting: str) -> bool:
    if isinstance(value, (bool, int)):
        return bool(value)
    text = str(value).strip().lower()
    if text in _TRUTHY:
        return True
    if text in _FALSY:
        return False
    raise TypeError(f"{setting} must be a bool, got {value!r}")


def _as_millis(value: Any, setting: str) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{setting} must be an int number of milliseconds, got {value!r}")
    return value


def _as_verify(value: Any, setting: str) -> bool | str:
    """A bool, or the path of a CA bundle."""
    if isinstance(value, str) and value.strip().lower() not in _TRUTHY | _FALSY:
        return value
    return _as_bool(value, setting)


def _as_headers(value: Any, setting: str) -> dict[str, str]:
    if not isinstance(value, Mapping):
        raise TypeError(f"{setting} must be a mapping of header names to values")
    return {str(name): str(header) for name, header in value.items()}


_CLIENT_SETTINGS: dict[str, Callable[[Any, str], Any]] = {
    "connect_timeout_ms": _as_millis,
    "read_timeout_ms": _as_millis,
    "pool_timeout_ms": _as_millis,
    "verify": _as_verify,
    "hostname_verification": _as_bool,
    "follow_redirects": _as_bool,
    "headers": _as_headers,
}


def client_config_from_dict(data: Mapping[str, Any]) -> ClientConfig:
    """Build a ClientConfig from the ``client`` section of a configuration mapping."""
    unknown = sorted(set(data) - set(_CLIENT_SETTINGS))
    if unknown:
        raise ValueError(f"Unknown client setting: {', '.join(f'client.{key}' for key in unknown)}")
    return ClientConfig(**{
        key: _CLIENT_SETTINGS[key](value, f"client.{key}")
        for key, value in data.items()
        if value is not None
    })


@dataclasses.dataclass
class RegistryConfig:
    """Which registry client to build and the options to build it with."""

    type: str = "in-memory"
    options: dict[str, Any] = dataclasses.field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RegistryConfig:
        # Options may sit beside ``type`` or in a nested ``options`` mapping.
        options = {key: value for key, value in data.items() if key not in ("type", "options")}
        options.update(_section(data, "options"))
        return cls(type=str(data.get("type") or "in-memory").strip(), options=options)

    def create_registry_client(self) -> RegistryClient:
        return RegistryClientFactory.create(self.type, **self.options)


def _service_identifier_from(name: str, value: Any) -> ServiceIdentifier:
    if value is None:
        return ServiceIdentifier.of(name)
    if isinstance(value, str):
        return ServiceIdentifier.of(value)
    if not isinstance(value, Mapping):
        raise TypeError(f"services.{name} must be a service name or a mapping")
    return ServiceIdentifier.model_validate({"service_name": name, **value})


@dataclasses.dataclass
class RegistryAwareClientConfig:
    """Top-level configuration: the HTTP client, the registry and named service identifiers.

    Example mapping::

        client:
          connect_timeout_ms: 2000
          read_timeout_ms: 10000
        registry:
          type: consul
          base_url: http://consul.service:8500
        services:
          orders:
            preferred_version: 2.1.0
          orders-admin:
            service_name: orders
            connector: admin
    """

    client: ClientConfig = dataclasses.field(default_factory=ClientConfig)
    registry: RegistryConfig = dataclasses.field(default_factory=RegistryConfig)
    services: dict[str, ServiceIdentifier] = dataclasses.field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RegistryAwareClientConfig:
        if not isinstance(data, Mapping):
            raise TypeError("configuration must be a mapping")
        return cls(
            client=client_config_from_dict(_section(data, "client")),
            registry=RegistryConfig.from_dict(_section(data, "registry")),
            services={
                str(name): _service_identifier_from(str(name), value)
                for name, value in _section(data, "services").items()
            },
        )

    def service(self, name: str) -> ServiceIdentifier:
        try:
            return self.services[name]
        except KeyError:
            raise KeyError(f"No service named '{name}' is configured") from None

    def create_registry_client(self) -> RegistryClient:
        return self.registry.create_registry_client()

    def create_client(self, registry_client: RegistryClient | None = None) -> RegistryAwareClient:
        """Build a RegistryAwareClient; the registry client comes from config unless given."""
        client_config = dataclasses.replace(self.client, headers=dict(self.client.headers))
        return (
            ClientBuilders.httpx(client_config)
            .registry_client(self.create_registry_client() if registry_client is None else registry_client)
            .build()
        )
