"""Registry client backed by Consul's HTTP health API.

Instances are read from ``GET /v1/health/service/<name>``. The service address and port
become the APPLICATION port; everything else comes from the service ``Meta`` map:

    version, commitRef, description      copied onto the instance
    scheme                               "https" marks the application port SECURE
    adminPort, adminScheme               optional ADMIN port (scheme defaults to ``scheme``)
    homePagePath, statusPath,
    healthCheckPath                      the instance's ServicePaths
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx

from registry_aware_client.discover.entities import Port, ServiceInstance, ServicePaths
from registry_aware_client.discover.registry.registry_client import InstanceQuery, RegistryClient, filter_instances
from registry_aware_client.discover.registry.registry_factory import registry
from registry_aware_client.utils.constant import PortType, Security

logger = logging.getLogger(__name__)

_PATH_META_KEYS = {
    "home_page_path": "homePagePath",
    "status_path": "statusPath",
    "health_check_path": "healthCheckPath",
}


def _security_for(scheme: str | None) -> Security:
    return Security.SECURE if (scheme or "").strip().lower() == "https" else Security.NOT_SECURE


@registry(name="consul")
class ConsulRegistryClient(RegistryClient):

    def __init__(
        self,
        base_url: str = "http://localhost:8500",
        *,
        token: str | None = None,
        datacenter: str | None = None,
        only_passing: bool = True,
        timeout: float = 5.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.datacenter = datacenter
        self.only_passing = only_passing
        # If provided, caller owns the client's lifecycle.
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(timeout=timeout)

    def _fetch_entries(self, service_name: str) -> list[Mapping[str, Any]]:
        params: dict[str, str] = {}
        if self.only_passing:
            params["passing"] = "true"
        if self.datacenter:
            params["dc"] = self.datacenter
        headers = {"X-Consul-Token": self.token} if self.token else {}

        url = f"{self.base_url}/v1/health/service/{quote(service_name, safe='')}"
        logger.debug("Querying Consul for service %s", service_name)
        response = self._client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response.json() or []

    def _to_service_instance(self, entry: Mapping[str, Any]) -> ServiceInstance:
        service = entry.get("Service") or {}
        node = entry.get("Node") or {}
        meta: Mapping[str, Any] = service.get("Meta") or {}

        scheme = meta.get("scheme")
        ports = [Port(number=service["Port"], type=PortType.APPLICATION, security=_security_for(scheme))]
        admin_port = meta.get("adminPort")
        if admin_port:
            ports.append(Port(
                number=int(admin_port),
                type=PortType.ADMIN,
                security=_security_for(meta.get("adminScheme", scheme)),
            ))

        paths = ServicePaths(**{field: meta[key] for field, key in _PATH_META_KEYS.items() if meta.get(key)})

        return ServiceInstance(
            instance_id=service.get("ID"),
            service_name=service.get("Service"),
            host_name=service.get("Address") or node.get("Address"),
            ip=node.get("Address"),
            ports=ports,
            paths=paths,
            version=meta.get("version"),
            commit_ref=meta.get("commitRef"),
            description=meta.get("description"),
            metadata={str(key): str(value) for key, value in meta.items()},
        )

    def _instances(self, service_name: str) -> list[ServiceInstance]:
        return [self._to_service_instance(entry) for entry in self._fetch_entries(service_name)]

    def find_service_instance_by_id(self, service_name: str, instance_id: str) -> ServiceInstance | None:
        for instance in self._instances(service_name):
            if instance.instance_id == instance_id:
                return instance
        return None

    def find_all_service_instances_by(self, query: InstanceQuery) -> list[ServiceInstance]:
        return filter_instances(self._instances(query.service_name), query)

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
