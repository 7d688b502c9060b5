import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any

from registry_aware_client.discover.entities import ServiceInstance
from registry_aware_client.discover.registry.registry_client import InstanceQuery, RegistryClient, filter_instances
from registry_aware_client.discover.registry.registry_factory import registry

logger = logging.getLogger(__name__)


@registry(name="in-memory")
class InMemoryRegistryClient(RegistryClient):
    """In-memory implementation of the RegistryClient, safe to share between threads."""

    def __init__(self, instances: Iterable[ServiceInstance | Mapping[str, Any]] | None = None) -> None:
        self._lock = threading.Lock()
        self._services: dict[str, list[ServiceInstance]] = {}
        for instance in instances or []:
            if not isinstance(instance, ServiceInstance):
                instance = ServiceInstance.model_validate(instance)
            self.register(instance)

    def register(self, instance: ServiceInstance) -> None:
        with self._lock:
            self._services.setdefault(instance.service_name, []).append(instance)
        logger.info("Registered service instance: %s", instance.instance_id or instance.host_name)

    def unregister(self, service_name: str, instance_id: str | None = None) -> None:
        """Remove one instance, or every instance of ``service_name`` when no id is given."""
        with self._lock:
            if instance_id is None:
                self._services.pop(service_name, None)
            else:
                instances = self._services.get(service_name, [])
                self._services[service_name] = [i for i in instances if i.instance_id != instance_id]
        logger.info("Unregistered service: %s", service_name if instance_id is None else instance_id)

    def list_instances(self, service_name: str) -> list[ServiceInstance]:
        with self._lock:
            return list(self._services.get(service_name) or [])

    def list_services(self) -> list[str]:
        with self._lock:
            return sorted(name for name, instances in self._services.items() if instances)

    def find_service_instance_by_id(self, service_name: str, instance_id: str) -> ServiceInstance | None:
        for instance in self.list_instances(service_name):
            if instance.instance_id == instance_id:
                return instance
        return None

    def find_all_service_instances_by(self, query: InstanceQuery) -> list[ServiceInstance]:
        return filter_instances(self.list_instances(query.service_name), query)
