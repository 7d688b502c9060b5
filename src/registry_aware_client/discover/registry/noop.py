from registry_aware_client.discover.entities import ServiceInstance
from registry_aware_client.discover.registry.registry_client import InstanceQuery, RegistryClient
from registry_aware_client.discover.registry.registry_factory import registry


@registry(name="noop")
class NoOpRegistryClient(RegistryClient):
    """Registry client that never finds anything. Useful in tests."""

    def find_service_instance_by_id(self, service_name: str, instance_id: str) -> ServiceInstance | None:
        return None

    def find_all_service_instances_by(self, query: InstanceQuery) -> list[ServiceInstance]:
        return []
