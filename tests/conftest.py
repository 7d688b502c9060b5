import pytest

from registry_aware_client.discover.entities import Port, ServiceInstance, ServicePaths
from registry_aware_client.discover.registry import InMemoryRegistryClient
from registry_aware_client.utils.constant import PortType, Security


class FakeRegistry:
    """Registry double that records queries and returns a canned result."""

    def __init__(self, result=None):
        self.result = result
        self.queries = []

    def find_service_instance_by(self, query):
        self.queries.append(query)
        return self.result

    def find_service_instance_by_id(self, service_name, instance_id):
        return None

    def find_all_service_instances_by(self, query):
        return []

    def close(self):
        pass


def make_instance(
    service_name: str = "test-service",
    host_name: str = "localhost",
    *,
    instance_id: str | None = None,
    version: str | None = None,
    app_port: int | None = 8080,
    admin_port: int | None = 8081,
    security: Security = Security.SECURE,
    home_page_path: str = "/home",
) -> ServiceInstance:
    ports = []
    if app_port is not None:
        ports.append(Port.of(app_port, PortType.APPLICATION, security))
    if admin_port is not None:
        ports.append(Port.of(admin_port, PortType.ADMIN, security))
    return ServiceInstance(
        instance_id=instance_id,
        service_name=service_name,
        host_name=host_name,
        ports=ports,
        paths=ServicePaths(home_page_path=home_page_path),
        version=version,
    )


@pytest.fixture
def instance() -> ServiceInstance:
    return make_instance(instance_id="test-1")


@pytest.fixture
def registry_client(instance) -> InMemoryRegistryClient:
    return InMemoryRegistryClient([instance])
