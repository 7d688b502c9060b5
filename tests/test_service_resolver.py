import random
import re

import pytest

from conftest import FakeRegistry, make_instance
from registry_aware_client.client.service_resolver import ServiceResolver, normalize_path, url_for_path
from registry_aware_client.discover.entities import Port, ServiceIdentifier
from registry_aware_client.discover.registry import InMemoryRegistryClient
from registry_aware_client.exceptions import MissingPortError, MissingServiceError
from registry_aware_client.utils.constant import PortType, Security


def test_resolves_application_port_and_home_page_path(registry_client):
    resolver = ServiceResolver(registry_client)

    resolved = resolver.resolve(ServiceIdentifier.of("test-service", PortType.APPLICATION))

    assert resolved.uri == "https://localhost:8080/home"
    assert resolved.scheme == "https"
    assert resolved.port.number == 8080


def test_admin_connector_defaults_to_root_path(registry_client):
    resolver = ServiceResolver(registry_client)

    resolved = resolver.resolve(ServiceIdentifier.of("test-service", PortType.ADMIN))

    assert resolved.uri == "https://localhost:8081/"


def test_path_resolver_overrides_default_path(registry_client):
    resolver = ServiceResolver(registry_client)

    resolved = resolver.resolve(
        ServiceIdentifier.of("test-service", PortType.ADMIN),
        lambda instance: instance.paths.status_path,
    )

    assert resolved.uri == "https://localhost:8081/ping"


def test_missing_service_message():
    resolver = ServiceResolver(InMemoryRegistryClient())

    expected = "No service instances found with name test-service, preferred version [latest], min version [none]"
    with pytest.raises(MissingServiceError, match=re.escape(expected)) as exc_info:
        resolver.resolve(ServiceIdentifier.of("test-service"))

    assert str(exc_info.value) == expected


def test_missing_service_message_includes_versions():
    resolver = ServiceResolver(FakeRegistry(None))
    identifier = ServiceIdentifier(service_name="orders", preferred_version="2.0.0", minimum_version="1.5.0")

    with pytest.raises(MissingServiceError) as exc_info:
        resolver.resolve(identifier)

    assert exc_info.value.message == (
        "No service instances found with name orders, preferred version 2.0.0, min version 1.5.0"
    )
    assert exc_info.value.data["minimum_version"] == "1.5.0"


def test_missing_port_raises():
    resolver = ServiceResolver(InMemoryRegistryClient([make_instance(admin_port=None)]))

    with pytest.raises(MissingPortError, match="has no ADMIN port"):
        resolver.resolve(ServiceIdentifier.of("test-service", PortType.ADMIN))


@pytest.mark.parametrize("result", [make_instance(), [make_instance()], (make_instance(),)])
def test_accepts_single_instance_or_sequence(result):
    resolver = ServiceResolver(FakeRegistry(result))
    assert resolver.resolve(ServiceIdentifier.of("test-service")).uri == "https://localhost:8080/home"


@pytest.mark.parametrize("result", [None, []])
def test_empty_results_are_missing_service(result):
    resolver = ServiceResolver(FakeRegistry(result))
    with pytest.raises(MissingServiceError):
        resolver.resolve(ServiceIdentifier.of("test-service"))


def test_query_carries_identifier_versions():
    registry = FakeRegistry([make_instance()])
    resolver = ServiceResolver(registry)

    resolver.resolve(ServiceIdentifier(service_name="test-service", preferred_version="1.0.0", minimum_version="0.9.0"))

    (query,) = registry.queries
    assert query.service_name == "test-service"
    assert query.preferred_version == "1.0.0"
    assert query.minimum_version == "0.9.0"


def test_every_call_queries_registry():
    registry = FakeRegistry([make_instance()])
    resolver = ServiceResolver(registry)
    identifier = ServiceIdentifier.of("test-service")

    resolver.resolve(identifier)
    resolver.resolve(identifier)

    assert len(registry.queries) == 2


def test_random_selection_draws_from_all_matches():
    instances = [make_instance(host_name=f"host-{i}") for i in range(3)]
    resolver = ServiceResolver(FakeRegistry(instances), rng=random.Random(7))
    identifier = ServiceIdentifier.of("test-service")

    hosts = {resolver.resolve(identifier).instance.host_name for _ in range(60)}

    assert hosts == {"host-0", "host-1", "host-2"}


def test_seeded_rng_is_repeatable():
    instances = [make_instance(host_name=f"host-{i}") for i in range(5)]
    identifier = ServiceIdentifier.of("test-service")

    first = [ServiceResolver(FakeRegistry(instances), rng=random.Random(42)).resolve(identifier).uri]
    second = [ServiceResolver(FakeRegistry(instances), rng=random.Random(42)).resolve(identifier).uri]

    assert first == second


def test_resolved_path_is_normalized():
    resolver = ServiceResolver(FakeRegistry([make_instance()]))

    resolved = resolver.resolve(ServiceIdentifier.of("test-service"), lambda instance: "api//v1")

    assert resolved.path == "/api/v1"
    assert resolved.uri == "https://localhost:8080/api/v1"


def test_registry_client_is_required():
    with pytest.raises(ValueError):
        ServiceResolver(None)


@pytest.mark.parametrize(
    ("path", "expected"),
    [(None, "/"), ("", "/"), ("/", "/"), ("home", "/home"), ("//a//b/", "/a/b/")],
)
def test_normalize_path(path, expected):
    assert normalize_path(path) == expected


def test_url_for_path_brackets_ipv6_hosts():
    port = Port.of(8080, PortType.APPLICATION, Security.NOT_SECURE)
    assert url_for_path("::1", port, "/status") == "http://[::1]:8080/status"
    assert url_for_path("[::1]", port, "/") == "http://[::1]:8080/"
