import threading

import httpx
import pytest

from registry_aware_client import ClientBuilders, RegistryAwareClient
from registry_aware_client.discover.entities import ServiceIdentifier
from registry_aware_client.discover.registry import InMemoryRegistryClient
from registry_aware_client.exceptions import MissingServiceError
from registry_aware_client.utils.constant import PortType


class CountingClient(httpx.Client):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.close_calls = 0

    def close(self):
        self.close_calls += 1
        super().close()


def _echo_transport(seen: list[httpx.Request]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"url": str(request.url)})

    return httpx.MockTransport(handler)


@pytest.fixture
def seen():
    return []


@pytest.fixture
def client(registry_client, seen):
    with RegistryAwareClient(httpx.Client(transport=_echo_transport(seen)), registry_client) as rac:
        yield rac


def test_target_for_service_by_name(client):
    target = client.target_for_service("test-service")
    assert str(target.uri) == "https://localhost:8080/home"


def test_target_for_service_with_connector(client):
    target = client.target_for_service("test-service", PortType.ADMIN)
    assert str(target.uri) == "https://localhost:8081/"


def test_target_for_service_with_path_resolver(client):
    target = client.target_for_service("test-service", PortType.ADMIN, lambda instance: instance.paths.status_path)
    assert str(target.uri) == "https://localhost:8081/ping"


def test_target_for_service_with_identifier(client):
    identifier = ServiceIdentifier(service_name="test-service", connector=PortType.ADMIN)

    assert str(client.target_for_service(identifier).uri) == "https://localhost:8081/"
    # An explicit connector overrides the identifier's.
    assert str(client.target_for_service(identifier, PortType.APPLICATION).uri) == "https://localhost:8080/home"


def test_target_for_missing_service(client):
    with pytest.raises(MissingServiceError, match="No service instances found with name payments"):
        client.target_for_service("payments")


def test_requests_go_to_resolved_instance(client, seen):
    response = client.target_for_service("test-service").path("orders", "42").query_param("expand", "items").get()

    assert response.status_code == 200
    assert str(seen[0].url) == "https://localhost:8080/home/orders/42?expand=items"


def test_target_for_plain_uri(client):
    assert str(client.target("http://example.test/a").uri) == "http://example.test/a"


def test_unknown_attributes_pass_through_to_httpx(client, seen):
    response = client.get("http://example.test/direct")

    assert response.json() == {"url": "http://example.test/direct"}
    assert client.headers is client.client.headers


def test_private_attributes_do_not_pass_through(client):
    with pytest.raises(AttributeError):
        client._transport


def test_close_is_idempotent():
    http_client = CountingClient()
    rac = RegistryAwareClient(http_client, InMemoryRegistryClient())

    rac.close()
    rac.close()

    assert rac.is_closed
    assert http_client.close_calls == 1


def test_concurrent_close_closes_once():
    http_client = CountingClient()
    rac = RegistryAwareClient(http_client, InMemoryRegistryClient())
    start = threading.Barrier(8)
    errors = []

    def close():
        start.wait()
        try:
            rac.close()
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=close) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert rac.is_closed
    assert http_client.close_calls == 1


def test_target_after_close_is_illegal_state():
    # Empty registry: without the closed check this would be a MissingServiceError.
    rac = RegistryAwareClient(httpx.Client(), InMemoryRegistryClient())
    rac.close()

    with pytest.raises(RuntimeError, match="client has been closed"):
        rac.target_for_service("test-service")
    with pytest.raises(RuntimeError):
        rac.target("http://example.test/")


def test_closing_wrapped_client_is_reflected():
    http_client = httpx.Client()
    rac = RegistryAwareClient(http_client, InMemoryRegistryClient())

    http_client.close()

    assert rac.is_closed
    with pytest.raises(RuntimeError):
        rac.target_for_service("test-service")


def test_context_manager_closes(registry_client):
    with RegistryAwareClient(httpx.Client(), registry_client) as rac:
        assert not rac.is_closed
    assert rac.is_closed


@pytest.mark.parametrize("which", ["client", "registry_client"])
def test_collaborators_are_required(which, registry_client):
    kwargs = {"client": httpx.Client(), "registry_client": registry_client, which: None}
    with pytest.raises(ValueError):
        RegistryAwareClient(**kwargs)


def test_header_supplier_argument_is_deprecated(registry_client, seen):
    http_client = httpx.Client(transport=_echo_transport(seen))

    with pytest.warns(DeprecationWarning):
        rac = RegistryAwareClient(http_client, registry_client, headers_supplier=lambda: {"X-Request-Id": "abc"})

    rac.target_for_service("test-service").get()
    assert seen[0].headers["X-Request-Id"] == "abc"


def test_built_client_uses_transport(registry_client, seen):
    rac = (
        ClientBuilders.httpx()
        .registry_client(registry_client)
        .transport(_echo_transport(seen))
        .build()
    )
    with rac:
        assert rac.target_for_service("test-service").get().status_code == 200
    assert str(seen[0].url) == "https://localhost:8080/home"


def test_repr_reports_state(registry_client):
    rac = RegistryAwareClient(httpx.Client(), registry_client)
    assert "open" in repr(rac)
    rac.close()
    assert "closed" in repr(rac)
