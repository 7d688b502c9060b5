from datetime import timedelta
from pathlib import Path

import pytest

from registry_aware_client.config import (
    ConfigError,
    RegistryAwareClientConfig,
    load_config,
    load_config_with_overrides,
)
from registry_aware_client.discover.registry import ConsulRegistryClient, InMemoryRegistryClient
from registry_aware_client.utils.constant import PortType


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


def test_load_config_yaml(tmp_path):
    path = _write(
        tmp_path,
        "client.yaml",
        """
client:
  connect_timeout_ms: 2000
  read_timeout_ms: "10000"
  follow_redirects: yes
  headers:
    User-Agent: orders-client
registry:
  type: consul
  base_url: http://consul.test:8500
  datacenter: dc1
services:
  orders:
    preferred_version: 2.1.0
    read_timeout: 30s
  orders-admin:
    service_name: orders
    connector: admin
  billing: billing-service
  audit:
""",
    )

    config = load_config(path)

    assert config.client.connect_timeout_ms == 2000
    assert config.client.read_timeout_ms == 10000
    assert config.client.follow_redirects is True
    assert config.client.headers == {"User-Agent": "orders-client"}
    assert config.registry.type == "consul"
    assert config.registry.options == {"base_url": "http://consul.test:8500", "datacenter": "dc1"}

    orders = config.service("orders")
    assert orders.service_name == "orders"
    assert orders.preferred_version == "2.1.0"
    assert orders.read_timeout == timedelta(seconds=30)
    assert config.service("orders-admin").connector == PortType.ADMIN
    assert config.service("orders-admin").service_name == "orders"
    assert config.service("billing").service_name == "billing-service"
    assert config.service("audit").service_name == "audit"


def test_env_expansion_and_root_key(tmp_path, monkeypatch):
    monkeypatch.setenv("CONSUL_URL", "http://consul.prod:8500")
    monkeypatch.delenv("ORDERS_VERSION", raising=False)
    path = _write(
        tmp_path,
        "client.yml",
        """
registry_aware_client:
  registry:
    type: consul
    base_url: ${CONSUL_URL}
  services:
    orders:
      minimum_version: ${ORDERS_VERSION:-1.0.0}
""",
    )

    config = load_config(path)

    assert config.registry.options["base_url"] == "http://consul.prod:8500"
    assert config.service("orders").minimum_version == "1.0.0"


def test_missing_env_without_default(tmp_path, monkeypatch):
    monkeypatch.delenv("MISSING_REGISTRY_URL", raising=False)
    path = _write(tmp_path, "client.yaml", "registry:\n  base_url: ${MISSING_REGISTRY_URL}\n")

    with pytest.raises(ConfigError, match="MISSING_REGISTRY_URL"):
        load_config(path)


def test_overrides_are_deep_merged(tmp_path):
    base = _write(
        tmp_path,
        "base.yaml",
        "client:\n  connect_timeout_ms: 1000\n  read_timeout_ms: 2000\nservices:\n  orders: {}\n",
    )
    override = _write(tmp_path, "prod.yaml", "client:\n  read_timeout_ms: 9000\n")

    config = load_config_with_overrides(base, override)

    assert config.client.connect_timeout_ms == 1000
    assert config.client.read_timeout_ms == 9000
    assert "orders" in config.services


@pytest.mark.parametrize(
    ("name", "content", "message"),
    [
        ("client.json", "{}", "Unsupported config file type"),
        ("client.yaml", "- a\n- b\n", "must contain a mapping"),
        ("client.yaml", "client: [unclosed\n", "Failed to parse"),
        ("client.yaml", "client:\n  retries: 3\n", "Unknown client setting"),
        ("client.yaml", "client:\n  read_timeout_ms: soon\n", "must be an int"),
        ("client.yaml", "services:\n  orders:\n    service_name: ' '\n", "Service name is required"),
    ],
)
def test_invalid_config(tmp_path, name, content, message):
    path = _write(tmp_path, name, content)
    with pytest.raises(ConfigError, match=message):
        load_config(path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "absent.yaml")


def test_unknown_service_name():
    with pytest.raises(KeyError, match="payments"):
        RegistryAwareClientConfig().service("payments")


def test_create_client_from_config(tmp_path):
    path = _write(
        tmp_path,
        "client.yaml",
        """
client:
  read_timeout_ms: 1500
registry:
  type: in-memory
  instances:
    - service_name: orders
      host_name: orders.internal
      ports:
        - number: 8443
          security: SECURE
""",
    )
    config = load_config(path)

    registry_client = config.create_registry_client()
    assert isinstance(registry_client, InMemoryRegistryClient)

    with config.create_client() as client:
        assert client.timeout.read == 1.5
        assert str(client.target_for_service("orders").uri) == "https://orders.internal:8443/"


def test_create_client_with_given_registry(registry_client):
    config = RegistryAwareClientConfig.from_dict({"registry": {"type": "consul"}})

    with config.create_client(registry_client) as client:
        assert client.registry_client is registry_client


def test_registry_options_section():
    config = RegistryAwareClientConfig.from_dict(
        {"registry": {"type": "consul", "options": {"base_url": "http://consul.test:8500"}}}
    )

    consul = config.create_registry_client()
    try:
        assert isinstance(consul, ConsulRegistryClient)
        assert consul.base_url == "http://consul.test:8500"
    finally:
        consul.close()
