from __future__ import annotations

import logging
import random
import ssl

import httpx

from registry_aware_client.client.config import ClientConfig
from registry_aware_client.client.headers import AddHeadersRequestHook, HeadersSupplier, MultiValueHeadersSupplier
from registry_aware_client.client.registry_aware_client import RegistryAwareClient
from registry_aware_client.discover.registry import RegistryClient
from registry_aware_client.utils.constant import MAX_INT_MILLIS

logger = logging.getLogger(__name__)


def _check_timeout_millis(name: str, millis: int) -> int:
    if isinstance(millis, bool) or not isinstance(millis, int):
        raise TypeError(f"{name} timeout must be an int number of milliseconds")
    if millis < 0:
        raise ValueError(f"{name} timeout must not be negative but was {millis}")
    if millis > MAX_INT_MILLIS:
        raise ValueError(f"{name} timeout must be convertible to an int but {millis} is more than {MAX_INT_MILLIS}")
    return millis


class RegistryAwareClientBuilder:
    """Builds RegistryAwareClient instances wrapping a new ``httpx.Client``.

    Timeouts not set explicitly fall back to the library defaults (5000 ms).
    """

    def __init__(self, config: ClientConfig | None = None) -> None:
        self._config = config or ClientConfig()
        self._registry_client: RegistryClient | None = None
        self._headers_supplier: HeadersSupplier | None = None
        self._headers_multi_value_supplier: MultiValueHeadersSupplier | None = None
        self._transport: httpx.BaseTransport | None = None
        self._rng: random.Random | None = None

    @property
    def config(self) -> ClientConfig:
        return self._config

    def connect_timeout(self, millis: int) -> RegistryAwareClientBuilder:
        self._config.connect_timeout_ms = _check_timeout_millis("connect", millis)
        return self

    def read_timeout(self, millis: int) -> RegistryAwareClientBuilder:
        self._config.read_timeout_ms = _check_timeout_millis("read", millis)
        return self

    def pool_timeout(self, millis: int) -> RegistryAwareClientBuilder:
        self._config.pool_timeout_ms = _check_timeout_millis("pool", millis)
        return self

    def ssl_context(self, ssl_context: ssl.SSLContext) -> RegistryAwareClientBuilder:
        self._config.ssl_context = ssl_context
        return self

    def verify(self, verify: bool | str) -> RegistryAwareClientBuilder:
        self._config.verify = verify
        return self

    def hostname_verification(self, enabled: bool) -> RegistryAwareClientBuilder:
        self._config.hostname_verification = enabled
        return self

    def headers(self, headers: dict[str, str]) -> RegistryAwareClientBuilder:
        self._config.headers.update(headers)
        return self

    def headers_supplier(self, supplier: HeadersSupplier) -> RegistryAwareClientBuilder:
        self._headers_supplier = supplier
        return self

    def headers_multi_value_supplier(self, supplier: MultiValueHeadersSupplier) -> RegistryAwareClientBuilder:
        self._headers_multi_value_supplier = supplier
        return self

    def follow_redirects(self, follow: bool = True) -> RegistryAwareClientBuilder:
        self._config.follow_redirects = follow
        return self

    def registry_client(self, registry_client: RegistryClient) -> RegistryAwareClientBuilder:
        self._registry_client = registry_client
        return self

    def transport(self, transport: httpx.BaseTransport) -> RegistryAwareClientBuilder:
        self._transport = transport
        return self

    def random_source(self, rng: random.Random) -> RegistryAwareClientBuilder:
        """Random source used to pick among several matching instances."""
        self._rng = rng
        return self

    def _timeout(self) -> httpx.Timeout:
        cfg = self._config
        if cfg.connect_timeout_ms is None:
            logger.debug("Connect timeout not configured; using default of %d ms", cfg.effective_connect_timeout_ms())
        if cfg.read_timeout_ms is None:
            logger.debug("Read timeout not configured; using default of %d ms", cfg.effective_read_timeout_ms())
        read_s = cfg.effective_read_timeout_ms() / 1000
        return httpx.Timeout(
            read_s,
            connect=cfg.effective_connect_timeout_ms() / 1000,
            read=read_s,
            pool=cfg.effective_pool_timeout_ms() / 1000,
        )

    def _verify(self) -> ssl.SSLContext | bool | str:
        cfg = self._config
        if cfg.ssl_context is not None:
            return cfg.ssl_context

        logger.info("No SSLContext provided; this client will use the system default TLS configuration")
        if cfg.hostname_verification or cfg.verify is False:
            return cfg.verify

        logger.warning("Hostname verification is disabled for this client")
        context = ssl.create_default_context(cafile=cfg.verify if isinstance(cfg.verify, str) else None)
        context.check_hostname = False
        return context

    def build(self) -> RegistryAwareClient:
        if self._registry_client is None:
            raise ValueError("registry_client is required to build a RegistryAwareClient")

        client = httpx.Client(
            timeout=self._timeout(),
            verify=self._verify(),
            headers=self._config.headers,
            follow_redirects=self._config.follow_redirects,
            transport=self._transport,
        )
        AddHeadersRequestHook.create_and_register(
            client, self._headers_supplier, self._headers_multi_value_supplier
        )
        return RegistryAwareClient(client, self._registry_client, rng=self._rng)


class ClientBuilders:
    """Starting point for creating RegistryAwareClient instances."""

    @staticmethod
    def httpx(config: ClientConfig | None = None) -> RegistryAwareClientBuilder:
        return RegistryAwareClientBuilder(config)
