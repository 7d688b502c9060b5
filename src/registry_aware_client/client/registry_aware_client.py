from __future__ import annotations

import logging
import random
import threading
import warnings
from typing import Any

import httpx

from registry_aware_client.client.headers import AddHeadersRequestHook, HeadersSupplier, MultiValueHeadersSupplier
from registry_aware_client.client.service_resolver import PathResolver, ServiceResolver
from registry_aware_client.client.web_target import WebTarget
from registry_aware_client.discover.entities import ServiceIdentifier
from registry_aware_client.discover.registry import RegistryClient
from registry_aware_client.utils.constant import PortType

logger = logging.getLogger(__name__)


class RegistryAwareClient:
    """An ``httpx.Client`` wrapper whose targets can be looked up in a service registry.

    Any attribute not defined here (``get``, ``post``, ``request``, ``stream``,
    ``headers``, ...) is served by the wrapped client, so code written against a plain
    ``httpx.Client`` keeps working.

    Closing this client closes the wrapped one exactly once, even when ``close`` is
    called repeatedly or from several threads.
    """

    def __init__(
        self,
        client: httpx.Client,
        registry_client: RegistryClient,
        *,
        headers_supplier: HeadersSupplier | None = None,
        headers_multi_value_supplier: MultiValueHeadersSupplier | None = None,
        rng: random.Random | None = None,
    ) -> None:
        if client is None:
            raise ValueError("client must not be None")
        if registry_client is None:
            raise ValueError("registry_client must not be None")

        if headers_supplier is not None or headers_multi_value_supplier is not None:
            warnings.warn(
                "Passing header suppliers to RegistryAwareClient is deprecated; register an "
                "AddHeadersRequestHook on the httpx.Client (or use the builder) before wrapping it",
                DeprecationWarning,
                stacklevel=2,
            )
            AddHeadersRequestHook.create_and_register(client, headers_supplier, headers_multi_value_supplier)

        self._client = client
        self._registry_client = registry_client
        self._resolver = ServiceResolver(registry_client, rng=rng)
        self._close_lock = threading.Lock()
        self._closed = False

    @property
    def client(self) -> httpx.Client:
        """The wrapped ``httpx.Client``. Rarely needed; prefer the methods on this class."""
        return self._client

    @property
    def registry_client(self) -> RegistryClient:
        return self._registry_client

    @property
    def is_closed(self) -> bool:
        return self._closed or self._client.is_closed

    def _ensure_open(self) -> None:
        if self.is_closed:
            raise RuntimeError("Cannot create a target, as the client has been closed.")

    def target(self, uri: str | httpx.URL) -> WebTarget:
        self._ensure_open()
        return WebTarget(self._client, uri)

    def target_for_service(
        self,
        service: str | ServiceIdentifier,
        connector: PortType | None = None,
        path_resolver: PathResolver | None = None,
    ) -> WebTarget:
        """Look up ``service`` in the registry and return a target for one of its instances.

        ``service`` is either a service name, resolved with default versions and
        timeouts (latest version), or a ServiceIdentifier used as given. A non-None
        ``connector`` overrides the connector on a copy of the identifier. When more
        than one instance matches, one is chosen at random on every call.

        ``path_resolver`` computes the target path from the selected instance, e.g.
        ``lambda instance: instance.paths.status_path``. Without it, APPLICATION
        targets use the instance's home page path and ADMIN targets use ``/``.

        Raises:
            MissingServiceError: no instance matches.
            RuntimeError: this client has been closed.
        """
        self._ensure_open()
        if isinstance(service, ServiceIdentifier):
            identifier = service if connector is None else service.with_connector(connector)
        else:
            identifier = ServiceIdentifier.of(service, connector)

        resolved = self._resolver.resolve(identifier, path_resolver)
        return WebTarget(self._client, resolved.uri)

    def close(self) -> None:
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        logger.debug("Closing wrapped httpx client")
        self._client.close()

    def __enter__(self) -> RegistryAwareClient:
        return self

    def __exit__(self, exc_type, exc, traceback) -> None:
        self.close()

    def __getattr__(self, name: str) -> Any:
        # Only reached for attributes not found on this object.
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._client, name)

    def __repr__(self) -> str:
        state = "closed" if self.is_closed else "open"
        return f"RegistryAwareClient(registry_client={type(self._registry_client).__name__}, {state})"
