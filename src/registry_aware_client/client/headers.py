from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

import httpx

logger = logging.getLogger(__name__)

HeadersSupplier = Callable[[], Mapping[str, Any] | None]
MultiValueHeadersSupplier = Callable[[], Mapping[str, Iterable[Any]] | None]


def _add_header(headers: httpx.Headers, name: str, value: Any) -> None:
    existing = headers.get(name)
    headers[name] = str(value) if existing is None else f"{existing}, {value}"


class AddHeadersRequestHook:
    """httpx request event hook that adds headers produced by a supplier.

    Exactly one of the two suppliers is set. Values are added, not replaced: when a
    request already carries a header, the new value is appended comma-separated.
    """

    def __init__(
        self,
        headers_supplier: HeadersSupplier | None,
        headers_multi_value_supplier: MultiValueHeadersSupplier | None,
    ) -> None:
        if (headers_supplier is None) == (headers_multi_value_supplier is None):
            raise ValueError(
                "one of headers_supplier and headers_multi_value_supplier must be None, and the other not None"
            )
        self.headers_supplier = headers_supplier
        self.headers_multi_value_supplier = headers_multi_value_supplier

    @classmethod
    def from_map_supplier(cls, headers_supplier: HeadersSupplier) -> AddHeadersRequestHook:
        """Use when each header needs a single value."""
        return cls(headers_supplier, None)

    @classmethod
    def from_multi_value_supplier(cls, headers_multi_value_supplier: MultiValueHeadersSupplier) -> AddHeadersRequestHook:
        """Use when a header needs several values."""
        return cls(None, headers_multi_value_supplier)

    @classmethod
    def create_and_register(
        cls,
        client: httpx.Client,
        headers_supplier: HeadersSupplier | None = None,
        headers_multi_value_supplier: MultiValueHeadersSupplier | None = None,
    ) -> AddHeadersRequestHook | None:
        """Create a hook and append it to ``client``'s request hooks.

        The multi-value supplier wins when both are given; when neither is, nothing is
        registered and None is returned.
        """
        if headers_multi_value_supplier is not None:
            hook = cls.from_multi_value_supplier(headers_multi_value_supplier)
        elif headers_supplier is not None:
            hook = cls.from_map_supplier(headers_supplier)
        else:
            logger.debug("Not registering AddHeadersRequestHook: both header suppliers are None")
            return None

        event_hooks = client.event_hooks
        event_hooks["request"] = [*event_hooks.get("request", []), hook]
        client.event_hooks = event_hooks
        return hook

    def __call__(self, request: httpx.Request) -> None:
        if self.headers_supplier is not None:
            self._add_headers_from_map(request)
        else:
            self._add_headers_from_multi_value_map(request)

    def _add_headers_from_map(self, request: httpx.Request) -> None:
        headers = self.headers_supplier()
        if not headers:
            logger.warning("No headers to add: supplier provided None or empty headers mapping")
            return
        for name, value in headers.items():
            if isinstance(value, (list, tuple, set)):
                raise RuntimeError(
                    "Supplier provided multiple values for header "
                    f"{name} (for multiple values, use from_multi_value_supplier)"
                )
            _add_header(request.headers, name, value)

    def _add_headers_from_multi_value_map(self, request: httpx.Request) -> None:
        headers = self.headers_multi_value_supplier()
        if not headers:
            logger.warning("No headers to add: supplier provided None or empty multi-value headers mapping")
            return
        for name, values in headers.items():
            for value in values:
                _add_header(request.headers, name, value)
