from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any

import httpx


class WebTarget:
    """A request-building handle bound to one URI on an ``httpx.Client``.

    ``path`` and ``query_param`` return new targets; the original is never changed.
    """

    def __init__(self, client: httpx.Client, uri: str | httpx.URL) -> None:
        self._client = client
        self._uri = httpx.URL(uri)

    @property
    def uri(self) -> httpx.URL:
        return self._uri

    @property
    def client(self) -> httpx.Client:
        return self._client

    def path(self, *segments: str) -> WebTarget:
        """Append path segments, joining them with single slashes."""
        parts = [self._uri.path.rstrip("/")]
        parts.extend(segment.strip("/") for segment in segments if segment and segment.strip("/"))
        new_path = "/".join(parts) or "/"
        if not new_path.startswith("/"):
            new_path = f"/{new_path}"
        return WebTarget(self._client, self._uri.copy_with(path=new_path))

    def query_param(self, name: str, *values: Any) -> WebTarget:
        uri = self._uri
        for value in values:
            uri = uri.copy_add_param(name, str(value))
        return WebTarget(self._client, uri)

    def request(self, method: str, **kwargs: Any) -> httpx.Response:
        return self._client.request(method, self._uri, **kwargs)

    def stream(self, method: str, **kwargs: Any) -> AbstractContextManager[httpx.Response]:
        return self._client.stream(method, self._uri, **kwargs)

    def get(self, **kwargs: Any) -> httpx.Response:
        return self.request("GET", **kwargs)

    def head(self, **kwargs: Any) -> httpx.Response:
        return self.request("HEAD", **kwargs)

    def options(self, **kwargs: Any) -> httpx.Response:
        return self.request("OPTIONS", **kwargs)

    def post(self, **kwargs: Any) -> httpx.Response:
        return self.request("POST", **kwargs)

    def put(self, **kwargs: Any) -> httpx.Response:
        return self.request("PUT", **kwargs)

    def patch(self, **kwargs: Any) -> httpx.Response:
        return self.request("PATCH", **kwargs)

    def delete(self, **kwargs: Any) -> httpx.Response:
        return self.request("DELETE", **kwargs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WebTarget):
            return NotImplemented
        return self._client is other._client and self._uri == other._uri

    def __hash__(self) -> int:
        return hash((id(self._client), str(self._uri)))

    def __repr__(self) -> str:
        return f"WebTarget(uri={str(self._uri)!r})"
