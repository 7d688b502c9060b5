import dataclasses
import ssl

from registry_aware_client.utils.constant import (
    DEFAULT_CONNECT_TIMEOUT_MILLIS,
    DEFAULT_CONNECTION_POOL_TIMEOUT_MILLIS,
    DEFAULT_READ_TIMEOUT_MILLIS,
)


@dataclasses.dataclass
class ClientConfig:
    """Settings used to build the wrapped ``httpx.Client``."""

    connect_timeout_ms: int | None = None
    """Connect timeout; DEFAULT_CONNECT_TIMEOUT_MILLIS when unset."""

    read_timeout_ms: int | None = None
    """Read timeout; DEFAULT_READ_TIMEOUT_MILLIS when unset."""

    pool_timeout_ms: int | None = None
    """Time to wait for a pooled connection; DEFAULT_CONNECTION_POOL_TIMEOUT_MILLIS when unset."""

    ssl_context: ssl.SSLContext | None = None
    """TLS context for outgoing connections. Takes precedence over ``verify``."""

    verify: bool | str = True
    """Certificate verification: a bool or a CA bundle path."""

    hostname_verification: bool = True
    """When False, certificates are still verified but host names are not checked."""

    headers: dict[str, str] = dataclasses.field(default_factory=dict)
    """Static headers sent with every request."""

    follow_redirects: bool = False

    def effective_connect_timeout_ms(self) -> int:
        return DEFAULT_CONNECT_TIMEOUT_MILLIS if self.connect_timeout_ms is None else self.connect_timeout_ms

    def effective_read_timeout_ms(self) -> int:
        return DEFAULT_READ_TIMEOUT_MILLIS if self.read_timeout_ms is None else self.read_timeout_ms

    def effective_pool_timeout_ms(self) -> int:
        return DEFAULT_CONNECTION_POOL_TIMEOUT_MILLIS if self.pool_timeout_ms is None else self.pool_timeout_ms
