from datetime import timedelta
from enum import StrEnum

DEFAULT_CONNECTION_POOL_TIMEOUT_MILLIS = 5_000

DEFAULT_CONNECT_TIMEOUT_MILLIS = 5_000
DEFAULT_CONNECT_TIMEOUT = timedelta(milliseconds=DEFAULT_CONNECT_TIMEOUT_MILLIS)

DEFAULT_READ_TIMEOUT_MILLIS = 5_000
DEFAULT_READ_TIMEOUT = timedelta(milliseconds=DEFAULT_READ_TIMEOUT_MILLIS)

# Largest timeout the transport layer accepts, in milliseconds (signed 32-bit int).
MAX_INT_MILLIS = 2_147_483_647

DEFAULT_HOME_PAGE_PATH = "/"
DEFAULT_STATUS_PATH = "/ping"
DEFAULT_HEALTH_CHECK_PATH = "/healthcheck"

LATEST_VERSION_TOKEN = "[latest]"
NO_MINIMUM_VERSION_TOKEN = "[none]"


class PortType(StrEnum):
    """Logical class of a port on a service instance
    APPLICATION: normal traffic
    ADMIN: operational / management traffic
    """
    APPLICATION = "APPLICATION"
    ADMIN = "ADMIN"

    @classmethod
    def to_original(cls, value: "str | PortType") -> "PortType":
        if isinstance(value, PortType):
            return value
        normalized = str(value).strip().upper()
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unknown port type: {value}")


class Security(StrEnum):
    """Whether a port speaks TLS"""
    SECURE = "SECURE"
    NOT_SECURE = "NOT_SECURE"

    @property
    def scheme(self) -> str:
        return "https" if self is Security.SECURE else "http"
