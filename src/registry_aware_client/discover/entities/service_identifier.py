from __future__ import annotations

import re
from datetime import timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from registry_aware_client.utils.constant import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_READ_TIMEOUT,
    MAX_INT_MILLIS,
    PortType,
)

_ONE_MILLISECOND = timedelta(milliseconds=1)

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([A-Za-z]+)\s*$")

_DURATION_UNITS: dict[str, str] = {
    "us": "microseconds",
    "microsecond": "microseconds",
    "microseconds": "microseconds",
    "ms": "milliseconds",
    "millisecond": "milliseconds",
    "milliseconds": "milliseconds",
    "s": "seconds",
    "second": "seconds",
    "seconds": "seconds",
    "m": "minutes",
    "min": "minutes",
    "minute": "minutes",
    "minutes": "minutes",
    "h": "hours",
    "hour": "hours",
    "hours": "hours",
    "d": "days",
    "day": "days",
    "days": "days",
}


def parse_duration(value: Any) -> Any:
    """Convert ``"<count> <unit>"`` strings (``"500ms"``, ``"5 seconds"``) into a timedelta.

    Anything else is returned untouched so pydantic can apply its own timedelta parsing
    (numbers of seconds, ISO-8601 durations).
    """
    if not isinstance(value, str):
        return value
    match = _DURATION_PATTERN.match(value)
    if match is None:
        return value
    count, unit = match.groups()
    keyword = _DURATION_UNITS.get(unit.lower())
    if keyword is None:
        raise ValueError(f"Unknown duration unit: {unit}")
    return timedelta(**{keyword: int(count)})


def duration_to_int_millis(duration: timedelta) -> int:
    millis = duration // _ONE_MILLISECOND
    if millis > MAX_INT_MILLIS:
        raise OverflowError(f"{millis} ms does not fit in a 32-bit int")
    return millis


class ServiceIdentifier(BaseModel):
    """Identifies the service a client connects to.

    Holds the service name, the preferred and minimum versions, the connector (which
    class of port to target) and the connect/read timeouts. Instances are immutable:
    ``with_service_name`` and ``with_connector`` return validated copies with one field
    replaced, which is handy when you hold an identifier for the APPLICATION connector
    but need the ADMIN one to check status, or need the same settings for another service.

    ``connector``, ``connect_timeout`` and ``read_timeout`` fall back to their defaults
    when omitted or passed as None.
    """
    model_config = ConfigDict(frozen=True)

    service_name: str = Field(default=None, validate_default=True)
    preferred_version: str | None = None
    minimum_version: str | None = None
    connector: PortType = PortType.APPLICATION
    connect_timeout: timedelta = DEFAULT_CONNECT_TIMEOUT
    read_timeout: timedelta = DEFAULT_READ_TIMEOUT

    @field_validator("service_name", mode="before")
    @classmethod
    def _require_service_name(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError("Service name is required")
        return value

    @field_validator("connector", mode="before")
    @classmethod
    def _default_connector(cls, value: Any) -> Any:
        if value is None:
            return PortType.APPLICATION
        if isinstance(value, str):
            return PortType.to_original(value)
        return value

    @field_validator("connect_timeout", "read_timeout", mode="before")
    @classmethod
    def _default_timeout(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return DEFAULT_CONNECT_TIMEOUT if info.field_name == "connect_timeout" else DEFAULT_READ_TIMEOUT
        return parse_duration(value)

    @field_validator("connect_timeout", "read_timeout")
    @classmethod
    def _check_timeout_fits_int(cls, value: timedelta, info: ValidationInfo) -> timedelta:
        name = info.field_name.removesuffix("_timeout")
        millis = value // _ONE_MILLISECOND
        if millis > MAX_INT_MILLIS:
            raise ValueError(
                f"{name} timeout must be convertible to an int but {millis} ms is more than "
                f"the maximum 32-bit int value {MAX_INT_MILLIS}"
            )
        return value

    @classmethod
    def of(cls, service_name: str, connector: PortType | None = None) -> ServiceIdentifier:
        """Identifier for ``service_name`` with no version constraints and default timeouts."""
        return cls(service_name=service_name, connector=connector)

    @staticmethod
    def copy_of(original: ServiceIdentifier) -> ServiceIdentifier:
        return original.model_copy()

    def with_service_name(self, service_name: str) -> ServiceIdentifier:
        return self._with(service_name=service_name)

    def with_connector(self, connector: PortType | None) -> ServiceIdentifier:
        return self._with(connector=connector)

    def _with(self, **changes: Any) -> ServiceIdentifier:
        return type(self).model_validate({**self.model_dump(), **changes})

    @property
    def connect_timeout_as_int_millis(self) -> int:
        """Connect timeout in milliseconds, for transports that only take an int."""
        return duration_to_int_millis(self.connect_timeout)

    @property
    def read_timeout_as_int_millis(self) -> int:
        """Read timeout in milliseconds, for transports that only take an int."""
        return duration_to_int_millis(self.read_timeout)
