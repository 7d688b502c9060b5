from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from registry_aware_client.utils.constant import LATEST_VERSION_TOKEN, NO_MINIMUM_VERSION_TOKEN

if TYPE_CHECKING:
    from registry_aware_client.discover.entities import ServiceIdentifier, ServiceInstance
    from registry_aware_client.utils.constant import PortType


@dataclass(eq=False)
class RegistryAwareClientError(Exception):
    """Base class for registry-aware client exceptions with a canonical error shape."""

    code: int
    message: str
    data: Any | None = None
    cause: Exception | None = None

    def __post_init__(self) -> None:
        self.args = (self.message,)
        if self.cause is not None:
            self.__cause__ = self.cause

    def to_error_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "data": self.data}


@dataclass(eq=False)
class MissingServiceError(RegistryAwareClientError):
    """Raised when the registry has no instance matching a service identifier."""

    code: int = 4002
    message: str = "No service instances found"

    @classmethod
    def from_identifier(cls, identifier: ServiceIdentifier) -> MissingServiceError:
        """Build the error for a failed lookup of ``identifier``.

        Absent versions are rendered as ``[latest]`` (preferred) and ``[none]`` (minimum)
        so the message stays stable for tooling that parses it.
        """
        preferred = identifier.preferred_version or LATEST_VERSION_TOKEN
        minimum = identifier.minimum_version or NO_MINIMUM_VERSION_TOKEN
        message = (
            f"No service instances found with name {identifier.service_name}, "
            f"preferred version {preferred}, min version {minimum}"
        )
        return cls(
            message=message,
            data={
                "service_name": identifier.service_name,
                "preferred_version": identifier.preferred_version,
                "minimum_version": identifier.minimum_version,
            },
        )


@dataclass(eq=False)
class MissingPortError(RegistryAwareClientError):
    """Raised when a resolved instance exposes no port of the requested connector type."""

    code: int = 4003
    message: str = "No matching port found"

    @classmethod
    def from_instance(cls, instance: ServiceInstance, connector: PortType) -> MissingPortError:
        message = (
            f"Service instance {instance.instance_id or instance.host_name} of {instance.service_name} "
            f"has no {connector.value} port"
        )
        return cls(
            message=message,
            data={
                "service_name": instance.service_name,
                "instance_id": instance.instance_id,
                "connector": connector.value,
            },
        )
