from pydantic import BaseModel, ConfigDict, Field, field_validator

from registry_aware_client.utils.constant import (
    DEFAULT_HEALTH_CHECK_PATH,
    DEFAULT_HOME_PAGE_PATH,
    DEFAULT_STATUS_PATH,
    PortType,
    Security,
)


class Port(BaseModel):
    """A single port exposed by a service instance."""
    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=0, le=65535)
    type: PortType = PortType.APPLICATION
    security: Security = Security.NOT_SECURE

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value):
        if isinstance(value, str):
            return PortType.to_original(value)
        return value

    @classmethod
    def of(cls, number: int, type: PortType, security: Security = Security.NOT_SECURE) -> "Port":
        return cls(number=number, type=type, security=security)

    @property
    def scheme(self) -> str:
        return self.security.scheme


class ServicePaths(BaseModel):
    """Named paths a service instance publishes in the registry."""
    model_config = ConfigDict(frozen=True)

    home_page_path: str = DEFAULT_HOME_PAGE_PATH
    status_path: str = DEFAULT_STATUS_PATH
    health_check_path: str = DEFAULT_HEALTH_CHECK_PATH


class ServiceInstance(BaseModel):
    """Represents one registered, reachable process backing a logical service."""
    model_config = ConfigDict(frozen=True)

    instance_id: str | None = None
    service_name: str
    host_name: str
    ip: str | None = None
    ports: list[Port] = []
    paths: ServicePaths = ServicePaths()
    version: str | None = None
    commit_ref: str | None = None
    description: str | None = None
    metadata: dict[str, str] = {}

    def find_port(self, port_type: PortType) -> Port | None:
        """Return the port to use for ``port_type``.

        Among the ports of that type, the first SECURE one in declaration order wins;
        otherwise the first NOT_SECURE one. Returns None when no port has that type.
        """
        candidates = [port for port in self.ports if port.type == port_type]
        for port in candidates:
            if port.security == Security.SECURE:
                return port
        return candidates[0] if candidates else None
