from .service_identifier import ServiceIdentifier
from .service_instance import (
    Port,
    ServiceInstance,
    ServicePaths,
)

__all__ = [
    "Port",
    "ServiceIdentifier",
    "ServiceInstance",
    "ServicePaths",
]
