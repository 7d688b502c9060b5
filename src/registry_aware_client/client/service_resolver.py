import logging
import random
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from registry_aware_client.discover.entities import Port, ServiceIdentifier, ServiceInstance
from registry_aware_client.discover.registry import InstanceQuery, RegistryClient
from registry_aware_client.exceptions import MissingPortError, MissingServiceError
from registry_aware_client.observability import LogContext
from registry_aware_client.utils.constant import PortType

logger = logging.getLogger(__name__)

PathResolver = Callable[[ServiceInstance], str]

_REPEATED_SLASHES = re.compile(r"/{2,}")


def normalize_path(path: str | None) -> str:
    """Leading slash, no doubled slashes; empty and None become ``/``."""
    if not path:
        return "/"
    return _REPEATED_SLASHES.sub("/", f"/{path}")


def url_for_path(host_name: str, port: Port, path: str | None) -> str:
    """Build ``scheme://host:port/path`` for a port, choosing https for SECURE ports."""
    host = f"[{host_name}]" if ":" in host_name and not host_name.startswith("[") else host_name
    return f"{port.scheme}://{host}:{port.number}{normalize_path(path)}"


@dataclass(frozen=True)
class ResolvedService:
    """A resolved service endpoint, ready to build a request target from."""

    identifier: ServiceIdentifier
    instance: ServiceInstance
    port: Port
    path: str

    @property
    def uri(self) -> str:
        return url_for_path(self.instance.host_name, self.port, self.path)

    @property
    def scheme(self) -> str:
        return self.port.scheme


def _as_instance_list(result: ServiceInstance | Iterable[ServiceInstance] | None) -> list[ServiceInstance]:
    if result is None:
        return []
    if isinstance(result, ServiceInstance):
        return [result]
    return list(result)


class ServiceResolver:
    """Resolve a ServiceIdentifier to a concrete instance, port and path.

    Boundary:
    - Every call performs a fresh registry lookup; nothing is cached between calls.
    - No retries and no timeout of its own; the registry client owns both.
    - It does not create HTTP clients or send requests.
    """

    def __init__(self, registry_client: RegistryClient, *, rng: random.Random | None = None):
        if registry_client is None:
            raise ValueError("registry_client must not be None")
        self._registry_client = registry_client
        self._rng = rng or random.Random()

    @property
    def registry_client(self) -> RegistryClient:
        return self._registry_client

    def find_instances(self, identifier: ServiceIdentifier) -> list[ServiceInstance]:
        query = InstanceQuery.from_identifier(identifier)
        logger.debug(
            "Find instances with name %s, preferred version %s, minimum version %s",
            query.service_name,
            query.preferred_version,
            query.minimum_version,
        )
        return _as_instance_list(self._registry_client.find_service_instance_by(query))

    def select_instance(self, instances: list[ServiceInstance]) -> ServiceInstance:
        if len(instances) == 1:
            return instances[0]
        return instances[self._rng.randrange(len(instances))]

    def resolve(self, identifier: ServiceIdentifier, path_resolver: PathResolver | None = None) -> ResolvedService:
        """Pick one matching instance and work out the port and path to target.

        Raises:
            MissingServiceError: the registry returned no matching instance.
            MissingPortError: the selected instance has no port for the identifier's connector.
        """
        with LogContext(service_name=identifier.service_name, connector=identifier.connector.value):
            instances = self.find_instances(identifier)
            if not instances:
                raise MissingServiceError.from_identifier(identifier)

            instance = self.select_instance(instances)
            LogContext.bind(instance_id=instance.instance_id or instance.host_name)
            if path_resolver is not None:
                path = path_resolver(instance)
            elif identifier.connector == PortType.APPLICATION:
                path = instance.paths.home_page_path
            else:
                path = "/"

            port = instance.find_port(identifier.connector)
            if port is None:
                raise MissingPortError.from_instance(instance, identifier.connector)

            resolved = ResolvedService(identifier=identifier, instance=instance, port=port, path=normalize_path(path))
            logger.debug(
                "Selected instance %s of %d for %s: %s",
                instance.instance_id or instance.host_name,
                len(instances),
                identifier.service_name,
                resolved.uri,
            )
            return resolved
