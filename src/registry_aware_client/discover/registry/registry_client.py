from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from packaging.version import InvalidVersion, Version

from registry_aware_client.discover.entities import ServiceIdentifier, ServiceInstance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstanceQuery:
    """Lookup parameters handed to a RegistryClient."""

    service_name: str
    preferred_version: str | None = None
    minimum_version: str | None = None

    @classmethod
    def from_identifier(cls, identifier: ServiceIdentifier) -> InstanceQuery:
        return cls(
            service_name=identifier.service_name,
            preferred_version=identifier.preferred_version,
            minimum_version=identifier.minimum_version,
        )


class RegistryClient(ABC):
    """Abstract base class for a service registry client."""

    @abstractmethod
    def find_service_instance_by_id(self, service_name: str, instance_id: str) -> ServiceInstance | None:
        """Finds a single instance of a service by its registry instance id.

        Args:
            service_name: The name of the service.
            instance_id: The id the instance was registered with.

        Returns:
            The instance, or None if not found.
        """

    @abstractmethod
    def find_all_service_instances_by(self, query: InstanceQuery) -> list[ServiceInstance]:
        """Finds every instance matching the query.

        Args:
            query: Service name plus optional preferred and minimum versions.

        Returns:
            The matching instances, empty when there are none.
        """

    def find_service_instance_by(
        self, query: InstanceQuery
    ) -> ServiceInstance | Sequence[ServiceInstance] | None:
        """Lookup used by the resolver.

        Implementations may return None, a single instance or a sequence of instances.
        """
        return self.find_all_service_instances_by(query)

    def close(self) -> None:
        """Release any resources held by the client."""


def _parse_version(value: str | None) -> Version | None:
    if not value:
        return None
    try:
        return Version(value)
    except InvalidVersion:
        logger.warning("Ignoring unparseable service version: %s", value)
        return None


def _parse_query_version(value: str | None, field_name: str) -> Version | None:
    if not value:
        return None
    try:
        return Version(value)
    except InvalidVersion:
        raise ValueError(f"Invalid {field_name}: {value!r} is not a valid version") from None


def filter_instances(instances: Iterable[ServiceInstance], query: InstanceQuery) -> list[ServiceInstance]:
    """Apply registry version matching to ``instances``.

    - only instances named ``query.service_name`` are considered
    - with a minimum version, instances below it (or unversioned) are dropped
    - with a preferred version that some instances carry, those instances win
    - otherwise the instances sharing the highest version win; unversioned instances
      rank below every versioned one

    Raises:
        ValueError: the query's preferred or minimum version cannot be parsed.
    """
    candidates = [instance for instance in instances if instance.service_name == query.service_name]

    minimum = _parse_query_version(query.minimum_version, "minimum_version")
    preferred = _parse_query_version(query.preferred_version, "preferred_version")
    if minimum is not None:
        candidates = [
            instance for instance in candidates
            if (version := _parse_version(instance.version)) is not None and version >= minimum
        ]

    if not candidates:
        return []

    if preferred is not None:
        exact = [instance for instance in candidates if _parse_version(instance.version) == preferred]
        if exact:
            return exact

    versions = [_parse_version(instance.version) for instance in candidates]
    known = [version for version in versions if version is not None]
    if not known:
        return candidates
    latest = max(known)
    return [instance for instance, version in zip(candidates, versions) if version == latest]
