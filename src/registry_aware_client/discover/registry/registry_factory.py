import inspect
import logging
from typing import Any

from registry_aware_client.discover.registry.registry_client import RegistryClient

logger = logging.getLogger(__name__)


def registry(name: str):
    """Class decorator making a RegistryClient implementation available by ``name``."""

    def register(cls: type[RegistryClient]) -> type[RegistryClient]:
        if not name:
            logger.warning("Registry client %s has no name; not registering it.", cls.__name__)
            return cls
        RegistryClientFactory.register_registry_client(name, cls)
        logger.debug("Registry client %s registered as '%s'", cls.__name__, name)
        return cls

    return register


def _accepted_options(registry_class: type, options: dict[str, Any]) -> dict[str, Any]:
    parameters = inspect.signature(registry_class).parameters
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in parameters.values()):
        return dict(options)
    return {key: value for key, value in options.items() if key in parameters}


class RegistryClientFactory:
    """Builds registry clients by the name they were registered under."""

    registry_classes: dict[str, type[RegistryClient]] = {}

    @classmethod
    def create(cls, registry_type: str, **options: Any) -> RegistryClient:
        """Creates a new registry client of ``registry_type``.

        Options the implementation's constructor does not take are dropped, so one
        configuration mapping can carry settings for several registry types.

        Raises:
            ValueError: nothing is registered under ``registry_type``.
        """
        try:
            registry_class = cls.registry_classes[registry_type]
        except KeyError:
            available = ", ".join(cls.list_registry_types()) or "none"
            raise ValueError(f"Registry client '{registry_type}' not found. Available: {available}") from None

        accepted = _accepted_options(registry_class, options)
        ignored = sorted(options.keys() - accepted.keys())
        if ignored:
            logger.debug("Ignoring options %s for registry client '%s'", ignored, registry_type)
        return registry_class(**accepted)

    @classmethod
    def register_registry_client(cls, name: str, registry_class: type[RegistryClient]) -> None:
        cls.registry_classes[name] = registry_class

    @classmethod
    def list_registry_types(cls) -> list[str]:
        return sorted(cls.registry_classes)
