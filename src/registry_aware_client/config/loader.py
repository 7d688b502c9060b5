from __future__ import annotations

import os
import re
from collections.abc import Mapping
from functools import reduce
from pathlib import Path
from typing import Any

import yaml

from .models import RegistryAwareClientConfig

ROOT_KEY = "registry_aware_client"
YAML_SUFFIXES = (".yaml", ".yml")

# ${NAME} or ${NAME:-fallback}
_PLACEHOLDER = re.compile(r"\$\{(?P<name>[A-Za-z_]\w*)(?::-(?P<fallback>[^}]*))?\}")


class ConfigError(RuntimeError):
    """A configuration file is missing, unreadable or describes an invalid client."""


def load_config(path: str | Path) -> RegistryAwareClientConfig:
    """Read one YAML file into a RegistryAwareClientConfig.

    String values may reference environment variables as ``${NAME}`` or
    ``${NAME:-fallback}``. The settings may be nested under a top-level
    ``registry_aware_client:`` key so they can share a file with other settings.
    """
    return _to_config(_read_document(path), path)


def load_config_with_overrides(
    base_path: str | Path, *override_paths: str | Path
) -> RegistryAwareClientConfig:
    """Read ``base_path`` and deep-merge each override file over it, in order."""
    documents = [_read_document(p) for p in (base_path, *override_paths)]
    return _to_config(reduce(_deep_merge, documents), base_path)


def _to_config(document: Mapping[str, Any], source: str | Path) -> RegistryAwareClientConfig:
    try:
        return RegistryAwareClientConfig.from_dict(document)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration in {source}: {exc}") from exc


def _read_document(path: str | Path) -> dict[str, Any]:
    file = Path(path).expanduser()
    if file.suffix.lower() not in YAML_SUFFIXES:
        raise ConfigError(f"Unsupported config file type: {file.suffix or file.name}")
    try:
        text = file.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {file}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {file}: {exc}") from exc

    try:
        document = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse config file {file}: {exc}") from exc
    if document is None:
        return {}
    if not isinstance(document, Mapping):
        raise ConfigError(f"Config file {file} must contain a mapping at the top level")

    document = _substitute_env(document)
    if ROOT_KEY in document:
        section = document[ROOT_KEY]
        if not isinstance(section, Mapping):
            raise ConfigError(f"'{ROOT_KEY}' in {file} must be a mapping")
        document = section
    return dict(document)


def _substitute_env(node: Any) -> Any:
    if isinstance(node, Mapping):
        return {key: _substitute_env(child) for key, child in node.items()}
    if isinstance(node, list):
        return list(map(_substitute_env, node))
    if not isinstance(node, str) or "${" not in node:
        return node
    return _PLACEHOLDER.sub(_env_lookup, node)


def _env_lookup(match: re.Match[str]) -> str:
    value = os.environ.get(match["name"])
    if value:
        return value
    if match["fallback"] is not None:
        return match["fallback"]
    raise ConfigError(f"Environment variable '{match['name']}' is not set and has no fallback")


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        both_mappings = isinstance(current, Mapping) and isinstance(value, Mapping)
        result[key] = _deep_merge(current, value) if both_mappings else value
    return result
