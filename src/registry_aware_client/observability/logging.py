"""Structured logging for service resolution.

Resolution code binds the service being looked up (and, once chosen, the instance)
into a context variable. Handlers created by ``get_logger`` copy those values onto
every record, so a JSON line or console line always says which service it is about.
"""
from __future__ import annotations

import contextvars
import json
import logging
import os
import sys
from datetime import datetime, timezone
from types import MappingProxyType
from typing import IO, Any, Mapping

__all__ = [
    "LOG_FORMAT_CONSOLE",
    "LOG_FORMAT_ENV",
    "LOG_FORMAT_JSON",
    "ContextFilter",
    "LogContext",
    "StructuredConsoleFormatter",
    "StructuredJSONFormatter",
    "get_logger",
]

LOG_FORMAT_ENV = "REGISTRY_AWARE_CLIENT_LOG_FORMAT"
LOG_FORMAT_JSON = "json"
LOG_FORMAT_CONSOLE = "console"

CONTEXT_FIELDS = ("service_name", "connector", "instance_id")

_EMPTY: Mapping[str, Any] = MappingProxyType({})
_resolution_context: contextvars.ContextVar[Mapping[str, Any]] = contextvars.ContextVar(
    "registry_aware_client_resolution_context", default=_EMPTY
)

# Attributes every LogRecord carries; anything else on a record came from ``extra=``.
_STANDARD_RECORD_KEYS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

_JSON_BASE_KEYS = frozenset({"timestamp", "level", "logger", "message", "exception", "stack"})


def _without_none(values: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _merged_context(values: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType({**_resolution_context.get(), **_without_none(values)})


class LogContext:
    """Scoped logging context for a resolution.

    Used as a context manager, the values apply inside the ``with`` block and the
    previous context comes back on exit. ``bind`` adds values to whatever scope is
    current. ``None`` values are ignored.
    """

    def __init__(
        self,
        service_name: str | None = None,
        connector: str | None = None,
        instance_id: str | None = None,
        **extra: Any,
    ) -> None:
        self._values = _without_none(
            {"service_name": service_name, "connector": connector, "instance_id": instance_id, **extra}
        )
        self._reset_tokens: list[contextvars.Token[Mapping[str, Any]]] = []

    def __enter__(self) -> LogContext:
        self._reset_tokens.append(_resolution_context.set(_merged_context(self._values)))
        return self

    def __exit__(self, exc_type, exc, traceback) -> None:
        _resolution_context.reset(self._reset_tokens.pop())

    @staticmethod
    def bind(**values: Any) -> None:
        _resolution_context.set(_merged_context(values))

    @staticmethod
    def clear() -> None:
        _resolution_context.set(_EMPTY)

    @staticmethod
    def snapshot() -> dict[str, Any]:
        """Current context; the standard fields are always present, None when unbound."""
        current = _resolution_context.get()
        return {**dict.fromkeys(CONTEXT_FIELDS), **current}


class ContextFilter(logging.Filter):
    """Copies the current LogContext onto records, using ``-`` for unbound fields."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in LogContext.snapshot().items():
            record.__dict__.setdefault(key, "-" if value is None else value)
        return True


class StructuredJSONFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, message, context and extras."""

    def __init__(self, *, datefmt: str | None = None, ensure_ascii: bool = True) -> None:
        super().__init__(datefmt=datefmt)
        self.ensure_ascii = ensure_ascii

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        if datefmt:
            return created.strftime(datefmt)
        return created.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def format(self, record: logging.LogRecord) -> str:
        document: dict[str, Any] = dict(
            timestamp=self.formatTime(record, self.datefmt),
            level=record.levelname,
            logger=record.name,
            message=record.getMessage(),
        )
        fields = {**LogContext.snapshot(), **{
            key: value for key, value in vars(record).items()
            if key not in _STANDARD_RECORD_KEYS and not key.startswith("_")
        }}
        document.update((key, value) for key, value in fields.items() if key not in _JSON_BASE_KEYS)
        if record.exc_info:
            document["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            document["stack"] = self.formatStack(record.stack_info)
        return json.dumps(document, default=str, ensure_ascii=self.ensure_ascii)


class StructuredConsoleFormatter(logging.Formatter):
    """Plain text line followed by ``key=value`` pairs for the context fields."""

    def __init__(self, fmt: str | None = None, *, datefmt: str | None = None) -> None:
        super().__init__(fmt=fmt or "%(asctime)s %(levelname)s %(name)s %(message)s", datefmt=datefmt)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        pairs = " ".join(f"{key}={getattr(record, key, '-')}" for key in CONTEXT_FIELDS)
        return f"{line} {pairs}"


class _StructuredHandler(logging.StreamHandler):

    def __init__(self, log_format: str, stream: IO[str] | None) -> None:
        super().__init__(stream or sys.stdout)
        self.log_format = log_format
        if log_format == LOG_FORMAT_CONSOLE:
            self.setFormatter(StructuredConsoleFormatter())
        else:
            self.setFormatter(StructuredJSONFormatter())
        self.addFilter(ContextFilter())


def _resolve_log_format(requested: str | None) -> str:
    candidate = (requested or os.getenv(LOG_FORMAT_ENV) or "").strip().lower()
    return LOG_FORMAT_CONSOLE if candidate == LOG_FORMAT_CONSOLE else LOG_FORMAT_JSON


def get_logger(
    name: str,
    *,
    log_format: str | None = None,
    level: int | None = None,
    stream: IO[str] | None = None,
) -> logging.Logger:
    """Return ``logging.getLogger(name)`` with a structured stream handler attached.

    The format is ``log_format`` if given, else the REGISTRY_AWARE_CLIENT_LOG_FORMAT
    environment variable; ``json`` unless one of them says ``console``. A logger
    that already has a handler for that format is returned as is. Loggers without
    a level get INFO.
    """
    resolved = _resolve_log_format(log_format)
    logger = logging.getLogger(name)
    if not any(isinstance(h, _StructuredHandler) and h.log_format == resolved for h in logger.handlers):
        logger.addHandler(_StructuredHandler(resolved, stream))
    if level is not None:
        logger.setLevel(level)
    elif logger.level == logging.NOTSET:
        logger.setLevel(logging.INFO)
    return logger
