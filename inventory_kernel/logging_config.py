"""
Structured JSON logging for the inventory kernel.

Every record is one JSON line.  Fields bound through ``LogContext`` (the
request's correlation id, the acting user, and the inventory and sector
being worked on) are stamped on each line, so a handheld sync or a closing
attempt can be followed end to end.  Kernel exceptions contribute their
``code`` and structured attributes as ``exc_*`` fields.
"""

__all__ = [
    "CONTEXT_FIELDS",
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "actor_id",
    "inventory_id",
    "sector_id",
    "ip_address",
)

_LOGGER_PREFIX = "inventory_kernel"


# ---------------------------------------------------------------------------
# Request context
# ---------------------------------------------------------------------------


class LogContext:
    """Request-scoped log fields held in context variables."""

    _vars: dict[str, ContextVar[str | None]] = {
        name: ContextVar(f"inventory_log_{name}", default=None)
        for name in CONTEXT_FIELDS
    }

    @classmethod
    def _var(cls, name: str) -> ContextVar[str | None]:
        try:
            return cls._vars[name]
        except KeyError:
            raise TypeError(f"Unknown log context field: {name}") from None

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Set context fields; None values are left untouched."""
        for name, value in fields.items():
            if value is not None:
                cls._var(name).set(str(value))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return {
            name: value
            for name, var in cls._vars.items()
            if (value := var.get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in cls._vars.values():
            var.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[type["LogContext"]]:
        """
        Bind fields for the duration of a block.

        Ids are stored as strings.  On exit each field goes back to what it
        was before, including unset.
        """
        tokens = [
            (cls._var(name), cls._var(name).set(str(value)))
            for name, value in fields.items()
            if value is not None
        ]
        try:
            yield cls
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------

_RESERVED_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(value: Any) -> Any:
    # Quantities stay exact: Decimal goes out as its string form.
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    to_dict = getattr(exc, "to_dict", None)
    if callable(to_dict):
        for key, value in to_dict().items():
            if key != "message":
                fields[f"exc_{key}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: envelope, context, extras, exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }

        for key, value in vars(record).items():
            if key not in _RESERVED_KEYS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``inventory_kernel`` namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one JSON handler to the ``inventory_kernel`` logger.

    Only the first call has an effect until ``reset_logging()``.  ``level``
    accepts the names used in the ``logging.level`` setting.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    target = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())

    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.setLevel(level.upper() if isinstance(level, str) else level)
    kernel_logger.propagate = False
    kernel_logger.addHandler(target)


def reset_logging() -> None:
    """Drop handlers and the configured flag. Used by the test suite."""
    global _configured
    with _lock:
        _configured = False
    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.handlers.clear()
    kernel_logger.setLevel(logging.WARNING)
