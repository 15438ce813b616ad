"""
Structured JSON logging for the decanter kernel.

Every decant call binds the schema name and decant context into
``LogContext``; the formatter stamps them onto each record emitted while the
call runs, next to any ``extra`` fields and the structured attributes of a
``DecanterError`` passed through ``exc_info``.
"""

__all__ = [
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
from contextvars import ContextVar
from datetime import UTC, date, datetime
from typing import Any, TextIO

from decanter_kernel.exceptions import DecanterError

_LOGGER_PREFIX = "decanter_kernel"

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_FIELDS: dict[str, ContextVar[str | None]] = {
    name: ContextVar(f"decanter_log_{name}", default=None)
    for name in ("correlation_id", "schema", "decant_context")
}


class LogContext:
    """Async-safe fields describing the decant call in progress."""

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Set known fields; None values and unknown names are ignored."""
        for name, val in fields.items():
            if val is not None and name in _FIELDS:
                _FIELDS[name].set(val)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return {
            name: val for name, var in _FIELDS.items() if (val := var.get()) is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in _FIELDS.values():
            var.set(None)

    @classmethod
    def bind(cls, **fields: str | None) -> "_Binding":
        """Set fields for the duration of a ``with`` block, then restore."""
        return _Binding(fields)


class _Binding:
    def __init__(self, fields: dict[str, str | None]):
        self._fields = fields
        self._tokens: list[tuple[ContextVar[str | None], Any]] = []

    def __enter__(self) -> type[LogContext]:
        for name, val in self._fields.items():
            if val is not None and name in _FIELDS:
                var = _FIELDS[name]
                self._tokens.append((var, var.set(val)))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _to_json(obj: Any) -> Any:
    # Decanted values and key collections that end up in log payloads
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    return str(obj)


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        payload.update(
            (key, val)
            for key, val in vars(record).items()
            if key not in _STDLIB_KEYS and key not in payload
        )

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)

    @staticmethod
    def _exception_fields(exc: BaseException) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        if isinstance(exc, DecanterError):
            fields["exc_code"] = exc.code
            fields.update(
                (f"exc_{k}", v) for k, v in vars(exc).items() if not k.startswith("_")
            )
        return fields


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``decanter_kernel`` namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """Attach one JSON handler to the ``decanter_kernel`` logger. Idempotent."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    handler = handler or logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False
    root.addHandler(handler)


def reset_logging() -> None:
    """Undo ``configure_logging``. Test isolation only."""
    global _configured
    with _lock:
        _configured = False
    root = logging.getLogger(_LOGGER_PREFIX)
    root.handlers.clear()
    root.setLevel(logging.WARNING)
    root.propagate = True
