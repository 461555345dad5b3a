"""
Structured JSON logging (``invoice_kernel.logging_config``).

Every engine logger is a child of ``invoice_kernel``.  Records render as one
JSON object per line:

* envelope -- ``ts``, ``level``, ``logger``, ``message``
* the fields currently bound in ``LogContext``
* the record's ``extra=`` fields
* for exceptions -- ``exc_type``, ``exc_message``, ``exc_code`` and every
  public attribute of the exception as ``exc_<name>``, then ``traceback``

The engine binds two context fields: ``invoice_number`` around
``InvoiceService.approve_single`` and ``batch_id`` around
``InvoiceService.approve_batch``.
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
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

_ROOT_LOGGER = "invoice_kernel"

_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    "invoice_number": ContextVar("log_invoice_number", default=None),
    "batch_id": ContextVar("log_batch_id", default=None),
}


# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------


def _check_fields(fields: dict[str, Any]) -> None:
    unknown = set(fields) - set(_CONTEXT_VARS)
    if unknown:
        raise TypeError(f"Unknown log context fields: {sorted(unknown)}")


class LogContext:
    """Context-variable fields merged into every log line.

    Backed by ``ContextVar``, so values are isolated per thread and per
    asyncio task.
    """

    FIELDS = tuple(_CONTEXT_VARS)

    @classmethod
    def set(cls, **fields: str | None) -> None:
        """Set fields; ``None`` values are ignored."""
        _check_fields(fields)
        for name, value in fields.items():
            if value is not None:
                _CONTEXT_VARS[name].set(value)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        bound = {}
        for name, var in _CONTEXT_VARS.items():
            value = var.get()
            if value is not None:
                bound[name] = value
        return bound

    @classmethod
    def clear(cls) -> None:
        for var in _CONTEXT_VARS.values():
            var.set(None)

    @classmethod
    def bind(cls, **fields: str | None):
        """Set ``fields`` for the duration of a ``with`` block.

        Unknown field names raise ``TypeError`` immediately, not on entry.
        """
        _check_fields(fields)
        return _bound(fields)


@contextmanager
def _bound(fields: dict[str, str | None]) -> Iterator[type[LogContext]]:
    tokens = [
        (_CONTEXT_VARS[name], _CONTEXT_VARS[name].set(value))
        for name, value in fields.items()
        if value is not None
    ]
    try:
        yield LogContext
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


# ---------------------------------------------------------------------------
# JSON rendering
# ---------------------------------------------------------------------------

_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "taskName",
}


def _json_default(value: Any) -> Any:
    # Money and dates must survive as exact text, never as floats.
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if not name.startswith("_"):
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Renders each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        line.update(LogContext.get_all())
        line.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and key not in line
        )
        if record.exc_info and record.exc_info[1] is not None:
            line.update(_exception_fields(record.exc_info[1]))
            line["traceback"] = self.formatException(record.exc_info)
        return json.dumps(line, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_setup_lock = threading.Lock()
_installed_handler: logging.Handler | None = None


def get_logger(name: str) -> logging.Logger:
    """Logger ``invoice_kernel.<name>``."""
    return logging.getLogger(f"{_ROOT_LOGGER}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> logging.Handler:
    """Install one JSON handler on ``invoice_kernel``.

    Idempotent: later calls leave the installed handler in place and return
    it.
    """
    global _installed_handler
    with _setup_lock:
        if _installed_handler is None:
            installed = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
            installed.setFormatter(StructuredFormatter())
            root = logging.getLogger(_ROOT_LOGGER)
            root.setLevel(level)
            root.propagate = False
            root.addHandler(installed)
            _installed_handler = installed
        return _installed_handler


def reset_logging() -> None:
    """Remove the installed handler and restore defaults. For tests."""
    global _installed_handler
    with _setup_lock:
        root = logging.getLogger(_ROOT_LOGGER)
        if _installed_handler is not None:
            root.removeHandler(_installed_handler)
        _installed_handler = None
        root.setLevel(logging.WARNING)
        root.propagate = True
