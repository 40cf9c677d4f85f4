"""Structured JSON logging for the payroll kernel.

Every record under the ``payroll_kernel`` logger namespace is written as
one JSON line carrying the run context bound through ``LogContext``.
Event names are snake_case messages with structured ``extra`` fields.
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
from contextvars import ContextVar, Token
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_CONTEXT_FIELDS = ("run_id", "employee_id", "pay_period")


class LogContext:
    """Run-scoped fields stamped on every record (thread- and async-safe).

    ``run_id`` is bound by the payroll run, ``employee_id`` and
    ``pay_period`` by the processor while it computes one employee.
    """

    _vars: dict[str, ContextVar[str | None]] = {
        name: ContextVar(f"payroll_log_{name}", default=None)
        for name in _CONTEXT_FIELDS
    }

    @classmethod
    def set(
        cls,
        *,
        run_id: str | None = None,
        employee_id: str | None = None,
        pay_period: str | None = None,
    ) -> None:
        """Set context fields. Only non-None values are updated."""
        values = {"run_id": run_id, "employee_id": employee_id, "pay_period": pay_period}
        for name, value in values.items():
            if value is not None:
                cls._vars[name].set(value)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """Return all non-None context fields as a dict."""
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
    def bind(cls, **kwargs: str | None) -> "_LogContextManager":
        """Context manager that sets fields on entry and restores on exit.

        Unknown field names and None values are ignored.
        """
        return _LogContextManager(**kwargs)


class _LogContextManager:
    def __init__(self, **kwargs: str | None):
        self._kwargs = kwargs
        self._tokens: list[tuple[ContextVar[str | None], Token]] = []

    def __enter__(self) -> type[LogContext]:
        for key, val in self._kwargs.items():
            var = LogContext._vars.get(key)
            if var is not None and val is not None:
                self._tokens.append((var, var.set(val)))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


class _JSONEncoder(json.JSONEncoder):
    """Handle date/datetime, Decimal and Enum in log payloads."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    """Type, message, and for payroll errors the code and public attributes."""
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for name, value in vars(exc).items():
        if not name.startswith("_") and name not in ("args", "code"):
            fields[f"exc_{name}"] = value
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

        # extra={...} lands on the record as attributes
        payload.update(
            (key, val)
            for key, val in vars(record).items()
            if key not in _STDLIB_KEYS and key not in payload
        )

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, cls=_JSONEncoder, default=str)


# ---------------------------------------------------------------------------
# Logger factory
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "payroll_kernel"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the payroll_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Configure the payroll_kernel logger hierarchy (idempotent)."""
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(level)
    root_logger.propagate = False

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    root_logger.addHandler(handler)


def reset_logging() -> None:
    """Reset logging configuration. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
    logger.propagate = True
