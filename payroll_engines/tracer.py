"""
payroll_engines.tracer -- Engine invocation tracer emitting PAYROLL_ENGINE_TRACE.

Responsibility:
    Provide a decorator (``@traced_engine``) that wraps a pure engine call
    with one structured trace record: engine_name, engine_version,
    input_fingerprint (SHA-256 of the selected arguments) and duration_ms.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Emits a log record only; never reads files or mutates inputs.
    Uses its own logger name (``payroll_kernel.engines.tracer``) so the
    record is routed by the kernel logging configuration.

Invariants enforced:
    - Determinism: identical arguments always give the same fingerprint.
      Decimals are normalized, enums reduced to their value, dict keys
      sorted.
    - Arguments are bound against the wrapped signature, so positional
      and keyword call styles fingerprint identically.

Failure modes:
    - A fingerprint field that is not a parameter of the wrapped function
      is recorded as "null".

Usage:
    from payroll_engines.tracer import traced_engine

    @traced_engine("deductions", "1.0", fingerprint_fields=("monthly_gross",))
    def calculate(self, monthly_gross, period_type):
        ...
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

_logger = logging.getLogger("payroll_kernel.engines.tracer")

TRACE_TYPE = "PAYROLL_ENGINE_TRACE"


def _canonicalize(value: Any) -> str:
    """Stable string form of a value for fingerprinting."""
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return _canonicalize(value.value)
    if isinstance(value, Decimal):
        # 100, 100.0 and 1E+2 must hash the same
        return format(value.normalize(), "f")
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "{" + ",".join(f"{k}:{_canonicalize(v)}" for k, v in items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: dict[str, Any],
) -> str:
    """Return a 16-char SHA-256 hex prefix over the selected arguments."""
    parts = [
        f"{field}={_canonicalize(arguments.get(field))}"
        for field in fingerprint_fields
    ]
    canonical = "|".join(parts)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits PAYROLL_ENGINE_TRACE for engine invocations.

    Args:
        engine_name: Engine identifier (e.g., "deductions").
        engine_version: Engine version (e.g., "1.0").
        fingerprint_fields: Parameter names to include in the input
            fingerprint.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fp = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fp = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.info(
                TRACE_TYPE,
                extra={
                    "trace_type": TRACE_TYPE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fp,
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
