"""
Structured JSON logging for the contract kernel.

Every record leaves as one JSON line.  Services attach the contract, draft
and acting user they are working on with ``LogContext.bind``; those fields
are stamped on every record emitted inside the block, including records
from the selectors and listeners the service calls into.

    with LogContext.bind(contract_id=contract_id, actor_id=user_id):
        logger.info("status_transitioned", extra={"final_status": "ONGOING"})

    {"ts": "...", "level": "INFO", "logger": "contract_kernel.services...",
     "message": "status_transitioned", "actor_id": "...",
     "contract_id": "...", "final_status": "ONGOING"}
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
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TextIO
from uuid import UUID

_NAMESPACE = "contract_kernel"


class LogContext:
    """Contract-scoped fields carried across calls in the current context."""

    FIELDS = ("actor_id", "contract_id", "draft_id")

    _vars: dict[str, ContextVar[str | None]] = {
        name: ContextVar(f"{_NAMESPACE}_{name}", default=None) for name in FIELDS
    }

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[None]:
        """
        Set fields for the duration of the block, then restore them.

        Values are stringified.  None values and names outside FIELDS are
        ignored, so callers can pass optional ids straight through.
        """
        tokens = [
            (cls._vars[name], cls._vars[name].set(str(value)))
            for name, value in fields.items()
            if value is not None and name in cls._vars
        ]
        try:
            yield
        finally:
            for var, token in reversed(tokens):
                var.reset(token)

    @classmethod
    def get_all(cls) -> dict[str, str]:
        values = {name: var.get() for name, var in cls._vars.items()}
        return {name: value for name, value in values.items() if value is not None}

    @classmethod
    def clear(cls) -> None:
        for var in cls._vars.values():
            var.set(None)


# Attributes every LogRecord has; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


class _JSONEncoder(json.JSONEncoder):
    """Ids, timestamps, money and statuses as they appear in the API."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (UUID, Decimal)):
            return str(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.name
        return super().default(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    """Flatten a kernel error into ``exc_*`` keys (code, contract id, statuses)."""
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for attr, value in vars(exc).items():
        if not attr.startswith("_") and attr not in ("args", "code"):
            fields[f"exc_{attr}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: header, bound context, extras, error."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, cls=_JSONEncoder, default=str)


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``contract_kernel`` namespace, e.g. ``services.creation``."""
    return logging.getLogger(f"{_NAMESPACE}.{name}")


_configured = False


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: TextIO | None = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Route the kernel's loggers to one JSON handler.

    Only the first call has an effect; ``bootstrap`` and the test suite
    may both call it.
    """
    global _configured
    if _configured:
        return
    _configured = True

    kernel_logger = logging.getLogger(_NAMESPACE)
    kernel_logger.setLevel(level)
    kernel_logger.propagate = False

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    kernel_logger.addHandler(handler)


def reset_logging() -> None:
    """Undo configure_logging. FOR TESTING ONLY."""
    global _configured
    _configured = False
    kernel_logger = logging.getLogger(_NAMESPACE)
    kernel_logger.handlers.clear()
    kernel_logger.setLevel(logging.WARNING)
