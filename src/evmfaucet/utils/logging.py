"""
Structured logging for the faucet.

Thin layer over the standard library ``logging`` module. Call sites log a
short message and pass structured context through ``extra``:

    >>> _logger = get_logger(__name__)
    >>> _logger.info("Transfer confirmed", extra={"chain_id": 5, "nonce": 12})

Extra fields are rendered after the message (or as JSON with
``configure_logging(json_format=True)``). ``LogContext`` attaches fields
to every record emitted inside a block.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional, Union

ROOT_LOGGER_NAME = "evmfaucet"

# Attributes present on every LogRecord; anything else came from `extra`
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None)).keys()
) | {"message", "asctime"}

_context: ContextVar[Dict[str, Any]] = ContextVar("evmfaucet_log_context", default={})

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = dict(_context.get())
    for key, value in vars(record).items():
        if key not in _RESERVED_ATTRS and not key.startswith("_"):
            fields[key] = value
    return fields


class KeyValueFormatter(logging.Formatter):
    """Renders ``message key=value key=value``."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        fields = _extra_fields(record)
        if not fields:
            return base
        rendered = " ".join(f"{k}={v}" for k, v in fields.items())
        return f"{base} {rendered}"


class JsonFormatter(logging.Formatter):
    """Renders one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_extra_fields(record))
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the package namespace.

    Args:
        name: Usually ``__name__`` of the calling module

    Returns:
        Configured ``logging.Logger``
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    json_format: bool = False,
    stream: Any = None,
) -> logging.Logger:
    """
    Attach a stream handler to the package root logger.

    Calling it again replaces the previously configured handler.

    Args:
        level: Logging level (name or number)
        json_format: Emit JSON lines instead of key=value text
        stream: Output stream (defaults to stderr)

    Returns:
        The package root logger
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, "_evmfaucet_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            KeyValueFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    handler._evmfaucet_handler = True  # type: ignore[attr-defined]

    root.addHandler(handler)
    root.setLevel(level)
    return root


def set_level(level: Union[int, str]) -> None:
    """Set the level of the package root logger."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)


def enable_debug() -> None:
    """Shortcut for ``set_level(logging.DEBUG)``."""
    set_level(logging.DEBUG)


def disable_logging() -> None:
    """Silence all package loggers."""
    # Above CRITICAL so child loggers inherit the silence
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.CRITICAL + 1)


class LogContext:
    """
    Attach fields to every record logged inside the block.

    Example:
        >>> with LogContext(chain_id=5, requester="0xabc..."):
        ...     await sender.send(address, chain)
    """

    def __init__(self, **fields: Any) -> None:
        self._fields = fields
        self._token: Optional[Any] = None

    def __enter__(self) -> "LogContext":
        merged = {**_context.get(), **self._fields}
        self._token = _context.set(merged)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _context.reset(self._token)
            self._token = None
