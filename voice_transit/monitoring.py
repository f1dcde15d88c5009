"""Logging setup for the CLI and embedding applications.

Library modules only call ``logging.getLogger(__name__)`` and pass
context through ``extra={...}``. The process entry point calls
``configure_logging`` once to decide how records are rendered.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

from .config import ObservabilityConfig, get_config

# Attributes every LogRecord has; anything else came in through ``extra``
_RECORD_ATTRIBUTES = set(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime"}

_HANDLER_NAME = "voice_transit"


def record_extras(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the fields passed to the logging call via ``extra``."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRIBUTES and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per line, extras merged at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }
        entry.update(record_extras(record))
        return json.dumps(entry, ensure_ascii=False, default=str)


class ExtrasFormatter(logging.Formatter):
    """Plain text format with ``key=value`` extras appended."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = record_extras(record)
        if extras:
            line += " " + " ".join(f"{key}={value}" for key, value in extras.items())
        return line


def configure_logging(
    config: Optional[ObservabilityConfig] = None,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """Install a stream handler on the root logger.

    Calling it again replaces the handler installed by a previous call
    instead of adding a second one.

    Args:
        config: Logging configuration (defaults to the application config).
        stream: Output stream (defaults to stderr).

    Returns:
        The installed handler.
    """
    config = config or get_config().observability
    root = logging.getLogger()

    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    if config.structured:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(ExtrasFormatter(config.format))

    root.addHandler(handler)
    root.setLevel(config.level.upper())
    return handler
