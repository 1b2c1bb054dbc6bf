"""Logging for the eventscout CLI.

Log lines go to stderr so stdout stays machine-readable for ``--json``
output. Two loggers are configured: ``eventscout`` (library modules, by
module path) and ``adapter`` (provider adapters, ``adapter.<source_id>``).

Records may carry context attributes (see ``CONTEXT_FIELDS``) injected via
``with_context``, and a ``payload`` dict that only the JSON format emits.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

LOGGER_NAMES = ("eventscout", "adapter")
CONTEXT_FIELDS = ("command", "source_id", "strategy", "event_id")


def _context_of(record: logging.LogRecord) -> dict[str, Any]:
    return {k: getattr(record, k) for k in CONTEXT_FIELDS if getattr(record, k, None)}


# ---------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------


class JsonFormatter(logging.Formatter):
    """One JSON object per line, timestamped from the record in UTC."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            **_context_of(record),
        }
        payload = getattr(record, "payload", None)
        if isinstance(payload, dict):
            line["payload"] = payload
        if record.exc_info:
            line["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(line, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """``LEVEL logger [k=v ...] message`` with an optional traceback."""

    def format(self, record: logging.LogRecord) -> str:
        context = _context_of(record)
        prefix = f"{record.levelname} {record.name}"
        if context:
            prefix += " [" + " ".join(f"{k}={v}" for k, v in context.items()) + "]"
        text = f"{prefix} {record.getMessage()}"
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text


# ---------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingOptions:
    level: str = "INFO"
    json_logs: bool = False
    log_file: Path | None = None
    enable_console: bool = True


def _build_handlers(options: LoggingOptions) -> list[logging.Handler]:
    formatter = JsonFormatter() if options.json_logs else TextFormatter()
    handlers: list[logging.Handler] = []
    if options.enable_console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if options.log_file is not None:
        options.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(options.log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(options: LoggingOptions | None = None) -> list[logging.Logger]:
    """
    Attach handlers to the ``eventscout`` and ``adapter`` loggers.

    Calling it again replaces (and closes) the handlers of the previous
    call, so each CLI invocation in one process starts clean.

    Returns:
        The configured loggers, in ``LOGGER_NAMES`` order
    """
    options = options or LoggingOptions()
    level = getattr(logging, options.level.upper(), logging.INFO)
    handlers = _build_handlers(options)

    configured = []
    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = False
        for old in list(logger.handlers):
            logger.removeHandler(old)
            old.close()
        for handler in handlers:
            handler.setLevel(level)
            logger.addHandler(handler)
        configured.append(logger)
    return configured


# ---------------------------------------------------------------------
# Context injection
# ---------------------------------------------------------------------


class ContextAdapter(logging.LoggerAdapter):
    """LoggerAdapter whose bound context is merged under per-call ``extra``."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def with_context(logger: logging.Logger, **context: Any) -> ContextAdapter:
    """Bind context fields to a logger; None values are dropped."""
    return ContextAdapter(logger, {k: v for k, v in context.items() if v is not None})
