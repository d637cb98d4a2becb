#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2025-present John Mille <john@ews-network.net>

from __future__ import annotations

import sys
import json
import logging as logthings
from contextvars import ContextVar

from . import __version__, __git_commit__
from .settings import LOG_LEVEL


# Subcommand and target file of the running invocation
_COMMAND_CONTEXT: ContextVar[dict | None] = ContextVar("command_context", default=None)


class SimpleJsonFormatter(logthings.Formatter):
    """Simple JSON formatter that always includes essential fields."""

    def format(self, record: logthings.LogRecord) -> str:
        from arcredhelper.sanitizer import sanitize_string

        sanitized_message = sanitize_string(record.getMessage())

        data = {
            "timestamp": record.created,
            "levelname": record.levelname,
            "message": sanitized_message,
            "name": record.name.split(".")[0],
        }

        # Add version info only for INFO level logs (exclude unknown/development values)
        if record.levelname == "INFO":
            if __version__ and __version__ not in ("unknown", "development", "none"):
                data["arcredhelper.version"] = __version__
            if __git_commit__ and __git_commit__ not in (
                "unknown",
                "development",
                "none",
            ):
                data["arcredhelper.git_commit"] = __git_commit__

        if hasattr(record, "command") and record.command:
            data["command"] = record.command

        if record.exc_info:
            exception_text = self.formatException(record.exc_info)
            data["exception"] = sanitize_string(exception_text)
        elif record.exc_text:
            data["exception"] = sanitize_string(record.exc_text)

        return json.dumps(data, separators=(",", ":"), default=str)


class CommandContextFilter(logthings.Filter):
    """Adds the running subcommand context to each LogRecord."""

    def filter(self, record: logthings.LogRecord) -> bool:
        context = _COMMAND_CONTEXT.get()
        if context:
            record.command = dict(context)
        else:
            record.command = {}

        # A flat target_file passed through ``extra`` joins the command block
        if hasattr(record, "target_file"):
            target_file = getattr(record, "target_file")
            record.command = {**record.command, "target_file": target_file}
            delattr(record, "target_file")

        return True


def set_command_context(name: str, target_file: str | None = None) -> None:
    """Record which subcommand (and optionally which file) is running."""
    context = {"name": name}
    if target_file:
        context["target_file"] = target_file
    _COMMAND_CONTEXT.set(context)


def clear_command_context() -> None:
    _COMMAND_CONTEXT.set(None)


def set_log_level(log_level: str) -> None:
    """Change the package logger level and all of its handlers."""
    level = getattr(logthings, log_level.upper())
    LOG.setLevel(level)
    for handler in LOG.handlers:
        handler.setLevel(level)


def setup_logging():
    """Setup simple JSON logging on stderr."""
    formatter = SimpleJsonFormatter()

    # stdout carries the ``get`` response, never logs
    handler = logthings.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    logger = logthings.getLogger("arcredhelper")
    logger.addHandler(handler)
    logger.setLevel(getattr(logthings, LOG_LEVEL.upper(), logthings.WARNING))
    logger.propagate = False

    logger.addFilter(CommandContextFilter())

    return logger


# Create logger instance
LOG = setup_logging()
