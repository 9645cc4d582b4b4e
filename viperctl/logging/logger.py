# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for viperctl.

Every log entry is a single JSON line with a timestamp, a level, the source
module and the message. Anything passed through `extra=` is merged into the
same object, which is how the toolchain attaches argv, exit codes and timings.

Log output goes to stderr. Stdout belongs to the programs we run (the Viper
binary in `test`, the sample lines in `benchmark`), and the two must not mix
when someone pipes the output somewhere.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "viperctl.toolchain.invoker", "msg": "Stage finished", ...}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Each log entry contains four mandatory fields:
      ts    : ISO 8601 UTC timestamp
      level : log level name
      module: the logger name (usually the Python module path)
      msg   : the formatted message string

    Extra keyword args from the log call are merged in as context fields.
    """

    _STANDARD_ATTRS = frozenset({
        "name",
        "msg",
        "args",
        "created",
        "relativeCreated",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "pathname",
        "filename",
        "module",
        "levelno",
        "levelname",
        "processName",
        "process",
        "threadName",
        "thread",
        "message",
        "msecs",
        "taskName",
    })

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in self._STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)

# One file handler shared by every viperctl logger once bootstrap has set a
# global.log_file. Module loggers are created at import time, before any
# config is read, so the file has to be attached to them after the fact.
_package_file_handler: Optional[logging.FileHandler] = None


def _is_package_logger(name: str) -> bool:
    return name == "viperctl" or name.startswith("viperctl.")


def _package_loggers() -> list[logging.Logger]:
    """Every viperctl logger that get_logger() has configured."""
    loggers = []
    for name, candidate in list(logging.Logger.manager.loggerDict.items()):
        if _is_package_logger(name) and isinstance(candidate, logging.Logger) and candidate.handlers:
            loggers.append(candidate)
    return loggers


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Create a structured JSON logger.

    Every module calls this once at the top and keeps the returned instance.
    The CLI calls it again with the user's --log-level, which only adjusts the
    level of an already configured logger. A viperctl logger created after
    attach_log_file() also writes to the package log file.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Optional path to a log file for this logger only. If
                  provided, logs go to both stderr and the file.

    Returns:
        A configured logging.Logger that outputs structured JSON.
    """
    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            if handler is not _package_file_handler:
                handler.setLevel(level)
        return logger

    formatter = JsonFormatter()

    stream_handler = logging.StreamHandler(stream=sys.stderr)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    if _package_file_handler is not None and _is_package_logger(name):
        logger.addHandler(_package_file_handler)

    logger.propagate = False

    return logger


def set_package_log_level(log_level: str) -> None:
    """Apply a level to every viperctl logger created so far."""
    level = _resolve_log_level(log_level)
    for logger in _package_loggers():
        logger.setLevel(level)
        for handler in logger.handlers:
            if handler is not _package_file_handler:
                handler.setLevel(level)


def attach_log_file(log_file: Path) -> None:
    """
    Send every viperctl logger, existing and future, to `log_file` as well.

    The handler has no level of its own; each logger's level decides what
    reaches the file. Attaching the same path twice is a no-op. Attaching a
    different path replaces the previous file.
    """
    global _package_file_handler

    if _package_file_handler is not None:
        if Path(_package_file_handler.baseFilename) == log_file.resolve():
            return
        detach_log_file()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(str(log_file), encoding="utf-8")
    handler.setFormatter(JsonFormatter())
    _package_file_handler = handler

    for logger in _package_loggers():
        logger.addHandler(handler)


def detach_log_file() -> None:
    """Stop writing to the package log file and close it."""
    global _package_file_handler

    handler = _package_file_handler
    if handler is None:
        return
    _package_file_handler = None
    for logger in _package_loggers():
        logger.removeHandler(handler)
    handler.close()
