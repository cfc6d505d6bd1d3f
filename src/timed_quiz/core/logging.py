"""JSON-lines logging used by every timed-quiz command."""

from __future__ import annotations

import json
import logging
import os
import sys
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

__all__ = [
    "JsonLogFormatter",
    "configure_logger",
]

_FILE_MARKER = "_timed_quiz_file"
_CONSOLE_MARKER = "_timed_quiz_console"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_FIELDS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class JsonLogFormatter(logging.Formatter):
    """Serialize each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        extras = {
            key: _jsonable(value)
            for key, value in vars(record).items()
            if key not in _RECORD_FIELDS
        }
        if extras:
            payload["extra"] = extras
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = record.stack_info
        return json.dumps(payload, ensure_ascii=True)


def configure_logger(
    name: str,
    *,
    log_dir: Path,
    level: str = "INFO",
    verbose: bool = False,
    capture_warnings: bool = False,
    max_bytes: int = 2 * 1024 * 1024,
    backup_count: int = 3,
) -> tuple[logging.Logger, Path]:
    """Return ``name``'s logger wired to a rotating JSON file.

    Calling this twice for the same logger reuses the existing handlers. With
    ``capture_warnings`` the ``warnings`` module is redirected into the log
    file so stray library warnings never draw over a full-screen UI.
    """

    logger = logging.getLogger(name)
    logger.propagate = False
    logger.setLevel(logging.DEBUG)

    file_path = _log_file_path(log_dir, f"{name.rsplit('.', 1)[-1]}.log")
    handler = _file_handler(logger, file_path, max_bytes, backup_count)
    handler.setLevel(logging.DEBUG if verbose else _level_from_name(level))

    if verbose:
        _attach_console(logger)
    else:
        _detach_console(logger)

    if capture_warnings:
        logging.captureWarnings(True)
        warnings_logger = logging.getLogger("py.warnings")
        warnings_logger.propagate = False
        if handler not in warnings_logger.handlers:
            warnings_logger.addHandler(handler)

    return logger, Path(handler.baseFilename)


def _level_from_name(level: str) -> int:
    numeric = logging.getLevelName(level.upper())
    if isinstance(numeric, int):
        return numeric
    return logging.INFO


def _file_handler(
    logger: logging.Logger,
    path: Path,
    max_bytes: int,
    backup_count: int,
) -> RotatingFileHandler:
    for existing in list(logger.handlers):
        if not getattr(existing, _FILE_MARKER, False):
            continue
        current = getattr(existing, "baseFilename", None)
        if current == os.path.abspath(path):
            return existing  # type: ignore[return-value]
        logger.removeHandler(existing)
        existing.close()
    handler = RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setFormatter(JsonLogFormatter())
    setattr(handler, _FILE_MARKER, True)
    logger.addHandler(handler)
    return handler


def _attach_console(logger: logging.Logger) -> None:
    if any(getattr(h, _CONSOLE_MARKER, False) for h in logger.handlers):
        return
    console = logging.StreamHandler(stream=sys.stderr)
    console.setLevel(logging.DEBUG)
    console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    setattr(console, _CONSOLE_MARKER, True)
    logger.addHandler(console)


def _detach_console(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        if getattr(handler, _CONSOLE_MARKER, False):
            logger.removeHandler(handler)
            handler.close()


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {str(key): _jsonable(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_jsonable(item) for item in value]
    return repr(value)


def _log_file_path(log_dir: Path, filename: str) -> Path:
    for directory in (log_dir, Path(tempfile.gettempdir()) / "timed-quiz-logs"):
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path = directory / filename
            path.touch(exist_ok=True)
        except PermissionError:
            continue
        try:
            path.chmod(0o600)
        except PermissionError:  # pragma: no cover - depends on filesystem
            pass
        return path
    raise PermissionError(f"No writable log directory for {filename}")
