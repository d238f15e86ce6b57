"""Logging configuration and structured context helpers."""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Iterator

from cli_agent.config import parse_bool, parse_int
from cli_agent.paths import log_dir

DEFAULT_LOG_FILE = "cli-agent.log"
DEFAULT_LOG_MAX_BYTES = 2_000_000
DEFAULT_LOG_BACKUPS = 3

_LOG_CONTEXT: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar("cli_agent_log_context", default={})


@dataclass(frozen=True)
class LogConfig:
    """Configuration for log setup.

    Logs go to a file by default because the terminal is owned by the
    session renderer while the loop runs.
    """

    log_file: Path
    level: int = logging.INFO
    stderr: bool = False
    json: bool = False
    max_bytes: int = DEFAULT_LOG_MAX_BYTES
    backup_count: int = DEFAULT_LOG_BACKUPS
    logger_levels: Dict[str, int] = field(default_factory=dict)


def _parse_level(value: str | None, default: int) -> int:
    """Parse a log level string or numeric value from environment settings."""
    if not value:
        return default
    if value.isdigit():
        return int(value)
    return logging._nameToLevel.get(value.upper(), default)


def build_log_config(*, log_file_name: str = DEFAULT_LOG_FILE, default_level: int = logging.INFO) -> LogConfig:
    """Build log configuration from CLI_AGENT_LOG_* environment variables."""

    directory = Path(os.getenv("CLI_AGENT_LOG_DIR") or log_dir())
    directory.mkdir(parents=True, exist_ok=True)

    return LogConfig(
        log_file=directory / log_file_name,
        level=_parse_level(os.getenv("CLI_AGENT_LOG_LEVEL"), default_level),
        stderr=parse_bool(os.getenv("CLI_AGENT_LOG_STDERR"), False),
        json=parse_bool(os.getenv("CLI_AGENT_LOG_JSON"), False),
        max_bytes=parse_int(os.getenv("CLI_AGENT_LOG_MAX_BYTES"), DEFAULT_LOG_MAX_BYTES),
        backup_count=parse_int(os.getenv("CLI_AGENT_LOG_BACKUPS"), DEFAULT_LOG_BACKUPS),
        logger_levels={"asyncio": logging.WARNING},
    )


def configure_logging(config: LogConfig) -> None:
    """Configure root logging with rotation and context support.

    Root handlers are reset first so repeated calls do not duplicate output.
    """

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(config.level)

    formatter: logging.Formatter
    if config.json:
        formatter = JsonFormatter()
    else:
        formatter = ContextFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")

    file_handler = RotatingFileHandler(
        config.log_file,
        maxBytes=config.max_bytes,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)
    file_handler.addFilter(ContextFilter())
    root_logger.addHandler(file_handler)

    if config.stderr:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        stream_handler.addFilter(ContextFilter())
        root_logger.addHandler(stream_handler)

    for name, level in config.logger_levels.items():
        logging.getLogger(name).setLevel(level)


@contextlib.contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Attach structured context fields to log records within a block."""

    current = _LOG_CONTEXT.get()
    merged = {**current, **{k: v for k, v in fields.items() if v is not None}}
    token = _LOG_CONTEXT.set(merged)
    try:
        yield
    finally:
        _LOG_CONTEXT.reset(token)


def log_event(logger: logging.Logger, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Log a structured event with optional fields.

    Events are short, stable identifiers such as ``task.start``.
    """

    logger.log(level, event, extra={"event_fields": fields})


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        if value == "":
            return '""'
        if any(ch.isspace() for ch in value) or "=" in value or '"' in value:
            return json.dumps(value)
        return value
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, ensure_ascii=True, separators=(",", ":"))
    return str(value)


def _format_fields(fields: Dict[str, Any]) -> str:
    parts: list[str] = []
    for key in sorted(fields):
        value = fields.get(key)
        if value is None:
            continue
        parts.append(f"{key}={_format_value(value)}")
    return " ".join(parts)


class ContextFilter(logging.Filter):
    """Inject context fields into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003 - logging API name
        record.context_fields = dict(_LOG_CONTEXT.get())
        record.event_fields = getattr(record, "event_fields", {})
        return True


class ContextFormatter(logging.Formatter):
    """Format records as text with key=value fields appended."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = _format_fields(getattr(record, "context_fields", {}))
        event_fields = _format_fields(getattr(record, "event_fields", {}))
        extra = " ".join(part for part in (context, event_fields) if part)
        if extra:
            return f"{base} {extra}"
        return base


class JsonFormatter(logging.Formatter):
    """Emit one JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context_fields", {})
        fields = getattr(record, "event_fields", {})
        if context:
            payload["context"] = context
        if fields:
            payload["fields"] = fields
        return json.dumps(payload, ensure_ascii=True, default=str)
