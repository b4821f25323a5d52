# -*- coding: utf-8 -*-
"""structlog + Logfire setup for the migrator.

stdlib handlers (console and a rotating file) carry the rendered events.
Logfire, when enabled, receives the same events through its structlog
processor. Signatures and credentials are redacted before any sink sees them.
"""

from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any

import logfire
import structlog
from structlog.types import EventDict, Processor

from allocation_migrator.config import AppSettings, LoggingSettings, Settings

# stdlib level name -> Logfire min_level
LOG_LEVEL_TO_LOGFIRE: dict[str, str] = {
    "DEBUG": "debug",
    "INFO": "info",
    "WARNING": "warn",
    "ERROR": "error",
    "CRITICAL": "fatal",
}

REDACTED = "[redacted]"
SECRET_KEYS: frozenset[str] = frozenset(
    {"signature", "private_key", "api_key", "logfire_token", "authorization"}
)

_LEVELS = logging.getLevelNamesMapping()


def _level(name: str) -> int:
    return _LEVELS.get(name.upper(), logging.INFO)


def _redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    for key in SECRET_KEYS.intersection(event_dict):
        event_dict[key] = REDACTED
    return event_dict


def _service_context(app_settings: AppSettings) -> Processor:
    """Processor stamping the logger name and the service identity on each event."""
    identity: dict[str, Any] = {
        "app_name": app_settings.app_name,
        "environment": app_settings.environment,
    }
    if app_settings.service_name:
        identity["service_name"] = app_settings.service_name
    if app_settings.service_version:
        identity["service_version"] = app_settings.service_version

    def _add_service_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        wrapped = getattr(logger, "_logger", None)
        event_dict["logger"] = getattr(wrapped, "name", None) or getattr(logger, "name", "") or ""
        event_dict.update(identity)
        return event_dict

    return _add_service_context


def _plain(handler: logging.Handler, level_name: str) -> logging.Handler:
    handler.setLevel(_level(level_name))
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def _build_handlers(cfg: LoggingSettings) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if cfg.log_to_console:
        handlers.append(_plain(logging.StreamHandler(), cfg.console_level))
    if cfg.log_to_file:
        path = Path(cfg.log_file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = TimedRotatingFileHandler(
            path,
            when=cfg.log_file_when,
            interval=cfg.log_file_interval,
            backupCount=cfg.log_file_backup_count,
            encoding="utf-8",
            utc=cfg.log_file_utc,
        )
        handlers.append(_plain(rotating, cfg.file_level))
    return handlers


def _configure_logfire(app_settings: AppSettings, cfg: LoggingSettings) -> None:
    logfire.configure(
        token=cfg.logfire_token,
        service_name=app_settings.service_name or app_settings.app_name,
        service_version=app_settings.service_version,
        min_level=LOG_LEVEL_TO_LOGFIRE.get(cfg.logfire_level, "info"),  # type: ignore[arg-type]
        environment=app_settings.environment,
    )


def _renderer(cfg: LoggingSettings) -> Processor:
    # A file sink is always JSON
    if cfg.log_to_file or cfg.json_format:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()  # type: ignore[return-value]


def configure_logging(settings: Settings) -> None:
    """Install handlers and the structlog processor chain for one process run."""
    cfg = settings.logging

    handlers = _build_handlers(cfg)
    if handlers:
        # force: run() and run_cleanup() may both configure within one interpreter
        logging.basicConfig(level=min(h.level for h in handlers), handlers=handlers, force=True)

    if cfg.logfire_enabled:
        _configure_logfire(settings.app, cfg)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _service_context(settings.app),
        _redact_secrets,
    ]
    if cfg.logfire_enabled:
        processors.append(logfire.StructlogProcessor())  # type: ignore[arg-type]
    processors.append(_renderer(cfg))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
