# -*- coding: utf-8 -*-
"""Unit tests for logging configuration."""

from __future__ import annotations

import logging
from collections.abc import Callable
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

import structlog

from allocation_migrator.config import AppSettings, LoggingSettings, Settings
from allocation_migrator.logging.config import (
    REDACTED,
    _build_handlers,
    _redact_secrets,
    _renderer,
    _service_context,
    configure_logging,
)


def test_service_context_processor() -> None:
    processor = _service_context(
        AppSettings(service_name="migrator", service_version="0.1.0", environment="test")
    )

    event = processor(structlog.get_logger("x"), "info", {"event": "e"})

    assert event["app_name"] == "allocation-migrator"
    assert event["service_name"] == "migrator"
    assert event["service_version"] == "0.1.0"
    assert event["environment"] == "test"


def test_secrets_are_redacted() -> None:
    event = _redact_secrets(
        None,
        "info",
        {"event": "e", "signature": "0xdead", "api_key": "k", "safe_tx_hash": "0x01"},
    )

    assert event["signature"] == REDACTED
    assert event["api_key"] == REDACTED
    assert event["safe_tx_hash"] == "0x01"


def test_file_output_forces_json(tmp_path: Path) -> None:
    cfg = LoggingSettings(
        log_to_console=False,
        log_to_file=True,
        log_file_path=str(tmp_path / "logs" / "run.log"),
        file_level="WARNING",
    )

    handlers = _build_handlers(cfg)

    assert len(handlers) == 1
    assert isinstance(handlers[0], TimedRotatingFileHandler)
    assert handlers[0].level == logging.WARNING
    assert (tmp_path / "logs").is_dir()
    assert isinstance(_renderer(cfg), structlog.processors.JSONRenderer)
    handlers[0].close()


def test_console_renderer_unless_json_requested() -> None:
    assert isinstance(_renderer(LoggingSettings(json_format=False)), structlog.dev.ConsoleRenderer)
    assert isinstance(_renderer(LoggingSettings(json_format=True)), structlog.processors.JSONRenderer)


def test_configure_logging_without_handlers_still_logs(
    settings_factory: Callable[..., Settings],
) -> None:
    configure_logging(settings_factory())

    structlog.get_logger("test").error("logging_smoke_test", value=1)
