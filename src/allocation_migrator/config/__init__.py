"""Configuration subpackage."""

from allocation_migrator.config.config import (
    ApiSettings,
    AppSettings,
    CleanupSettings,
    DuneSettings,
    LoggingSettings,
    MigrationSettings,
    RetrySettings,
    RpcSettings,
    SafeSettings,
    Settings,
    SignerSettings,
    get_settings,
)

__all__ = [
    "ApiSettings",
    "AppSettings",
    "CleanupSettings",
    "DuneSettings",
    "LoggingSettings",
    "MigrationSettings",
    "RetrySettings",
    "RpcSettings",
    "SafeSettings",
    "Settings",
    "SignerSettings",
    "get_settings",
]
