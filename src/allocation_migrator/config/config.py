# -*- coding: utf-8 -*-
"""Configuration loaded from environment via Pydantic Settings.

Nested env vars use <section>__<key>, e.g. SAFE__ADDRESS, SIGNER__PRIVATE_KEY, LOGGING__CONSOLE_LEVEL.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from allocation_migrator.exceptions import ConfigurationError, MissingRequiredConfigError
from allocation_migrator.utils.validation import is_hex_address, is_private_key

# Token distro contract on Gnosis chain that exposes transferAllocation(address,address)
DEFAULT_TOKEN_DISTRO_CONTRACT = "0xc0dbDcA66a0636236fAbe1B3C16B1bD4C84bB1E1"
# MultiSendCallOnly v1.3.0 (canonical deployment)
DEFAULT_MULTISEND_CALL_ONLY = "0x40A2aCCbd92BCA938b02010E17A5b8929b49130D"


class AppSettings(BaseSettings):
    """General application configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    app_name: str = "allocation-migrator"
    service_name: Optional[str] = None
    service_version: Optional[str] = None
    environment: Literal["development", "test", "production"] = "development"


class LoggingSettings(BaseSettings):
    """Structured logging configuration for structlog/stdlib/Logfire."""

    model_config = SettingsConfigDict(extra="ignore")

    console_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    logfire_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "logs/allocation_migrator.log"
    # TimedRotatingFileHandler: when to rotate (S/M/H/D/W0–W6/midnight), interval, backups to keep
    log_file_when: Literal[
        "S", "M", "H", "D", "W0", "W1", "W2", "W3", "W4", "W5", "W6", "midnight"
    ] = "midnight"
    log_file_interval: int = 1
    log_file_backup_count: int = 30
    log_file_utc: bool = True

    # Main output format: JSONRenderer if True, ConsoleRenderer if False
    json_format: bool = False

    logfire_enabled: bool = False
    logfire_token: Optional[str] = None


class ApiSettings(BaseSettings):
    """HTTP transport configuration shared by every API client."""

    model_config = SettingsConfigDict(extra="ignore")

    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="HTTP request timeout in seconds.",
    )


class RetrySettings(BaseSettings):
    """Bounded retry policy applied to every network-facing call."""

    model_config = SettingsConfigDict(extra="ignore")

    max_attempts: int = Field(default=3, ge=1, le=20, description="Attempts per call, first one included.")
    delay_seconds: float = Field(default=1.0, ge=0.0, le=60.0, description="Delay before the first retry.")
    backoff: Literal["fixed", "exponential"] = "fixed"
    max_delay_seconds: float = Field(default=30.0, ge=0.0, le=600.0)


class SafeSettings(BaseSettings):
    """Safe wallet and Safe Transaction Service configuration (env SAFE__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    address: Optional[str] = Field(default=None, description="Safe (multisig) address.")
    chain_id: int = Field(default=100, description="Chain ID (100 for Gnosis chain).")
    api_key: Optional[str] = Field(default=None, description="Safe Transaction Service API key.")
    service_url: Optional[str] = Field(
        default=None,
        description="Override for the Transaction Service base URL; defaults to the chain table.",
    )
    version: Optional[str] = Field(
        default=None,
        description="Safe contract version (e.g. 1.3.0). Read from the contract when unset.",
    )
    multisend_address: str = Field(
        default=DEFAULT_MULTISEND_CALL_ONLY,
        description="MultiSendCallOnly contract used to batch several calls into one transaction.",
    )
    origin: str = Field(default="GIVback claim", description="Origin label attached to proposals.")


class SignerSettings(BaseSettings):
    """Signer key material (env SIGNER__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    private_key: Optional[str] = Field(default=None, description="Delegate or owner private key.")
    role: Literal["delegate", "owner"] = "delegate"


class RpcSettings(BaseSettings):
    """JSON-RPC endpoint (env RPC__URL)."""

    model_config = SettingsConfigDict(extra="ignore")

    url: Optional[str] = Field(default=None, description="JSON-RPC endpoint of the Safe's chain.")


class DuneSettings(BaseSettings):
    """Dune Analytics data source (env DUNE__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    api_key: Optional[str] = Field(default=None, description="Dune API key.")
    api_host: str = Field(default="https://api.dune.com", description="Dune API base URL.")
    query_id: int = Field(default=3799716, description="Query returning the grantees to migrate.")
    days_since_last_allocate: int = Field(
        default=270,
        ge=0,
        description="Value of the daysSinceLastAllocate query parameter.",
    )


class MigrationSettings(BaseSettings):
    """Allocation migration pipeline (env MIGRATION__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    recipient_address: Optional[str] = Field(
        default=None,
        description="New recipient that every allocation is transferred to.",
    )
    contract_address: str = Field(
        default=DEFAULT_TOKEN_DISTRO_CONTRACT,
        description="Token distro contract exposing transferAllocation(address,address).",
    )
    chunk_size: int = Field(default=1000, ge=1, le=5000, description="Calls per proposed transaction.")
    row_field: str = Field(default="grantee", description="Row field holding the previous recipient.")
    advance_mode: Literal["rows_returned", "fixed_limit"] = Field(
        default="rows_returned",
        description="Cursor advancement: by rows actually returned, or by the fixed page limit.",
    )
    start_offset: int = Field(
        default=0,
        ge=0,
        description="Source offset to resume from (next_offset of a previous run).",
    )
    max_chunks: Optional[int] = Field(default=None, ge=1, description="Stop after this many proposals.")
    preflight_signer_check: bool = Field(
        default=True,
        description="Check that the signer is an owner/delegate before proposing anything.",
    )


class CleanupSettings(BaseSettings):
    """Pending-proposal cleanup (env CLEANUP__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    pause_seconds: float = Field(default=1.0, ge=0.0, le=60.0, description="Pause between deletions.")
    only_own: bool = Field(default=True, description="Only delete proposals sent by the signer.")


class Settings(BaseSettings):
    """Root application configuration.

    Groups all sub-configurations so the rest of the code does not
    read environment variables directly. Nested overrides use
    <section>__<key>, e.g. SAFE__CHAIN_ID, MIGRATION__CHUNK_SIZE.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    safe: SafeSettings = Field(default_factory=SafeSettings)
    signer: SignerSettings = Field(default_factory=SignerSettings)
    rpc: RpcSettings = Field(default_factory=RpcSettings)
    dune: DuneSettings = Field(default_factory=DuneSettings)
    migration: MigrationSettings = Field(default_factory=MigrationSettings)
    cleanup: CleanupSettings = Field(default_factory=CleanupSettings)

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """Build settings from environment (and .env), with optional overrides.

        Nested overrides can be passed as nested dicts, e.g.:
        - from_env(safe={"chain_id": 1})

        Returns:
            A new Settings instance.
        """
        return cls(**overrides)

    def missing_for_cleanup(self) -> list[str]:
        """Env keys required by the cleanup run that are not set."""
        missing: list[str] = []
        if not (self.safe.address or "").strip():
            missing.append("SAFE__ADDRESS")
        if not (self.safe.api_key or "").strip():
            missing.append("SAFE__API_KEY")
        if not (self.signer.private_key or "").strip():
            missing.append("SIGNER__PRIVATE_KEY")
        return missing

    def missing_for_pipeline(self) -> list[str]:
        """Env keys required by the proposal pipeline that are not set."""
        missing = self.missing_for_cleanup()
        if not (self.rpc.url or "").strip():
            missing.append("RPC__URL")
        if not (self.dune.api_key or "").strip():
            missing.append("DUNE__API_KEY")
        if not (self.migration.recipient_address or "").strip():
            missing.append("MIGRATION__RECIPIENT_ADDRESS")
        if not self.migration.contract_address.strip():
            missing.append("MIGRATION__CONTRACT_ADDRESS")
        return missing

    def validate_for_cleanup(self) -> None:
        """Raise if the cleanup run cannot start with this configuration.

        Raises:
            MissingRequiredConfigError: If a required value is absent.
            ConfigurationError: If a value is present but malformed.
        """
        missing = self.missing_for_cleanup()
        if missing:
            raise MissingRequiredConfigError(*missing)
        self._check_common()

    def validate_for_pipeline(self) -> None:
        """Raise if the proposal pipeline cannot start with this configuration.

        Raises:
            MissingRequiredConfigError: If a required value is absent.
            ConfigurationError: If a value is present but malformed.
        """
        missing = self.missing_for_pipeline()
        if missing:
            raise MissingRequiredConfigError(*missing)
        self._check_common()
        for key, value in (
            ("MIGRATION__RECIPIENT_ADDRESS", self.migration.recipient_address),
            ("MIGRATION__CONTRACT_ADDRESS", self.migration.contract_address),
            ("SAFE__MULTISEND_ADDRESS", self.safe.multisend_address),
        ):
            if not is_hex_address(value):
                raise ConfigurationError(f"{key} is not a valid 0x address")

    def _check_common(self) -> None:
        if not is_hex_address(self.safe.address):
            raise ConfigurationError("SAFE__ADDRESS is not a valid 0x address")
        if not is_private_key(self.signer.private_key):
            raise ConfigurationError("SIGNER__PRIVATE_KEY is not a 32-byte hex key")


@lru_cache
def get_settings() -> Settings:
    """Return a single cached instance of Settings.

    Only process entry points call this; components receive Settings explicitly.

        from allocation_migrator.config import get_settings

        settings = get_settings()
        chunk_size = settings.migration.chunk_size
    """
    return Settings()
