# -*- coding: utf-8 -*-
"""Unit tests for Settings validation."""

from __future__ import annotations

from collections.abc import Callable

import pytest
from pydantic import ValidationError

from allocation_migrator.config import Settings
from allocation_migrator.config.config import DEFAULT_TOKEN_DISTRO_CONTRACT
from allocation_migrator.exceptions import ConfigurationError, MissingRequiredConfigError


def test_defaults(settings_factory: Callable[..., Settings]) -> None:
    settings = settings_factory(migration=None)

    assert settings.safe.chain_id == 100
    assert settings.dune.query_id == 3799716
    assert settings.dune.days_since_last_allocate == 270
    assert settings.migration.chunk_size == 1000
    assert settings.migration.row_field == "grantee"
    assert settings.migration.advance_mode == "rows_returned"
    assert settings.migration.start_offset == 0
    assert settings.migration.contract_address == DEFAULT_TOKEN_DISTRO_CONTRACT
    assert settings.migration.contract_address == "0xc0dbDcA66a0636236fAbe1B3C16B1bD4C84bB1E1"
    assert settings.migration.recipient_address is None
    assert settings.cleanup.pause_seconds == 1.0
    assert settings.signer.role == "delegate"


def test_complete_configuration_validates(settings_factory: Callable[..., Settings]) -> None:
    settings = settings_factory()

    settings.validate_for_pipeline()
    settings.validate_for_cleanup()
    assert settings.missing_for_pipeline() == []


def test_missing_keys_are_all_listed(settings_factory: Callable[..., Settings]) -> None:
    settings = settings_factory(
        safe={"address": None, "api_key": None},
        signer={"private_key": None},
        rpc={"url": None},
        dune={"api_key": None},
        migration={"recipient_address": None},
    )

    with pytest.raises(MissingRequiredConfigError) as exc:
        settings.validate_for_pipeline()

    assert set(exc.value.keys) == {
        "SAFE__ADDRESS",
        "SAFE__API_KEY",
        "SIGNER__PRIVATE_KEY",
        "RPC__URL",
        "DUNE__API_KEY",
        "MIGRATION__RECIPIENT_ADDRESS",
    }


def test_cleanup_needs_fewer_keys(settings_factory: Callable[..., Settings]) -> None:
    settings = settings_factory(rpc={"url": None}, dune={"api_key": None})

    settings.validate_for_cleanup()
    assert settings.missing_for_pipeline() == ["RPC__URL", "DUNE__API_KEY"]


@pytest.mark.parametrize(
    "sections",
    [
        {"safe": {"address": "0x1234"}},
        {"signer": {"private_key": "0xdeadbeef"}},
        {"migration": {"recipient_address": "not-an-address"}},
    ],
)
def test_malformed_values_are_rejected(
    sections: dict,
    settings_factory: Callable[..., Settings],
) -> None:
    with pytest.raises(ConfigurationError):
        settings_factory(**sections).validate_for_pipeline()


def test_settings_are_frozen(settings_factory: Callable[..., Settings]) -> None:
    settings = settings_factory()

    with pytest.raises(ValidationError):
        settings.safe = settings.safe  # type: ignore[misc]


def test_nested_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SAFE__CHAIN_ID", "137")
    monkeypatch.setenv("MIGRATION__CHUNK_SIZE", "250")
    monkeypatch.setenv("SIGNER__ROLE", "owner")

    settings = Settings(_env_file=None)

    assert settings.safe.chain_id == 137
    assert settings.migration.chunk_size == 250
    assert settings.signer.role == "owner"
