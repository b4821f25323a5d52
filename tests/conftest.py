# -*- coding: utf-8 -*-
"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import pytest

from allocation_migrator.config import Settings
from allocation_migrator.models.proposal import SignerRole
from allocation_migrator.utils.retry import RetryPolicy
from allocation_migrator.wallet.signer import SignerIdentity

# Well-known development keys (never funded on a real chain)
DELEGATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
DELEGATE_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
OWNER_KEY = "0x59c6995e998f97a5a0044966f0945389dc9e86dae88c7a8412f4603b6b78690d"
OWNER_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

SAFE_ADDRESS = "0x4f2083f5fbede34c2714affb3105539775f7fe64"
RECIPIENT = "0xdddddddddddddddddddddddddddddddddddddddd"
CONTRACT = "0xc0dbdca66a0636236fabe1b3c16b1bd4c84bb1e1"


class FakeRowSource:
    """In-memory data source honoring limit/offset; records every call."""

    def __init__(self, rows: list[Mapping[str, Any]]) -> None:
        self.rows = rows
        self.calls: list[tuple[int, int]] = []

    async def get_rows(self, *, limit: int, offset: int) -> list[Mapping[str, Any]]:
        self.calls.append((limit, offset))
        return list(self.rows[offset : offset + limit])


@pytest.fixture
def row_source_factory() -> Callable[[list[Mapping[str, Any]]], FakeRowSource]:
    return FakeRowSource


@pytest.fixture
def grantee_rows() -> Callable[[int], list[dict[str, str]]]:
    """k distinct rows with address-shaped grantees."""

    def _build(k: int) -> list[dict[str, str]]:
        return [{"grantee": "0x" + f"{i + 1:040x}"} for i in range(k)]

    return _build


@pytest.fixture
def safe_address() -> str:
    return SAFE_ADDRESS


@pytest.fixture
def recipient() -> str:
    return RECIPIENT


@pytest.fixture
def contract() -> str:
    return CONTRACT


@pytest.fixture
def delegate_identity() -> SignerIdentity:
    return SignerIdentity.from_private_key(DELEGATE_KEY, SignerRole.DELEGATE)


@pytest.fixture
def owner_identity() -> SignerIdentity:
    return SignerIdentity.from_private_key(OWNER_KEY, SignerRole.OWNER)


@pytest.fixture
def no_sleep_retry() -> Callable[..., RetryPolicy]:
    """RetryPolicy factory whose sleeps are recorded instead of awaited."""

    def _build(**overrides: Any) -> RetryPolicy:
        sleeps: list[float] = overrides.pop("sleeps", [])

        async def _sleep(delay: float) -> None:
            sleeps.append(delay)

        return RetryPolicy(
            max_attempts=overrides.pop("max_attempts", 3),
            delay_seconds=overrides.pop("delay_seconds", 1.0),
            backoff=overrides.pop("backoff", "fixed"),
            sleep=_sleep,
            **overrides,
        )

    return _build


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Build Settings without reading .env, with a complete pipeline configuration by default."""

    def _build(**sections: Any) -> Settings:
        base: dict[str, dict[str, Any]] = {
            "safe": {
                "address": SAFE_ADDRESS,
                "chain_id": 100,
                "api_key": "safe-key",
                "version": "1.3.0",
            },
            "signer": {"private_key": DELEGATE_KEY, "role": "delegate"},
            "rpc": {"url": "https://rpc.gnosischain.com"},
            "dune": {"api_key": "dune-key"},
            "migration": {"recipient_address": RECIPIENT, "contract_address": CONTRACT},
            "logging": {"log_to_console": False, "log_to_file": False},
        }
        for name, values in sections.items():
            if values is None:
                base.pop(name, None)
            else:
                base[name] = {**base.get(name, {}), **values}
        return Settings(_env_file=None, **base)

    return _build
