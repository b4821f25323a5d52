# -*- coding: utf-8 -*-
"""Unit tests for SignerPreflight."""

from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest

from allocation_migrator.exceptions import UnauthorizedSignerError
from allocation_migrator.services.pipeline.preflight import SignerPreflight
from allocation_migrator.wallet.signer import SignerIdentity

NOW = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def _directory(*, owners: list[str] | None = None, delegates: list[dict[str, Any]] | None = None) -> Any:
    return SimpleNamespace(
        get_safe_info=AsyncMock(return_value={"owners": owners or []}),
        get_delegates=AsyncMock(return_value=delegates or []),
    )


def _preflight(directory: Any, safe_address: str) -> SignerPreflight:
    return SignerPreflight(directory, safe_address, clock=lambda: NOW)


async def test_owner_in_owner_list_passes(owner_identity: SignerIdentity, safe_address: str) -> None:
    directory = _directory(owners=[owner_identity.address.lower()])

    await _preflight(directory, safe_address).check(owner_identity)

    directory.get_safe_info.assert_awaited_once_with(safe_address)
    directory.get_delegates.assert_not_called()


async def test_owner_missing_fails(owner_identity: SignerIdentity, safe_address: str) -> None:
    directory = _directory(owners=["0x" + "99" * 20])

    with pytest.raises(UnauthorizedSignerError, match="not an owner"):
        await _preflight(directory, safe_address).check(owner_identity)


async def test_registered_delegate_passes(delegate_identity: SignerIdentity, safe_address: str) -> None:
    directory = _directory(
        delegates=[{"delegate": delegate_identity.address, "delegator": "0x" + "99" * 20}]
    )

    await _preflight(directory, safe_address).check(delegate_identity)

    directory.get_safe_info.assert_not_called()


async def test_unregistered_delegate_fails(delegate_identity: SignerIdentity, safe_address: str) -> None:
    directory = _directory(delegates=[{"delegate": "0x" + "99" * 20}])

    with pytest.raises(UnauthorizedSignerError, match="delegate"):
        await _preflight(directory, safe_address).check(delegate_identity)


async def test_expired_delegate_fails(delegate_identity: SignerIdentity, safe_address: str) -> None:
    directory = _directory(
        delegates=[{"delegate": delegate_identity.address, "expiryDate": "2026-09-30T00:00:00Z"}]
    )

    with pytest.raises(UnauthorizedSignerError):
        await _preflight(directory, safe_address).check(delegate_identity)


async def test_delegate_with_future_expiry_passes(
    delegate_identity: SignerIdentity,
    safe_address: str,
) -> None:
    directory = _directory(
        delegates=[{"delegate": delegate_identity.address, "expiryDate": "2027-01-01T00:00:00Z"}]
    )

    await _preflight(directory, safe_address).check(delegate_identity)
