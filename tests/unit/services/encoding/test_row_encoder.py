# -*- coding: utf-8 -*-
"""Unit tests for the transferAllocation row encoder."""

from __future__ import annotations

import pytest
from eth_utils import keccak

from allocation_migrator.exceptions import MalformedRowError
from allocation_migrator.models.call_payload import Operation
from allocation_migrator.services.encoding.row_encoder import (
    TRANSFER_ALLOCATION_SELECTOR,
    TRANSFER_ALLOCATION_SIGNATURE,
    RowEncoder,
    encode_row,
    encode_transfer_allocation,
)

PREV = "0x30e384a67b5ede03c203071d8858f3611a232ef5"
NEW = "0xc0dbdca66a0636236fabe1b3c16b1bd4c84bb1e1"
# Calldata of a transferAllocation proposal taken from the Safe queue
KNOWN_CALLDATA = (
    "0x397f6121"
    "00000000000000000000000030e384a67b5ede03c203071d8858f3611a232ef5"
    "000000000000000000000000c0dbdca66a0636236fabe1b3c16b1bd4c84bb1e1"
)


def test_selector_matches_function_signature() -> None:
    assert keccak(text=TRANSFER_ALLOCATION_SIGNATURE)[:4] == TRANSFER_ALLOCATION_SELECTOR


def test_encode_transfer_allocation_matches_known_calldata() -> None:
    assert "0x" + encode_transfer_allocation(PREV, NEW).hex() == KNOWN_CALLDATA


def test_encode_row_layout(recipient: str, contract: str) -> None:
    payload = encode_row({"grantee": PREV}, recipient, contract)

    assert payload.data[:4] == TRANSFER_ALLOCATION_SELECTOR
    assert len(payload.data) == 4 + 64
    assert payload.data[4:36] == bytes(12) + bytes.fromhex(PREV[2:])
    assert payload.data[36:68] == bytes(12) + bytes.fromhex(recipient[2:])
    assert payload.to.lower() == contract.lower()
    assert payload.value == 0
    assert payload.operation is Operation.CALL


def test_encode_row_strips_whitespace(recipient: str, contract: str) -> None:
    payload = encode_row({"grantee": f"  {PREV}\n"}, recipient, contract)
    assert payload.data[4:36].hex().endswith(PREV[2:])


@pytest.mark.parametrize(
    "row",
    [
        {},
        {"grantee": None},
        {"grantee": 12345},
        {"grantee": "0x1234"},
        {"grantee": "not-an-address"},
    ],
)
def test_encode_row_rejects_malformed_rows(row: dict, recipient: str, contract: str) -> None:
    with pytest.raises(MalformedRowError):
        encode_row(row, recipient, contract)


def test_encode_row_rejects_bad_checksum(recipient: str, contract: str) -> None:
    # Mixed case that is not the EIP-55 checksum of this address
    bad = "0x30E384a67b5ede03c203071d8858f3611a232ef5"
    with pytest.raises(MalformedRowError, match="checksum"):
        encode_row({"grantee": bad}, recipient, contract)


@pytest.mark.parametrize(
    "grantee",
    [
        "0x30e384a67b5EDe03C203071d8858F3611a232Ef5",
        "0x30e384a67b5ede03c203071d8858f3611a232ef5",
        "0x30E384A67B5EDE03C203071D8858F3611A232EF5",
    ],
)
def test_encode_row_accepts_checksummed_or_single_case(
    grantee: str, recipient: str, contract: str
) -> None:
    payload = encode_row({"grantee": grantee}, recipient, contract)

    assert payload.data[4:36].hex().endswith("30e384a67b5ede03c203071d8858f3611a232ef5")


def test_row_encoder_uses_configured_field(recipient: str, contract: str) -> None:
    encoder = RowEncoder(field="recipient")

    payload = encoder.encode({"recipient": PREV}, recipient, contract)

    assert payload.data[4:36].hex().endswith(PREV[2:])
    with pytest.raises(MalformedRowError) as exc:
        encoder.encode({"grantee": PREV}, recipient, contract)
    assert exc.value.field == "recipient"
