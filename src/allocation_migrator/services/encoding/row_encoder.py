"""Row encoder: one source row -> one transferAllocation call."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from eth_abi import encode as abi_encode
from eth_utils import (
    is_address,
    is_checksum_address,
    is_checksum_formatted_address,
    to_checksum_address,
)

from allocation_migrator.exceptions import MalformedRowError
from allocation_migrator.models.call_payload import CallPayload, Operation

TRANSFER_ALLOCATION_SIGNATURE = "transferAllocation(address,address)"
# bytes4(keccak256("transferAllocation(address,address)"))
TRANSFER_ALLOCATION_SELECTOR = bytes.fromhex("397f6121")

DEFAULT_ROW_FIELD = "grantee"


def _address(value: Any, *, what: str) -> str:
    if not isinstance(value, str) or not is_address(value.strip()):
        raise MalformedRowError(f"{what} is not an address: {value!r}", field=what, value=value)
    v = value.strip()
    # Mixed case must be a valid EIP-55 checksum; all-lower and all-upper carry none
    if is_checksum_formatted_address(v) and not is_checksum_address(v):
        raise MalformedRowError(f"{what} has an invalid checksum: {value!r}", field=what, value=value)
    return to_checksum_address(v)


def encode_transfer_allocation(prev_recipient: str, new_recipient: str) -> bytes:
    """Calldata for transferAllocation(prevRecipient, newRecipient)."""
    return TRANSFER_ALLOCATION_SELECTOR + abi_encode(
        ["address", "address"],
        [to_checksum_address(prev_recipient), to_checksum_address(new_recipient)],
    )


def encode_row(
    row: Mapping[str, Any],
    recipient: str,
    contract: str,
    *,
    field: str = DEFAULT_ROW_FIELD,
) -> CallPayload:
    """Encode one row as a call moving its allocation from row[field] to recipient.

    Raises:
        MalformedRowError: If the field is absent or not address-shaped.
    """
    if field not in row or row[field] is None:
        raise MalformedRowError(f"row has no {field!r} field", field=field)
    prev_recipient = _address(row[field], what=field)
    return CallPayload(
        to=_address(contract, what="contract"),
        data=encode_transfer_allocation(prev_recipient, _address(recipient, what="recipient")),
        value=0,
        operation=Operation.CALL,
    )


class RowEncoder:
    """Encoder bound to a row field name. Stateless."""

    def __init__(self, *, field: str = DEFAULT_ROW_FIELD) -> None:
        self._field = field

    @property
    def field(self) -> str:
        return self._field

    def encode(self, row: Mapping[str, Any], recipient: str, contract: str) -> CallPayload:
        return encode_row(row, recipient, contract, field=self._field)
