"""MultiSend batch encoding: several calls executed atomically, in order, by one Safe transaction."""

from __future__ import annotations

from collections.abc import Sequence

from eth_abi import encode as abi_encode
from eth_abi.packed import encode_packed

from allocation_migrator.models.call_payload import CallPayload

# bytes4(keccak256("multiSend(bytes)"))
MULTISEND_SELECTOR = bytes.fromhex("8d80ff0a")


def pack_call(call: CallPayload) -> bytes:
    """Pack one call as operation (1) | to (20) | value (32) | data length (32) | data."""
    return encode_packed(
        ["uint8", "address", "uint256", "uint256", "bytes"],
        [int(call.operation), call.to, call.value, len(call.data), call.data],
    )


def encode_multisend(calls: Sequence[CallPayload]) -> bytes:
    """Calldata for multiSend(bytes transactions) over the packed calls."""
    if not calls:
        raise ValueError("multiSend needs at least one call")
    packed = b"".join(pack_call(c) for c in calls)
    return MULTISEND_SELECTOR + abi_encode(["bytes"], [packed])
