"""CallPayload: one encoded contract invocation inside a Safe batch."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class Operation(IntEnum):
    """Safe operation type."""

    CALL = 0
    DELEGATE_CALL = 1


@dataclass(frozen=True, slots=True)
class CallPayload:
    """Encoded call produced from exactly one source row."""

    to: str
    """Target contract (checksummed 0x address)."""
    data: bytes
    """Calldata: 4-byte selector followed by ABI-encoded arguments."""
    value: int = 0
    operation: Operation = Operation.CALL

    @property
    def data_hex(self) -> str:
        return "0x" + self.data.hex()
