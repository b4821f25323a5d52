"""SafeTransaction: the SafeTx struct a chunk is turned into."""

from __future__ import annotations

from dataclasses import dataclass

from allocation_migrator.models.call_payload import Operation

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


@dataclass(frozen=True, slots=True)
class SafeTransaction:
    """SafeTx fields as hashed (EIP-712) and sent to the Transaction Service.

    Gas and refund fields are zero: proposals are executed later by an owner
    who pays gas directly.
    """

    to: str
    value: int
    data: bytes
    operation: Operation
    nonce: int
    safe_tx_gas: int = 0
    base_gas: int = 0
    gas_price: int = 0
    gas_token: str = ZERO_ADDRESS
    refund_receiver: str = ZERO_ADDRESS
    call_count: int = 1
    """Number of source calls packed into this transaction."""

    @property
    def data_hex(self) -> str:
        return "0x" + self.data.hex()
