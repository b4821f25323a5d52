"""SignedProposal: a hashed and signed SafeTransaction ready for submission."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from allocation_migrator.models.safe_transaction import SafeTransaction


class SignerRole(str, Enum):
    """Authority the signer holds over the Safe."""

    DELEGATE = "delegate"
    """May propose and delete proposals; no confirmation weight."""
    OWNER = "owner"
    """Full owner; the signature counts as a confirmation."""


@dataclass(frozen=True, slots=True)
class SignedProposal:
    """One per chunk. The hash identifies the proposal on the Transaction Service."""

    safe_tx_hash: str
    """0x-prefixed EIP-712 SafeTx hash."""
    sender: str
    """Checksummed signer address."""
    signature: bytes
    role: SignerRole
    transaction: SafeTransaction

    @property
    def signature_hex(self) -> str:
        return "0x" + self.signature.hex()

    @property
    def nonce(self) -> int:
        return self.transaction.nonce
