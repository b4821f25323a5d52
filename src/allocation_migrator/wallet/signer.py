"""SignerIdentity: local key plus the role it holds over the Safe."""

from __future__ import annotations

from typing import Any

from eth_account import Account
from eth_account.messages import encode_defunct, encode_typed_data
from eth_account.signers.local import LocalAccount

from allocation_migrator.models.proposal import SignerRole

# Safe signature type marker: eth_sign signatures carry v + 4 (31/32)
ETH_SIGN_V_OFFSET = 4


class SignerIdentity:
    """A delegate or owner key. Callers never see the private key, only signatures."""

    def __init__(self, account: LocalAccount, role: SignerRole) -> None:
        self._account = account
        self._role = role

    @classmethod
    def from_private_key(cls, private_key: str, role: SignerRole | str) -> SignerIdentity:
        return cls(Account.from_key(private_key), SignerRole(role))

    @property
    def address(self) -> str:
        """Checksummed signer address."""
        return self._account.address

    @property
    def role(self) -> SignerRole:
        return self._role

    def sign_hash(self, message_hash: bytes) -> bytes:
        """eth_sign a 32-byte hash, in the Safe's eth_sign signature format (v raised by 4).

        The Transaction Service accepts this format from owners and delegates alike.
        """
        if len(message_hash) != 32:
            raise ValueError("message_hash must be 32 bytes")
        signed = self._account.sign_message(encode_defunct(primitive=message_hash))
        sig = bytes(signed.signature)
        return sig[:64] + bytes([sig[64] + ETH_SIGN_V_OFFSET])

    def sign_typed_data(self, full_message: dict[str, Any]) -> bytes:
        """Sign an EIP-712 message (types, primaryType, domain, message)."""
        signed = self._account.sign_message(encode_typed_data(full_message=full_message))
        return bytes(signed.signature)

    def __repr__(self) -> str:
        return f"SignerIdentity(address={self.address!r}, role={self._role.value!r})"
