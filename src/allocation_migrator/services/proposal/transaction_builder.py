"""Transaction builder & signer: chunk + nonce -> SafeTransaction -> SignedProposal."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog

from allocation_migrator.models.chunk import Chunk
from allocation_migrator.models.proposal import SignedProposal
from allocation_migrator.models.safe_transaction import SafeTransaction

if TYPE_CHECKING:
    from allocation_migrator.wallet.runtime import IWalletRuntime
    from allocation_migrator.wallet.signer import SignerIdentity


class TransactionBuilder:
    """Builds and signs one Safe transaction per chunk through the wallet runtime.

    Works the same for delegate and owner identities; the identity's role is
    carried on the resulting proposal.
    """

    def __init__(
        self,
        wallet_runtime: IWalletRuntime,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        self._runtime = wallet_runtime
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def build(self, chunk: Chunk, nonce: int) -> SafeTransaction:
        """Transaction executing every call of the chunk atomically, in order, at `nonce`."""
        if chunk.is_empty:
            raise ValueError("cannot build a transaction from an empty chunk")
        tx = await self._runtime.create_transaction(chunk.calls, nonce)
        self._logger.debug(
            "transaction_built",
            nonce=nonce,
            call_count=tx.call_count,
            operation=int(tx.operation),
            chunk_offset=chunk.offset,
        )
        return tx

    async def sign(self, tx: SafeTransaction, identity: SignerIdentity) -> SignedProposal:
        """Hash tx with the runtime and sign the hash with identity."""
        safe_tx_hash = await self._runtime.get_transaction_hash(tx)
        signature = await self._runtime.sign_hash(safe_tx_hash, identity)
        self._logger.info(
            "transaction_signed",
            nonce=tx.nonce,
            safe_tx_hash=safe_tx_hash,
            signer_role=identity.role.value,
            signer=identity.address,
        )
        return SignedProposal(
            safe_tx_hash=safe_tx_hash,
            sender=identity.address,
            signature=signature,
            role=identity.role,
            transaction=tx,
        )

    async def build_and_sign(
        self,
        chunk: Chunk,
        nonce: int,
        identity: SignerIdentity,
    ) -> SignedProposal:
        tx = await self.build(chunk, nonce)
        return await self.sign(tx, identity)
