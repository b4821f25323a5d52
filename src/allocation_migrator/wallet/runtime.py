# -*- coding: utf-8 -*-
"""Wallet runtime: builds Safe transactions from calls, hashes them (EIP-712 SafeTx) and signs hashes.

The SafeTx hash follows the Safe contract's typed-data rules; the encoding itself is
done by eth-account, this module only describes the struct and its domain.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

import structlog
from eth_account.messages import encode_typed_data
from eth_utils import keccak, to_checksum_address

from allocation_migrator.exceptions import ConfigurationError
from allocation_migrator.models.call_payload import CallPayload, Operation
from allocation_migrator.models.safe_transaction import SafeTransaction
from allocation_migrator.utils.retry import RetryPolicy
from allocation_migrator.utils.validation import mask_address
from allocation_migrator.wallet.multisend import encode_multisend

if TYPE_CHECKING:
    from allocation_migrator.clients.rpc_client import RpcClient
    from allocation_migrator.config import Settings
    from allocation_migrator.wallet.signer import SignerIdentity

SAFE_TX_FIELDS: list[tuple[str, str]] = [
    ("to", "address"),
    ("value", "uint256"),
    ("data", "bytes"),
    ("operation", "uint8"),
    ("safeTxGas", "uint256"),
    ("baseGas", "uint256"),
    ("gasPrice", "uint256"),
    ("gasToken", "address"),
    ("refundReceiver", "address"),
    ("nonce", "uint256"),
]


def parse_version(version: str) -> tuple[int, int, int]:
    """Parse "1.3.0" / "1.4.1+L2" into (1, 3, 0) / (1, 4, 1)."""
    m = re.match(r"^\s*v?(\d+)\.(\d+)(?:\.(\d+))?", version or "")
    if m is None:
        raise ConfigurationError(f"Unrecognized Safe version: {version!r}")
    return int(m.group(1)), int(m.group(2)), int(m.group(3) or 0)


def safe_tx_typed_data(
    tx: SafeTransaction,
    *,
    safe_address: str,
    chain_id: int,
    version: str,
) -> dict[str, Any]:
    """EIP-712 message for a SafeTx.

    Safes from 1.3.0 bind the chain id into the domain; older ones only the
    verifying contract. Before 1.0.0 the baseGas field was named dataGas.
    """
    v = parse_version(version)
    if v >= (1, 3, 0):
        domain_types = [
            {"name": "chainId", "type": "uint256"},
            {"name": "verifyingContract", "type": "address"},
        ]
        domain: dict[str, Any] = {
            "chainId": chain_id,
            "verifyingContract": to_checksum_address(safe_address),
        }
    else:
        domain_types = [{"name": "verifyingContract", "type": "address"}]
        domain = {"verifyingContract": to_checksum_address(safe_address)}

    base_gas_name = "baseGas" if v >= (1, 0, 0) else "dataGas"
    fields = [
        {"name": base_gas_name if name == "baseGas" else name, "type": type_}
        for name, type_ in SAFE_TX_FIELDS
    ]
    message = {
        "to": to_checksum_address(tx.to),
        "value": tx.value,
        "data": tx.data,
        "operation": int(tx.operation),
        "safeTxGas": tx.safe_tx_gas,
        base_gas_name: tx.base_gas,
        "gasPrice": tx.gas_price,
        "gasToken": to_checksum_address(tx.gas_token),
        "refundReceiver": to_checksum_address(tx.refund_receiver),
        "nonce": tx.nonce,
    }
    return {
        "types": {"EIP712Domain": domain_types, "SafeTx": fields},
        "primaryType": "SafeTx",
        "domain": domain,
        "message": message,
    }


def hash_typed_data(full_message: dict[str, Any]) -> bytes:
    """keccak256(0x19 || 0x01 || domainSeparator || structHash)."""
    signable = encode_typed_data(full_message=full_message)
    return keccak(b"\x19" + signable.version + signable.header + signable.body)


class IWalletRuntime(ABC):
    """Interface of the multisig wallet runtime (create, hash, sign)."""

    @abstractmethod
    async def create_transaction(self, calls: Sequence[CallPayload], nonce: int) -> SafeTransaction:
        """Build one transaction executing calls atomically and in order."""
        ...

    @abstractmethod
    async def get_transaction_hash(self, tx: SafeTransaction) -> str:
        """Return the 0x-prefixed 32-byte transaction hash."""
        ...

    @abstractmethod
    async def sign_hash(self, safe_tx_hash: str, identity: SignerIdentity) -> bytes:
        """Sign the hash with the given identity."""
        ...


class SafeWalletRuntime(IWalletRuntime):
    """Safe runtime for one Safe on one chain."""

    def __init__(
        self,
        settings: Settings,
        rpc_client: RpcClient | None = None,
        *,
        retry_policy: RetryPolicy | None = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the runtime.

        Args:
            settings: Application settings (uses settings.safe).
            rpc_client: Used to read VERSION() when SAFE__VERSION is not set.
            retry_policy: Applied to the VERSION() read; a single attempt when None.
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        if not settings.safe.address:
            raise ConfigurationError("SAFE__ADDRESS is required")
        self._safe_address = to_checksum_address(settings.safe.address)
        self._chain_id = settings.safe.chain_id
        self._multisend_address = to_checksum_address(settings.safe.multisend_address)
        self._version: str | None = settings.safe.version
        self._rpc = rpc_client
        self._retry = retry_policy or RetryPolicy(max_attempts=1)
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def safe_address(self) -> str:
        return self._safe_address

    @property
    def chain_id(self) -> int:
        return self._chain_id

    async def get_version(self) -> str:
        """Safe contract version; read once from the chain unless configured."""
        if self._version is None:
            if self._rpc is None:
                raise ConfigurationError("Safe version unknown: set SAFE__VERSION or RPC__URL")
            rpc = self._rpc
            version = await self._retry.run(
                "get_safe_version",
                lambda: rpc.get_safe_version(self._safe_address),
            )
            parse_version(version)
            self._version = version
            self._logger.info(
                "wallet_safe_version_loaded",
                safe_masked=mask_address(self._safe_address),
                safe_version=self._version,
            )
        return self._version

    async def create_transaction(self, calls: Sequence[CallPayload], nonce: int) -> SafeTransaction:
        """One call is proposed as-is; several are packed into a MultiSend delegatecall."""
        if not calls:
            raise ValueError("cannot create a transaction without calls")
        if nonce < 0:
            raise ValueError("nonce must be >= 0")
        if len(calls) == 1:
            call = calls[0]
            return SafeTransaction(
                to=to_checksum_address(call.to),
                value=call.value,
                data=call.data,
                operation=call.operation,
                nonce=nonce,
                call_count=1,
            )
        return SafeTransaction(
            to=self._multisend_address,
            value=0,
            data=encode_multisend(calls),
            operation=Operation.DELEGATE_CALL,
            nonce=nonce,
            call_count=len(calls),
        )

    async def get_transaction_hash(self, tx: SafeTransaction) -> str:
        version = await self.get_version()
        typed = safe_tx_typed_data(
            tx,
            safe_address=self._safe_address,
            chain_id=self._chain_id,
            version=version,
        )
        return "0x" + hash_typed_data(typed).hex()

    async def sign_hash(self, safe_tx_hash: str, identity: SignerIdentity) -> bytes:
        return identity.sign_hash(bytes.fromhex(safe_tx_hash.removeprefix("0x")))
