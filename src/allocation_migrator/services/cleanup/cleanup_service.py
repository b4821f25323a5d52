# -*- coding: utf-8 -*-
"""Pending-proposal cleanup: deletes queued proposals with a TOTP-windowed DeleteRequest signature."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any

import structlog
from structlog.contextvars import bound_contextvars

from allocation_migrator.exceptions import ProposalDeletionError, ServiceUnavailableError
from allocation_migrator.utils.retry import RetryPolicy
from allocation_migrator.utils.validation import mask_address

if TYPE_CHECKING:
    from allocation_migrator.clients.safe_service import SafeServiceClient
    from allocation_migrator.wallet.signer import SignerIdentity

# The service accepts a signature for the current one-hour window
TOTP_WINDOW_SECONDS = 3600

DELETE_REQUEST_DOMAIN_NAME = "Safe Transaction Service"
DELETE_REQUEST_DOMAIN_VERSION = "1.0"


def totp_window(unix_time: float) -> int:
    return int(unix_time // TOTP_WINDOW_SECONDS)


def delete_request_typed_data(
    safe_tx_hash: str,
    totp: int,
    *,
    chain_id: int,
    safe_address: str,
) -> dict[str, Any]:
    """EIP-712 DeleteRequest message for DELETE /api/v1/multisig-transactions/{hash}/."""
    return {
        "types": {
            "EIP712Domain": [
                {"name": "name", "type": "string"},
                {"name": "version", "type": "string"},
                {"name": "chainId", "type": "uint256"},
                {"name": "verifyingContract", "type": "address"},
            ],
            "DeleteRequest": [
                {"name": "safeTxHash", "type": "bytes32"},
                {"name": "totp", "type": "uint256"},
            ],
        },
        "primaryType": "DeleteRequest",
        "domain": {
            "name": DELETE_REQUEST_DOMAIN_NAME,
            "version": DELETE_REQUEST_DOMAIN_VERSION,
            "chainId": chain_id,
            "verifyingContract": safe_address,
        },
        "message": {
            "safeTxHash": bytes.fromhex(safe_tx_hash.removeprefix("0x")),
            "totp": totp,
        },
    }


@dataclass
class CleanupReport:
    deleted: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    """Pending hashes left alone (proposed by someone else, or already gone)."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ProposalCleanupService:
    """Deletes pending proposals of a Safe, one at a time with a pause in between.

    Only the original proposer (or its delegator) may delete a proposal, and
    only while no owner has confirmed it.
    """

    def __init__(
        self,
        safe_service: SafeServiceClient,
        identity: SignerIdentity,
        *,
        safe_address: str,
        chain_id: int,
        retry_policy: RetryPolicy | None = None,
        pause_seconds: float = 1.0,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        self._service = safe_service
        self._identity = identity
        self._safe_address = safe_address
        self._chain_id = chain_id
        self._retry = retry_policy or RetryPolicy(max_attempts=1)
        self._pause_seconds = pause_seconds
        self._clock = clock
        self._sleep = sleep
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def sign_delete_request(self, safe_tx_hash: str) -> str:
        """Signature (0x hex) over DeleteRequest{safeTxHash, totp} for the current window."""
        typed = delete_request_typed_data(
            safe_tx_hash,
            totp_window(self._clock()),
            chain_id=self._chain_id,
            safe_address=self._safe_address,
        )
        return "0x" + self._identity.sign_typed_data(typed).hex()

    async def delete_pending(self, *, only_own: bool = True) -> CleanupReport:
        """Delete every pending proposal at or above the Safe's current nonce.

        Args:
            only_own: Skip proposals whose proposer is not this signer.

        Returns:
            CleanupReport with deleted and skipped hashes.

        Raises:
            ProposalDeletionError: On the first non-retryable delete failure.
            ServiceUnavailableError: If listing or deleting keeps failing after retries.
        """
        report = CleanupReport()
        with bound_contextvars(safe_masked=mask_address(self._safe_address)):
            info = await self._retry.run(
                "get_safe_info",
                lambda: self._service.get_safe_info(self._safe_address),
            )
            current_nonce = int(info.get("nonce", 0))
            pending = await self._retry.run(
                "list_pending_transactions",
                lambda: self._service.list_pending_transactions(
                    self._safe_address, nonce_gte=current_nonce
                ),
            )
            self._logger.info(
                "cleanup_pending_listed",
                nonce_current=current_nonce,
                pending_count=len(pending),
                only_own=only_own,
            )

            signer = self._identity.address.lower()
            first = True
            for tx in pending:
                safe_tx_hash = str(tx.get("safeTxHash", ""))
                if not safe_tx_hash:
                    continue
                proposer = str(tx.get("proposer") or "").lower()
                if only_own and proposer != signer:
                    self._logger.info(
                        "cleanup_skipped_foreign",
                        safe_tx_hash=safe_tx_hash,
                        nonce=tx.get("nonce"),
                    )
                    report.skipped.append(safe_tx_hash)
                    continue

                if not first and self._pause_seconds > 0:
                    await self._sleep(self._pause_seconds)
                first = False

                deleted = await self._retry.run(
                    "delete_transaction",
                    lambda h=safe_tx_hash: self._delete_once(h),
                )
                if deleted:
                    report.deleted.append(safe_tx_hash)
                else:
                    report.skipped.append(safe_tx_hash)

        self._logger.info(
            "cleanup_finished",
            deleted_count=len(report.deleted),
            skipped_count=len(report.skipped),
        )
        return report

    async def _delete_once(self, safe_tx_hash: str) -> bool:
        """One DELETE attempt. False when the proposal no longer exists."""
        # Signed per attempt so a retry across an hour boundary uses the new window
        signature = self.sign_delete_request(safe_tx_hash)
        response = await self._service.delete_transaction(safe_tx_hash, signature)
        if response.ok:
            self._logger.info("cleanup_deleted", safe_tx_hash=safe_tx_hash)
            return True
        if response.status == 404:
            self._logger.info("cleanup_already_gone", safe_tx_hash=safe_tx_hash)
            return False
        if response.retryable:
            raise ServiceUnavailableError(
                f"DELETE returned {response.status}",
                status_code=response.status,
                body=response.text,
            )
        self._logger.error(
            "cleanup_delete_failed",
            safe_tx_hash=safe_tx_hash,
            http_status_code=response.status,
            http_body=response.text,
            hint=(
                "only the original proposer may delete, the delegate must still be valid, "
                "and the proposal must have no owner confirmations"
            ),
        )
        raise ProposalDeletionError(safe_tx_hash, status_code=response.status, body=response.text)
