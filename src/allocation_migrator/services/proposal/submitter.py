# -*- coding: utf-8 -*-
"""Proposal submitter: one POST per call, response classified into a SubmissionResult."""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional, Protocol

import structlog
from structlog.contextvars import bound_contextvars

from allocation_migrator.clients.safe_service.schema import (
    MultisigTransactionSchema,
    ProposeTransactionBody,
)
from allocation_migrator.exceptions import ServiceAPIError, ServiceUnavailableError
from allocation_migrator.models.proposal import SignedProposal, SignerRole
from allocation_migrator.services.proposal.dto import SubmissionResult, SubmissionStatus
from allocation_migrator.utils.validation import mask_address

if TYPE_CHECKING:
    from allocation_migrator.clients.http import HttpResponse

_UNAUTHORIZED_PATTERN = re.compile(r"not an? (?:owner|delegate)|not (?:a )?valid delegate", re.IGNORECASE)

UNAUTHORIZED_HINTS: dict[SignerRole, str] = {
    SignerRole.DELEGATE: (
        "delegate {sender} is not registered for the Safe "
        "(revoked, expired or never added by an owner)"
    ),
    SignerRole.OWNER: "signer {sender} is not an owner of the Safe",
}


class IProposalService(Protocol):
    async def propose_transaction(self, safe_address: str, body: ProposeTransactionBody) -> HttpResponse:
        ...

    async def get_transaction(self, safe_tx_hash: str) -> Optional[MultisigTransactionSchema]:
        ...


def build_propose_body(proposal: SignedProposal, *, origin: str | None) -> ProposeTransactionBody:
    """Request body for POST /api/v1/safes/{address}/multisig-transactions/."""
    tx = proposal.transaction
    return ProposeTransactionBody(
        to=tx.to,
        value=str(tx.value),
        data=tx.data_hex if tx.data else None,
        operation=int(tx.operation),
        safeTxGas=str(tx.safe_tx_gas),
        baseGas=str(tx.base_gas),
        gasPrice=str(tx.gas_price),
        gasToken=tx.gas_token,
        refundReceiver=tx.refund_receiver,
        nonce=tx.nonce,
        contractTransactionHash=proposal.safe_tx_hash,
        sender=proposal.sender,
        signature=proposal.signature_hex,
        origin=origin,
    )


class ProposalSubmitter:
    """Sends signed proposals to the Safe Transaction Service. Never retries by itself."""

    def __init__(
        self,
        service: IProposalService,
        safe_address: str,
        *,
        origin: str | None = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the submitter.

        Args:
            service: Safe Transaction Service client.
            safe_address: Safe the proposals belong to.
            origin: Optional origin label stored with each proposal.
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._service = service
        self._safe_address = safe_address
        self._origin = origin
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def submit(self, proposal: SignedProposal) -> SubmissionResult:
        """POST the proposal once and classify the outcome.

        2xx is ACCEPTED. A 4xx for a hash the service already holds is also
        ACCEPTED (already_known). Transport errors, 5xx and 429 are
        SERVICE_UNAVAILABLE, as is a 4xx whose hash lookup fails transiently.
        Other 4xx are UNAUTHORIZED or REJECTED.
        """
        with bound_contextvars(
            safe_masked=mask_address(self._safe_address),
            safe_tx_hash=proposal.safe_tx_hash,
            nonce=proposal.nonce,
        ):
            body = build_propose_body(proposal, origin=self._origin)
            try:
                response = await self._service.propose_transaction(self._safe_address, body)
            except ServiceUnavailableError as e:
                self._logger.warning(
                    "proposal_service_unavailable",
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                return SubmissionResult(
                    status=SubmissionStatus.SERVICE_UNAVAILABLE,
                    safe_tx_hash=proposal.safe_tx_hash,
                    reason=str(e),
                )

            if response.ok:
                self._logger.info("proposal_accepted", http_status_code=response.status)
                return SubmissionResult(
                    status=SubmissionStatus.ACCEPTED,
                    safe_tx_hash=proposal.safe_tx_hash,
                    status_code=response.status,
                )

            if response.retryable:
                self._logger.warning(
                    "proposal_service_unavailable",
                    http_status_code=response.status,
                    http_body=response.text[:500],
                )
                return SubmissionResult(
                    status=SubmissionStatus.SERVICE_UNAVAILABLE,
                    safe_tx_hash=proposal.safe_tx_hash,
                    reason=response.text or f"HTTP {response.status}",
                    status_code=response.status,
                )

            try:
                known = await self._already_recorded(proposal.safe_tx_hash)
            except ServiceUnavailableError as e:
                # The 4xx may be a duplicate of an accepted proposal
                self._logger.warning(
                    "proposal_service_unavailable",
                    http_status_code=response.status,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
                return SubmissionResult(
                    status=SubmissionStatus.SERVICE_UNAVAILABLE,
                    safe_tx_hash=proposal.safe_tx_hash,
                    reason=f"hash lookup failed after HTTP {response.status}: {e}",
                    status_code=response.status,
                )
            if known:
                self._logger.info(
                    "proposal_already_known",
                    http_status_code=response.status,
                )
                return SubmissionResult(
                    status=SubmissionStatus.ACCEPTED,
                    safe_tx_hash=proposal.safe_tx_hash,
                    status_code=response.status,
                    already_known=True,
                )

            if response.status in (401, 403) or _UNAUTHORIZED_PATTERN.search(response.text or ""):
                hint = UNAUTHORIZED_HINTS[proposal.role].format(sender=proposal.sender)
                self._logger.error(
                    "proposal_unauthorized",
                    http_status_code=response.status,
                    http_body=response.text,
                    signer_role=proposal.role.value,
                    hint=hint,
                )
                return SubmissionResult(
                    status=SubmissionStatus.UNAUTHORIZED,
                    safe_tx_hash=proposal.safe_tx_hash,
                    reason=f"{hint}: {response.text}",
                    status_code=response.status,
                )

            self._logger.error(
                "proposal_rejected",
                http_status_code=response.status,
                http_body=response.text,
            )
            return SubmissionResult(
                status=SubmissionStatus.REJECTED,
                safe_tx_hash=proposal.safe_tx_hash,
                reason=response.text or f"HTTP {response.status}",
                status_code=response.status,
            )

    async def _already_recorded(self, safe_tx_hash: str) -> bool:
        """True when the service already holds this hash.

        Raises:
            ServiceUnavailableError: If the lookup hits a transient failure.
        """
        try:
            existing = await self._service.get_transaction(safe_tx_hash)
        except ServiceUnavailableError:
            raise
        except ServiceAPIError as e:
            self._logger.warning(
                "proposal_lookup_failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False
        if existing is None:
            return False
        return str(existing.get("safeTxHash", "")).lower() == safe_tx_hash.lower()
