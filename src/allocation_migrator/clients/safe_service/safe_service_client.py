# -*- coding: utf-8 -*-
"""Safe Transaction Service client (proposals, pending queue, delegates, deletion)."""

from __future__ import annotations

import structlog
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, cast
from structlog.contextvars import bound_contextvars

from allocation_migrator.clients.safe_service.chains import transaction_service_url
from allocation_migrator.clients.safe_service.schema import (
    DelegateSchema,
    MultisigTransactionSchema,
    PaginatedSchema,
    ProposeTransactionBody,
    SafeInfoSchema,
)
from allocation_migrator.config import Settings
from allocation_migrator.exceptions import ServiceAPIError
from allocation_migrator.utils.validation import mask_address

if TYPE_CHECKING:
    from allocation_migrator.clients.http import AsyncHttpClient, HttpResponse

# Guard against a `next` link loop on the paginated endpoints
MAX_PAGES = 50


class SafeServiceClient:
    """Client for the Safe Transaction Service REST API.

    The base URL comes from SAFE__SERVICE_URL or the chain table; an unknown
    chain id fails at construction, before any request is made.
    """

    def __init__(
        self,
        http_client: "AsyncHttpClient",
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            http_client: Async HTTP client (e.g. AsyncHttpClient).
            settings: Application settings (uses settings.safe).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).

        Raises:
            UnsupportedChainError: If no service URL is configured and the chain id is unknown.
        """
        self._http = http_client
        self._settings = settings
        self._base_url = (
            settings.safe.service_url or transaction_service_url(settings.safe.chain_id)
        ).rstrip("/")
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _headers(self) -> Dict[str, str]:
        api_key = self._settings.safe.api_key
        if api_key:
            return {"Authorization": f"Bearer {api_key}"}
        return {}

    async def get_safe_info(self, safe_address: str) -> SafeInfoSchema:
        """GET /api/v1/safes/{address}/ (nonce, owners, threshold, version)."""
        url = f"{self._base_url}/api/v1/safes/{safe_address}/"
        data = await self._http.get(url, headers=self._headers())
        if not isinstance(data, dict):
            raise ServiceAPIError("Unexpected Safe info response", url=url)
        return cast(SafeInfoSchema, data)

    async def list_pending_transactions(
        self,
        safe_address: str,
        *,
        nonce_gte: Optional[int] = None,
        limit: int = 100,
    ) -> List[MultisigTransactionSchema]:
        """List not-yet-executed multisig transactions, highest nonce first.

        Follows `next` links until the listing is exhausted.
        """
        url: Optional[str] = f"{self._base_url}/api/v1/safes/{safe_address}/multisig-transactions/"
        query: Dict[str, Any] = {
            "executed": "false",
            "ordering": "-nonce",
            "limit": limit,
        }
        if nonce_gte is not None:
            query["nonce__gte"] = nonce_gte
        params: Optional[Dict[str, Any]] = query

        result: List[MultisigTransactionSchema] = []
        pages = 0
        with bound_contextvars(safe_masked=mask_address(safe_address)):
            while url and pages < MAX_PAGES:
                data = await self._http.get(url, params=params, headers=self._headers())
                if not isinstance(data, dict):
                    self._logger.warning(
                        "safe_service_pending_non_dict",
                        response_type=type(data).__name__,
                    )
                    break
                page = cast(PaginatedSchema, data)
                for item in page.get("results", []) or []:
                    if isinstance(item, dict):
                        result.append(cast(MultisigTransactionSchema, item))
                url = page.get("next")
                # `next` already carries the query string
                params = None
                pages += 1
        return result

    async def get_next_nonce(self, safe_address: str) -> int:
        """Next usable nonce: on-chain nonce, raised past every pending proposal."""
        info = await self.get_safe_info(safe_address)
        current = int(info.get("nonce", 0))
        pending = await self.list_pending_transactions(safe_address, nonce_gte=current)
        if pending:
            highest = max(int(tx.get("nonce", 0)) for tx in pending)
            if highest >= current:
                return highest + 1
        return current

    async def get_transaction(self, safe_tx_hash: str) -> Optional[MultisigTransactionSchema]:
        """GET /api/v1/multisig-transactions/{hash}/. Returns None when the hash is unknown (404)."""
        url = f"{self._base_url}/api/v1/multisig-transactions/{safe_tx_hash}/"
        response = await self._http.request("GET", url, headers=self._headers())
        if response.status == 404:
            return None
        if not response.ok or not isinstance(response.data, dict):
            raise ServiceAPIError(
                f"GET failed with status {response.status}: {url}",
                url=url,
                status_code=response.status,
                body=response.text,
            )
        return cast(MultisigTransactionSchema, response.data)

    async def propose_transaction(
        self,
        safe_address: str,
        body: ProposeTransactionBody,
    ) -> "HttpResponse":
        """POST a signed proposal. Returns the raw response; callers classify the status."""
        url = f"{self._base_url}/api/v1/safes/{safe_address}/multisig-transactions/"
        return await self._http.request(
            "POST", url, json=cast(Dict[str, Any], body), headers=self._headers()
        )

    async def delete_transaction(self, safe_tx_hash: str, signature: str) -> "HttpResponse":
        """DELETE a pending proposal with the proposer's DeleteRequest signature."""
        url = f"{self._base_url}/api/v1/multisig-transactions/{safe_tx_hash}/"
        return await self._http.request(
            "DELETE",
            url,
            json={"safeTxHash": safe_tx_hash, "signature": signature},
            headers=self._headers(),
        )

    async def get_delegates(self, safe_address: str) -> List[DelegateSchema]:
        """GET /api/v2/delegates/?safe={address}."""
        url = f"{self._base_url}/api/v2/delegates/"
        data = await self._http.get(url, params={"safe": safe_address}, headers=self._headers())
        if not isinstance(data, dict):
            return []
        page = cast(PaginatedSchema, data)
        return [
            cast(DelegateSchema, d)
            for d in page.get("results", []) or []
            if isinstance(d, dict)
        ]
