"""JSON-RPC client for on-chain reads of the Safe contract (eth_call, eth_chainId)."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, cast

import structlog
from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError

from allocation_migrator.exceptions import ConfigurationError, ServiceAPIError
from allocation_migrator.utils.validation import mask_address

if TYPE_CHECKING:
    from allocation_migrator.clients.http import AsyncHttpClient
    from allocation_migrator.config import Settings

# Safe selectors (bytes4(keccak256(...)))
SELECTOR_VERSION = "0xffa1ad74"


class RpcClient:
    """Client for the chain's JSON-RPC endpoint. Used to check the chain id and read the Safe version."""

    def __init__(
        self,
        http_client: AsyncHttpClient,
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the RPC client.

        Args:
            http_client: HTTP client for POST requests (JSON-RPC).
            settings: Configuration (uses settings.rpc.url).
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _rpc_url(self) -> str:
        url = self._settings.rpc.url
        if not url:
            raise ConfigurationError("RPC__URL is not set")
        return url.rstrip("/")

    async def _call(self, method: str, params: list[Any]) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": method,
            "params": params,
        }
        response = await self._http.post(self._rpc_url(), json=payload)
        if not isinstance(response, dict):
            raise ServiceAPIError(
                f"Unexpected RPC response type: {type(response).__name__}",
                url=self._rpc_url(),
            )
        resp_dict = cast(dict[str, Any], response)
        if "error" in resp_dict:
            err = resp_dict["error"]
            if isinstance(err, dict):
                err_d = cast(dict[str, Any], err)
                msg = str(err_d.get("message", err_d))
            else:
                msg = str(err)
            raise ServiceAPIError(f"RPC error: {msg}", url=self._rpc_url())
        return resp_dict.get("result")

    async def chain_id(self) -> int:
        """Return the chain id served by the RPC endpoint."""
        result = await self._call("eth_chainId", [])
        return int(str(result), 16)

    async def verify_chain_id(self, expected: int) -> int:
        """Check that the endpoint serves the chain bound into the SafeTx domain.

        Raises:
            ConfigurationError: If the served chain id differs from expected.
        """
        served = await self.chain_id()
        if served != expected:
            raise ConfigurationError(
                f"RPC__URL serves chain {served} but SAFE__CHAIN_ID is {expected}"
            )
        return served

    async def eth_call(self, to: str, data: str, block: str = "latest") -> str:
        """Perform eth_call (read-only contract call).

        Args:
            to: Contract address (0x...).
            data: Hex-encoded calldata (with 0x prefix).
            block: Block tag (default "latest").

        Returns:
            Hex-encoded result (e.g. "0x...").

        Raises:
            ServiceUnavailableError: On transport errors or 5xx.
            ServiceAPIError: If the RPC response carries an error.
        """
        to_norm = to.strip()
        if not to_norm.startswith("0x"):
            to_norm = "0x" + to_norm
        result = await self._call("eth_call", [{"to": to_norm, "data": data}, block])
        return str(result) if result is not None else "0x"

    async def get_safe_version(self, safe_address: str) -> str:
        """Return the Safe contract's VERSION() string (e.g. "1.3.0")."""
        raw = await self.eth_call(safe_address, SELECTOR_VERSION)
        try:
            (version,) = abi_decode(["string"], bytes.fromhex(raw.removeprefix("0x")))
        except (DecodingError, ValueError) as e:
            # Empty or short result: no Safe at this address on this chain
            raise ServiceAPIError(
                f"VERSION() returned no decodable string for {mask_address(safe_address)}: {raw[:66]!r}",
                url=self._rpc_url(),
                body=raw,
                cause=e,
            ) from e
        self._logger.debug(
            "rpc_safe_version",
            safe_masked=mask_address(safe_address),
            safe_version=version,
        )
        return str(version)
