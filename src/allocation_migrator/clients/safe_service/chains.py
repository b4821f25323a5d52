"""Chain id -> Safe Transaction Service base URL.

Adding a chain is a change to TRANSACTION_SERVICE_URLS only.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from allocation_migrator.exceptions import UnsupportedChainError

TRANSACTION_SERVICE_URLS: Mapping[int, str] = MappingProxyType(
    {
        1: "https://safe-transaction-mainnet.safe.global",
        10: "https://safe-transaction-optimism.safe.global",
        100: "https://safe-transaction-gnosis-chain.safe.global",
        137: "https://safe-transaction-polygon.safe.global",
        8453: "https://safe-transaction-base.safe.global",
        42161: "https://safe-transaction-arbitrum.safe.global",
        11155111: "https://safe-transaction-sepolia.safe.global",
    }
)


def transaction_service_url(chain_id: int) -> str:
    """Return the Transaction Service base URL for chain_id.

    Raises:
        UnsupportedChainError: If chain_id is not in the table.
    """
    try:
        return TRANSACTION_SERVICE_URLS[int(chain_id)]
    except KeyError:
        raise UnsupportedChainError(chain_id) from None
