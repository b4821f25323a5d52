"""Nonce sequencer: asks the service for the next nonce per chunk and refuses to go backwards."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

import structlog

from allocation_migrator.exceptions import NonceRegressionError
from allocation_migrator.utils.retry import RetryPolicy
from allocation_migrator.utils.validation import mask_address


class INonceSource(Protocol):
    async def get_next_nonce(self, safe_address: str) -> int:
        ...


class NonceSequencer:
    """Assigns one nonce per chunk.

    The service is queried for every chunk, since each accepted proposal moves
    the Safe's next nonce. The last nonce handed out is the high-water mark; the
    service reporting a nonce at or below it means another proposal already
    holds that slot.
    """

    def __init__(
        self,
        nonce_source: INonceSource,
        safe_address: str,
        *,
        retry_policy: RetryPolicy | None = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        self._source = nonce_source
        self._safe_address = safe_address
        self._retry = retry_policy or RetryPolicy(max_attempts=1)
        self._high_water_mark: int | None = None
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def high_water_mark(self) -> int | None:
        return self._high_water_mark

    async def next_nonce(self) -> int:
        """Query the next usable nonce and record it as the new high-water mark.

        Raises:
            NonceRegressionError: If the reported nonce is <= the high-water mark.
            ServiceUnavailableError: If the query keeps failing after retries.
        """
        nonce = int(
            await self._retry.run(
                "next_nonce",
                lambda: self._source.get_next_nonce(self._safe_address),
            )
        )
        mark = self._high_water_mark
        if mark is not None:
            if nonce <= mark:
                self._logger.error(
                    "nonce_regression",
                    safe_masked=mask_address(self._safe_address),
                    nonce_reported=nonce,
                    nonce_high_water_mark=mark,
                )
                raise NonceRegressionError(nonce, mark)
            if nonce > mark + 1:
                self._logger.warning(
                    "nonce_gap",
                    safe_masked=mask_address(self._safe_address),
                    nonce_reported=nonce,
                    nonce_expected=mark + 1,
                )
        self._high_water_mark = nonce
        self._logger.debug("nonce_assigned", nonce=nonce)
        return nonce
