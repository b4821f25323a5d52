"""Batcher: fetches one page of rows, encodes it into a chunk and advances the cursor."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

import structlog

from allocation_migrator.exceptions import ChunkEncodingError, MalformedRowError
from allocation_migrator.models.call_payload import CallPayload
from allocation_migrator.models.chunk import Chunk, PipelineCursor
from allocation_migrator.services.encoding.row_encoder import RowEncoder
from allocation_migrator.utils.retry import RetryPolicy


class IRowSource(Protocol):
    """Paged analytics data source. Repeated calls with the same paging return the same rows."""

    async def get_rows(self, *, limit: int, offset: int) -> list[Mapping[str, Any]]:
        ...


class AdvanceMode(str, Enum):
    """How far the cursor moves after a page."""

    ROWS_RETURNED = "rows_returned"
    """offset += number of rows actually returned."""
    FIXED_LIMIT = "fixed_limit"
    """offset += limit, whatever was returned (legacy behaviour)."""


@dataclass(frozen=True, slots=True)
class BatchResult:
    chunk: Chunk
    next_cursor: PipelineCursor
    is_last: bool
    """True when no further page should be requested."""


class Batcher:
    """Turns pages of the data source into chunks of encoded calls."""

    def __init__(
        self,
        source: IRowSource,
        encoder: RowEncoder,
        *,
        recipient: str,
        contract: str,
        advance_mode: AdvanceMode | str = AdvanceMode.ROWS_RETURNED,
        retry_policy: RetryPolicy | None = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the batcher.

        Args:
            source: Data source exposing get_rows(limit=, offset=).
            encoder: Row encoder.
            recipient: New recipient for every allocation.
            contract: Token distro contract address.
            advance_mode: Cursor advancement rule.
            retry_policy: Applied to each fetch; a single attempt when None.
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._source = source
        self._encoder = encoder
        self._recipient = recipient
        self._contract = contract
        self._advance_mode = AdvanceMode(advance_mode)
        self._retry = retry_policy or RetryPolicy(max_attempts=1)
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def next_chunk(self, cursor: PipelineCursor) -> BatchResult:
        """Fetch `cursor.limit` rows at `cursor.offset` and encode them.

        Returns:
            BatchResult. An empty chunk with is_last=True means the source is exhausted.

        Raises:
            ChunkEncodingError: If any row fails to encode (the whole chunk is dropped).
            ServiceUnavailableError: If the fetch keeps failing after retries.
        """
        rows = await self._retry.run(
            "fetch_rows",
            lambda: self._source.get_rows(limit=cursor.limit, offset=cursor.offset),
        )
        self._logger.info(
            "batcher_rows_fetched",
            cursor_offset=cursor.offset,
            cursor_limit=cursor.limit,
            row_count=len(rows),
        )
        if not rows:
            return BatchResult(
                chunk=Chunk(calls=(), offset=cursor.offset),
                next_cursor=cursor,
                is_last=True,
            )

        calls: list[CallPayload] = []
        for index, row in enumerate(rows):
            try:
                calls.append(self._encoder.encode(row, self._recipient, self._contract))
            except MalformedRowError as e:
                self._logger.error(
                    "batcher_row_malformed",
                    cursor_offset=cursor.offset,
                    row_index=cursor.offset + index,
                    error_message=str(e),
                )
                raise ChunkEncodingError(
                    f"row {cursor.offset + index} could not be encoded: {e}",
                    offset_start=cursor.offset,
                    offset_end=cursor.offset + len(rows),
                    row_index=cursor.offset + index,
                    cause=e,
                ) from e

        step = len(rows) if self._advance_mode is AdvanceMode.ROWS_RETURNED else cursor.limit
        return BatchResult(
            chunk=Chunk(calls=tuple(calls), offset=cursor.offset),
            next_cursor=cursor.advanced(step),
            is_last=len(rows) < cursor.limit,
        )
