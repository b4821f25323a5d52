"""Chunk and PipelineCursor: batching and pagination state."""

from __future__ import annotations

from dataclasses import dataclass

from allocation_migrator.models.call_payload import CallPayload


@dataclass(frozen=True, slots=True)
class PipelineCursor:
    """Position in the data source. Process-local; a restart begins at offset 0."""

    offset: int = 0
    limit: int = 1000

    def advanced(self, by: int) -> PipelineCursor:
        """Return a copy moved forward by `by` rows."""
        return PipelineCursor(offset=self.offset + by, limit=self.limit)


@dataclass(frozen=True, slots=True)
class Chunk:
    """Ordered calls proposed together as one Safe transaction.

    Order is source order. An empty chunk means there is nothing to propose.
    """

    calls: tuple[CallPayload, ...]
    offset: int
    """Source offset of the first row."""

    def __len__(self) -> int:
        return len(self.calls)

    @property
    def is_empty(self) -> bool:
        return not self.calls

    @property
    def offset_end(self) -> int:
        """Exclusive end of the source rows covered by this chunk."""
        return self.offset + len(self.calls)
