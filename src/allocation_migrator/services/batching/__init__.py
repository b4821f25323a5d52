"""Chunking of source rows."""

from allocation_migrator.services.batching.batcher import (
    AdvanceMode,
    Batcher,
    BatchResult,
    IRowSource,
)

__all__ = ["AdvanceMode", "BatchResult", "Batcher", "IRowSource"]
