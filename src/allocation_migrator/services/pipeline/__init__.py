"""Pipeline driver and run report."""

from allocation_migrator.services.pipeline.driver import PipelineDriver
from allocation_migrator.services.pipeline.dto import (
    ChunkFailure,
    PipelineReport,
    PipelineState,
    ProposedChunk,
)
from allocation_migrator.services.pipeline.preflight import SignerPreflight

__all__ = [
    "ChunkFailure",
    "PipelineDriver",
    "PipelineReport",
    "PipelineState",
    "ProposedChunk",
    "SignerPreflight",
]
