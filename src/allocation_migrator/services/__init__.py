"""Pipeline services: encoding, batching, nonce sequencing, proposal, driver, cleanup."""

from allocation_migrator.services.batching import AdvanceMode, Batcher, BatchResult
from allocation_migrator.services.cleanup import CleanupReport, ProposalCleanupService
from allocation_migrator.services.encoding import RowEncoder, encode_row
from allocation_migrator.services.nonce import NonceSequencer
from allocation_migrator.services.pipeline import (
    PipelineDriver,
    PipelineReport,
    PipelineState,
    SignerPreflight,
)
from allocation_migrator.services.proposal import (
    ProposalSubmitter,
    SubmissionResult,
    SubmissionStatus,
    TransactionBuilder,
)

__all__ = [
    "AdvanceMode",
    "BatchResult",
    "Batcher",
    "CleanupReport",
    "NonceSequencer",
    "PipelineDriver",
    "PipelineReport",
    "PipelineState",
    "ProposalCleanupService",
    "ProposalSubmitter",
    "RowEncoder",
    "SignerPreflight",
    "SubmissionResult",
    "SubmissionStatus",
    "TransactionBuilder",
    "encode_row",
]
