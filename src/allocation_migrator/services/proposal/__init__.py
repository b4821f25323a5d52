"""Transaction building, signing and submission."""

from allocation_migrator.services.proposal.dto import SubmissionResult, SubmissionStatus
from allocation_migrator.services.proposal.submitter import (
    ProposalSubmitter,
    build_propose_body,
)
from allocation_migrator.services.proposal.transaction_builder import TransactionBuilder

__all__ = [
    "ProposalSubmitter",
    "SubmissionResult",
    "SubmissionStatus",
    "TransactionBuilder",
    "build_propose_body",
]
