# -*- coding: utf-8 -*-
"""Domain models."""

from allocation_migrator.models.call_payload import CallPayload, Operation
from allocation_migrator.models.chunk import Chunk, PipelineCursor
from allocation_migrator.models.proposal import SignedProposal, SignerRole
from allocation_migrator.models.safe_transaction import ZERO_ADDRESS, SafeTransaction

__all__ = [
    "CallPayload",
    "Chunk",
    "Operation",
    "PipelineCursor",
    "SafeTransaction",
    "SignedProposal",
    "SignerRole",
    "ZERO_ADDRESS",
]
