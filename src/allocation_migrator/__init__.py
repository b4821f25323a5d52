"""GIVback allocation migration: chunked Safe proposals of transferAllocation calls."""

from allocation_migrator.config import get_settings
from allocation_migrator.DI import Container
from allocation_migrator.services import PipelineDriver, ProposalCleanupService

__version__ = "0.1.0"
__all__ = [
    "Container",
    "PipelineDriver",
    "ProposalCleanupService",
    "get_settings",
]
