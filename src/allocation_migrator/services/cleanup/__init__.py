"""Pending-proposal cleanup."""

from allocation_migrator.services.cleanup.cleanup_service import (
    CleanupReport,
    ProposalCleanupService,
    delete_request_typed_data,
    totp_window,
)

__all__ = [
    "CleanupReport",
    "ProposalCleanupService",
    "delete_request_typed_data",
    "totp_window",
]
