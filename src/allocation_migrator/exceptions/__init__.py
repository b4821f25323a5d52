"""Exceptions subpackage."""

from allocation_migrator.exceptions.exceptions import (
    ChunkEncodingError,
    ConfigurationError,
    DataSourceError,
    MalformedRowError,
    MigrationError,
    MissingRequiredConfigError,
    NonceRegressionError,
    PipelineAbortedError,
    ProposalDeletionError,
    ServiceAPIError,
    ServiceUnavailableError,
    SubmissionRejectedError,
    UnauthorizedSignerError,
    UnsupportedChainError,
)

__all__ = [
    "ChunkEncodingError",
    "ConfigurationError",
    "DataSourceError",
    "MalformedRowError",
    "MigrationError",
    "MissingRequiredConfigError",
    "NonceRegressionError",
    "PipelineAbortedError",
    "ProposalDeletionError",
    "ServiceAPIError",
    "ServiceUnavailableError",
    "SubmissionRejectedError",
    "UnauthorizedSignerError",
    "UnsupportedChainError",
]
