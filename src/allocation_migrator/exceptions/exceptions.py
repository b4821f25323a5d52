"""Custom exceptions for the allocation migration pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from allocation_migrator.services.pipeline.dto import PipelineReport


class MigrationError(Exception):
    """Base exception for allocation-migration errors."""

    pass


class ConfigurationError(MigrationError):
    """Raised when environment configuration is missing or invalid."""

    pass


class MissingRequiredConfigError(ConfigurationError):
    """Raised when one or more required configuration values are missing."""

    def __init__(self, *keys: str) -> None:
        self.keys = tuple(keys)
        super().__init__(f"Missing required configuration: {', '.join(self.keys)}")


class UnsupportedChainError(ConfigurationError):
    """Raised when a chain id has no known Safe Transaction Service endpoint."""

    def __init__(self, chain_id: int) -> None:
        super().__init__(f"Unsupported chain ID: {chain_id}")
        self.chain_id = chain_id


class MalformedRowError(MigrationError):
    """Raised when a source row has no usable previous-recipient address."""

    def __init__(self, message: str, *, field: str | None = None, value: object = None) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class ChunkEncodingError(MigrationError):
    """Raised when any row of a chunk fails to encode. No partial chunk is produced."""

    def __init__(
        self,
        message: str,
        *,
        offset_start: int,
        offset_end: int,
        row_index: int,
        cause: MalformedRowError,
    ) -> None:
        super().__init__(message)
        self.offset_start = offset_start
        self.offset_end = offset_end
        self.row_index = row_index
        self.cause = cause


class DataSourceError(MigrationError):
    """Raised when the analytics data source returns no usable result."""

    pass


class ServiceAPIError(MigrationError):
    """Raised when an HTTP API request fails."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        body: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.body = body
        self.cause = cause


class ServiceUnavailableError(ServiceAPIError):
    """Raised on transport errors, 5xx or 429. Retryable."""

    pass


class NonceRegressionError(MigrationError):
    """Raised when the service reports a nonce at or below one already handed out."""

    def __init__(self, reported: int, high_water_mark: int) -> None:
        super().__init__(
            f"Service reported nonce {reported} but nonce {high_water_mark} was already used; "
            "another proposer may be racing on this Safe"
        )
        self.reported = reported
        self.high_water_mark = high_water_mark


class SubmissionRejectedError(MigrationError):
    """Raised when the coordination service rejects a proposal (4xx)."""

    def __init__(self, reason: str, *, status_code: int | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code


class UnauthorizedSignerError(SubmissionRejectedError):
    """Raised when the signer is not an owner or registered delegate of the Safe."""

    pass


class PipelineAbortedError(MigrationError):
    """Raised when the pipeline stops on an unrecoverable chunk failure."""

    def __init__(self, report: PipelineReport) -> None:
        failure = report.failure
        if failure is not None:
            message = (
                f"Pipeline aborted at rows [{failure.offset_start}, {failure.offset_end}): "
                f"{failure.error_type}: {failure.reason}"
            )
        else:
            message = "Pipeline aborted"
        super().__init__(message)
        self.report = report


class ProposalDeletionError(MigrationError):
    """Raised when a pending proposal cannot be deleted."""

    def __init__(self, safe_tx_hash: str, *, status_code: int | None, body: str | None) -> None:
        super().__init__(f"Delete failed for {safe_tx_hash}: {status_code} - {body}")
        self.safe_tx_hash = safe_tx_hash
        self.status_code = status_code
        self.body = body
