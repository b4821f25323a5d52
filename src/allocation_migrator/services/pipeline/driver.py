# -*- coding: utf-8 -*-
"""Pipeline driver: fetch -> encode -> sequence -> submit -> advance, one chunk at a time."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog
from structlog.contextvars import bound_contextvars

from allocation_migrator.exceptions import (
    ChunkEncodingError,
    MigrationError,
    PipelineAbortedError,
    ServiceUnavailableError,
    SubmissionRejectedError,
    UnauthorizedSignerError,
)
from allocation_migrator.models.chunk import Chunk, PipelineCursor
from allocation_migrator.services.pipeline.dto import (
    ChunkFailure,
    PipelineReport,
    PipelineState,
    ProposedChunk,
)
from allocation_migrator.services.proposal.dto import SubmissionResult, SubmissionStatus
from allocation_migrator.utils.retry import RetryPolicy

if TYPE_CHECKING:
    from allocation_migrator.models.proposal import SignedProposal
    from allocation_migrator.services.batching.batcher import Batcher
    from allocation_migrator.services.nonce.nonce_sequencer import NonceSequencer
    from allocation_migrator.services.pipeline.preflight import SignerPreflight
    from allocation_migrator.services.proposal.submitter import ProposalSubmitter
    from allocation_migrator.services.proposal.transaction_builder import TransactionBuilder
    from allocation_migrator.wallet.signer import SignerIdentity

_FAILURE_TYPES: dict[SubmissionStatus, str] = {
    SubmissionStatus.REJECTED: SubmissionRejectedError.__name__,
    SubmissionStatus.UNAUTHORIZED: UnauthorizedSignerError.__name__,
    SubmissionStatus.SERVICE_UNAVAILABLE: ServiceUnavailableError.__name__,
}


class PipelineDriver:
    """Runs the chunked proposal pipeline for one signer identity.

    Chunks are proposed strictly one after another: each nonce depends on the
    Safe's pending queue after the previous acceptance. The first unrecoverable
    error ends the run in ABORTED; chunks accepted before it stay proposed.
    """

    def __init__(
        self,
        batcher: Batcher,
        sequencer: NonceSequencer,
        builder: TransactionBuilder,
        submitter: ProposalSubmitter,
        identity: SignerIdentity,
        *,
        chunk_size: int = 1000,
        start_offset: int = 0,
        retry_policy: RetryPolicy | None = None,
        max_chunks: int | None = None,
        preflight: SignerPreflight | None = None,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the driver.

        Args:
            batcher: Source of encoded chunks.
            sequencer: Nonce source for each chunk.
            builder: Builds and signs one transaction per chunk.
            submitter: Posts signed proposals.
            identity: Signer (delegate or owner).
            chunk_size: Rows requested per chunk.
            start_offset: Source offset of the first row to process.
            retry_policy: Bounds re-submission on SERVICE_UNAVAILABLE.
            max_chunks: Stop after this many accepted chunks (None: no cap).
            preflight: Optional signer check run before the first fetch.
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if start_offset < 0:
            raise ValueError("start_offset must not be negative")
        self._batcher = batcher
        self._sequencer = sequencer
        self._builder = builder
        self._submitter = submitter
        self._identity = identity
        self._chunk_size = chunk_size
        self._start_offset = start_offset
        self._retry = retry_policy or RetryPolicy(max_attempts=1)
        self._max_chunks = max_chunks
        self._preflight = preflight
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def run(self, stop_event: asyncio.Event | None = None) -> PipelineReport:
        """Process chunks until the source is exhausted, a stop is requested, or a chunk fails.

        Args:
            stop_event: Checked between chunks; once set, the run ends in DONE with stopped=True.

        Returns:
            PipelineReport with the final state, every accepted chunk and the failure if any.

        Raises:
            UnauthorizedSignerError: If the preflight check fails.
        """
        if self._preflight is not None:
            await self._preflight.check(self._identity)

        report = PipelineReport()
        cursor = PipelineCursor(offset=self._start_offset, limit=self._chunk_size)
        self._logger.info(
            "pipeline_started",
            chunk_size=self._chunk_size,
            start_offset=self._start_offset,
            max_chunks=self._max_chunks,
            signer_role=self._identity.role.value,
            signer=self._identity.address,
        )

        while not report.state.is_terminal:
            if stop_event is not None and stop_event.is_set():
                report.stopped = True
                self._transition(report, PipelineState.DONE, reason="stop_requested")
                break
            if self._max_chunks is not None and report.proposed_count >= self._max_chunks:
                report.stopped = True
                self._transition(report, PipelineState.DONE, reason="max_chunks_reached")
                break
            with bound_contextvars(chunk_offset=cursor.offset):
                cursor = await self._process_chunk(report, cursor)

        self._logger.info(
            "pipeline_finished",
            state=report.state.value,
            chunks_proposed=report.proposed_count,
            stopped=report.stopped,
            next_offset=report.next_offset,
        )
        return report

    async def run_or_raise(self, stop_event: asyncio.Event | None = None) -> PipelineReport:
        """Like run(), but raises PipelineAbortedError when the run ends in ABORTED."""
        report = await self.run(stop_event)
        if report.state is PipelineState.ABORTED:
            raise PipelineAbortedError(report)
        return report

    async def _process_chunk(self, report: PipelineReport, cursor: PipelineCursor) -> PipelineCursor:
        """One loop iteration. Returns the cursor for the next iteration."""
        offset_end = cursor.offset + cursor.limit
        self._transition(report, PipelineState.FETCHING, cursor_limit=cursor.limit)
        try:
            batch = await self._batcher.next_chunk(cursor)
        except ChunkEncodingError as e:
            self._transition(report, PipelineState.ENCODING)
            self._abort(report, e.offset_start, e.offset_end, str(e), type(e).__name__)
            return cursor
        except MigrationError as e:
            self._abort(report, cursor.offset, offset_end, str(e), type(e).__name__)
            return cursor

        chunk = batch.chunk
        if chunk.is_empty:
            self._transition(report, PipelineState.DONE, reason="source_exhausted")
            return cursor

        self._transition(report, PipelineState.ENCODING, call_count=len(chunk))
        self._transition(report, PipelineState.SEQUENCING)
        try:
            nonce = await self._sequencer.next_nonce()
        except MigrationError as e:
            self._abort(report, chunk.offset, chunk.offset_end, str(e), type(e).__name__)
            return cursor

        try:
            proposal = await self._builder.build_and_sign(chunk, nonce, self._identity)
        except MigrationError as e:
            self._abort(report, chunk.offset, chunk.offset_end, str(e), type(e).__name__, nonce=nonce)
            return cursor

        result = await self._submit(report, proposal)
        if not result.accepted:
            self._abort(
                report,
                chunk.offset,
                chunk.offset_end,
                result.reason or result.status.value,
                _FAILURE_TYPES[result.status],
                nonce=nonce,
                status_code=result.status_code,
            )
            return cursor

        self._transition(report, PipelineState.ADVANCING)
        self._record(report, chunk, proposal, result)
        if batch.is_last:
            self._transition(report, PipelineState.DONE, reason="last_chunk")
        return batch.next_cursor

    async def _submit(self, report: PipelineReport, proposal: SignedProposal) -> SubmissionResult:
        """Submit, re-entering SUBMITTING on SERVICE_UNAVAILABLE until attempts run out."""
        attempt = 1
        while True:
            self._transition(
                report,
                PipelineState.SUBMITTING,
                nonce=proposal.nonce,
                safe_tx_hash=proposal.safe_tx_hash,
                submit_attempt=attempt,
            )
            result = await self._submitter.submit(proposal)
            if not result.retryable or attempt >= self._retry.max_attempts:
                return result
            self._logger.warning(
                "pipeline_submit_retry",
                nonce=proposal.nonce,
                submit_attempt=attempt,
                retry_delay_seconds=self._retry.delay_for(attempt),
                reason=result.reason,
            )
            await self._retry.wait(attempt)
            attempt += 1

    def _record(
        self,
        report: PipelineReport,
        chunk: Chunk,
        proposal: SignedProposal,
        result: SubmissionResult,
    ) -> None:
        proposed = ProposedChunk(
            offset_start=chunk.offset,
            offset_end=chunk.offset_end,
            nonce=proposal.nonce,
            safe_tx_hash=proposal.safe_tx_hash,
            call_count=len(chunk),
            already_known=result.already_known,
        )
        report.proposed.append(proposed)
        self._logger.info(
            "pipeline_chunk_proposed",
            offset_start=proposed.offset_start,
            offset_end=proposed.offset_end,
            nonce=proposed.nonce,
            safe_tx_hash=proposed.safe_tx_hash,
            call_count=proposed.call_count,
            already_known=proposed.already_known,
        )

    def _abort(
        self,
        report: PipelineReport,
        offset_start: int,
        offset_end: int,
        reason: str,
        error_type: str,
        *,
        nonce: int | None = None,
        status_code: int | None = None,
    ) -> None:
        report.failure = ChunkFailure(
            offset_start=offset_start,
            offset_end=offset_end,
            reason=reason,
            error_type=error_type,
            nonce=nonce,
            status_code=status_code,
        )
        self._transition(report, PipelineState.ABORTED)
        self._logger.error(
            "pipeline_chunk_failed",
            offset_start=offset_start,
            offset_end=offset_end,
            nonce=nonce,
            error_type=error_type,
            error_message=reason,
            http_status_code=status_code,
            chunks_proposed=report.proposed_count,
        )

    def _transition(self, report: PipelineReport, state: PipelineState, **context: Any) -> None:
        previous = report.state
        report.state = state
        self._logger.info(
            "pipeline_state_changed",
            state_from=previous.value,
            state_to=state.value,
            **context,
        )
