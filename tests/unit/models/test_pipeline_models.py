# -*- coding: utf-8 -*-
"""Unit tests for chunk, cursor, report and error records."""

from __future__ import annotations

import dataclasses

import pytest

from allocation_migrator.exceptions import MissingRequiredConfigError, PipelineAbortedError
from allocation_migrator.models.call_payload import CallPayload
from allocation_migrator.models.chunk import Chunk, PipelineCursor
from allocation_migrator.services.pipeline.dto import (
    ChunkFailure,
    PipelineReport,
    PipelineState,
    ProposedChunk,
)


def test_cursor_advanced_returns_new_cursor() -> None:
    cursor = PipelineCursor(offset=0, limit=1000)

    moved = cursor.advanced(1000)

    assert moved == PipelineCursor(offset=1000, limit=1000)
    assert cursor.offset == 0
    with pytest.raises(dataclasses.FrozenInstanceError):
        cursor.offset = 5  # type: ignore[misc]


def test_chunk_offset_range() -> None:
    calls = tuple(CallPayload(to="0x" + "ee" * 20, data=b"\x00") for _ in range(3))
    chunk = Chunk(calls=calls, offset=10)

    assert len(chunk) == 3
    assert chunk.offset_end == 13
    assert not chunk.is_empty
    assert Chunk(calls=(), offset=10).is_empty


def test_report_next_offset_and_terminal_states() -> None:
    report = PipelineReport()
    assert report.next_offset is None
    assert not report.state.is_terminal

    report.proposed.append(
        ProposedChunk(offset_start=0, offset_end=2, nonce=4, safe_tx_hash="0x01", call_count=2)
    )
    report.state = PipelineState.DONE

    assert report.next_offset == 2
    assert report.succeeded
    assert PipelineState.ABORTED.is_terminal
    assert report.to_dict()["proposed"][0]["nonce"] == 4


def test_pipeline_aborted_error_names_failed_chunk() -> None:
    report = PipelineReport(
        state=PipelineState.ABORTED,
        failure=ChunkFailure(
            offset_start=1000,
            offset_end=2000,
            reason="stale nonce",
            error_type="SubmissionRejectedError",
            nonce=8,
        ),
    )

    error = PipelineAbortedError(report)

    assert "[1000, 2000)" in str(error)
    assert "stale nonce" in str(error)
    assert error.report is report


def test_missing_config_error_lists_keys() -> None:
    error = MissingRequiredConfigError("SAFE__ADDRESS", "RPC__URL")

    assert error.keys == ("SAFE__ADDRESS", "RPC__URL")
    assert "SAFE__ADDRESS, RPC__URL" in str(error)
