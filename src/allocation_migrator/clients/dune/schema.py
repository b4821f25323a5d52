"""Dune query results API response types."""

from __future__ import annotations

from typing import Any, TypedDict


class ResultMetadataSchema(TypedDict, total=False):
    """`result.metadata` of GET /query/{id}/results."""

    column_names: list[str]
    row_count: int
    total_row_count: int
    result_set_bytes: int
    datapoint_count: int


class ExecutionResultSchema(TypedDict, total=False):
    """`result` of GET /query/{id}/results."""

    rows: list[dict[str, Any]]
    metadata: ResultMetadataSchema


class QueryResultsSchema(TypedDict, total=False):
    """GET /api/v1/query/{id}/results body. Keys match API response (snake_case)."""

    execution_id: str
    query_id: int
    state: str
    is_execution_finished: bool
    result: ExecutionResultSchema
    next_offset: int
    next_uri: str
