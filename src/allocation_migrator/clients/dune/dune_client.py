# -*- coding: utf-8 -*-
"""Dune Analytics client: latest results of a saved query, paginated by limit/offset."""

from __future__ import annotations

import structlog
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, cast
from structlog.contextvars import bound_contextvars

from allocation_migrator.clients.dune.schema import QueryResultsSchema
from allocation_migrator.config import Settings
from allocation_migrator.exceptions import ConfigurationError, DataSourceError

if TYPE_CHECKING:
    from allocation_migrator.clients.http import AsyncHttpClient

SourceRow = Mapping[str, Any]


class DuneClient:
    """Client for the Dune query results endpoint (GET /api/v1/query/{id}/results)."""

    def __init__(
        self,
        http_client: "AsyncHttpClient",
        settings: Settings,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the client.

        Args:
            http_client: Async HTTP client (e.g. AsyncHttpClient).
            settings: Application settings (uses settings.dune).
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._http = http_client
        self._settings = settings
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _base_url(self) -> str:
        return self._settings.dune.api_host.rstrip("/")

    def _headers(self) -> Dict[str, str]:
        api_key = self._settings.dune.api_key
        if not api_key:
            raise ConfigurationError("DUNE__API_KEY is not set")
        return {"X-Dune-API-Key": api_key}

    def _query_parameters(self) -> Dict[str, Any]:
        # Query parameters are passed as params.<name>
        return {"params.daysSinceLastAllocate": self._settings.dune.days_since_last_allocate}

    async def get_rows(self, *, limit: int, offset: int) -> List[SourceRow]:
        """Fetch one page of the query's latest result.

        Args:
            limit: Maximum number of rows to return.
            offset: Index of the first row.

        Returns:
            Rows in result order; empty when offset is past the end.

        Raises:
            DataSourceError: If the response has no result rows, or a row is not an object.
            ServiceUnavailableError: On transport errors, 5xx or 429.
        """
        query_id = self._settings.dune.query_id
        with bound_contextvars(
            dune_query_id=query_id,
            dune_limit=limit,
            dune_offset=offset,
        ):
            url = f"{self._base_url()}/api/v1/query/{query_id}/results"
            params: Dict[str, Any] = {
                "limit": limit,
                "offset": offset,
                **self._query_parameters(),
            }
            data = await self._http.get(url, params=params, headers=self._headers())
            if not isinstance(data, dict):
                raise DataSourceError("No data returned from Dune query.")
            body = cast(QueryResultsSchema, data)
            result = body.get("result")
            if not result or result.get("rows") is None:
                raise DataSourceError("No data returned from Dune query.")
            rows = result.get("rows", [])
            for index, row in enumerate(rows):
                if not isinstance(row, dict):
                    raise DataSourceError(
                        f"Dune row {offset + index} is not an object: {type(row).__name__}"
                    )
            self._logger.debug("dune_rows_fetched", dune_row_count=len(rows))
            return cast(List[SourceRow], rows)
