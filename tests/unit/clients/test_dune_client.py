# -*- coding: utf-8 -*-
"""Unit tests for DuneClient."""

from __future__ import annotations

from collections.abc import Callable
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from allocation_migrator.clients.dune.dune_client import DuneClient
from allocation_migrator.config import Settings
from allocation_migrator.exceptions import ConfigurationError, DataSourceError


async def test_get_rows_requests_page_with_query_params(settings_factory: Callable[..., Settings]) -> None:
    rows = [{"grantee": "0x" + "aa" * 20}, {"grantee": "0x" + "bb" * 20}]
    http = SimpleNamespace(get=AsyncMock(return_value={"result": {"rows": rows}}))
    client = DuneClient(http, settings_factory(dune={"api_key": "dk", "query_id": 42}))

    result = await client.get_rows(limit=2, offset=4)

    assert result == rows
    url = http.get.await_args.args[0]
    assert url == "https://api.dune.com/api/v1/query/42/results"
    assert http.get.await_args.kwargs["params"] == {
        "limit": 2,
        "offset": 4,
        "params.daysSinceLastAllocate": 270,
    }
    assert http.get.await_args.kwargs["headers"] == {"X-Dune-API-Key": "dk"}


async def test_empty_page_is_returned_as_empty_list(settings_factory: Callable[..., Settings]) -> None:
    http = SimpleNamespace(get=AsyncMock(return_value={"result": {"rows": []}}))

    assert await DuneClient(http, settings_factory()).get_rows(limit=10, offset=100) == []


@pytest.mark.parametrize("body", [None, [], {}, {"result": None}, {"result": {"metadata": {}}}])
async def test_missing_rows_raise(body: object, settings_factory: Callable[..., Settings]) -> None:
    http = SimpleNamespace(get=AsyncMock(return_value=body))

    with pytest.raises(DataSourceError):
        await DuneClient(http, settings_factory()).get_rows(limit=10, offset=0)


async def test_missing_api_key_is_a_configuration_error(
    settings_factory: Callable[..., Settings],
) -> None:
    http = SimpleNamespace(get=AsyncMock())

    with pytest.raises(ConfigurationError):
        await DuneClient(http, settings_factory(dune={"api_key": None})).get_rows(limit=1, offset=0)

    http.get.assert_not_called()


async def test_non_object_row_raises_instead_of_shortening_page(
    settings_factory: Callable[..., Settings],
) -> None:
    rows = [{"grantee": "0x" + "aa" * 20}, "0x" + "bb" * 20, {"grantee": "0x" + "cc" * 20}]
    http = SimpleNamespace(get=AsyncMock(return_value={"result": {"rows": rows}}))

    with pytest.raises(DataSourceError, match="row 11"):
        await DuneClient(http, settings_factory()).get_rows(limit=3, offset=10)
