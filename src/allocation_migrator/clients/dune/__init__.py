"""Dune Analytics data source."""

from allocation_migrator.clients.dune.dune_client import DuneClient, SourceRow
from allocation_migrator.clients.dune.schema import QueryResultsSchema

__all__ = ["DuneClient", "QueryResultsSchema", "SourceRow"]
