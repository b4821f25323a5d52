"""HTTP and API clients."""

from allocation_migrator.clients.dune import DuneClient
from allocation_migrator.clients.http import AsyncHttpClient, HttpResponse
from allocation_migrator.clients.rpc_client import RpcClient
from allocation_migrator.clients.safe_service import SafeServiceClient

__all__ = [
    "AsyncHttpClient",
    "DuneClient",
    "HttpResponse",
    "RpcClient",
    "SafeServiceClient",
]
