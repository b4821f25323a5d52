"""JSON-RPC client."""

from allocation_migrator.clients.rpc_client.rpc_client import RpcClient

__all__ = ["RpcClient"]
