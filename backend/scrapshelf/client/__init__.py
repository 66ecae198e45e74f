"""Python client for the batched RPC endpoint."""

from scrapshelf.client.batch_client import BatchedRpcClient

__all__ = ["BatchedRpcClient"]
