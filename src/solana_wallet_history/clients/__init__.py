"""HTTP and RPC clients."""

from solana_wallet_history.clients.http import AsyncHttpClient
from solana_wallet_history.clients.rpc import (
    EndpointPool,
    EndpointRecord,
    ResilientExecutor,
    RetryPolicy,
    SolanaRpcConnection,
)

__all__ = [
    "AsyncHttpClient",
    "EndpointPool",
    "EndpointRecord",
    "ResilientExecutor",
    "RetryPolicy",
    "SolanaRpcConnection",
]
