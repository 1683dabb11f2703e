"""Solana RPC access: endpoint pool, resilient executor, per-endpoint connection."""

from solana_wallet_history.clients.rpc.endpoint_pool import EndpointPool, EndpointRecord
from solana_wallet_history.clients.rpc.executor import (
    ResilientExecutor,
    RetryPolicy,
    fixed_backoff,
)
from solana_wallet_history.clients.rpc.rpc_client import (
    MAX_SIGNATURES_PER_CALL,
    SolanaRpcConnection,
)
from solana_wallet_history.clients.rpc.schema import (
    RawTransactionSchema,
    SignatureInfoSchema,
    TokenBalanceSchema,
)

__all__ = [
    "EndpointPool",
    "EndpointRecord",
    "MAX_SIGNATURES_PER_CALL",
    "RawTransactionSchema",
    "ResilientExecutor",
    "RetryPolicy",
    "SignatureInfoSchema",
    "SolanaRpcConnection",
    "TokenBalanceSchema",
    "fixed_backoff",
]
