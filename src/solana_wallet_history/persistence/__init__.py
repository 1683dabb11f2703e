"""Persistence layer (repositories and the history cache)."""

from solana_wallet_history.persistence.history_cache import HistoryCache
from solana_wallet_history.persistence.repositories import (
    ISignatureSetRepository,
    ITransferEventRepository,
    InMemorySignatureSetRepository,
    InMemoryTransferEventRepository,
    JsonFileSignatureSetRepository,
)

__all__ = [
    "HistoryCache",
    "ISignatureSetRepository",
    "ITransferEventRepository",
    "InMemorySignatureSetRepository",
    "InMemoryTransferEventRepository",
    "JsonFileSignatureSetRepository",
]
