# -*- coding: utf-8 -*-
"""Repositories: interfaces (abstractions) and implementations (in_memory, json_file)."""

from solana_wallet_history.persistence.repositories.interfaces import (
    ISignatureSetRepository,
    ITransferEventRepository,
)
from solana_wallet_history.persistence.repositories.in_memory import (
    InMemorySignatureSetRepository,
    InMemoryTransferEventRepository,
)
from solana_wallet_history.persistence.repositories.json_file import (
    JsonFileSignatureSetRepository,
)

__all__ = [
    "ISignatureSetRepository",
    "ITransferEventRepository",
    "InMemorySignatureSetRepository",
    "InMemoryTransferEventRepository",
    "JsonFileSignatureSetRepository",
]
