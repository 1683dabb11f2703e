"""In-memory repository implementations."""

from solana_wallet_history.persistence.repositories.in_memory.signature_set_repository import (
    InMemorySignatureSetRepository,
)
from solana_wallet_history.persistence.repositories.in_memory.transfer_event_repository import (
    InMemoryTransferEventRepository,
)

__all__ = [
    "InMemorySignatureSetRepository",
    "InMemoryTransferEventRepository",
]
