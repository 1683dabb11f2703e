"""Repository interfaces (abstractions)."""

from solana_wallet_history.persistence.repositories.interfaces.signature_set_repository import (
    ISignatureSetRepository,
)
from solana_wallet_history.persistence.repositories.interfaces.transfer_event_repository import (
    ITransferEventRepository,
)

__all__ = [
    "ISignatureSetRepository",
    "ITransferEventRepository",
]
