"""Page: a bounded, sorted slice of a wallet's decoded history."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from solana_wallet_history.models.transfer_event import TransferEvent


@dataclass(frozen=True, slots=True)
class Page:
    """Result of one page request. Built per request; never persisted."""

    transactions: list[TransferEvent] = field(default_factory=list)
    """Events of the page, newest first."""
    has_more: bool = False
    total_seen: int = 0
    """Signatures known for the wallet when the page was built."""
    is_complete: bool = True
    """False while the signature crawl is still running in the background."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "transactions": [e.to_dict() for e in self.transactions],
            "hasMore": self.has_more,
            "totalSeen": self.total_seen,
        }
