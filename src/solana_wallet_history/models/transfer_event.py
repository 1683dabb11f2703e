"""TransferEvent: one normalized asset movement for a wallet.

Identity: id. Native events use the transaction signature; token events use
signature + "_" + mint, since one transaction can move SOL and several tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from solana_wallet_history.utils.timefmt import to_iso8601


class Direction(str, Enum):
    """Direction of a transfer relative to the tracked wallet."""

    RECEIVED = "received"
    SENT = "sent"

    @classmethod
    def from_delta(cls, delta: Decimal) -> Direction:
        return cls.RECEIVED if delta > 0 else cls.SENT


@dataclass(frozen=True, slots=True)
class TransferEvent:
    """Asset movement derived from a balance delta. Immutable once decoded."""

    id: str
    wallet: str
    direction: Direction
    amount: str
    """Positive magnitude as a decimal string; direction carries the sign."""
    asset_symbol: str
    counterparty: str
    """Counterparty in display form (first4...last4) or Unknown."""
    timestamp: datetime
    """Aware UTC datetime from block time (or decode time when absent)."""
    signature: str
    mint: str | None = None
    """Token mint; None for native SOL."""

    @property
    def is_native(self) -> bool:
        return self.mint is None

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict in the shape served to the HTTP layer."""
        return {
            "id": self.id,
            "wallet": self.wallet,
            "type": self.direction.value,
            "amount": self.amount,
            "token": self.asset_symbol,
            "address": self.counterparty,
            "timestamp": to_iso8601(self.timestamp),
            "signature": self.signature,
            "mint": self.mint,
        }
