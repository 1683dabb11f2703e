"""Abstract interface for decoded-event storage keyed by (wallet, signature)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from solana_wallet_history.models.transfer_event import TransferEvent


class ITransferEventRepository(ABC):
    """Interface for memoizing decoded events per (wallet, signature)."""

    @abstractmethod
    async def get(self, wallet: str, signature: str) -> list[TransferEvent] | None:
        """Return cached events (possibly empty), or None when not decoded yet."""
        ...

    @abstractmethod
    async def put_if_absent(
        self, wallet: str, signature: str, events: list[TransferEvent]
    ) -> list[TransferEvent]:
        """Store events unless an entry exists. Returns the entry that is now stored."""
        ...
