# -*- coding: utf-8 -*-
"""In-memory decoded-event repository (bounded LRU keyed by (wallet, signature))."""

from __future__ import annotations

from cachetools import LRUCache

from solana_wallet_history.models.transfer_event import TransferEvent
from solana_wallet_history.persistence.repositories.interfaces.transfer_event_repository import (
    ITransferEventRepository,
)


def _key(wallet: str, signature: str) -> tuple[str, str]:
    """Normalize key for storage."""
    return (wallet.strip(), signature.strip())


class InMemoryTransferEventRepository(ITransferEventRepository):
    """In-memory implementation of ITransferEventRepository. Entries are write-once."""

    def __init__(self, *, maxsize: int = 100_000) -> None:
        self._store: LRUCache[tuple[str, str], tuple[TransferEvent, ...]] = LRUCache(
            maxsize=max(1, maxsize)
        )

    async def get(self, wallet: str, signature: str) -> list[TransferEvent] | None:
        events = self._store.get(_key(wallet, signature))
        return list(events) if events is not None else None

    async def put_if_absent(
        self, wallet: str, signature: str, events: list[TransferEvent]
    ) -> list[TransferEvent]:
        k = _key(wallet, signature)
        existing = self._store.get(k)
        if existing is not None:
            return list(existing)
        self._store[k] = tuple(events)
        return list(events)
