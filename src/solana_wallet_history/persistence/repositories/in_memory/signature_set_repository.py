# -*- coding: utf-8 -*-
"""In-memory signature-set repository (bounded LRU keyed by wallet)."""

from __future__ import annotations

from cachetools import LRUCache

from solana_wallet_history.models.signature import SignatureSet
from solana_wallet_history.persistence.repositories.interfaces.signature_set_repository import (
    ISignatureSetRepository,
)


class InMemorySignatureSetRepository(ISignatureSetRepository):
    """In-memory implementation of ISignatureSetRepository.

    Uses cachetools.LRUCache so memory stays bounded when many wallets are queried;
    an evicted wallet is simply crawled again on its next request.
    """

    def __init__(self, *, maxsize: int = 1024) -> None:
        self._store: LRUCache[str, SignatureSet] = LRUCache(maxsize=max(1, maxsize))

    async def get(self, wallet: str) -> SignatureSet | None:
        return self._store.get(wallet.strip())

    async def save(self, signature_set: SignatureSet) -> None:
        self._store[signature_set.wallet.strip()] = signature_set
