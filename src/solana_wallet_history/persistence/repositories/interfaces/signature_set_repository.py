"""Abstract interface for signature-set storage (in-memory, JSON file, etc.)."""

from __future__ import annotations

from abc import ABC, abstractmethod

from solana_wallet_history.models.signature import SignatureSet


class ISignatureSetRepository(ABC):
    """Interface for persisting crawl state (one SignatureSet per wallet)."""

    @abstractmethod
    async def get(self, wallet: str) -> SignatureSet | None:
        """Return the stored set for wallet, or None if never crawled."""
        ...

    @abstractmethod
    async def save(self, signature_set: SignatureSet) -> None:
        """Store (replace) the set for signature_set.wallet."""
        ...
