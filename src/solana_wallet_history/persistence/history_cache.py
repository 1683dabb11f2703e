# -*- coding: utf-8 -*-
"""History cache: signature sets per wallet and decoded events per (wallet, signature)."""

from __future__ import annotations

import asyncio
import weakref
from collections.abc import Callable
from typing import Any, Optional

import structlog

from solana_wallet_history.models.signature import SignatureSet
from solana_wallet_history.models.transfer_event import TransferEvent
from solana_wallet_history.persistence.repositories.interfaces import (
    ISignatureSetRepository,
    ITransferEventRepository,
)
from solana_wallet_history.utils.validation import mask_address


class HistoryCache:
    """Owns both memo levels and the per-wallet crawl locks.

    Injected into the crawler and the orchestrator instead of module-level maps.
    Signature sets only grow (append + completion); event lists are write-once.
    """

    def __init__(
        self,
        signature_repository: ISignatureSetRepository,
        event_repository: ITransferEventRepository,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the cache.

        Args:
            signature_repository: Storage for SignatureSet per wallet.
            event_repository: Storage for decoded events per (wallet, signature).
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._signatures = signature_repository
        self._events = event_repository
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def wallet_lock(self, wallet: str) -> asyncio.Lock:
        """Lock serializing crawl batches for one wallet."""
        lock = self._locks.get(wallet)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[wallet] = lock
        return lock

    async def get_signature_set(self, wallet: str) -> SignatureSet | None:
        return await self._signatures.get(wallet)

    async def save_signature_set(self, signature_set: SignatureSet) -> None:
        """Store a set, refusing to shrink or un-complete what is already stored."""
        current = await self._signatures.get(signature_set.wallet)
        if current is not None:
            if len(signature_set.refs) < len(current.refs):
                self._logger.warning(
                    "signature_set_shrink_ignored",
                    wallet_masked=mask_address(signature_set.wallet),
                    stored_count=len(current.refs),
                    offered_count=len(signature_set.refs),
                )
                return
            if current.is_complete and not signature_set.is_complete:
                signature_set = signature_set.with_completed()
        await self._signatures.save(signature_set)

    async def get_events(self, wallet: str, signature: str) -> list[TransferEvent] | None:
        return await self._events.get(wallet, signature)

    async def put_events(
        self, wallet: str, signature: str, events: list[TransferEvent]
    ) -> list[TransferEvent]:
        """Write-once store; returns whichever list ends up cached."""
        return await self._events.put_if_absent(wallet, signature, events)
