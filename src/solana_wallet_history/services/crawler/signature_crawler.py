"""Signature crawler: walks a wallet's ledger history backward in batches until exhaustion."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog
from structlog.contextvars import bound_contextvars

from solana_wallet_history.models.signature import SignatureRef, SignatureSet
from solana_wallet_history.utils.validation import mask_address

if TYPE_CHECKING:
    from solana_wallet_history.clients.rpc.executor import ResilientExecutor
    from solana_wallet_history.clients.rpc.rpc_client import SolanaRpcConnection
    from solana_wallet_history.clients.rpc.schema import SignatureInfoSchema
    from solana_wallet_history.config import Settings
    from solana_wallet_history.persistence.history_cache import HistoryCache


class SignatureCrawler:
    """Builds and extends the cached SignatureSet of a wallet.

    Each batch is requested `before` the oldest known signature. Progress is
    saved after every non-empty batch, so an interrupted or failed crawl
    resumes where it stopped. The crawl ends after `empty_batch_threshold`
    consecutive empty batches, each served by a different endpoint, since
    endpoints may disagree on how deep their history goes.
    """

    def __init__(
        self,
        settings: Settings,
        executor: ResilientExecutor,
        cache: HistoryCache,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the crawler.

        Args:
            settings: Application settings (uses settings.history and settings.rpc.commitment).
            executor: Resilient executor for getSignaturesForAddress.
            cache: History cache holding signature sets and per-wallet locks.
            get_logger: Logger factory (injected) with default of structlog.get_logger.
            logger_name: Optional logger name (defaults to class name).
        """
        self._settings = settings
        self._executor = executor
        self._cache = cache
        self._batch_size = settings.history.signature_batch_size
        self._empty_threshold = settings.history.empty_batch_threshold
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def load_history(self, wallet: str) -> SignatureSet:
        """Return the wallet's full signature history, crawling whatever is missing.

        A complete cached set is returned without any network call.

        Raises:
            EndpointExhaustedError: If a batch request fails on every endpoint.
                Batches saved before the failure are kept.
        """
        return await self._crawl(wallet.strip(), target=None)

    async def load_at_least(self, wallet: str, count: int) -> SignatureSet:
        """Crawl until at least `count` signatures are known or history is complete."""
        return await self._crawl(wallet.strip(), target=max(0, count))

    @staticmethod
    def _satisfied(signature_set: SignatureSet, target: int | None) -> bool:
        if signature_set.is_complete:
            return True
        return target is not None and len(signature_set.refs) >= target

    async def _fetch_batch(self, wallet: str, before: str | None) -> list[SignatureRef]:
        limit = self._batch_size
        commitment = self._settings.rpc.commitment

        async def request(conn: SolanaRpcConnection) -> list[SignatureInfoSchema]:
            return await conn.get_signatures_for_address(
                wallet, limit=limit, before=before, commitment=commitment
            )

        items = await self._executor.execute(request, "getSignaturesForAddress")
        refs: list[SignatureRef] = []
        for item in items:
            try:
                refs.append(SignatureRef.from_response(dict(item)))
            except ValueError:
                self._logger.debug("crawl_signature_item_skipped", item=item)
        return refs

    async def _crawl(self, wallet: str, *, target: int | None) -> SignatureSet:
        cached = await self._cache.get_signature_set(wallet)
        if cached is not None and self._satisfied(cached, target):
            return cached

        pool = self._executor.pool
        empty_batches = 0
        batches = 0
        with bound_contextvars(
            crawl_wallet_masked=mask_address(wallet),
            crawl_target=target,
        ):
            while True:
                async with self._cache.wallet_lock(wallet):
                    # Re-read under the lock: a concurrent crawl may have advanced the set.
                    current = await self._cache.get_signature_set(wallet) or SignatureSet.empty(wallet)
                    if self._satisfied(current, target):
                        return current

                    batch = await self._fetch_batch(wallet, current.cursor)
                    batches += 1
                    updated, added = current.with_appended(batch)

                    if added:
                        empty_batches = 0
                        await self._cache.save_signature_set(updated)
                        self._logger.debug(
                            "crawl_batch_appended",
                            crawl_batch=batches,
                            crawl_batch_size=len(batch),
                            crawl_added=added,
                            crawl_total=len(updated.refs),
                        )
                        if len(batch) < self._batch_size:
                            # Short batch: maybe the end, but another endpoint may go deeper.
                            await pool.rotate()
                        continue

                    empty_batches += 1
                    if empty_batches >= self._empty_threshold:
                        completed = updated.with_completed()
                        await self._cache.save_signature_set(completed)
                        self._logger.info(
                            "crawl_completed",
                            crawl_batches=batches,
                            crawl_total=len(completed.refs),
                        )
                        return completed

                    self._logger.debug(
                        "crawl_empty_batch",
                        crawl_empty_batches=empty_batches,
                        crawl_empty_threshold=self._empty_threshold,
                    )
                    await pool.rotate()
