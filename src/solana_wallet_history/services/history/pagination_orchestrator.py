# -*- coding: utf-8 -*-
"""Pagination orchestrator: crawl enough signatures, decode one page concurrently, sort."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

import structlog
from structlog.contextvars import bound_contextvars

from solana_wallet_history.exceptions import EndpointExhaustedError
from solana_wallet_history.models.page import Page
from solana_wallet_history.models.signature import SignatureRef, SignatureSet
from solana_wallet_history.models.transfer_event import TransferEvent
from solana_wallet_history.services.decoder.decode_result import Skipped, SkipReason, events_of
from solana_wallet_history.utils.validation import mask_address

if TYPE_CHECKING:
    from solana_wallet_history.clients.rpc.executor import ResilientExecutor
    from solana_wallet_history.clients.rpc.rpc_client import SolanaRpcConnection
    from solana_wallet_history.clients.rpc.schema import RawTransactionSchema
    from solana_wallet_history.config import Settings
    from solana_wallet_history.persistence.history_cache import HistoryCache
    from solana_wallet_history.services.crawler.signature_crawler import SignatureCrawler
    from solana_wallet_history.services.decoder.transaction_decoder import TransactionDecoder


class PaginationOrchestrator:
    """Serves bounded pages of decoded events for a wallet.

    With background crawling enabled, a page is served as soon as enough
    signatures are known to fill it; the rest of the history is crawled by a
    background task (one per wallet). Otherwise the full history is crawled
    before the first page is returned.
    """

    def __init__(
        self,
        settings: Settings,
        crawler: SignatureCrawler,
        decoder: TransactionDecoder,
        executor: ResilientExecutor,
        cache: HistoryCache,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            settings: Uses settings.history (concurrency, background crawl, fallback) and rpc.commitment.
            crawler: Signature crawler.
            decoder: Transaction decoder.
            executor: Resilient executor for getTransaction.
            cache: History cache (decoded events per (wallet, signature)).
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._settings = settings
        self._crawler = crawler
        self._decoder = decoder
        self._executor = executor
        self._cache = cache
        self._background: dict[str, asyncio.Task[None]] = {}
        self._logger = get_logger(logger_name or self.__class__.__name__)

    async def get_page(self, wallet: str, page: int, page_size: int) -> Page:
        """Return page `page` (1-based) of `page_size` signatures' events, newest first.

        Raises:
            ValueError: If page or page_size is below 1.
            EndpointExhaustedError: If signatures cannot be crawled and no cached
                history can be served instead.
        """
        if page < 1:
            raise ValueError("page must be >= 1")
        if page_size < 1:
            raise ValueError("page_size must be >= 1")

        wallet = wallet.strip()
        start = (page - 1) * page_size
        end = page * page_size

        with bound_contextvars(
            history_wallet_masked=mask_address(wallet),
            history_page=page,
            history_page_size=page_size,
        ):
            signature_set = await self._ensure_signatures(wallet, end)
            refs = signature_set.refs
            events = await self._decode_refs(wallet, list(refs[start:end]))
            has_more = end < len(refs) or not signature_set.is_complete
            self._logger.debug(
                "history_page_built",
                history_events=len(events),
                history_total_seen=len(refs),
                history_has_more=has_more,
                history_complete=signature_set.is_complete,
            )
            return Page(
                transactions=events,
                has_more=has_more,
                total_seen=len(refs),
                is_complete=signature_set.is_complete,
            )

    async def _ensure_signatures(self, wallet: str, end: int) -> SignatureSet:
        history = self._settings.history
        try:
            if not history.background_crawl:
                return await self._crawler.load_history(wallet)
            # One past the page end, so has_more is exact even mid-crawl.
            signature_set = await self._crawler.load_at_least(wallet, end + 1)
            if not signature_set.is_complete:
                self._schedule_background_crawl(wallet)
            return signature_set
        except EndpointExhaustedError as e:
            if not history.serve_cached_on_failure:
                raise
            cached = await self._cache.get_signature_set(wallet)
            if cached is None or not cached.refs:
                raise
            self._logger.warning(
                "history_serving_cached_signatures",
                history_total_seen=len(cached.refs),
                error_message=str(e),
            )
            return cached

    async def _decode_refs(self, wallet: str, refs: list[SignatureRef]) -> list[TransferEvent]:
        window = self._settings.history.decode_concurrency
        decoded: list[list[TransferEvent]] = []
        for i in range(0, len(refs), window):
            chunk = refs[i : i + window]
            decoded.extend(await asyncio.gather(*(self._events_for(wallet, ref) for ref in chunk)))
        flat = [event for events in decoded for event in events]
        # sorted() is stable with reverse=True: equal timestamps keep signature order.
        return sorted(flat, key=lambda e: e.timestamp, reverse=True)

    async def _fetch_transaction(self, signature: str) -> RawTransactionSchema | None:
        commitment = self._settings.rpc.commitment

        async def request(conn: SolanaRpcConnection) -> RawTransactionSchema | None:
            return await conn.get_transaction(signature, commitment=commitment)

        return await self._executor.execute(request, "getTransaction")

    async def _events_for(self, wallet: str, ref: SignatureRef) -> list[TransferEvent]:
        cached = await self._cache.get_events(wallet, ref.signature)
        if cached is not None:
            return cached

        if ref.failed:
            # Failed on-chain: no balance moved except fees, nothing to fetch.
            return await self._cache.put_events(wallet, ref.signature, [])

        try:
            raw = await self._fetch_transaction(ref.signature)
        except EndpointExhaustedError as e:
            self._logger.warning(
                "history_transaction_unavailable",
                signature=ref.signature,
                error_message=str(e),
            )
            return []

        result = self._decoder.decode_result(raw, ref, wallet)
        if isinstance(result, Skipped):
            self._logger.debug(
                "history_transaction_skipped",
                signature=ref.signature,
                skip_reason=result.reason.value,
            )
            if result.reason is SkipReason.MISSING:
                # Not cached: another endpoint may still return the record later.
                return []
        return await self._cache.put_events(wallet, ref.signature, events_of(result))

    def _schedule_background_crawl(self, wallet: str) -> None:
        task = self._background.get(wallet)
        if task is not None and not task.done():
            return
        task = asyncio.create_task(self._background_crawl(wallet), name=f"crawl:{wallet}")
        self._background[wallet] = task
        task.add_done_callback(lambda t: self._forget_task(wallet, t))

    def _forget_task(self, wallet: str, task: asyncio.Task[None]) -> None:
        if self._background.get(wallet) is task:
            del self._background[wallet]

    async def _background_crawl(self, wallet: str) -> None:
        with bound_contextvars(history_wallet_masked=mask_address(wallet)):
            try:
                signature_set = await self._crawler.load_history(wallet)
            except EndpointExhaustedError as e:
                self._logger.warning(
                    "history_background_crawl_failed",
                    error_message=str(e),
                )
                return
            except Exception as e:
                self._logger.exception("history_background_crawl_error", error=str(e))
                return
            self._logger.debug(
                "history_background_crawl_done",
                history_total_seen=len(signature_set.refs),
            )

    def background_task(self, wallet: str) -> asyncio.Task[None] | None:
        """Running background crawl for wallet, if any."""
        return self._background.get(wallet.strip())

    async def aclose(self) -> None:
        """Cancel background crawls. Progress they already saved is kept."""
        tasks = list(self._background.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._background.clear()
