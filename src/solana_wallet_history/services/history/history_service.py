# -*- coding: utf-8 -*-
"""History service: the list() boundary called by the HTTP layer."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Optional

import structlog

from solana_wallet_history.exceptions import (
    EndpointExhaustedError,
    InvalidAddressError,
    UpstreamUnavailableError,
)
from solana_wallet_history.models.page import Page
from solana_wallet_history.services.history.mock_history import mock_events
from solana_wallet_history.utils.validation import is_solana_address, mask_address

if TYPE_CHECKING:
    from solana_wallet_history.clients.rpc.endpoint_pool import EndpointPool
    from solana_wallet_history.config import Settings
    from solana_wallet_history.services.history.pagination_orchestrator import (
        PaginationOrchestrator,
    )


class HistoryService:
    """Validates requests, delegates to the orchestrator and applies the fallback policy.

    Responses are either a well-formed page dict or a single exception:
    InvalidAddressError (bad wallet, no network call made), ValueError (bad
    paging arguments) or UpstreamUnavailableError (ledger unreachable and
    fallback_mode=error).
    """

    def __init__(
        self,
        settings: Settings,
        orchestrator: PaginationOrchestrator,
        pool: EndpointPool,
        *,
        now: Callable[[], datetime] = lambda: datetime.now(UTC),
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the service.

        Args:
            settings: Uses settings.history (page sizes, fallback_mode).
            orchestrator: Pagination orchestrator.
            pool: Endpoint pool (diagnostics only).
            now: Clock for mock events.
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._settings = settings
        self._orchestrator = orchestrator
        self._pool = pool
        self._now = now
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _page_size(self, page_size: Optional[int]) -> int:
        history = self._settings.history
        if page_size is None:
            page_size = history.default_page_size
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        if page_size > history.max_page_size:
            raise ValueError(f"page_size must be <= {history.max_page_size}")
        return page_size

    async def get_page(self, wallet: str, page: int = 1, page_size: Optional[int] = None) -> Page:
        """Like list(), but returns the Page model."""
        if not is_solana_address(wallet):
            raise InvalidAddressError(wallet, "not a base58 public key")
        if page < 1:
            raise ValueError("page must be >= 1")
        wallet = wallet.strip()
        size = self._page_size(page_size)

        try:
            return await self._orchestrator.get_page(wallet, page, size)
        except EndpointExhaustedError as e:
            mode = self._settings.history.fallback_mode
            self._logger.warning(
                "history_upstream_unavailable",
                wallet_masked=mask_address(wallet),
                fallback_mode=mode,
                error_message=str(e),
            )
            if mode == "empty":
                return Page(transactions=[], has_more=False, total_seen=0, is_complete=False)
            if mode == "mock":
                return self._mock_page(wallet, page, size)
            raise UpstreamUnavailableError(
                "Ledger RPC endpoints are unavailable", cause=e
            ) from e

    async def list(
        self,
        wallet: str,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> dict[str, Any]:
        """Return {"transactions": [...], "hasMore": bool, "totalSeen": int} for a wallet.

        Args:
            wallet: Base58 wallet address.
            page: 1-based page number.
            page_size: Signatures per page; defaults to history.default_page_size.
                Values above history.max_page_size raise ValueError.
        """
        return (await self.get_page(wallet, page, page_size)).to_dict()

    def _mock_page(self, wallet: str, page: int, page_size: int) -> Page:
        events = mock_events(wallet, self._now())
        start = (page - 1) * page_size
        end = page * page_size
        return Page(
            transactions=events[start:end],
            has_more=end < len(events),
            total_seen=len(events),
            is_complete=True,
        )

    async def endpoint_stats(self) -> list[dict[str, Any]]:
        """Ranked endpoint counters for diagnostics."""
        return await self._pool.snapshot()

    async def aclose(self) -> None:
        await self._orchestrator.aclose()
