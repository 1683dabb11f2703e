# -*- coding: utf-8 -*-
"""Unit tests for PaginationOrchestrator."""

from __future__ import annotations

from collections.abc import Callable
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest

from solana_wallet_history.clients.rpc.executor import ResilientExecutor
from solana_wallet_history.config import Settings
from solana_wallet_history.exceptions import EndpointExhaustedError
from solana_wallet_history.models.signature import SignatureSet
from solana_wallet_history.persistence import HistoryCache
from solana_wallet_history.services.crawler import SignatureCrawler
from solana_wallet_history.services.decoder import TransactionDecoder
from solana_wallet_history.services.history import PaginationOrchestrator

SYSTEM_PROGRAM = "11111111111111111111111111111111"
TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
SOL = 1_000_000_000


def _orchestrator(settings: Settings, executor: ResilientExecutor, cache: HistoryCache) -> PaginationOrchestrator:
    return PaginationOrchestrator(
        settings,
        crawler=SignatureCrawler(settings, executor, cache),
        decoder=TransactionDecoder(settings),
        executor=executor,
        cache=cache,
    )


@pytest.fixture
def native_tx(
    raw_tx_factory: Callable[..., dict[str, Any]],
    wallet: str,
    counterparty: str,
) -> Callable[..., dict[str, Any]]:
    """Native transfer of `lamports` into the wallet (negative: out of it)."""

    def _build(lamports: int, block_time: int) -> dict[str, Any]:
        return raw_tx_factory(
            account_keys=[wallet, counterparty, SYSTEM_PROGRAM],
            pre_balances=[10 * SOL, 10 * SOL, 1],
            post_balances=[10 * SOL + lamports, 10 * SOL - lamports, 1],
            instructions=[{"programIdIndex": 2, "accounts": [1, 0], "data": ""}],
            block_time=block_time,
        )

    return _build


def _seed(ledger: Any, items: list[dict[str, Any]], native_tx: Callable[..., dict[str, Any]]) -> None:
    ledger.signatures = items
    for i, item in enumerate(items, start=1):
        ledger.transactions[item["signature"]] = native_tx(i * 1_000_000, item["blockTime"])


async def test_page_beyond_history_is_empty_and_final(
    settings: Settings,
    executor: ResilientExecutor,
    history_cache: HistoryCache,
    ledger: Any,
    signature_items: Callable[..., list[dict[str, Any]]],
    native_tx: Callable[..., dict[str, Any]],
    wallet: str,
) -> None:
    _seed(ledger, signature_items(5), native_tx)

    page = await _orchestrator(settings, executor, history_cache).get_page(wallet, 2, 10)

    assert page.to_dict() == {"transactions": [], "hasMore": False, "totalSeen": 5}
    assert ledger.transaction_calls == []


async def test_native_and_token_transfers_sorted_newest_first(
    settings: Settings,
    executor: ResilientExecutor,
    history_cache: HistoryCache,
    ledger: Any,
    signature_items: Callable[..., list[dict[str, Any]]],
    native_tx: Callable[..., dict[str, Any]],
    raw_tx_factory: Callable[..., dict[str, Any]],
    token_balance: Callable[..., dict[str, Any]],
    wallet: str,
    counterparty: str,
) -> None:
    ledger.signatures = signature_items(2)
    wallet_ata = "3Kq1vhGz5n3hX6Gm1jW9Jr8bWxkXkz1o3QYx2cYk2Vy5"
    dest_ata = "8Qbu3Yp4Ch3sZ2k4VVZc6ZyqU1fVQv1xP2n3K1rTq9Lm"
    ledger.transactions["sig-1"] = raw_tx_factory(
        account_keys=[wallet, wallet_ata, dest_ata, counterparty, TOKEN_PROGRAM],
        pre_balances=[SOL, 1, 1, SOL, 1],
        post_balances=[SOL, 1, 1, SOL, 1],
        pre_token_balances=[token_balance(1, wallet, 10_000_000), token_balance(2, counterparty, 0)],
        post_token_balances=[token_balance(1, wallet, 8_000_000), token_balance(2, counterparty, 2_000_000)],
        block_time=1_770_000_000,
    )
    ledger.transactions["sig-2"] = native_tx(SOL // 2, 1_770_000_500)

    page = await _orchestrator(settings, executor, history_cache).get_page(wallet, 1, 10)

    summary = [(e["type"], e["token"], e["amount"]) for e in page.to_dict()["transactions"]]
    assert summary == [("received", "SOL", "0.5"), ("sent", "USDC", "2.000000")]
    assert [e.id for e in page.transactions] == [
        "sig-2",
        "sig-1_EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    ]


async def test_pages_cover_history_without_overlap(
    settings: Settings,
    executor: ResilientExecutor,
    history_cache: HistoryCache,
    ledger: Any,
    signature_items: Callable[..., list[dict[str, Any]]],
    native_tx: Callable[..., dict[str, Any]],
    wallet: str,
) -> None:
    _seed(ledger, signature_items(25), native_tx)
    orchestrator = _orchestrator(settings, executor, history_cache)

    pages = [await orchestrator.get_page(wallet, n, 10) for n in (1, 2, 3)]

    ids = [e.id for p in pages for e in p.transactions]
    assert ids == [f"sig-{i}" for i in range(1, 26)]
    assert [p.has_more for p in pages] == [True, True, False]
    assert all(p.total_seen == 25 for p in pages)


async def test_decoded_events_are_served_from_cache(
    settings: Settings,
    executor: ResilientExecutor,
    history_cache: HistoryCache,
    ledger: Any,
    signature_items: Callable[..., list[dict[str, Any]]],
    native_tx: Callable[..., dict[str, Any]],
    wallet: str,
) -> None:
    _seed(ledger, signature_items(3), native_tx)
    orchestrator = _orchestrator(settings, executor, history_cache)

    first = await orchestrator.get_page(wallet, 1, 10)
    calls = len(ledger.transaction_calls)
    second = await orchestrator.get_page(wallet, 1, 10)

    assert calls == 3
    assert len(ledger.transaction_calls) == calls
    assert first.transactions == second.transactions


async def test_failed_signatures_are_not_fetched(
    settings: Settings,
    executor: ResilientExecutor,
    history_cache: HistoryCache,
    ledger: Any,
    signature_items: Callable[..., list[dict[str, Any]]],
    native_tx: Callable[..., dict[str, Any]],
    wallet: str,
) -> None:
    items = signature_items(2)
    items[0]["err"] = {"InstructionError": [0, "Custom"]}
    _seed(ledger, items, native_tx)

    page = await _orchestrator(settings, executor, history_cache).get_page(wallet, 1, 10)

    assert [e.id for e in page.transactions] == ["sig-2"]
    assert [sig for _, sig in ledger.transaction_calls] == ["sig-2"]
    assert await history_cache.get_events(wallet, "sig-1") == []


async def test_missing_transactions_are_retried_on_next_request(
    settings: Settings,
    executor: ResilientExecutor,
    history_cache: HistoryCache,
    ledger: Any,
    signature_items: Callable[..., list[dict[str, Any]]],
    native_tx: Callable[..., dict[str, Any]],
    wallet: str,
) -> None:
    items = signature_items(1)
    ledger.signatures = items
    orchestrator = _orchestrator(settings, executor, history_cache)

    empty = await orchestrator.get_page(wallet, 1, 10)
    ledger.transactions["sig-1"] = native_tx(SOL, items[0]["blockTime"])
    filled = await orchestrator.get_page(wallet, 1, 10)

    assert empty.transactions == []
    assert [e.amount for e in filled.transactions] == ["1"]


async def test_background_crawl_serves_first_page_early(
    settings_factory: Callable[..., Settings],
    executor: ResilientExecutor,
    history_cache: HistoryCache,
    ledger: Any,
    signature_items: Callable[..., list[dict[str, Any]]],
    native_tx: Callable[..., dict[str, Any]],
    wallet: str,
) -> None:
    settings = settings_factory(history={"background_crawl": True, "signature_batch_size": 2})
    _seed(ledger, signature_items(5), native_tx)
    orchestrator = _orchestrator(settings, executor, history_cache)

    page = await orchestrator.get_page(wallet, 1, 1)

    assert [e.id for e in page.transactions] == ["sig-1"]
    assert page.has_more is True
    assert page.total_seen == 2
    task = orchestrator.background_task(wallet)
    if task is not None:
        await task

    signature_set = await history_cache.get_signature_set(wallet)
    assert signature_set is not None
    assert signature_set.is_complete is True
    assert len(signature_set.refs) == 5
    await orchestrator.aclose()


async def test_serves_cached_signatures_when_endpoints_fail(
    settings: Settings,
    executor: ResilientExecutor,
    history_cache: HistoryCache,
    ledger: Any,
    signature_items: Callable[..., list[dict[str, Any]]],
    native_tx: Callable[..., dict[str, Any]],
    wallet: str,
) -> None:
    _seed(ledger, signature_items(5), native_tx)
    await SignatureCrawler(settings, executor, history_cache).load_at_least(wallet, 1)
    ledger.failing = "all"

    page = await _orchestrator(settings, executor, history_cache).get_page(wallet, 1, 10)

    assert page.total_seen == 5
    assert page.has_more is True
    assert page.is_complete is False
    assert page.transactions == []


async def test_failure_without_cached_history_propagates(
    settings_factory: Callable[..., Settings],
    executor: ResilientExecutor,
    history_cache: HistoryCache,
    ledger: Any,
    wallet: str,
) -> None:
    settings = settings_factory(history={"serve_cached_on_failure": False})
    ledger.failing = "all"

    with pytest.raises(EndpointExhaustedError):
        await _orchestrator(settings, executor, history_cache).get_page(wallet, 1, 10)


@pytest.mark.parametrize(("page", "page_size"), [(0, 10), (1, 0)])
async def test_rejects_non_positive_paging(
    settings: Settings,
    executor: ResilientExecutor,
    history_cache: HistoryCache,
    wallet: str,
    page: int,
    page_size: int,
) -> None:
    with pytest.raises(ValueError):
        await _orchestrator(settings, executor, history_cache).get_page(wallet, page, page_size)


async def test_unexpected_background_crawl_error_is_logged_not_raised(
    settings_factory: Callable[..., Settings],
    executor: ResilientExecutor,
    history_cache: HistoryCache,
    wallet: str,
) -> None:
    settings = settings_factory(history={"background_crawl": True})
    crawler = SimpleNamespace(
        load_at_least=AsyncMock(return_value=SignatureSet.empty(wallet)),
        load_history=AsyncMock(side_effect=OSError("disk full")),
    )
    orchestrator = PaginationOrchestrator(
        settings,
        crawler=crawler,  # type: ignore[arg-type]
        decoder=TransactionDecoder(settings),
        executor=executor,
        cache=history_cache,
    )

    page = await orchestrator.get_page(wallet, 1, 10)
    task = orchestrator.background_task(wallet)
    assert task is not None
    await task

    assert page.has_more is True
    assert task.exception() is None
    crawler.load_history.assert_awaited_once_with(wallet)
    await orchestrator.aclose()
