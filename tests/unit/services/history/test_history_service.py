# -*- coding: utf-8 -*-
"""Unit tests for HistoryService."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest

from solana_wallet_history.clients.rpc.endpoint_pool import EndpointPool
from solana_wallet_history.clients.rpc.executor import ResilientExecutor
from solana_wallet_history.config import Settings
from solana_wallet_history.exceptions import (
    EndpointExhaustedError,
    InvalidAddressError,
    UpstreamUnavailableError,
)
from solana_wallet_history.models.page import Page
from solana_wallet_history.models.transfer_event import Direction, TransferEvent
from solana_wallet_history.persistence import HistoryCache
from solana_wallet_history.services.crawler import SignatureCrawler
from solana_wallet_history.services.decoder import TransactionDecoder
from solana_wallet_history.services.history import HistoryService, PaginationOrchestrator

SYSTEM_PROGRAM = "11111111111111111111111111111111"
SOL = 1_000_000_000


def _service(settings: Settings, orchestrator: SimpleNamespace, now: datetime) -> HistoryService:
    return HistoryService(
        settings,
        orchestrator,  # type: ignore[arg-type]
        EndpointPool(settings.rpc.endpoints),
        now=lambda: now,
    )


def _orchestrator(**kwargs: object) -> SimpleNamespace:
    return SimpleNamespace(get_page=AsyncMock(**kwargs), aclose=AsyncMock())


@pytest.mark.parametrize(
    "address",
    ["", "   ", "not-a-wallet", "0x2d27b6e21b3d4d7c9a43fdf58f12345678907706", "9WzDXwBbmkg8ZTbNMqUx"],
)
async def test_invalid_address_is_rejected_before_any_call(
    settings: Settings, now_utc: datetime, address: str
) -> None:
    orchestrator = _orchestrator(return_value=Page())

    with pytest.raises(InvalidAddressError):
        await _service(settings, orchestrator, now_utc).list(address)

    orchestrator.get_page.assert_not_awaited()


async def test_list_returns_serialized_page(settings: Settings, now_utc: datetime, wallet: str) -> None:
    event = TransferEvent(
        id="sig-1",
        wallet=wallet,
        direction=Direction.RECEIVED,
        amount="0.5",
        asset_symbol="SOL",
        counterparty="7xKX...gAsU",
        timestamp=now_utc,
        signature="sig-1",
    )
    orchestrator = _orchestrator(return_value=Page([event], has_more=True, total_seen=31, is_complete=True))

    result = await _service(settings, orchestrator, now_utc).list(f"  {wallet} ")

    assert result == {
        "transactions": [
            {
                "id": "sig-1",
                "wallet": wallet,
                "type": "received",
                "amount": "0.5",
                "token": "SOL",
                "address": "7xKX...gAsU",
                "timestamp": "2026-02-13T12:00:00.000Z",
                "signature": "sig-1",
                "mint": None,
            }
        ],
        "hasMore": True,
        "totalSeen": 31,
    }
    orchestrator.get_page.assert_awaited_once_with(wallet, 1, 30)


async def test_page_size_above_maximum_is_rejected(settings: Settings, now_utc: datetime, wallet: str) -> None:
    orchestrator = _orchestrator(return_value=Page())

    with pytest.raises(ValueError):
        await _service(settings, orchestrator, now_utc).list(wallet, page=3, page_size=101)

    orchestrator.get_page.assert_not_awaited()


async def test_large_pages_cover_history_exactly_once(
    settings_factory: Callable[..., Settings],
    executor: ResilientExecutor,
    history_cache: HistoryCache,
    ledger: Any,
    signature_items: Callable[..., list[dict[str, Any]]],
    raw_tx_factory: Callable[..., dict[str, Any]],
    now_utc: datetime,
    wallet: str,
    counterparty: str,
) -> None:
    settings = settings_factory(history={"max_page_size": 150})
    ledger.signatures = signature_items(300)
    for item in ledger.signatures:
        ledger.transactions[item["signature"]] = raw_tx_factory(
            account_keys=[wallet, counterparty, SYSTEM_PROGRAM],
            pre_balances=[10 * SOL, 10 * SOL, 1],
            post_balances=[11 * SOL, 9 * SOL, 1],
            instructions=[{"programIdIndex": 2, "accounts": [1, 0], "data": ""}],
            block_time=item["blockTime"],
        )
    orchestrator = PaginationOrchestrator(
        settings,
        crawler=SignatureCrawler(settings, executor, history_cache),
        decoder=TransactionDecoder(settings),
        executor=executor,
        cache=history_cache,
    )
    service = HistoryService(settings, orchestrator, EndpointPool(settings.rpc.endpoints), now=lambda: now_utc)

    first = await service.list(wallet, page=1, page_size=150)
    second = await service.list(wallet, page=2, page_size=150)

    ids = [e["id"] for e in first["transactions"] + second["transactions"]]
    assert len(ids) == 300
    assert set(ids) == {f"sig-{i}" for i in range(1, 301)}
    assert first["hasMore"] is True
    assert second["hasMore"] is False
    assert second["totalSeen"] == 300


@pytest.mark.parametrize(("page", "page_size"), [(0, None), (-1, 10), (1, 0)])
async def test_invalid_paging_raises_value_error(
    settings: Settings, now_utc: datetime, wallet: str, page: int, page_size: int | None
) -> None:
    orchestrator = _orchestrator(return_value=Page())

    with pytest.raises(ValueError):
        await _service(settings, orchestrator, now_utc).list(wallet, page=page, page_size=page_size)


async def test_unreachable_ledger_raises_by_default(settings: Settings, now_utc: datetime, wallet: str) -> None:
    orchestrator = _orchestrator(side_effect=EndpointExhaustedError("getSignaturesForAddress", 3))

    with pytest.raises(UpstreamUnavailableError) as exc_info:
        await _service(settings, orchestrator, now_utc).list(wallet)

    assert isinstance(exc_info.value.cause, EndpointExhaustedError)


async def test_unreachable_ledger_empty_fallback(
    settings_factory: Callable[..., Settings], now_utc: datetime, wallet: str
) -> None:
    settings = settings_factory(history={"fallback_mode": "empty"})
    orchestrator = _orchestrator(side_effect=EndpointExhaustedError("getSignaturesForAddress", 3))

    result = await _service(settings, orchestrator, now_utc).list(wallet)

    assert result == {"transactions": [], "hasMore": False, "totalSeen": 0}


async def test_unreachable_ledger_mock_fallback_is_paginated(
    settings_factory: Callable[..., Settings], now_utc: datetime, wallet: str
) -> None:
    settings = settings_factory(history={"fallback_mode": "mock"})
    orchestrator = _orchestrator(side_effect=EndpointExhaustedError("getSignaturesForAddress", 3))
    service = _service(settings, orchestrator, now_utc)

    first = await service.list(wallet, page=1, page_size=2)
    second = await service.list(wallet, page=2, page_size=2)

    assert [e["id"] for e in first["transactions"]] == ["mock-1", "mock-2"]
    assert first["hasMore"] is True
    assert first["totalSeen"] == 4
    assert [e["id"] for e in second["transactions"]] == ["mock-3", "mock-4"]
    assert second["hasMore"] is False
    assert all(e["wallet"] == wallet for e in first["transactions"])


async def test_endpoint_stats_and_close(settings: Settings, now_utc: datetime) -> None:
    orchestrator = _orchestrator(return_value=Page())
    service = _service(settings, orchestrator, now_utc)

    stats = await service.endpoint_stats()
    await service.aclose()

    assert [row["url"] for row in stats] == settings.rpc.endpoints
    orchestrator.aclose.assert_awaited_once()
