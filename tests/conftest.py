# -*- coding: utf-8 -*-
"""Shared pytest fixtures for unit tests."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Optional
from unittest.mock import AsyncMock

import pytest

from solana_wallet_history.clients.rpc.endpoint_pool import EndpointPool
from solana_wallet_history.clients.rpc.executor import ResilientExecutor, RetryPolicy, fixed_backoff
from solana_wallet_history.config import Settings
from solana_wallet_history.exceptions import RpcRequestError
from solana_wallet_history.persistence import (
    HistoryCache,
    InMemorySignatureSetRepository,
    InMemoryTransferEventRepository,
)

TEST_ENDPOINTS = "https://rpc-a.test,https://rpc-b.test,https://rpc-c.test"

SYSTEM_PROGRAM = "11111111111111111111111111111111"
TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


class FakeLedger:
    """In-memory ledger answering getSignaturesForAddress/getTransaction like an RPC node.

    Records every signature call as (url, before, limit). Set `failing` to a
    set of URLs (or "all") to make those endpoints raise RpcRequestError.
    """

    def __init__(self, signatures: Optional[list[dict[str, Any]]] = None) -> None:
        self.signatures: list[dict[str, Any]] = list(signatures or [])
        self.transactions: dict[str, Optional[dict[str, Any]]] = {}
        self.signature_calls: list[tuple[str, Optional[str], int]] = []
        self.transaction_calls: list[tuple[str, str]] = []
        self.failing: set[str] | str = set()

    def _check(self, url: str) -> None:
        if self.failing == "all" or url in self.failing:
            raise RpcRequestError("endpoint down", url=url, status_code=503)

    def connection(self, url: str) -> "FakeConnection":
        return FakeConnection(self, url)


class FakeConnection:
    def __init__(self, ledger: FakeLedger, url: str) -> None:
        self._ledger = ledger
        self.url = url

    async def get_signatures_for_address(
        self,
        address: str,
        *,
        limit: int = 1000,
        before: Optional[str] = None,
        commitment: str = "confirmed",
    ) -> list[dict[str, Any]]:
        self._ledger.signature_calls.append((self.url, before, limit))
        self._ledger._check(self.url)
        items = self._ledger.signatures
        start = 0
        if before is not None:
            known = [i.get("signature") for i in items]
            start = known.index(before) + 1 if before in known else len(items)
        return [dict(i) for i in items[start : start + limit]]

    async def get_transaction(self, signature: str, *, commitment: str = "confirmed") -> Any:
        self._ledger.transaction_calls.append((self.url, signature))
        self._ledger._check(self.url)
        return self._ledger.transactions.get(signature)


@pytest.fixture
def wallet() -> str:
    """Default tracked wallet (valid base58 public key)."""
    return "9WzDXwBbmkg8ZTbNMqUxvQRAyrZzDsGYdLVL9zYtAWWM"


@pytest.fixture
def counterparty() -> str:
    """Default other party of a transfer."""
    return "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"


@pytest.fixture
def now_utc() -> datetime:
    """Stable UTC timestamp for deterministic assertions."""
    return datetime(2026, 2, 13, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings_factory() -> Callable[..., Settings]:
    """Build Settings with test endpoints, no backoff and per-section overrides."""

    def _build(**sections: dict[str, Any]) -> Settings:
        rpc = {"endpoints": TEST_ENDPOINTS, "backoff_seconds": 0.0, **sections.pop("rpc", {})}
        history = {"background_crawl": False, **sections.pop("history", {})}
        return Settings.from_env(rpc=rpc, history=history, **sections)

    return _build


@pytest.fixture
def settings(settings_factory: Callable[..., Settings]) -> Settings:
    return settings_factory()


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def signature_items() -> Callable[..., list[dict[str, Any]]]:
    """getSignaturesForAddress items sig-1 (newest) .. sig-n, one second apart."""

    def _build(n: int, *, newest_block_time: int = 1_770_000_000, prefix: str = "sig") -> list[dict[str, Any]]:
        return [
            {
                "signature": f"{prefix}-{i}",
                "slot": 300_000_000 - i,
                "blockTime": newest_block_time - i,
                "err": None,
            }
            for i in range(1, n + 1)
        ]

    return _build


@pytest.fixture
def pool(settings: Settings) -> EndpointPool:
    return EndpointPool(settings.rpc.endpoints)


@pytest.fixture
def fake_sleep() -> AsyncMock:
    return AsyncMock(return_value=None)


@pytest.fixture
def executor(pool: EndpointPool, ledger: FakeLedger, fake_sleep: AsyncMock) -> ResilientExecutor:
    """Executor whose connections are served by the fake ledger."""
    return ResilientExecutor(
        pool,
        http_client=AsyncMock(),
        policy=RetryPolicy(backoff=fixed_backoff(0.0)),
        connection_factory=lambda endpoint: ledger.connection(endpoint.url),  # type: ignore[arg-type,return-value]
        sleep=fake_sleep,
    )


@pytest.fixture
def history_cache() -> HistoryCache:
    """Fresh in-memory history cache per test."""
    return HistoryCache(
        signature_repository=InMemorySignatureSetRepository(maxsize=16),
        event_repository=InMemoryTransferEventRepository(maxsize=1000),
    )


@pytest.fixture
def raw_tx_factory() -> Callable[..., dict[str, Any]]:
    """Build a getTransaction record (json encoding) with easy overrides."""

    def _build(
        *,
        account_keys: list[str],
        pre_balances: list[int],
        post_balances: list[int],
        pre_token_balances: Optional[list[dict[str, Any]]] = None,
        post_token_balances: Optional[list[dict[str, Any]]] = None,
        instructions: Optional[list[dict[str, Any]]] = None,
        inner_instructions: Optional[list[dict[str, Any]]] = None,
        err: Any = None,
        block_time: Optional[int] = 1_770_000_000,
        version: Any = "legacy",
        loaded_addresses: Optional[dict[str, list[str]]] = None,
    ) -> dict[str, Any]:
        meta: dict[str, Any] = {
            "err": err,
            "fee": 5000,
            "preBalances": pre_balances,
            "postBalances": post_balances,
            "preTokenBalances": pre_token_balances or [],
            "postTokenBalances": post_token_balances or [],
            "innerInstructions": inner_instructions or [],
        }
        if loaded_addresses is not None:
            meta["loadedAddresses"] = loaded_addresses
        return {
            "slot": 300_000_000,
            "blockTime": block_time,
            "version": version,
            "meta": meta,
            "transaction": {
                "signatures": ["placeholder"],
                "message": {
                    "accountKeys": account_keys,
                    "instructions": instructions or [],
                    "recentBlockhash": "11111111111111111111111111111111",
                },
            },
        }

    return _build


@pytest.fixture
def token_balance() -> Callable[..., dict[str, Any]]:
    """Build a pre/post token balance entry from a raw integer amount."""

    def _build(account_index: int, owner: str, amount: int, *, mint: str = USDC_MINT, decimals: int = 6) -> dict[str, Any]:
        ui = amount / (10**decimals)
        return {
            "accountIndex": account_index,
            "mint": mint,
            "owner": owner,
            "programId": TOKEN_PROGRAM,
            "uiTokenAmount": {
                "amount": str(amount),
                "decimals": decimals,
                "uiAmount": ui,
                "uiAmountString": str(ui),
            },
        }

    return _build
