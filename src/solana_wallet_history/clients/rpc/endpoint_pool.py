# -*- coding: utf-8 -*-
"""Pool of RPC endpoints with success/error scoring and circular rotation."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from solana_wallet_history.exceptions import MissingRequiredConfigError


@dataclass(slots=True, eq=False)
class EndpointRecord:
    """One RPC backend and its live counters. Identity is the object itself."""

    url: str
    success_count: int = 0
    error_count: int = 0

    @property
    def score(self) -> float:
        """Success ratio in [0, 1]; 0 for an endpoint never used."""
        return self.success_count / max(self.success_count + self.error_count, 1)


class EndpointPool:
    """Holds endpoints, a current-index pointer and per-endpoint counters.

    No endpoint is ever excluded: a failing endpoint is rotated past on each
    failure. Pointer and counters are guarded by one asyncio.Lock so concurrent
    requests never race on rotation.
    """

    def __init__(
        self,
        urls: Sequence[str],
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the pool.

        Args:
            urls: Endpoint URLs in preference order (first one is used first).
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).

        Raises:
            MissingRequiredConfigError: If urls is empty.
        """
        cleaned = [u.strip() for u in urls if u and u.strip()]
        if not cleaned:
            raise MissingRequiredConfigError("RPC__ENDPOINTS")
        self._endpoints: list[EndpointRecord] = [EndpointRecord(url=u) for u in cleaned]
        self._index = 0
        self._lock = asyncio.Lock()
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def __len__(self) -> int:
        return len(self._endpoints)

    @property
    def endpoints(self) -> list[EndpointRecord]:
        return list(self._endpoints)

    async def current(self) -> EndpointRecord:
        """Return the endpoint the next call should use."""
        async with self._lock:
            return self._endpoints[self._index]

    async def rotate(self, expected: Optional[EndpointRecord] = None) -> EndpointRecord:
        """Advance the pointer circularly and return the new current endpoint.

        Args:
            expected: If given, rotate only while `expected` is still current, so
                concurrent failures on one endpoint move the pointer once.
        """
        async with self._lock:
            current = self._endpoints[self._index]
            if expected is None or current is expected:
                self._index = (self._index + 1) % len(self._endpoints)
                new = self._endpoints[self._index]
                if new is not current:
                    self._logger.debug(
                        "endpoint_rotated",
                        endpoint_from=current.url,
                        endpoint_to=new.url,
                    )
                return new
            return current

    async def record_success(self, endpoint: EndpointRecord) -> None:
        async with self._lock:
            endpoint.success_count += 1

    async def record_failure(self, endpoint: EndpointRecord) -> None:
        async with self._lock:
            endpoint.error_count += 1

    async def rank(self) -> list[EndpointRecord]:
        """Endpoints ordered by success ratio, best first; ties keep configured order."""
        async with self._lock:
            return sorted(self._endpoints, key=lambda e: e.score, reverse=True)

    async def snapshot(self) -> list[dict[str, Any]]:
        """Diagnostics view of the pool, ranked."""
        async with self._lock:
            current = self._endpoints[self._index]
        return [
            {
                "url": e.url,
                "success_count": e.success_count,
                "error_count": e.error_count,
                "score": round(e.score, 4),
                "current": e is current,
            }
            for e in await self.rank()
        ]
