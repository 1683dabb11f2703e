# -*- coding: utf-8 -*-
"""Resilient request executor: one logical RPC call, failover across the endpoint pool."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, TypeVar

import structlog
from structlog.contextvars import bound_contextvars

from solana_wallet_history.clients.rpc.rpc_client import SolanaRpcConnection
from solana_wallet_history.exceptions import EndpointExhaustedError, RpcRequestError

if TYPE_CHECKING:
    from solana_wallet_history.clients.http import AsyncHttpClient
    from solana_wallet_history.clients.rpc.endpoint_pool import EndpointPool, EndpointRecord
    from solana_wallet_history.config import Settings

T = TypeVar("T")

RequestFn = Callable[[SolanaRpcConnection], Awaitable[T]]
SleepFn = Callable[[float], Awaitable[Any]]


def fixed_backoff(seconds: float) -> Callable[[int], float]:
    """Backoff function returning the same delay for every attempt."""
    return lambda attempt: seconds


@dataclass(frozen=True)
class RetryPolicy:
    """How many attempts a logical call gets and how long to pause between them."""

    max_attempts: Optional[int] = None
    """None means one attempt per pool endpoint."""
    backoff: Callable[[int], float] = fixed_backoff(0.05)
    """Delay in seconds after failed attempt number `attempt` (0-based)."""

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_attempts=settings.rpc.max_attempts,
            backoff=fixed_backoff(settings.rpc.backoff_seconds),
        )

    def attempts_for(self, pool_size: int) -> int:
        return max(1, self.max_attempts if self.max_attempts is not None else pool_size)

    def delay(self, attempt: int) -> float:
        return max(0.0, self.backoff(attempt))


class ResilientExecutor:
    """Runs a request function against the pool's current endpoint, rotating on failure.

    Worst-case latency is attempts * (per-call timeout + backoff); there is no
    unbounded retry.
    """

    def __init__(
        self,
        pool: EndpointPool,
        http_client: AsyncHttpClient,
        *,
        policy: Optional[RetryPolicy] = None,
        connection_factory: Optional[Callable[[EndpointRecord], SolanaRpcConnection]] = None,
        sleep: SleepFn = asyncio.sleep,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the executor.

        Args:
            pool: Endpoint pool (shared).
            http_client: HTTP client used by connections built for each endpoint.
            policy: Retry policy; defaults to one attempt per endpoint with 50ms pauses.
            connection_factory: Builds a connection for an endpoint (override in tests).
            sleep: Awaitable sleep (inject a fake clock in tests).
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._pool = pool
        self._http = http_client
        self._policy = policy or RetryPolicy()
        self._connection_factory = connection_factory or self._default_connection
        self._sleep = sleep
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def pool(self) -> EndpointPool:
        return self._pool

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def _default_connection(self, endpoint: EndpointRecord) -> SolanaRpcConnection:
        return SolanaRpcConnection(self._http, endpoint.url)

    async def execute(self, request_fn: RequestFn[T], description: str) -> T:
        """Run request_fn with failover.

        Args:
            request_fn: Async callable receiving a connection for the current endpoint.
            description: Human-readable name of the logical call (for logs and errors).

        Returns:
            Whatever request_fn returns on the first successful attempt.

        Raises:
            EndpointExhaustedError: If every attempt failed.
        """
        attempts = self._policy.attempts_for(len(self._pool))
        last_error: Optional[Exception] = None

        with bound_contextvars(rpc_description=description, rpc_max_attempts=attempts):
            for attempt in range(attempts):
                endpoint = await self._pool.current()
                with bound_contextvars(rpc_attempt=attempt + 1, rpc_endpoint=endpoint.url):
                    try:
                        result = await request_fn(self._connection_factory(endpoint))
                    except (RpcRequestError, asyncio.TimeoutError) as e:
                        last_error = e
                        await self._pool.record_failure(endpoint)
                        await self._pool.rotate(expected=endpoint)
                        self._logger.debug(
                            "rpc_attempt_failed",
                            error_type=type(e).__name__,
                            error_message=str(e),
                        )
                        if attempt + 1 < attempts:
                            await self._sleep(self._policy.delay(attempt))
                        continue
                    await self._pool.record_success(endpoint)
                    return result

            self._logger.warning(
                "rpc_endpoints_exhausted",
                rpc_attempts=attempts,
                error_type=type(last_error).__name__ if last_error else None,
                error_message=str(last_error) if last_error else None,
            )
            raise EndpointExhaustedError(description, attempts, last_error=last_error) from last_error
