# -*- coding: utf-8 -*-
"""Dependency injection container (dependency-injector)."""

from __future__ import annotations

from dependency_injector import containers, providers

from solana_wallet_history.clients.http import AsyncHttpClient
from solana_wallet_history.clients.rpc import EndpointPool, ResilientExecutor, RetryPolicy
from solana_wallet_history.config import Settings, get_settings
from solana_wallet_history.persistence import (
    HistoryCache,
    ISignatureSetRepository,
    InMemorySignatureSetRepository,
    InMemoryTransferEventRepository,
    JsonFileSignatureSetRepository,
)
from solana_wallet_history.services.crawler import SignatureCrawler
from solana_wallet_history.services.decoder import TransactionDecoder
from solana_wallet_history.services.history import HistoryService, PaginationOrchestrator


def _build_endpoint_pool(settings: Settings) -> EndpointPool:
    return EndpointPool(settings.rpc.endpoints)


def _build_signature_repository(settings: Settings) -> ISignatureSetRepository:
    """JSON files when a persist dir is configured, memory otherwise."""
    cache = settings.cache
    if cache.persist_dir:
        return JsonFileSignatureSetRepository(cache.persist_dir, maxsize=cache.signature_sets_maxsize)
    return InMemorySignatureSetRepository(maxsize=cache.signature_sets_maxsize)


def _build_event_repository(settings: Settings) -> InMemoryTransferEventRepository:
    return InMemoryTransferEventRepository(maxsize=settings.cache.events_maxsize)


class Container(containers.DeclarativeContainer):
    """Application container. Wires settings, RPC access, cache, crawler, decoder and services."""

    config = providers.Callable(get_settings)

    http_client = providers.Singleton(
        AsyncHttpClient,
        settings=config,
    )

    endpoint_pool = providers.Singleton(_build_endpoint_pool, config)

    retry_policy = providers.Singleton(RetryPolicy.from_settings, config)

    executor = providers.Singleton(
        ResilientExecutor,
        pool=endpoint_pool,
        http_client=http_client,
        policy=retry_policy,
    )

    signature_repository = providers.Singleton(_build_signature_repository, config)

    event_repository = providers.Singleton(_build_event_repository, config)

    history_cache = providers.Singleton(
        HistoryCache,
        signature_repository=signature_repository,
        event_repository=event_repository,
    )

    signature_crawler = providers.Singleton(
        SignatureCrawler,
        settings=config,
        executor=executor,
        cache=history_cache,
    )

    transaction_decoder = providers.Singleton(
        TransactionDecoder,
        settings=config,
    )

    pagination_orchestrator = providers.Singleton(
        PaginationOrchestrator,
        settings=config,
        crawler=signature_crawler,
        decoder=transaction_decoder,
        executor=executor,
        cache=history_cache,
    )

    history_service = providers.Singleton(
        HistoryService,
        settings=config,
        orchestrator=pagination_orchestrator,
        pool=endpoint_pool,
    )
