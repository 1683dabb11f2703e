"""Solana wallet history: resilient RPC crawling, transaction decoding and pagination."""

from solana_wallet_history.config import get_settings
from solana_wallet_history.DI import Container
from solana_wallet_history.services.history import HistoryService, PaginationOrchestrator

__all__ = [
    "Container",
    "HistoryService",
    "PaginationOrchestrator",
    "get_settings",
]
