"""History pagination and the list() boundary."""

from solana_wallet_history.services.history.history_service import HistoryService
from solana_wallet_history.services.history.mock_history import mock_events
from solana_wallet_history.services.history.pagination_orchestrator import (
    PaginationOrchestrator,
)

__all__ = [
    "HistoryService",
    "PaginationOrchestrator",
    "mock_events",
]
