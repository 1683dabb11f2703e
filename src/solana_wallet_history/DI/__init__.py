"""Dependency injection."""

from solana_wallet_history.DI.container import Container

__all__ = ["Container"]
