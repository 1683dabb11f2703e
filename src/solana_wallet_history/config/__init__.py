"""Configuration subpackage."""

from solana_wallet_history.config.config import (
    AppSettings,
    CacheSettings,
    Commitment,
    FallbackMode,
    HistorySettings,
    LoggingSettings,
    RpcSettings,
    Settings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "CacheSettings",
    "Commitment",
    "FallbackMode",
    "HistorySettings",
    "LoggingSettings",
    "RpcSettings",
    "Settings",
    "get_settings",
]
