# -*- coding: utf-8 -*-
"""Configuration loaded from environment via Pydantic Settings.

Nested env vars use <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, RPC__ENDPOINTS.
"""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

FallbackMode = Literal["error", "empty", "mock"]
Commitment = Literal["confirmed", "finalized"]

DEFAULT_RPC_ENDPOINTS = ",".join(
    [
        "https://api.mainnet-beta.solana.com",
        "https://solana-rpc.publicnode.com",
        "https://rpc.ankr.com/solana",
    ]
)


class AppSettings(BaseSettings):
    """General application configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    app_name: str = "solana-wallet-history"
    service_name: Optional[str] = None
    service_version: Optional[str] = None
    environment: Literal["development", "test", "production"] = "development"


class LoggingSettings(BaseSettings):
    """Structured logging configuration for structlog/stdlib/Logfire."""

    model_config = SettingsConfigDict(extra="ignore")

    # Per-target levels (only the 5 standard levels)
    console_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    logfire_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Local outputs
    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "logs/wallet_history.log"
    # TimedRotatingFileHandler: when to rotate (S/M/H/D/W0–W6/midnight), interval, backups to keep
    log_file_when: Literal[
        "S", "M", "H", "D", "W0", "W1", "W2", "W3", "W4", "W5", "W6", "midnight"
    ] = "midnight"
    log_file_interval: int = 1
    log_file_backup_count: int = 30
    log_file_utc: bool = True

    # Main output format: JSONRenderer if True, ConsoleRenderer if False
    json_format: bool = False

    # Logfire integration via structlog
    logfire_enabled: bool = False
    logfire_token: Optional[str] = None


class RpcSettings(BaseSettings):
    """Solana JSON-RPC endpoints and per-call limits."""

    model_config = SettingsConfigDict(extra="ignore")

    # Raw string from env so pydantic-settings does not try to JSON-decode it.
    endpoints_raw: str = Field(
        default=DEFAULT_RPC_ENDPOINTS,
        description="RPC endpoint URLs, comma-separated. Env: RPC__ENDPOINTS.",
        validation_alias="endpoints",
    )
    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=120.0,
        description="Timeout of a single RPC call in seconds.",
    )
    commitment: Commitment = Field(
        default="confirmed",
        description="Commitment level requested from the ledger.",
    )
    backoff_seconds: float = Field(
        default=0.05,
        ge=0.0,
        le=5.0,
        description="Fixed pause between two attempts of the same logical call.",
    )
    max_attempts: Optional[int] = Field(
        default=None,
        ge=1,
        le=50,
        description="Attempts per logical call. None means one attempt per endpoint.",
    )

    @computed_field
    @property
    def endpoints(self) -> list[str]:
        """Parse comma-separated endpoints_raw into list of stripped URLs."""
        if not self.endpoints_raw or not self.endpoints_raw.strip():
            return []
        return [s.strip() for s in self.endpoints_raw.split(",") if s.strip()]


class HistorySettings(BaseSettings):
    """Crawling, decoding and pagination tunables."""

    model_config = SettingsConfigDict(extra="ignore")

    signature_batch_size: int = Field(
        default=1000,
        ge=1,
        le=1000,
        description="Signatures requested per getSignaturesForAddress call.",
    )
    empty_batch_threshold: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Consecutive empty batches (across rotated endpoints) that end a crawl.",
    )
    native_dust_threshold: Decimal = Field(
        default=Decimal("0.000001"),
        ge=0,
        description="Smallest SOL change reported as a transfer (inclusive).",
    )
    token_dust_threshold: Decimal = Field(
        default=Decimal("0.000001"),
        ge=0,
        description="Smallest token change reported as a transfer (inclusive).",
    )
    counterparty_noise_lamports: int = Field(
        default=5000,
        ge=0,
        description="Lamport change an account must exceed to count as counterparty.",
    )
    decode_concurrency: int = Field(
        default=25,
        ge=1,
        le=100,
        description="Transactions fetched and decoded concurrently per page.",
    )
    default_page_size: int = Field(default=30, ge=1, le=1000)
    max_page_size: int = Field(default=100, ge=1, le=1000)
    background_crawl: bool = Field(
        default=True,
        description="Serve pages once enough signatures are known and finish the crawl in the background.",
    )
    serve_cached_on_failure: bool = Field(
        default=True,
        description="Serve a partially crawled history when every endpoint fails.",
    )
    fallback_mode: FallbackMode = Field(
        default="error",
        description="What list() returns when the ledger is unreachable: error, empty or mock.",
    )
    native_symbol: str = "SOL"
    known_mints_raw: str = Field(
        default="",
        description="Extra mint symbols as mint:SYMBOL pairs, comma-separated. Env: HISTORY__KNOWN_MINTS.",
        validation_alias="known_mints",
    )

    @computed_field
    @property
    def known_mints(self) -> dict[str, str]:
        """Parse known_mints_raw into {mint: symbol}."""
        result: dict[str, str] = {}
        for item in (self.known_mints_raw or "").split(","):
            mint, sep, symbol = item.partition(":")
            if sep and mint.strip() and symbol.strip():
                result[mint.strip()] = symbol.strip()
        return result


class CacheSettings(BaseSettings):
    """History cache bounds and optional on-disk persistence."""

    model_config = SettingsConfigDict(extra="ignore")

    signature_sets_maxsize: int = Field(
        default=1024,
        ge=1,
        description="Wallets whose signature history is kept in memory (LRU).",
    )
    events_maxsize: int = Field(
        default=100_000,
        ge=1,
        description="Decoded (wallet, signature) entries kept in memory (LRU).",
    )
    persist_dir: Optional[str] = Field(
        default=None,
        description="Directory for JSON signature-set files. None keeps history in memory only.",
    )


class Settings(BaseSettings):
    """Root application configuration.

    Groups all sub-configurations so the rest of the code does not
    read environment variables directly. Nested overrides use
    <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, HISTORY__FALLBACK_MODE.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    rpc: RpcSettings = Field(default_factory=RpcSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """Build settings from environment (and .env), with optional overrides.

        Nested overrides can be passed as nested dicts, e.g.:
        - from_env(rpc={"endpoints": "https://a,https://b"})
        - from_env(history={"fallback_mode": "mock"})

        Returns:
            A new Settings instance.
        """
        return cls(**overrides)


@lru_cache
def get_settings() -> Settings:
    """Return a single cached instance of Settings.

    Typical usage:

        from solana_wallet_history.config import get_settings

        settings = get_settings()
        endpoints = settings.rpc.endpoints
        dust = settings.history.native_dust_threshold
    """
    return Settings()
