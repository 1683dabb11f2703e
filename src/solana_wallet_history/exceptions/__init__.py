"""Exceptions subpackage."""

from solana_wallet_history.exceptions.exceptions import (
    EndpointExhaustedError,
    InvalidAddressError,
    LedgerReportedError,
    MalformedRecordError,
    MissingRequiredConfigError,
    RateLimitError,
    RpcRequestError,
    RpcResponseError,
    UpstreamUnavailableError,
    WalletHistoryError,
)

__all__ = [
    "EndpointExhaustedError",
    "InvalidAddressError",
    "LedgerReportedError",
    "MalformedRecordError",
    "MissingRequiredConfigError",
    "RateLimitError",
    "RpcRequestError",
    "RpcResponseError",
    "UpstreamUnavailableError",
    "WalletHistoryError",
]
