"""Custom exceptions for RPC access, crawling and history serving."""

from __future__ import annotations


class WalletHistoryError(Exception):
    """Base exception for wallet-history errors."""

    pass


class MissingRequiredConfigError(WalletHistoryError):
    """Raised when a required configuration value is missing."""

    pass


class InvalidAddressError(WalletHistoryError):
    """Raised when a wallet identifier is not a valid ledger address."""

    def __init__(self, address: object, reason: str | None = None) -> None:
        message = f"Invalid wallet address: {address!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.address = address
        self.reason = reason


class RpcRequestError(WalletHistoryError):
    """Raised when a single RPC call against one endpoint fails."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause


class RateLimitError(RpcRequestError):
    """Raised when the endpoint returns HTTP 429 (Too Many Requests)."""

    def __init__(
        self,
        message: str = "Rate limit exceeded (429)",
        *,
        url: str | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, url=url, status_code=429)
        self.retry_after = retry_after


class RpcResponseError(RpcRequestError):
    """Raised when the endpoint answers with a JSON-RPC error object."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        code: int | None = None,
    ) -> None:
        super().__init__(message, url=url)
        self.code = code


class EndpointExhaustedError(WalletHistoryError):
    """Raised when every attempt of one logical RPC call failed."""

    def __init__(
        self,
        description: str,
        attempts: int,
        *,
        last_error: Exception | None = None,
    ) -> None:
        super().__init__(f"{description} failed after {attempts} attempts")
        self.description = description
        self.attempts = attempts
        self.last_error = last_error


class MalformedRecordError(WalletHistoryError):
    """Raised inside the decoder when a transaction record has an unexpected shape."""

    pass


class LedgerReportedError(WalletHistoryError):
    """Raised inside the decoder when the transaction failed on-chain."""

    pass


class UpstreamUnavailableError(WalletHistoryError):
    """Raised to callers when history cannot be served because the ledger is unreachable."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause
