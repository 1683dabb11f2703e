"""Solana JSON-RPC connection bound to one endpoint (getSignaturesForAddress, getTransaction)."""

from __future__ import annotations

from collections.abc import Callable
from itertools import count
from typing import TYPE_CHECKING, Any, cast

import structlog

from solana_wallet_history.clients.rpc.schema import RawTransactionSchema, SignatureInfoSchema
from solana_wallet_history.exceptions import RpcRequestError, RpcResponseError
from solana_wallet_history.utils.validation import mask_address

if TYPE_CHECKING:
    from solana_wallet_history.clients.http import AsyncHttpClient
    from solana_wallet_history.config import Commitment

# getSignaturesForAddress refuses limits above this.
MAX_SIGNATURES_PER_CALL = 1000

_request_ids = count(1)


class SolanaRpcConnection:
    """Live handle on one RPC endpoint. Cheap to build; shares the HTTP session."""

    def __init__(
        self,
        http_client: AsyncHttpClient,
        url: str,
        *,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: str | None = None,
    ) -> None:
        """Initialize the connection.

        Args:
            http_client: HTTP client for POST requests (JSON-RPC).
            url: Endpoint URL.
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._http = http_client
        self._url = url.rstrip("/")
        self._logger = get_logger(logger_name or self.__class__.__name__)

    @property
    def url(self) -> str:
        return self._url

    async def call(self, method: str, params: list[Any]) -> Any:
        """Perform one JSON-RPC call and return its `result` field.

        Raises:
            RpcRequestError: If the transport fails or the body is not a JSON-RPC response.
            RpcResponseError: If the response carries a JSON-RPC error object.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(_request_ids),
            "method": method,
            "params": params,
        }
        response = await self._http.post(self._url, json=payload)
        if not isinstance(response, dict):
            raise RpcRequestError(
                f"Unexpected RPC response type: {type(response).__name__}",
                url=self._url,
            )
        resp_dict = cast(dict[str, Any], response)
        if "error" in resp_dict:
            err = resp_dict["error"]
            code: int | None = None
            if isinstance(err, dict):
                err_d = cast(dict[str, Any], err)
                msg = str(err_d.get("message", err_d))
                raw_code = err_d.get("code")
                code = raw_code if isinstance(raw_code, int) else None
            else:
                msg = str(err)
            raise RpcResponseError(f"RPC error ({method}): {msg}", url=self._url, code=code)
        return resp_dict.get("result")

    async def get_signatures_for_address(
        self,
        address: str,
        *,
        limit: int = MAX_SIGNATURES_PER_CALL,
        before: str | None = None,
        commitment: Commitment = "confirmed",
    ) -> list[SignatureInfoSchema]:
        """Fetch signatures for an address, newest first, older than `before` when given.

        Args:
            address: Base58 wallet address.
            limit: Batch size (1..1000).
            before: Signature cursor; only older signatures are returned.
            commitment: Ledger commitment level.

        Returns:
            Signature items as returned by the endpoint (possibly empty).
        """
        opts: dict[str, Any] = {
            "limit": max(1, min(MAX_SIGNATURES_PER_CALL, limit)),
            "commitment": commitment,
        }
        if before is not None:
            opts["before"] = before
        result = await self.call("getSignaturesForAddress", [address, opts])
        if result is None:
            return []
        if not isinstance(result, list):
            raise RpcRequestError(
                f"getSignaturesForAddress returned {type(result).__name__}, expected list",
                url=self._url,
            )
        items = [cast(SignatureInfoSchema, x) for x in cast(list[Any], result) if isinstance(x, dict)]
        self._logger.debug(
            "rpc_signatures_fetched",
            rpc_url=self._url,
            address_masked=mask_address(address),
            rpc_before=before,
            rpc_count=len(items),
        )
        return items

    async def get_transaction(
        self,
        signature: str,
        *,
        commitment: Commitment = "confirmed",
    ) -> RawTransactionSchema | None:
        """Fetch one transaction (legacy or version 0). None if the ledger does not know it."""
        opts = {
            "commitment": commitment,
            "encoding": "json",
            "maxSupportedTransactionVersion": 0,
        }
        result = await self.call("getTransaction", [signature, opts])
        if result is None:
            return None
        if not isinstance(result, dict):
            raise RpcRequestError(
                f"getTransaction returned {type(result).__name__}, expected object",
                url=self._url,
            )
        return cast(RawTransactionSchema, result)
