# -*- coding: utf-8 -*-
"""Transaction decoder: raw getTransaction records -> TransferEvents for one wallet.

Handles legacy messages and version-0 messages whose account list is extended
by address lookup tables (meta.loadedAddresses). Never raises: any record that
cannot be read degrades to Skipped(MALFORMED), i.e. no events.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Optional

import structlog
from cachetools import LRUCache

from solana_wallet_history.exceptions import LedgerReportedError, MalformedRecordError
from solana_wallet_history.models.signature import SignatureRef
from solana_wallet_history.models.transfer_event import Direction, TransferEvent
from solana_wallet_history.services.decoder.decode_result import (
    DecodeResult,
    Decoded,
    Skipped,
    SkipReason,
    events_of,
)
from solana_wallet_history.services.decoder.known_addresses import (
    LAMPORTS_PER_SOL,
    SYSTEM_PROGRAM_ADDRESSES,
    UNKNOWN_TOKEN_SYMBOL,
    build_mint_table,
)
from solana_wallet_history.utils.timefmt import block_time_to_datetime
from solana_wallet_history.utils.validation import (
    UNKNOWN_COUNTERPARTY,
    format_counterparty,
    mask_address,
)

if TYPE_CHECKING:
    from solana_wallet_history.config import Settings

ZERO = Decimal(0)


def format_amount(value: Decimal, decimals: Optional[int] = None) -> str:
    """Fixed-point string of a magnitude: quantized to `decimals` when known, else normalized."""
    value = abs(value)
    if decimals is not None and decimals >= 0:
        return format(value.quantize(Decimal(1).scaleb(-decimals)), "f")
    return format(value.normalize(), "f")


def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedRecordError(f"{what} is {type(value).__name__}, expected object")
    return value


def _int_list(value: Any, what: str) -> list[int]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(
        isinstance(v, int) and not isinstance(v, bool) for v in value
    ):
        raise MalformedRecordError(f"{what} is not a list of integers")
    return value


def _ui_amount(entry: Mapping[str, Any]) -> tuple[Decimal, Optional[int]]:
    """Token amount in display units and the mint's decimals (None if unknown)."""
    ui = entry.get("uiTokenAmount")
    if not isinstance(ui, Mapping):
        return ZERO, None
    decimals = ui.get("decimals")
    decimals = decimals if isinstance(decimals, int) and not isinstance(decimals, bool) else None
    try:
        raw = ui.get("amount")
        if isinstance(raw, str) and raw and decimals is not None:
            return Decimal(raw).scaleb(-decimals), decimals
        ui_string = ui.get("uiAmountString")
        if isinstance(ui_string, str) and ui_string:
            return Decimal(ui_string), decimals
        ui_float = ui.get("uiAmount")
        if isinstance(ui_float, (int, float)) and not isinstance(ui_float, bool):
            return Decimal(str(ui_float)), decimals
    except InvalidOperation as e:
        raise MalformedRecordError(f"unparseable token amount: {ui!r}") from e
    return ZERO, decimals


class TransactionDecoder:
    """Derives native and token balance deltas and the counterparty for a wallet."""

    def __init__(
        self,
        settings: Settings,
        *,
        now: Callable[[], datetime] = lambda: datetime.now(UTC),
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the decoder.

        Args:
            settings: Uses settings.history (dust thresholds, noise, symbols, mints).
            now: Clock used when neither the record nor the signature carries a block time.
                The first reading is remembered per signature, so re-decoding is stable.
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        history = settings.history
        self._native_dust = history.native_dust_threshold
        self._token_dust = history.token_dust_threshold
        self._noise_lamports = history.counterparty_noise_lamports
        self._native_symbol = history.native_symbol
        self._mints = build_mint_table(history.known_mints)
        self._now = now
        self._fallback_times: LRUCache[str, datetime] = LRUCache(maxsize=10_000)
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def symbol_for(self, mint: str) -> str:
        return self._mints.get(mint, UNKNOWN_TOKEN_SYMBOL)

    def decode(
        self,
        raw: Optional[Mapping[str, Any]],
        signature_ref: SignatureRef,
        wallet: str,
    ) -> list[TransferEvent]:
        """Return the wallet's transfer events in this transaction (possibly none)."""
        return events_of(self.decode_result(raw, signature_ref, wallet))

    def decode_result(
        self,
        raw: Optional[Mapping[str, Any]],
        signature_ref: SignatureRef,
        wallet: str,
    ) -> DecodeResult:
        """Decode with the reason a transaction yielded nothing. Never raises."""
        if raw is None:
            return Skipped(SkipReason.MISSING)
        try:
            return self._decode(raw, signature_ref, wallet)
        except LedgerReportedError as e:
            return Skipped(SkipReason.LEDGER_ERROR, str(e))
        except (MalformedRecordError, KeyError, IndexError, TypeError, ValueError, ArithmeticError) as e:
            self._logger.debug(
                "decode_malformed_record",
                signature=signature_ref.signature,
                wallet_masked=mask_address(wallet),
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return Skipped(SkipReason.MALFORMED, str(e))

    # -- record shape -----------------------------------------------------

    @staticmethod
    def account_keys(raw: Mapping[str, Any]) -> list[str]:
        """Full account list: static keys, then loaded writable, then loaded readonly."""
        transaction = _mapping(raw.get("transaction"), "transaction")
        message = _mapping(transaction.get("message"), "transaction.message")
        static = message.get("accountKeys") or []
        if not isinstance(static, list):
            raise MalformedRecordError("accountKeys is not a list")

        keys: list[str] = []
        already_expanded = False
        for k in static:
            if isinstance(k, str):
                keys.append(k)
            elif isinstance(k, Mapping) and isinstance(k.get("pubkey"), str):
                # jsonParsed entries already include lookup-table addresses.
                already_expanded = already_expanded or k.get("source") == "lookupTable"
                keys.append(k["pubkey"])
            else:
                raise MalformedRecordError(f"unsupported account key entry: {k!r}")

        version = raw.get("version")
        if version not in (None, "legacy") and not already_expanded:
            meta = raw.get("meta")
            loaded = meta.get("loadedAddresses") if isinstance(meta, Mapping) else None
            if isinstance(loaded, Mapping):
                for group in ("writable", "readonly"):
                    addresses = loaded.get(group) or []
                    if not isinstance(addresses, list):
                        raise MalformedRecordError(f"loadedAddresses.{group} is not a list")
                    keys.extend(str(a) for a in addresses)
        return keys

    @staticmethod
    def _instructions(raw: Mapping[str, Any]) -> Iterator[Mapping[str, Any]]:
        """Outer instructions, then inner (CPI) instructions."""
        message = raw["transaction"]["message"]
        for ix in message.get("instructions") or []:
            if isinstance(ix, Mapping):
                yield ix
        meta = raw.get("meta") or {}
        for group in meta.get("innerInstructions") or []:
            if isinstance(group, Mapping):
                for ix in group.get("instructions") or []:
                    if isinstance(ix, Mapping):
                        yield ix

    def _program_addresses(self, raw: Mapping[str, Any], keys: Sequence[str]) -> set[str]:
        programs = set(SYSTEM_PROGRAM_ADDRESSES)
        for ix in self._instructions(raw):
            idx = ix.get("programIdIndex")
            if isinstance(idx, int) and 0 <= idx < len(keys):
                programs.add(keys[idx])
        return programs

    def _timestamp(self, raw: Mapping[str, Any], signature_ref: SignatureRef) -> datetime:
        return (
            block_time_to_datetime(raw.get("blockTime"))
            or block_time_to_datetime(signature_ref.block_time)
            or self._fallback_time(signature_ref.signature)
        )

    def _fallback_time(self, signature: str) -> datetime:
        fallback = self._fallback_times.get(signature)
        if fallback is None:
            fallback = self._fallback_times[signature] = self._now()
        return fallback

    # -- decoding ---------------------------------------------------------

    def _decode(
        self,
        raw: Mapping[str, Any],
        signature_ref: SignatureRef,
        wallet: str,
    ) -> DecodeResult:
        meta = _mapping(raw.get("meta"), "meta")
        if meta.get("err") is not None:
            raise LedgerReportedError(f"transaction failed on-chain: {meta.get('err')!r}")

        keys = self.account_keys(raw)
        try:
            wallet_idx = keys.index(wallet)
        except ValueError:
            return Skipped(SkipReason.WALLET_NOT_FOUND)

        pre = _int_list(meta.get("preBalances"), "preBalances")
        post = _int_list(meta.get("postBalances"), "postBalances")
        pre_tokens = meta.get("preTokenBalances") or []
        post_tokens = meta.get("postTokenBalances") or []
        if not isinstance(pre_tokens, list) or not isinstance(post_tokens, list):
            raise MalformedRecordError("token balances are not lists")

        programs = self._program_addresses(raw, keys)
        # The wallet's own token accounts are never its counterparty.
        excluded = programs | {wallet} | {
            keys[b["accountIndex"]]
            for b in [*pre_tokens, *post_tokens]
            if isinstance(b, Mapping)
            and b.get("owner") == wallet
            and isinstance(b.get("accountIndex"), int)
            and 0 <= b["accountIndex"] < len(keys)
        }

        timestamp = self._timestamp(raw, signature_ref)
        signature = signature_ref.signature
        counterparty: Optional[str] = None
        events: list[TransferEvent] = []

        pre_lamports = pre[wallet_idx] if wallet_idx < len(pre) else 0
        post_lamports = post[wallet_idx] if wallet_idx < len(post) else 0
        native_delta = Decimal(post_lamports - pre_lamports) / LAMPORTS_PER_SOL
        if native_delta != ZERO and abs(native_delta) >= self._native_dust:
            counterparty = self._infer_counterparty(raw, keys, wallet_idx, pre, post, excluded)
            events.append(
                TransferEvent(
                    id=signature,
                    wallet=wallet,
                    direction=Direction.from_delta(native_delta),
                    amount=format_amount(native_delta),
                    asset_symbol=self._native_symbol,
                    counterparty=format_counterparty(counterparty),
                    timestamp=timestamp,
                    signature=signature,
                )
            )

        for mint, delta, decimals in self._token_deltas(pre_tokens, post_tokens, wallet):
            if delta == ZERO or abs(delta) < self._token_dust:
                continue
            token_counterparty = self._token_counterparty(pre_tokens, post_tokens, mint, wallet, delta)
            if token_counterparty is None:
                if counterparty is None:
                    counterparty = self._infer_counterparty(raw, keys, wallet_idx, pre, post, excluded)
                token_counterparty = counterparty
            events.append(
                TransferEvent(
                    id=f"{signature}_{mint}",
                    wallet=wallet,
                    direction=Direction.from_delta(delta),
                    amount=format_amount(delta, decimals),
                    asset_symbol=self.symbol_for(mint),
                    counterparty=format_counterparty(token_counterparty),
                    timestamp=timestamp,
                    signature=signature,
                    mint=mint,
                )
            )

        if not events:
            return Skipped(SkipReason.NO_CHANGES)
        return Decoded(events)

    def _infer_counterparty(
        self,
        raw: Mapping[str, Any],
        keys: Sequence[str],
        wallet_idx: int,
        pre: Sequence[int],
        post: Sequence[int],
        excluded: set[str],
    ) -> str:
        """Best guess at the other party, in decreasing order of confidence."""
        # 1. An account sharing an instruction with the wallet.
        for ix in self._instructions(raw):
            accounts = [a for a in ix.get("accounts") or [] if isinstance(a, int) and 0 <= a < len(keys)]
            if wallet_idx not in accounts:
                continue
            for a in accounts:
                if keys[a] not in excluded:
                    return keys[a]

        # 2. An account whose own lamport balance moved beyond fee noise.
        for i, addr in enumerate(keys):
            if addr in excluded or i >= len(pre) or i >= len(post):
                continue
            if abs(post[i] - pre[i]) > self._noise_lamports:
                return addr

        # 3. Any other non-program account.
        for addr in keys:
            if addr not in excluded:
                return addr

        return UNKNOWN_COUNTERPARTY

    @staticmethod
    def _owner_amounts(
        entries: Sequence[Any],
        *,
        owner: Optional[str] = None,
        mint: Optional[str] = None,
    ) -> dict[tuple[str, str], tuple[Decimal, Optional[int]]]:
        """Sum token amounts per (owner, mint), optionally filtered."""
        totals: dict[tuple[str, str], tuple[Decimal, Optional[int]]] = {}
        for entry in entries:
            entry = _mapping(entry, "token balance")
            entry_owner = entry.get("owner")
            entry_mint = entry.get("mint")
            if not isinstance(entry_mint, str):
                raise MalformedRecordError("token balance without mint")
            if not isinstance(entry_owner, str):
                continue
            if owner is not None and entry_owner != owner:
                continue
            if mint is not None and entry_mint != mint:
                continue
            amount, decimals = _ui_amount(entry)
            key = (entry_owner, entry_mint)
            prev_amount, prev_decimals = totals.get(key, (ZERO, None))
            totals[key] = (prev_amount + amount, decimals if decimals is not None else prev_decimals)
        return totals

    def _token_deltas(
        self,
        pre_tokens: Sequence[Any],
        post_tokens: Sequence[Any],
        wallet: str,
    ) -> list[tuple[str, Decimal, Optional[int]]]:
        """(mint, post - pre, decimals) for every mint the wallet held before or after."""
        pre = self._owner_amounts(pre_tokens, owner=wallet)
        post = self._owner_amounts(post_tokens, owner=wallet)
        result: list[tuple[str, Decimal, Optional[int]]] = []
        for key in dict.fromkeys([*pre, *post]):
            pre_amount, pre_decimals = pre.get(key, (ZERO, None))
            post_amount, post_decimals = post.get(key, (ZERO, None))
            decimals = post_decimals if post_decimals is not None else pre_decimals
            result.append((key[1], post_amount - pre_amount, decimals))
        return result

    def _token_counterparty(
        self,
        pre_tokens: Sequence[Any],
        post_tokens: Sequence[Any],
        mint: str,
        wallet: str,
        wallet_delta: Decimal,
    ) -> Optional[str]:
        """Owner whose balance of the same mint moved the opposite way, if any."""
        pre = self._owner_amounts(pre_tokens, mint=mint)
        post = self._owner_amounts(post_tokens, mint=mint)
        for key in dict.fromkeys([*pre, *post]):
            owner = key[0]
            if owner == wallet:
                continue
            delta = post.get(key, (ZERO, None))[0] - pre.get(key, (ZERO, None))[0]
            if delta != ZERO and (delta > 0) != (wallet_delta > 0):
                return owner
        return None
