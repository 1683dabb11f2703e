"""Decoder outcome: Decoded(events) or Skipped(reason)."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from solana_wallet_history.models.transfer_event import TransferEvent


class SkipReason(str, Enum):
    """Why a transaction produced no events."""

    MISSING = "missing"
    """The ledger returned no record for the signature."""
    LEDGER_ERROR = "ledger_error"
    """The transaction failed on-chain."""
    WALLET_NOT_FOUND = "wallet_not_found"
    """The wallet is not among the transaction's account keys."""
    MALFORMED = "malformed"
    """The record had an unexpected shape."""
    NO_CHANGES = "no_changes"
    """Every balance change was below the dust thresholds."""


@dataclass(frozen=True, slots=True)
class Decoded:
    events: list[TransferEvent] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Skipped:
    reason: SkipReason
    detail: str | None = None


DecodeResult = Union[Decoded, Skipped]


def events_of(result: DecodeResult) -> list[TransferEvent]:
    """Collapse a result to the public contract: zero or more events."""
    return list(result.events) if isinstance(result, Decoded) else []
