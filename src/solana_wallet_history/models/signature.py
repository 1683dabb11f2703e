"""SignatureRef and SignatureSet: crawl state of a wallet's ledger history.

A SignatureSet is append-only: refs are ordered newest to oldest and unique by
signature; the only other transition is is_complete going from False to True.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class SignatureRef:
    """Pointer to one ledger transaction that touched a wallet."""

    signature: str
    """Base58 transaction signature (unique id)."""
    block_time: int | None = None
    """Unix time (seconds) of the block, when the endpoint reports it."""
    slot: int | None = None
    """Slot of the transaction; signatures are returned newest slot first."""
    failed: bool = False
    """True when getSignaturesForAddress reported an on-chain error for it."""

    @classmethod
    def from_response(cls, item: dict[str, Any]) -> SignatureRef:
        """Build from one getSignaturesForAddress result item (camelCase)."""
        signature = item.get("signature")
        if not isinstance(signature, str) or not signature:
            raise ValueError("signature item without a signature")
        block_time = item.get("blockTime")
        slot = item.get("slot")
        return cls(
            signature=signature,
            block_time=int(block_time) if isinstance(block_time, (int, float)) else None,
            slot=int(slot) if isinstance(slot, (int, float)) else None,
            failed=item.get("err") is not None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "signature": self.signature,
            "block_time": self.block_time,
            "slot": self.slot,
            "failed": self.failed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SignatureRef:
        return cls(
            signature=str(data["signature"]),
            block_time=data.get("block_time"),
            slot=data.get("slot"),
            failed=bool(data.get("failed", False)),
        )


@dataclass(frozen=True, slots=True)
class SignatureSet:
    """Crawl state for one wallet: known signatures plus a completion flag."""

    wallet: str
    refs: tuple[SignatureRef, ...] = ()
    """Known signatures, newest first, unique by signature."""
    is_complete: bool = False
    """True once the crawler concluded the ledger holds nothing older."""
    last_updated: datetime = field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def empty(cls, wallet: str) -> SignatureSet:
        return cls(wallet=wallet)

    @property
    def cursor(self) -> str | None:
        """Oldest known signature (the `before` cursor for the next batch)."""
        return self.refs[-1].signature if self.refs else None

    def signatures(self) -> set[str]:
        return {r.signature for r in self.refs}

    def with_appended(self, refs: list[SignatureRef]) -> tuple[SignatureSet, int]:
        """Return a copy extended with refs not yet known, and how many were added.

        Refs are appended in the order given (the batch is older than the cursor).
        """
        seen = self.signatures()
        added: list[SignatureRef] = []
        for ref in refs:
            if ref.signature in seen:
                continue
            seen.add(ref.signature)
            added.append(ref)
        if not added:
            return self, 0
        return (
            SignatureSet(
                wallet=self.wallet,
                refs=self.refs + tuple(added),
                is_complete=self.is_complete,
                last_updated=datetime.now(UTC),
            ),
            len(added),
        )

    def with_completed(self) -> SignatureSet:
        """Return a copy marked complete."""
        return SignatureSet(
            wallet=self.wallet,
            refs=self.refs,
            is_complete=True,
            last_updated=datetime.now(UTC),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "wallet": self.wallet,
            "is_complete": self.is_complete,
            "last_updated": self.last_updated.isoformat(),
            "signatures": [r.to_dict() for r in self.refs],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SignatureSet:
        last_updated_raw = data.get("last_updated")
        last_updated = (
            datetime.fromisoformat(last_updated_raw)
            if isinstance(last_updated_raw, str)
            else datetime.now(UTC)
        )
        return cls(
            wallet=str(data["wallet"]),
            refs=tuple(SignatureRef.from_dict(r) for r in data.get("signatures", [])),
            is_complete=bool(data.get("is_complete", False)),
            last_updated=last_updated,
        )
