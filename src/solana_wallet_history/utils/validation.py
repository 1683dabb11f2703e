"""Validation and display helpers for ledger addresses."""

from __future__ import annotations

from typing import Any

from solders.pubkey import Pubkey

UNKNOWN_COUNTERPARTY = "Unknown"


def is_solana_address(addr: Any) -> bool:
    """Return True if addr parses as a base58 Solana public key."""
    if not isinstance(addr, str):
        return False
    s = addr.strip()
    if not s:
        return False
    try:
        Pubkey.from_string(s)
    except (TypeError, ValueError):
        return False
    return True


def mask_address(addr: str | None) -> str:
    """Return a masked wallet address for logging (e.g. 9WzD...AWWM)."""
    if not addr or len(addr) < 10:
        return "***"
    return f"{addr[:4]}...{addr[-4:]}"


def format_counterparty(addr: str | None) -> str:
    """Return the display form of a counterparty: first4...last4, or Unknown."""
    if not addr or addr == UNKNOWN_COUNTERPARTY:
        return UNKNOWN_COUNTERPARTY
    if len(addr) <= 8:
        return addr
    return f"{addr[:4]}...{addr[-4:]}"
