"""Deterministic placeholder history served when the ledger is unreachable and fallback_mode=mock."""

from __future__ import annotations

from datetime import datetime, timedelta

from solana_wallet_history.models.transfer_event import Direction, TransferEvent

_USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"

# (days ago, direction, amount, symbol, counterparty)
_MOCK_TRANSFERS: tuple[tuple[int, Direction, str, str, str], ...] = (
    (10, Direction.RECEIVED, "5.000000", "USDC", "Cpr9...6MfH"),
    (10, Direction.RECEIVED, "0.00001", "SOL", "Cpr9...EmVU"),
    (11, Direction.RECEIVED, "0.03017", "SOL", "5YhL...p29w"),
    (16, Direction.SENT, "0.03336", "SOL", "7xKX...gAsU"),
)


def mock_events(wallet: str, now: datetime) -> list[TransferEvent]:
    """Placeholder events for wallet, newest first. Ids and signatures are prefixed with mock-."""
    events = [
        TransferEvent(
            id=f"mock-{i}",
            wallet=wallet,
            direction=direction,
            amount=amount,
            asset_symbol=symbol,
            counterparty=counterparty,
            timestamp=now - timedelta(days=days),
            signature=f"mock-{i}",
            mint=_USDC_MINT if symbol == "USDC" else None,
        )
        for i, (days, direction, amount, symbol, counterparty) in enumerate(_MOCK_TRANSFERS, start=1)
    ]
    return sorted(events, key=lambda e: e.timestamp, reverse=True)
