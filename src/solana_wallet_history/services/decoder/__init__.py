"""Transaction decoding."""

from solana_wallet_history.services.decoder.decode_result import (
    DecodeResult,
    Decoded,
    Skipped,
    SkipReason,
    events_of,
)
from solana_wallet_history.services.decoder.known_addresses import (
    KNOWN_MINTS,
    SYSTEM_PROGRAM_ADDRESSES,
    UNKNOWN_TOKEN_SYMBOL,
)
from solana_wallet_history.services.decoder.transaction_decoder import (
    TransactionDecoder,
    format_amount,
)

__all__ = [
    "DecodeResult",
    "Decoded",
    "KNOWN_MINTS",
    "SYSTEM_PROGRAM_ADDRESSES",
    "SkipReason",
    "Skipped",
    "TransactionDecoder",
    "UNKNOWN_TOKEN_SYMBOL",
    "events_of",
    "format_amount",
]
