# -*- coding: utf-8 -*-
"""Utility modules."""

from solana_wallet_history.utils.timefmt import block_time_to_datetime, to_iso8601
from solana_wallet_history.utils.validation import (
    UNKNOWN_COUNTERPARTY,
    format_counterparty,
    is_solana_address,
    mask_address,
)

__all__ = [
    "UNKNOWN_COUNTERPARTY",
    "block_time_to_datetime",
    "format_counterparty",
    "is_solana_address",
    "mask_address",
    "to_iso8601",
]
