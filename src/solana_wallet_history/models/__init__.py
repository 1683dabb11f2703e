# -*- coding: utf-8 -*-
"""Domain models."""

from solana_wallet_history.models.page import Page
from solana_wallet_history.models.signature import SignatureRef, SignatureSet
from solana_wallet_history.models.transfer_event import Direction, TransferEvent

__all__ = [
    "Direction",
    "Page",
    "SignatureRef",
    "SignatureSet",
    "TransferEvent",
]
