"""Solana JSON-RPC response types (getSignaturesForAddress, getTransaction with encoding=json)."""

from __future__ import annotations

from typing import Any, Optional, TypedDict, Union


class SignatureInfoSchema(TypedDict, total=False):
    """getSignaturesForAddress result item."""

    signature: str
    slot: int
    err: Optional[Any]
    memo: Optional[str]
    blockTime: Optional[int]
    confirmationStatus: Optional[str]


class UiTokenAmountSchema(TypedDict, total=False):
    amount: str
    """Raw amount in base units (string)."""
    decimals: int
    uiAmount: Optional[float]
    uiAmountString: str


class TokenBalanceSchema(TypedDict, total=False):
    """meta.preTokenBalances / meta.postTokenBalances item."""

    accountIndex: int
    mint: str
    owner: str
    programId: str
    uiTokenAmount: UiTokenAmountSchema


class LoadedAddressesSchema(TypedDict, total=False):
    """meta.loadedAddresses (versioned transactions with address lookup tables)."""

    writable: list[str]
    readonly: list[str]


class CompiledInstructionSchema(TypedDict, total=False):
    programIdIndex: int
    accounts: list[int]
    data: str
    stackHeight: Optional[int]


class InnerInstructionsSchema(TypedDict, total=False):
    index: int
    instructions: list[CompiledInstructionSchema]


class ParsedAccountKeySchema(TypedDict, total=False):
    """accountKeys entry when an endpoint answers with jsonParsed encoding."""

    pubkey: str
    signer: bool
    writable: bool
    source: str


class MessageSchema(TypedDict, total=False):
    accountKeys: list[Union[str, ParsedAccountKeySchema]]
    instructions: list[CompiledInstructionSchema]
    recentBlockhash: str


class TransactionBodySchema(TypedDict, total=False):
    signatures: list[str]
    message: MessageSchema


class TransactionMetaSchema(TypedDict, total=False):
    err: Optional[Any]
    fee: int
    preBalances: list[int]
    postBalances: list[int]
    preTokenBalances: list[TokenBalanceSchema]
    postTokenBalances: list[TokenBalanceSchema]
    innerInstructions: list[InnerInstructionsSchema]
    loadedAddresses: LoadedAddressesSchema


class RawTransactionSchema(TypedDict, total=False):
    """getTransaction result (null when the ledger does not know the signature)."""

    slot: int
    blockTime: Optional[int]
    version: Union[str, int, None]
    """'legacy' or 0 for versioned messages."""
    meta: TransactionMetaSchema
    transaction: TransactionBodySchema
