"""JSON-file repository implementations."""

from solana_wallet_history.persistence.repositories.json_file.signature_set_repository import (
    JsonFileSignatureSetRepository,
)

__all__ = ["JsonFileSignatureSetRepository"]
