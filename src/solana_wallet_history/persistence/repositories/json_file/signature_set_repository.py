# -*- coding: utf-8 -*-
"""JSON-file signature-set repository: one file per wallet, fronted by an LRU."""

from __future__ import annotations

import asyncio
import json
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any, Optional

import structlog
from cachetools import LRUCache

from solana_wallet_history.models.signature import SignatureSet
from solana_wallet_history.persistence.repositories.interfaces.signature_set_repository import (
    ISignatureSetRepository,
)
from solana_wallet_history.utils.validation import mask_address


class JsonFileSignatureSetRepository(ISignatureSetRepository):
    """Persists crawl progress so a restarted process resumes instead of re-crawling.

    Files are written to a temporary name and atomically replaced. A file that
    cannot be parsed is treated as absent (the wallet is crawled again). A failed
    write is logged and the in-memory copy keeps serving the wallet.
    """

    def __init__(
        self,
        directory: str | Path,
        *,
        maxsize: int = 1024,
        get_logger: Callable[[str], Any] = structlog.get_logger,
        logger_name: Optional[str] = None,
    ) -> None:
        """Initialize the repository.

        Args:
            directory: Directory holding <wallet>.json files (created if missing).
            maxsize: In-memory LRU entries kept in front of the files.
            get_logger: Logger factory (injected).
            logger_name: Optional logger name (defaults to class name).
        """
        self._dir = Path(directory)
        self._memory: LRUCache[str, SignatureSet] = LRUCache(maxsize=max(1, maxsize))
        self._logger = get_logger(logger_name or self.__class__.__name__)

    def _path(self, wallet: str) -> Path:
        # Base58 addresses are filesystem-safe.
        return self._dir / f"{wallet}.json"

    def _read(self, wallet: str) -> SignatureSet | None:
        path = self._path(wallet)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return SignatureSet.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            self._logger.warning(
                "signature_set_file_unreadable",
                wallet_masked=mask_address(wallet),
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return None

    def _write(self, signature_set: SignatureSet) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self._path(signature_set.wallet)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(signature_set.to_dict()), encoding="utf-8")
        os.replace(tmp, path)

    async def get(self, wallet: str) -> SignatureSet | None:
        wallet = wallet.strip()
        cached = self._memory.get(wallet)
        if cached is not None:
            return cached
        loaded = await asyncio.to_thread(self._read, wallet)
        if loaded is not None:
            self._memory[wallet] = loaded
        return loaded

    async def save(self, signature_set: SignatureSet) -> None:
        self._memory[signature_set.wallet.strip()] = signature_set
        try:
            await asyncio.to_thread(self._write, signature_set)
        except OSError as e:
            self._logger.warning(
                "signature_set_file_write_failed",
                wallet_masked=mask_address(signature_set.wallet),
                error_type=type(e).__name__,
                error_message=str(e),
            )
