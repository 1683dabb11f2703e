# -*- coding: utf-8 -*-
"""
Command-line entry point: print one page of a wallet's transfer history as JSON.

Orchestrates: logging, settings, container, history service, shutdown.

Run with: python -m solana_wallet_history.main <wallet> [--page N] [--page-size N]

Notebook usage:
    from solana_wallet_history.main import run
    result = await run("<wallet>", page=1, page_size=30)
"""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
import structlog
from typing import Any, Optional, Sequence

from solana_wallet_history.DI import Container
from solana_wallet_history.exceptions import InvalidAddressError, UpstreamUnavailableError
from solana_wallet_history.logging.config import configure_logging
from solana_wallet_history.utils import mask_address


async def run(
    wallet: str,
    *,
    page: int = 1,
    page_size: Optional[int] = None,
    container: Optional[Container] = None,
) -> dict[str, Any]:
    """Fetch one page and release network resources. Background crawls are cancelled on exit."""
    container = container or Container()
    logger = structlog.get_logger("main")
    service = container.history_service()
    http_client = container.http_client()
    try:
        result = await service.list(wallet, page=page, page_size=page_size)
        logger.info(
            "main_page_served",
            wallet_masked=mask_address(wallet),
            page=page,
            events=len(result["transactions"]),
            has_more=result["hasMore"],
            total_seen=result["totalSeen"],
        )
        logger.debug("main_endpoint_stats", endpoints=await service.endpoint_stats())
        return result
    finally:
        await service.aclose()
        await http_client.aclose()


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print a Solana wallet's transfer history page as JSON.")
    parser.add_argument("wallet", help="Base58 wallet address")
    parser.add_argument("--page", type=int, default=1, help="1-based page number (default 1)")
    parser.add_argument("--page-size", type=int, default=None, help="Signatures per page")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging()
    try:
        result = asyncio.run(run(args.wallet, page=args.page, page_size=args.page_size))
    except InvalidAddressError as e:
        print(json.dumps({"error": "invalid_address", "message": str(e)}), file=sys.stderr)
        return 2
    except UpstreamUnavailableError as e:
        print(json.dumps({"error": "upstream_unavailable", "message": str(e)}), file=sys.stderr)
        return 3
    except ValueError as e:
        print(json.dumps({"error": "invalid_request", "message": str(e)}), file=sys.stderr)
        return 2
    print(json.dumps(result, indent=2))
    return 0


__all__ = ["run", "main"]

if __name__ == "__main__":
    sys.exit(main())
