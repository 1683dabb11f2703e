"""Signature crawling."""

from solana_wallet_history.services.crawler.signature_crawler import SignatureCrawler

__all__ = ["SignatureCrawler"]
