"""Logging setup (structlog + optional Logfire)."""
