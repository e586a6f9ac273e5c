"""
Configuration management for the USDC indexer.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for RPC endpoint and batching parameters.
"""

from usdc_indexer.config.settings import IndexerSettings, get_settings  # noqa: F401

__all__ = ["IndexerSettings", "get_settings"]
