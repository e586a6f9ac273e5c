"""
Environment variable loading for the USDC indexer.

- SOLANA_RPC_URL: RPC endpoint (read from .env)
- HELIUS_API_KEY: Helius API key (fallback for RPC URL)
- INDEXER_*: batching, pacing, timeout and commitment overrides
- LOG_LEVEL / LOG_FORMAT: log verbosity and renderer (json or console)
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from usdc_indexer.indexer_logging import get_logger

logger = get_logger(__name__)

# Project root: config is usdc_indexer/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
HELIUS_MAINNET_URL_TEMPLATE = "https://mainnet.helius-rpc.com/?api-key={key}"


def load_indexer_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides set vars."""
    load_dotenv(_ENV_PATH, override=False)


def get_solana_rpc_url() -> str:
    """
    Resolve Solana RPC URL from env.
    Order: SOLANA_RPC_URL > HELIUS_API_KEY > public mainnet.
    """
    load_indexer_env()
    url = (os.getenv("SOLANA_RPC_URL") or "").strip()
    if url:
        return url
    key = (os.getenv("HELIUS_API_KEY") or "").strip()
    if key:
        return HELIUS_MAINNET_URL_TEMPLATE.format(key=key)
    return MAINNET_RPC_URL


def get_int_env(name: str, default: int) -> int:
    """Read an integer env var; invalid or missing values fall back to default."""
    load_indexer_env()
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("config_invalid_int", name=name, value=raw, default=default)
        return default


def get_float_env(name: str, default: float) -> float:
    """Read a float env var; invalid or missing values fall back to default."""
    load_indexer_env()
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("config_invalid_float", name=name, value=raw, default=default)
        return default


def get_str_env(name: str, default: str) -> str:
    load_indexer_env()
    return (os.getenv(name) or "").strip() or default


def get_choice_env(name: str, default: str, choices: tuple[str, ...]) -> str:
    """Read an env var that must be one of choices (case-insensitive); else default."""
    raw = get_str_env(name, default)
    for choice in choices:
        if raw.lower() == choice.lower():
            return choice
    logger.warning("config_invalid_choice", name=name, value=raw, default=default)
    return default


def mask_rpc_url(rpc: str) -> str:
    """Mask API key in URL if present."""
    if "api-key=" in rpc:
        return rpc.split("api-key=")[0] + "api-key=***"
    return rpc
