"""
Application settings for the USDC indexer.

Typed, immutable view over the environment: RPC URL, batch width,
pacing delays, request timeout, signature page size, commitment, and the
log level and format the CLI applies at startup.
"""

from __future__ import annotations

from dataclasses import dataclass

from usdc_indexer.config.env import (
    get_choice_env,
    get_float_env,
    get_int_env,
    get_solana_rpc_url,
    get_str_env,
)
from usdc_indexer.indexer_logging.logger import (
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_LEVEL,
    LOG_FORMATS,
    LOG_LEVELS,
)

DEFAULT_BATCH_SIZE = 10
DEFAULT_BATCH_DELAY_MS = 100
DEFAULT_SEQUENTIAL_DELAY_MS = 50
DEFAULT_REQUEST_TIMEOUT_SEC = 30.0
MAX_SIGNATURES_LIMIT = 1000
DEFAULT_COMMITMENT = "confirmed"


@dataclass(frozen=True)
class IndexerSettings:
    """Runtime configuration for one indexer run."""

    rpc_url: str
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_delay_sec: float = DEFAULT_BATCH_DELAY_MS / 1000.0
    sequential_delay_sec: float = DEFAULT_SEQUENTIAL_DELAY_MS / 1000.0
    request_timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC
    signatures_limit: int = MAX_SIGNATURES_LIMIT
    commitment: str = DEFAULT_COMMITMENT
    log_level: str = DEFAULT_LOG_LEVEL
    log_format: str = DEFAULT_LOG_FORMAT

    def __post_init__(self) -> None:
        if not self.rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        object.__setattr__(self, "batch_size", max(1, int(self.batch_size)))
        object.__setattr__(
            self,
            "signatures_limit",
            max(1, min(int(self.signatures_limit), MAX_SIGNATURES_LIMIT)),
        )
        object.__setattr__(self, "batch_delay_sec", max(0.0, float(self.batch_delay_sec)))
        object.__setattr__(
            self, "sequential_delay_sec", max(0.0, float(self.sequential_delay_sec))
        )


def get_settings(rpc_url: str | None = None) -> IndexerSettings:
    """
    Return settings resolved from the environment.

    Args:
        rpc_url: Optional override (e.g. from --rpc-url); env resolution otherwise.
    """
    return IndexerSettings(
        rpc_url=(rpc_url or "").strip() or get_solana_rpc_url(),
        batch_size=get_int_env("INDEXER_BATCH_SIZE", DEFAULT_BATCH_SIZE),
        batch_delay_sec=get_int_env("INDEXER_BATCH_DELAY_MS", DEFAULT_BATCH_DELAY_MS) / 1000.0,
        sequential_delay_sec=get_int_env(
            "INDEXER_SEQUENTIAL_DELAY_MS", DEFAULT_SEQUENTIAL_DELAY_MS
        ) / 1000.0,
        request_timeout_sec=get_float_env(
            "INDEXER_REQUEST_TIMEOUT_SEC", DEFAULT_REQUEST_TIMEOUT_SEC
        ),
        signatures_limit=get_int_env("INDEXER_SIGNATURES_LIMIT", MAX_SIGNATURES_LIMIT),
        commitment=get_str_env("INDEXER_COMMITMENT", DEFAULT_COMMITMENT),
        log_level=get_choice_env("LOG_LEVEL", DEFAULT_LOG_LEVEL, LOG_LEVELS),
        log_format=get_choice_env("LOG_FORMAT", DEFAULT_LOG_FORMAT, LOG_FORMATS),
    )
