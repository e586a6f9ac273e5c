"""
Structured logging for the USDC indexer.

Use get_logger(__name__) in indexer modules; the CLI applies the configured
level and format with configure_logging().
"""

from usdc_indexer.indexer_logging.logger import (
    LOG_FORMATS,
    LOG_LEVELS,
    bind_wallet,
    configure_logging,
    get_logger,
)

__all__ = ["LOG_FORMATS", "LOG_LEVELS", "bind_wallet", "configure_logging", "get_logger"]
