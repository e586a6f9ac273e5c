"""
Solana RPC access and USDC transfer reconstruction.

Fetches signatures and transactions over JSON-RPC, normalizes raw payloads
into dataclasses, and turns token-balance deltas into transfer events.
"""

from usdc_indexer.solana_listener.models import (
    USDC_MINT,
    SignatureInfo,
    TokenBalanceSnapshot,
    TransactionRecord,
    TransferDirection,
    TransferEvent,
)
from usdc_indexer.solana_listener.parser import (
    MIN_SIGNIFICANT_CHANGE,
    parse_usdc_transfers,
)
from usdc_indexer.solana_listener.rpc import SolanaRpcClient

__all__ = [
    "MIN_SIGNIFICANT_CHANGE",
    "USDC_MINT",
    "SignatureInfo",
    "SolanaRpcClient",
    "TokenBalanceSnapshot",
    "TransactionRecord",
    "TransferDirection",
    "TransferEvent",
    "parse_usdc_transfers",
]
