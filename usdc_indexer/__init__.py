"""
USDC Indexer — USDC transfer history for a single Solana wallet.

Lists recent signatures for a wallet, bounds them to a look-back window,
fetches full transactions in paced batches, and reconstructs USDC
transfers from pre/post token-balance deltas.
"""

__version__ = "0.1.0"
