"""Wallet validation utilities."""

from solders.pubkey import Pubkey

from usdc_indexer.core.exceptions import InvalidAddress


def validate_wallet(wallet: str) -> str:
    """Return the stripped wallet address; raise InvalidAddress if it is not a pubkey."""
    wallet = (wallet or "").strip()
    if not wallet:
        raise InvalidAddress("Wallet address must be non-empty")
    try:
        Pubkey.from_string(wallet)
    except Exception as e:
        raise InvalidAddress(f"Invalid Solana wallet: {e}") from e
    return wallet
