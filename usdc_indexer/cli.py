"""
Command-line entry point: index USDC transfers for one wallet.

Usage:
  python -m usdc_indexer --wallet <ADDRESS> --hours 24 --output pretty
  usdc-indexer -w <ADDRESS> -H 6 -o json
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from usdc_indexer.config.env import mask_rpc_url
from usdc_indexer.config.settings import IndexerSettings, get_settings
from usdc_indexer.core.exceptions import InvalidAddress, TransportError
from usdc_indexer.indexer_logging import configure_logging, get_logger
from usdc_indexer.ingestion.pipeline import UsdcIndexer
from usdc_indexer.output import render_json, render_pretty
from usdc_indexer.solana_listener.models import TransferEvent
from usdc_indexer.solana_listener.rpc import SolanaRpcClient
from usdc_indexer.utils.wallet_utils import validate_wallet

logger = get_logger(__name__)

DEFAULT_WALLET = "7cMEhpt9y3inBNVv8fNnuaEbx7hKHZnLvR1KWKKxuDDU"
DEFAULT_HOURS = 24

EXIT_INVALID_ADDRESS = 1
EXIT_TRANSPORT_ERROR = 2


def _non_negative_float(value: str) -> float:
    try:
        f = float(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not a number: {value}") from e
    if f < 0:
        raise argparse.ArgumentTypeError("hours must not be negative")
    return f


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="usdc-indexer",
        description="Reconstruct USDC transfers for a Solana wallet from token balance changes",
    )
    ap.add_argument("-w", "--wallet", default=DEFAULT_WALLET, help="Wallet address to index")
    ap.add_argument(
        "-H", "--hours", type=_non_negative_float, default=DEFAULT_HOURS,
        help="Hours to backfill (default: 24)",
    )
    ap.add_argument(
        "-o", "--output", choices=("json", "pretty"), default="pretty",
        help="Output format (default: pretty)",
    )
    ap.add_argument(
        "--sequential", action="store_true",
        help="Fetch transactions one at a time instead of in concurrent batches",
    )
    ap.add_argument("--rpc-url", default=None, help="Override SOLANA_RPC_URL")
    return ap


async def run(
    wallet: str,
    hours: float,
    settings: IndexerSettings,
    *,
    sequential: bool = False,
) -> list[TransferEvent]:
    async with SolanaRpcClient(
        settings.rpc_url,
        timeout_sec=settings.request_timeout_sec,
        commitment=settings.commitment,
    ) as rpc:
        indexer = UsdcIndexer(rpc, settings)
        return await indexer.get_usdc_transfers(wallet, hours, sequential=sequential)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        wallet = validate_wallet(args.wallet)
    except InvalidAddress as e:
        logger.error("cli_invalid_wallet", wallet=args.wallet, error=str(e))
        print(f"[usdc-indexer] ERROR: {e}", file=sys.stderr)
        return EXIT_INVALID_ADDRESS

    settings = get_settings(args.rpc_url)
    configure_logging(settings.log_level, settings.log_format)
    logger.info(
        "cli_start",
        wallet_id=wallet,
        hours=args.hours,
        output=args.output,
        rpc=mask_rpc_url(settings.rpc_url),
    )

    try:
        transfers = asyncio.run(run(wallet, args.hours, settings, sequential=args.sequential))
    except TransportError as e:
        logger.error("cli_signature_listing_failed", wallet_id=wallet, error=str(e))
        print(f"[usdc-indexer] ERROR: could not list signatures: {e}", file=sys.stderr)
        return EXIT_TRANSPORT_ERROR

    if args.output == "json":
        print(render_json(transfers))
    else:
        print(render_pretty(transfers))
    return 0


if __name__ == "__main__":
    sys.exit(main())
