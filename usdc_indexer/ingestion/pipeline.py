"""
USDC indexing pipeline: signatures → window → dedup → fetch → parse → assemble.

Listing failures abort the run (TransportError propagates). Fetch and parse
failures are logged per transaction and excluded; the run always completes
over its filtered signature set and returns whatever it could reconstruct.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from usdc_indexer.config.settings import IndexerSettings
from usdc_indexer.core.exceptions import MalformedRecord
from usdc_indexer.indexer_logging import bind_wallet
from usdc_indexer.ingestion.batch import BatchFetcher, FetchOutcome, SleepFn
from usdc_indexer.ingestion.dedup import SignatureDeduplicator
from usdc_indexer.ingestion.window import filter_by_time_window
from usdc_indexer.solana_listener.models import USDC_MINT, TransferEvent
from usdc_indexer.solana_listener.parser import parse_usdc_transfers
from usdc_indexer.solana_listener.rpc import SolanaRpcClient
from usdc_indexer.utils.wallet_utils import validate_wallet


def assemble_transfers(batches: Iterable[Iterable[TransferEvent]]) -> list[TransferEvent]:
    """Concatenate per-transaction transfers, newest first. Ties keep no particular order."""
    all_transfers = [t for batch in batches for t in batch]
    all_transfers.sort(key=lambda t: t.timestamp, reverse=True)
    return all_transfers


@dataclass
class RunStats:
    """Counters for one run; logged at the end."""

    signatures_listed: int = 0
    signatures_in_window: int = 0
    fetched: int = 0
    not_found: int = 0
    fetch_errors: int = 0
    parse_errors: int = 0
    transfers: int = 0
    failed_signatures: list[str] = field(default_factory=list)


class UsdcIndexer:
    """
    Reconstructs USDC transfers for one wallet over a recent time window.

    Each call to get_usdc_transfers is an independent run with its own
    deduplicator; the RPC client may be shared across runs.
    """

    def __init__(
        self,
        rpc: SolanaRpcClient,
        settings: IndexerSettings,
        *,
        mint: str = USDC_MINT,
        sleep: SleepFn | None = None,
    ) -> None:
        self._rpc = rpc
        self._settings = settings
        self._mint = mint
        self._sleep = sleep
        self.last_stats: RunStats | None = None

    def _make_fetcher(self) -> BatchFetcher:
        kwargs = {}
        if self._sleep is not None:
            kwargs["sleep"] = self._sleep
        return BatchFetcher(
            self._rpc.get_transaction,
            deduplicator=SignatureDeduplicator(),
            batch_size=self._settings.batch_size,
            batch_delay_sec=self._settings.batch_delay_sec,
            sequential_delay_sec=self._settings.sequential_delay_sec,
            **kwargs,
        )

    async def get_usdc_transfers(
        self,
        wallet: str,
        hours_back: float,
        *,
        sequential: bool = False,
        now: datetime | None = None,
    ) -> list[TransferEvent]:
        """
        Run the pipeline for wallet over the last hours_back hours.

        Raises InvalidAddress before any RPC call if wallet is not a pubkey,
        and TransportError if the signature list cannot be fetched.
        """
        wallet = validate_wallet(wallet)
        if hours_back < 0:
            raise ValueError("hours_back must not be negative")
        now = now or datetime.now(timezone.utc)
        log = bind_wallet(wallet)
        stats = RunStats()
        self.last_stats = stats

        log.info("indexer_fetching_signatures", hours_back=hours_back)
        signatures = await self._rpc.get_signatures_for_address(
            wallet, limit=self._settings.signatures_limit
        )
        stats.signatures_listed = len(signatures)
        log.info("indexer_signatures_fetched", count=len(signatures))

        recent = filter_by_time_window(signatures, now, hours_back)
        stats.signatures_in_window = len(recent)
        log.info(
            "indexer_signatures_in_window",
            count=len(recent),
            hours_back=hours_back,
        )

        fetcher = self._make_fetcher()
        sig_list = [s.signature for s in recent]
        if sequential:
            outcomes = await fetcher.fetch_sequential(sig_list)
        else:
            outcomes = await fetcher.fetch_all(sig_list)

        batches = [self._extract(outcome, wallet, now, stats) for outcome in outcomes]
        transfers = assemble_transfers(batches)
        stats.transfers = len(transfers)
        log.info(
            "indexer_run_complete",
            transfers=stats.transfers,
            fetched=stats.fetched,
            not_found=stats.not_found,
            fetch_errors=stats.fetch_errors,
            parse_errors=stats.parse_errors,
        )
        return transfers

    def _extract(
        self,
        outcome: FetchOutcome,
        wallet: str,
        now: datetime,
        stats: RunStats,
    ) -> list[TransferEvent]:
        if outcome.error is not None:
            stats.fetch_errors += 1
            stats.failed_signatures.append(outcome.signature)
            return []
        if outcome.record is None:
            stats.not_found += 1
            return []
        stats.fetched += 1
        try:
            return parse_usdc_transfers(outcome.record, wallet, mint=self._mint, now=now)
        except MalformedRecord as e:
            stats.parse_errors += 1
            stats.failed_signatures.append(outcome.signature)
            bind_wallet(wallet).warning(
                "indexer_parse_failed",
                signature=outcome.signature[:16],
                error=str(e),
            )
            return []
