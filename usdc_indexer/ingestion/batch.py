"""
Paced batch fetching of full transactions.

Signatures are split into consecutive chunks of batch_size. Each chunk is
fanned out with asyncio.gather and must fully settle before the pacing
delay and the next chunk, so at most batch_size requests are ever in
flight against the public RPC. A failed fetch is recorded on its outcome
and never aborts the batch.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

from usdc_indexer.config.settings import (
    DEFAULT_BATCH_DELAY_MS,
    DEFAULT_BATCH_SIZE,
    DEFAULT_SEQUENTIAL_DELAY_MS,
)
from usdc_indexer.core.exceptions import NotFound
from usdc_indexer.indexer_logging import get_logger
from usdc_indexer.ingestion.dedup import SignatureDeduplicator
from usdc_indexer.solana_listener.models import TransactionRecord

logger = get_logger(__name__)

DEFAULT_BATCH_DELAY_SEC = DEFAULT_BATCH_DELAY_MS / 1000.0
DEFAULT_SEQUENTIAL_DELAY_SEC = DEFAULT_SEQUENTIAL_DELAY_MS / 1000.0
PROGRESS_LOG_EVERY = 10

FetchFn = Callable[[str], Awaitable[TransactionRecord | None]]
SleepFn = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class FetchOutcome:
    """
    Result of fetching one signature.

    record None with error None means the ledger has no such transaction.
    """

    signature: str
    record: TransactionRecord | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def chunked(items: Sequence[str], size: int) -> list[Sequence[str]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class BatchFetcher:
    """Fetches transactions for a run, bounded in width and paced between chunks."""

    def __init__(
        self,
        fetch: FetchFn,
        *,
        deduplicator: SignatureDeduplicator | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay_sec: float = DEFAULT_BATCH_DELAY_SEC,
        sequential_delay_sec: float = DEFAULT_SEQUENTIAL_DELAY_SEC,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self._fetch = fetch
        self._dedup = deduplicator if deduplicator is not None else SignatureDeduplicator()
        self._batch_size = batch_size
        self._batch_delay = batch_delay_sec
        self._sequential_delay = sequential_delay_sec
        self._sleep = sleep

    @property
    def deduplicator(self) -> SignatureDeduplicator:
        return self._dedup

    async def _fetch_one(self, signature: str) -> FetchOutcome | None:
        """Fetch one signature unless already taken by this run; capture any failure."""
        if not self._dedup.should_fetch(signature):
            return None
        try:
            record = await self._fetch(signature)
        except NotFound:
            return FetchOutcome(signature=signature)
        except Exception as e:
            logger.warning(
                "batch_fetch_failed",
                signature=signature[:16] + "..." if len(signature) > 16 else signature,
                error=str(e),
                error_type=type(e).__name__,
            )
            return FetchOutcome(signature=signature, error=e)
        return FetchOutcome(signature=signature, record=record)

    async def fetch_all(self, signatures: Sequence[str]) -> list[FetchOutcome]:
        """
        Fetch all signatures chunk by chunk.

        Within a chunk order of completion is free; chunk k+1 is only
        dispatched after every fetch of chunk k has settled and the pacing
        delay has elapsed.
        """
        outcomes: list[FetchOutcome] = []
        chunks = chunked(list(signatures), self._batch_size)
        for i, chunk in enumerate(chunks):
            results = await asyncio.gather(*(self._fetch_one(sig) for sig in chunk))
            outcomes.extend(r for r in results if r is not None)
            logger.debug(
                "batch_chunk_done",
                chunk=i + 1,
                chunks=len(chunks),
                fetched=sum(1 for r in results if r is not None),
            )
            if i + 1 < len(chunks):
                await self._sleep(self._batch_delay)
        return outcomes

    async def fetch_sequential(self, signatures: Sequence[str]) -> list[FetchOutcome]:
        """One request at a time with a pacing delay after each; progress every 10 items."""
        outcomes: list[FetchOutcome] = []
        total = len(signatures)
        for i, sig in enumerate(signatures):
            if i % PROGRESS_LOG_EVERY == 0:
                logger.info("batch_sequential_progress", position=i + 1, total=total)
            outcome = await self._fetch_one(sig)
            if outcome is None:
                continue
            outcomes.append(outcome)
            await self._sleep(self._sequential_delay)
        return outcomes
