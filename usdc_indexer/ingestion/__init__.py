"""
Batch ingestion for one indexer run.

Bounds signatures to a look-back window, deduplicates them, fetches full
transactions in paced chunks, and assembles reconstructed transfers.
"""

from usdc_indexer.ingestion.batch import BatchFetcher, FetchOutcome
from usdc_indexer.ingestion.dedup import SignatureDeduplicator
from usdc_indexer.ingestion.pipeline import UsdcIndexer, assemble_transfers
from usdc_indexer.ingestion.window import filter_by_time_window

__all__ = [
    "BatchFetcher",
    "FetchOutcome",
    "SignatureDeduplicator",
    "UsdcIndexer",
    "assemble_transfers",
    "filter_by_time_window",
]
