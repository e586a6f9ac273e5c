"""Time-window filtering of signature lists."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

from usdc_indexer.solana_listener.models import SignatureInfo


def cutoff_for(now: datetime, hours_back: float) -> datetime:
    return now - timedelta(hours=hours_back)


def filter_by_time_window(
    records: Iterable[SignatureInfo],
    now: datetime,
    hours_back: float,
) -> list[SignatureInfo]:
    """
    Keep records at or after now - hours_back, plus records with no block time.

    Unknown block times are treated as recent and kept. Input order is preserved.
    """
    cutoff = cutoff_for(now, hours_back)
    return [
        r for r in records
        if r.block_time is None or r.block_time >= cutoff
    ]
