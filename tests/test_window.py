"""
Tests for look-back window filtering.
"""

from __future__ import annotations

import random
from datetime import timedelta

from tests.conftest import NOW
from usdc_indexer.ingestion.window import cutoff_for, filter_by_time_window
from usdc_indexer.solana_listener.models import SignatureInfo


def _sig(name: str, hours_ago: float | None) -> SignatureInfo:
    bt = None if hours_ago is None else NOW - timedelta(hours=hours_ago)
    return SignatureInfo(signature=name, slot=1, block_time=bt)


def test_keeps_recent_and_drops_old():
    records = [_sig("recent", 2), _sig("old", 30)]
    kept = filter_by_time_window(records, NOW, 24)
    assert [r.signature for r in kept] == ["recent"]


def test_unknown_block_time_is_kept():
    records = [_sig("unknown", None), _sig("old", 48)]
    kept = filter_by_time_window(records, NOW, 24)
    assert [r.signature for r in kept] == ["unknown"]


def test_boundary_is_inclusive():
    kept = filter_by_time_window([_sig("edge", 24)], NOW, 24)
    assert len(kept) == 1


def test_order_preserved():
    records = [_sig("a", 1), _sig("b", 50), _sig("c", None), _sig("d", 3)]
    kept = filter_by_time_window(records, NOW, 24)
    assert [r.signature for r in kept] == ["a", "c", "d"]


def test_random_sets_never_grow_and_respect_cutoff():
    rng = random.Random(7)
    cutoff = cutoff_for(NOW, 12)
    for _ in range(50):
        records = [
            _sig(f"s{i}", None if rng.random() < 0.1 else rng.uniform(0, 48))
            for i in range(rng.randint(0, 40))
        ]
        kept = filter_by_time_window(records, NOW, 12)
        assert len(kept) <= len(records)
        assert all(r.block_time is None or r.block_time >= cutoff for r in kept)
