"""
Per-run signature deduplication.

One instance per indexer run; never module-level. The check-and-insert is
guarded by a lock so concurrent fetch tasks (or threads) see each
signature admitted exactly once.
"""

from __future__ import annotations

import threading


class SignatureDeduplicator:
    """Set of signatures already scheduled for fetch in this run."""

    def __init__(self) -> None:
        self._seen: set[str] = set()
        self._lock = threading.Lock()

    def should_fetch(self, signature: str) -> bool:
        """Return True the first time signature is offered, False afterwards."""
        with self._lock:
            if signature in self._seen:
                return False
            self._seen.add(signature)
            return True

    def __contains__(self, signature: object) -> bool:
        with self._lock:
            return signature in self._seen

    def __len__(self) -> int:
        with self._lock:
            return len(self._seen)
