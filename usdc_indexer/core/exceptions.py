"""
Application-level exceptions.

Listing failures are fatal to a run; per-transaction failures are
isolated by the pipeline and logged.
"""

from __future__ import annotations


class IndexerError(Exception):
    """Base class for all indexer errors."""


class TransportError(IndexerError):
    """RPC call could not complete or returned a malformed envelope."""


class NotFound(IndexerError):
    """No transaction exists for the given signature."""


class MalformedRecord(IndexerError):
    """A fetched record's fields cannot be interpreted."""


class InvalidAddress(IndexerError, ValueError):
    """Configured wallet address fails base58 pubkey validation."""
