"""
Solana JSON-RPC client — getSignaturesForAddress and getTransaction.

Thin async wrapper over httpx. Transport failures, non-2xx statuses,
undecodable bodies and JSON-RPC error members all surface as TransportError;
a null getTransaction result is returned as None (not found).
"""

from __future__ import annotations

import itertools
from typing import Any

import httpx

from usdc_indexer.config.settings import (
    DEFAULT_COMMITMENT,
    DEFAULT_REQUEST_TIMEOUT_SEC,
    MAX_SIGNATURES_LIMIT,
)
from usdc_indexer.core.exceptions import MalformedRecord, TransportError
from usdc_indexer.indexer_logging import get_logger
from usdc_indexer.solana_listener.models import SignatureInfo, TransactionRecord

logger = get_logger(__name__)


def _short(value: str, n: int = 16) -> str:
    return value[:n] + "..." if len(value) > n else value


class SolanaRpcClient:
    """
    Async JSON-RPC client for one Solana endpoint.

    Use as an async context manager so the underlying httpx.AsyncClient is
    closed; or pass an existing client (e.g. with a MockTransport in tests).
    Safe to share across concurrent tasks.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout_sec: float = DEFAULT_REQUEST_TIMEOUT_SEC,
        commitment: str = DEFAULT_COMMITMENT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        self._rpc_url = rpc_url.rstrip("/")
        self._commitment = commitment
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_sec))
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "SolanaRpcClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _build_body(self, method: str, params: list[Any]) -> dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }

    async def _call(self, method: str, params: list[Any]) -> Any:
        """Perform one JSON-RPC call; return the result member or raise TransportError."""
        body = self._build_body(method, params)
        try:
            resp = await self._client.post(self._rpc_url, json=body)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as e:
            raise TransportError(f"{method} request failed: {e}") from e
        except ValueError as e:
            raise TransportError(f"{method} returned invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise TransportError(f"{method} returned a non-object envelope")
        if "error" in data and data["error"] is not None:
            err = data["error"]
            message = err.get("message", err) if isinstance(err, dict) else err
            code = err.get("code") if isinstance(err, dict) else None
            raise TransportError(f"Solana RPC error: {message} (code={code})")
        if "result" not in data:
            raise TransportError(f"{method} envelope has no result")
        return data["result"]

    async def get_signatures_for_address(
        self,
        address: str,
        limit: int = MAX_SIGNATURES_LIMIT,
    ) -> list[SignatureInfo]:
        """
        Fetch one page of signatures for address, newest first.

        Raises TransportError if the call fails, the result is not a list, or
        any item cannot be interpreted; a partial listing is never returned.
        """
        limit = max(1, min(int(limit), MAX_SIGNATURES_LIMIT))
        result = await self._call(
            "getSignaturesForAddress",
            [address, {"limit": limit, "commitment": self._commitment}],
        )
        if not isinstance(result, list):
            raise TransportError("getSignaturesForAddress result is not a list")
        infos: list[SignatureInfo] = []
        for position, item in enumerate(result):
            try:
                infos.append(SignatureInfo.from_rpc_item(item))
            except MalformedRecord as e:
                raise TransportError(
                    f"getSignaturesForAddress item {position} is malformed: {e}"
                ) from e
        return infos

    async def get_transaction(self, signature: str) -> TransactionRecord | None:
        """
        Fetch a single transaction by signature (json encoding, versioned allowed).

        Returns None when the ledger reports no such transaction.
        Raises TransportError or MalformedRecord.
        """
        result = await self._call(
            "getTransaction",
            [
                signature,
                {
                    "encoding": "json",
                    "commitment": self._commitment,
                    "maxSupportedTransactionVersion": 0,
                },
            ],
        )
        if result is None:
            logger.debug("rpc_transaction_not_found", signature=_short(signature))
            return None
        return TransactionRecord.from_rpc_result(result)
