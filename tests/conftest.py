"""
Pytest fixtures for USDC indexer tests: RPC payload builders and a fake
JSON-RPC endpoint on httpx.MockTransport.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable

import httpx
import pytest

from usdc_indexer.solana_listener.models import USDC_MINT

# Valid Solana pubkeys (base58, 32 bytes)
TARGET_WALLET = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
OTHER_WALLET = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"
THIRD_WALLET = "7cMEhpt9y3inBNVv8fNnuaEbx7hKHZnLvR1KWKKxuDDU"
TARGET_ATA = "TargetTokenAccount1111111111111111111111111"
OTHER_ATA = "OtherTokenAccount11111111111111111111111111"
THIRD_ATA = "ThirdTokenAccount11111111111111111111111111"
OTHER_MINT = "So11111111111111111111111111111111111111112"

NOW = datetime(2026, 10, 16, 12, 0, 0, tzinfo=timezone.utc)
RPC_URL = "https://rpc.test.invalid"


def token_balance(
    index: int,
    amount: str | float | None,
    owner: str | None = None,
    mint: str = USDC_MINT,
) -> dict[str, Any]:
    ui: dict[str, Any] = {"amount": "0", "decimals": 6, "uiAmount": None, "uiAmountString": ""}
    if amount is not None:
        ui["uiAmount"] = float(amount)
        ui["uiAmountString"] = str(amount)
    item: dict[str, Any] = {"accountIndex": index, "mint": mint, "uiTokenAmount": ui}
    if owner is not None:
        item["owner"] = owner
    return item


def tx_result(
    signature: str,
    *,
    block_time: int | None,
    account_keys: list[str],
    pre: list[dict[str, Any]],
    post: list[dict[str, Any]],
    err: Any = None,
    with_meta: bool = True,
) -> dict[str, Any]:
    raw: dict[str, Any] = {
        "slot": 250_000_000,
        "blockTime": block_time,
        "transaction": {
            "signatures": [signature],
            "message": {"accountKeys": account_keys, "instructions": [], "recentBlockhash": "x"},
        },
    }
    if with_meta:
        raw["meta"] = {
            "err": err,
            "fee": 5000,
            "preBalances": [],
            "postBalances": [],
            "preTokenBalances": pre,
            "postTokenBalances": post,
            "status": {"Ok": None} if err is None else {"Err": err},
        }
    else:
        raw["meta"] = None
    return raw


def incoming_tx(signature: str, block_time: int | None, amount_in: str = "25.5") -> dict[str, Any]:
    """OTHER_WALLET pays TARGET_WALLET amount_in USDC (target starts at 0)."""
    return tx_result(
        signature,
        block_time=block_time,
        account_keys=[OTHER_WALLET, OTHER_ATA, TARGET_ATA],
        pre=[token_balance(1, "40.0", OTHER_WALLET)],
        post=[
            token_balance(1, str(40 - float(amount_in)), OTHER_WALLET),
            token_balance(2, amount_in, TARGET_WALLET),
        ],
    )


def ts(dt: datetime) -> int:
    return int(dt.timestamp())


class FakeRpc:
    """
    Route JSON-RPC bodies by method. signatures: list of getSignaturesForAddress items;
    transactions: signature -> result (None for not found, Exception to fail with HTTP 500).
    """

    def __init__(
        self,
        signatures: list[dict[str, Any]] | None = None,
        transactions: dict[str, Any] | None = None,
    ) -> None:
        self.signatures = signatures or []
        self.transactions = transactions or {}
        self.requests: list[dict[str, Any]] = []
        self.signatures_error: dict[str, Any] | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        method = body["method"]
        if method == "getSignaturesForAddress":
            if self.signatures_error is not None:
                return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": self.signatures_error})
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": self.signatures})
        if method == "getTransaction":
            sig = body["params"][0]
            result = self.transactions.get(sig)
            if isinstance(result, Exception):
                return httpx.Response(500, text="upstream failure")
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})
        return httpx.Response(400, json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32601, "message": "Method not found"}})

    def methods(self) -> list[str]:
        return [r["method"] for r in self.requests]


@pytest.fixture
def fake_rpc() -> FakeRpc:
    return FakeRpc()


@pytest.fixture
def make_http_client() -> Callable[[FakeRpc], httpx.AsyncClient]:
    def _make(handler: FakeRpc) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make


async def no_sleep(_: float) -> None:
    return None
