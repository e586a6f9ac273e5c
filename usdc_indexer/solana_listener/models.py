"""
Data models for Solana RPC payloads and reconstructed USDC transfers.

Responsibilities:
- Normalize getSignaturesForAddress items and getTransaction results into
  immutable dataclasses the pipeline can rely on.
- Keep token amounts as Decimal end to end (no float drift).
- Serialize TransferEvent to/from JSON-ready dicts without loss.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

from usdc_indexer.core.exceptions import MalformedRecord

# USDC mint address on Solana mainnet
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


def block_time_to_datetime(value: Any) -> datetime | None:
    """Convert an RPC blockTime (unix seconds) to an aware UTC datetime; None if absent."""
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError) as e:
        raise MalformedRecord(f"Invalid blockTime: {value!r}") from e


def _to_decimal(value: Any) -> Decimal | None:
    if value is None:
        return None
    try:
        # str() first so floats keep their shortest repr, not binary expansion
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise MalformedRecord(f"Invalid token amount: {value!r}") from e


@dataclass(frozen=True)
class SignatureInfo:
    """
    Normalized transaction signature info from getSignaturesForAddress.

    err is an opaque RPC payload; only its presence matters.
    """

    signature: str
    slot: int
    block_time: datetime | None
    err: Any = None
    confirmation_status: str | None = None

    @property
    def failed(self) -> bool:
        return self.err is not None

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "SignatureInfo":
        """Build from a single getSignaturesForAddress result item."""
        if not isinstance(item, dict):
            raise MalformedRecord(f"Signature item is not an object: {type(item).__name__}")
        try:
            signature = item["signature"]
            slot = int(item["slot"])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedRecord(f"Invalid signature item: {e}") from e
        if not isinstance(signature, str) or not signature:
            raise MalformedRecord("Signature item has empty signature")
        return cls(
            signature=signature,
            slot=slot,
            block_time=block_time_to_datetime(item.get("blockTime")),
            err=item.get("err"),
            confirmation_status=item.get("confirmationStatus"),
        )


@dataclass(frozen=True)
class TokenBalanceSnapshot:
    """Balance of one token account immediately before or after a transaction."""

    account_index: int
    mint: str
    owner: str | None
    ui_amount: Decimal | None

    @property
    def amount_or_zero(self) -> Decimal:
        return self.ui_amount if self.ui_amount is not None else Decimal(0)

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "TokenBalanceSnapshot":
        """
        Build from a pre/postTokenBalances entry.

        uiAmountString is preferred over uiAmount: it is the exact decimal
        rendering, uiAmount is a JSON float.
        """
        if not isinstance(item, dict):
            raise MalformedRecord("Token balance entry is not an object")
        try:
            account_index = int(item["accountIndex"])
            mint = str(item["mint"])
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedRecord(f"Invalid token balance entry: {e}") from e
        ui = item.get("uiTokenAmount") or {}
        if not isinstance(ui, dict):
            raise MalformedRecord("uiTokenAmount is not an object")
        raw_amount = ui.get("uiAmountString")
        if raw_amount in (None, ""):
            raw_amount = ui.get("uiAmount")
        owner = item.get("owner")
        return cls(
            account_index=account_index,
            mint=mint,
            owner=owner if isinstance(owner, str) and owner else None,
            ui_amount=_to_decimal(raw_amount),
        )


def _account_keys(message: dict[str, Any], meta: dict[str, Any] | None) -> list[str]:
    """
    Resolve accountKeys to a list of base58 strings (handles json vs jsonParsed).
    For versioned transactions, appends meta.loadedAddresses (writable + readonly).
    """
    keys = message.get("accountKeys")
    if not isinstance(keys, list):
        raise MalformedRecord("Transaction message has no accountKeys")
    out: list[str] = []
    for k in keys:
        if isinstance(k, str):
            out.append(k)
        elif isinstance(k, dict) and isinstance(k.get("pubkey"), str):
            out.append(k["pubkey"])
        else:
            raise MalformedRecord(f"Unparsable account key: {k!r}")
    loaded = (meta or {}).get("loadedAddresses") or {}
    for role in ("writable", "readonly"):
        for addr in loaded.get(role) or []:
            if not isinstance(addr, str):
                raise MalformedRecord(f"Unparsable loaded address: {addr!r}")
            out.append(addr)
    return out


def _snapshots(raw: Any) -> list[TokenBalanceSnapshot]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise MalformedRecord("Token balances are not a list")
    return [TokenBalanceSnapshot.from_rpc_item(item) for item in raw]


@dataclass(frozen=True)
class TransactionRecord:
    """
    Structured view of a getTransaction result (json encoding).

    succeeded is False when meta is missing or meta.err is set.
    has_balance_meta is False when meta is missing entirely.
    pre_balances_reported / post_balances_reported are False when the node
    sent null for that token balance list (read back as an empty list).
    """

    signature: str
    succeeded: bool
    block_time: datetime | None
    account_keys: list[str]
    pre_token_balances: list[TokenBalanceSnapshot] = field(default_factory=list)
    post_token_balances: list[TokenBalanceSnapshot] = field(default_factory=list)
    slot: int | None = None
    has_balance_meta: bool = True
    pre_balances_reported: bool = True
    post_balances_reported: bool = True

    @property
    def both_balance_lists_reported(self) -> bool:
        return self.pre_balances_reported and self.post_balances_reported

    def pre_balance_for(self, account_index: int) -> TokenBalanceSnapshot | None:
        for pb in self.pre_token_balances:
            if pb.account_index == account_index:
                return pb
        return None

    def post_balance_for(self, account_index: int) -> TokenBalanceSnapshot | None:
        for pb in self.post_token_balances:
            if pb.account_index == account_index:
                return pb
        return None

    @classmethod
    def from_rpc_result(cls, raw: dict[str, Any]) -> "TransactionRecord":
        """Build from a non-null getTransaction result; raise MalformedRecord on bad shape."""
        if not isinstance(raw, dict):
            raise MalformedRecord("Transaction result is not an object")
        tx_obj = raw.get("transaction")
        if not isinstance(tx_obj, dict):
            raise MalformedRecord("Transaction result has no transaction object")
        message = tx_obj.get("message")
        if not isinstance(message, dict):
            raise MalformedRecord("Transaction has no message")
        signatures = tx_obj.get("signatures")
        if not isinstance(signatures, list) or not signatures:
            raise MalformedRecord("No signature found")
        meta = raw.get("meta")
        if meta is not None and not isinstance(meta, dict):
            raise MalformedRecord("Transaction meta is not an object")

        slot = raw.get("slot")
        raw_pre = (meta or {}).get("preTokenBalances")
        raw_post = (meta or {}).get("postTokenBalances")
        return cls(
            signature=str(signatures[0]),
            succeeded=meta is not None and meta.get("err") is None,
            block_time=block_time_to_datetime(raw.get("blockTime")),
            account_keys=_account_keys(message, meta),
            pre_token_balances=_snapshots(raw_pre),
            post_token_balances=_snapshots(raw_post),
            slot=int(slot) if slot is not None else None,
            has_balance_meta=meta is not None,
            pre_balances_reported=raw_pre is not None,
            post_balances_reported=raw_post is not None,
        )


class TransferDirection(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


@dataclass(frozen=True)
class TransferEvent:
    """
    One USDC movement into or out of the target wallet.

    amount is always non-negative; direction carries the sign.
    """

    signature: str
    timestamp: datetime
    from_address: str
    to_address: str
    amount: Decimal
    direction: TransferDirection

    @property
    def is_incoming(self) -> bool:
        return self.direction is TransferDirection.INCOMING

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable dict; amount as decimal string, timestamp as ISO 8601."""
        return {
            "signature": self.signature,
            "timestamp": self.timestamp.isoformat(),
            "from_address": self.from_address,
            "to_address": self.to_address,
            "amount": str(self.amount),
            "direction": self.direction.value,
            "is_incoming": self.is_incoming,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransferEvent":
        try:
            return cls(
                signature=data["signature"],
                timestamp=datetime.fromisoformat(data["timestamp"]),
                from_address=data["from_address"],
                to_address=data["to_address"],
                amount=Decimal(str(data["amount"])),
                direction=TransferDirection(data["direction"]),
            )
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise MalformedRecord(f"Invalid transfer object: {e}") from e
