"""
Rendering of transfer lists: JSON for machines, a text summary for people.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Sequence

from usdc_indexer.core.exceptions import MalformedRecord
from usdc_indexer.solana_listener.models import TransferEvent

RULE = "═" * 63


@dataclass(frozen=True)
class TransferSummary:
    count: int
    total_received: Decimal
    total_sent: Decimal

    @property
    def net_change(self) -> Decimal:
        return self.total_received - self.total_sent


def summarize(transfers: Sequence[TransferEvent]) -> TransferSummary:
    received = sum((t.amount for t in transfers if t.is_incoming), Decimal(0))
    sent = sum((t.amount for t in transfers if not t.is_incoming), Decimal(0))
    return TransferSummary(count=len(transfers), total_received=received, total_sent=sent)


def render_json(transfers: Sequence[TransferEvent]) -> str:
    return json.dumps([t.to_dict() for t in transfers], indent=2)


def load_json(text: str) -> list[TransferEvent]:
    """Inverse of render_json."""
    try:
        data = json.loads(text)
    except ValueError as e:
        raise MalformedRecord(f"Invalid transfer JSON: {e}") from e
    if not isinstance(data, list):
        raise MalformedRecord("Transfer JSON must be an array")
    return [TransferEvent.from_dict(item) for item in data]


def _fmt(amount: Decimal) -> str:
    return f"{amount:.6f}"


def render_pretty(transfers: Sequence[TransferEvent]) -> str:
    """Human-readable report: one block per transfer plus received/sent/net totals."""
    lines = [
        "",
        "USDC Transfer Summary",
        RULE,
        f"Found {len(transfers)} USDC transfers",
        "",
    ]
    if not transfers:
        lines.append("No USDC transfers found in the specified time period.")
        return "\n".join(lines)

    for t in transfers:
        direction = "RECEIVED" if t.is_incoming else "SENT"
        lines.append(
            f"{t.timestamp.strftime('%Y-%m-%d %H:%M:%S UTC')} | {direction} | ${_fmt(t.amount)} USDC"
        )
        lines.append(f"   Transaction: {t.signature}")
        if t.is_incoming:
            lines.append(f"   From: {t.from_address}")
        else:
            lines.append(f"   To: {t.to_address}")
        lines.append("")

    summary = summarize(transfers)
    lines.extend([
        RULE,
        f"Total Received: ${_fmt(summary.total_received)} USDC",
        f"Total Sent: ${_fmt(summary.total_sent)} USDC",
        f"Net Change: ${_fmt(summary.net_change)} USDC",
        RULE,
    ])
    return "\n".join(lines)
