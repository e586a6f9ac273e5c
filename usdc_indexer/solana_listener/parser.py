"""
USDC transfer parser — token-balance deltas to directional transfers.

Transfers are not read from instructions. For every post-transaction token
balance of the tracked mint, the parser diffs it against the matching
pre-transaction balance; when the account is owned by the target wallet,
the delta becomes an incoming or outgoing TransferEvent and the other side
is resolved heuristically from the remaining balance changes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from usdc_indexer.core.exceptions import MalformedRecord
from usdc_indexer.indexer_logging import get_logger
from usdc_indexer.solana_listener.models import (
    USDC_MINT,
    TokenBalanceSnapshot,
    TransactionRecord,
    TransferDirection,
    TransferEvent,
)

logger = get_logger(__name__)

# Deltas below this are decimal noise, not transfers
MIN_SIGNIFICANT_CHANGE = Decimal("0.000001")
UNKNOWN_COUNTERPARTY = "Unknown"


def _resolve_owner(
    balance: TokenBalanceSnapshot,
    account_keys: list[str],
) -> str | None:
    """
    Owner of a token account: the reported owner, else the account key just
    before it in the message (positional guess, not verified on chain).
    """
    if balance.owner is not None:
        return balance.owner
    if balance.account_index > 0:
        return account_keys[balance.account_index - 1]
    return None


def _owner_or_key(balance: TokenBalanceSnapshot, account_keys: list[str]) -> str | None:
    if balance.owner is not None:
        return balance.owner
    if 0 <= balance.account_index < len(account_keys):
        return account_keys[balance.account_index]
    return None


def find_sender_address(
    record: TransactionRecord,
    target_account_index: int,
    mint: str = USDC_MINT,
) -> str | None:
    """
    First other account of the same mint whose balance went down.

    Scans pre balances in order; no amount matching, first match wins.
    Returns None when either token balance list was not reported.
    """
    if not record.both_balance_lists_reported:
        return None
    for pre_balance in record.pre_token_balances:
        if pre_balance.mint != mint or pre_balance.account_index == target_account_index:
            continue
        post_balance = record.post_balance_for(pre_balance.account_index)
        pre_amount = pre_balance.amount_or_zero
        post_amount = post_balance.amount_or_zero if post_balance else Decimal(0)
        if pre_amount > post_amount:
            return _owner_or_key(pre_balance, record.account_keys)
    return None


def find_recipient_address(
    record: TransactionRecord,
    sender_account_index: int,
    mint: str = USDC_MINT,
) -> str | None:
    """
    First other account of the same mint whose balance went up (post balances, in order).

    Returns None when either token balance list was not reported.
    """
    if not record.both_balance_lists_reported:
        return None
    for post_balance in record.post_token_balances:
        if post_balance.mint != mint or post_balance.account_index == sender_account_index:
            continue
        pre_balance = record.pre_balance_for(post_balance.account_index)
        pre_amount = pre_balance.amount_or_zero if pre_balance else Decimal(0)
        post_amount = post_balance.amount_or_zero
        if post_amount > pre_amount:
            return _owner_or_key(post_balance, record.account_keys)
    return None


def parse_usdc_transfers(
    record: TransactionRecord,
    target_wallet: str,
    *,
    mint: str = USDC_MINT,
    now: datetime | None = None,
) -> list[TransferEvent]:
    """
    Reconstruct transfers touching target_wallet from one transaction.

    Failed transactions and transactions without meta yield nothing. When
    the record has no blockTime, now (default: current UTC time) is used.
    Raises MalformedRecord when a balance points outside the account keys.
    """
    if not record.succeeded or not record.has_balance_meta:
        return []

    timestamp = record.block_time or now or datetime.now(timezone.utc)
    transfers: list[TransferEvent] = []

    for post_balance in record.post_token_balances:
        if post_balance.mint != mint:
            continue

        pre_balance = record.pre_balance_for(post_balance.account_index)
        pre_amount = pre_balance.amount_or_zero if pre_balance else Decimal(0)
        post_amount = post_balance.amount_or_zero
        amount_change = post_amount - pre_amount

        if abs(amount_change) < MIN_SIGNIFICANT_CHANGE:
            continue

        if not 0 <= post_balance.account_index < len(record.account_keys):
            raise MalformedRecord(
                f"Account index {post_balance.account_index} out of bounds "
                f"({len(record.account_keys)} account keys)"
            )

        owner = _resolve_owner(post_balance, record.account_keys)
        if owner != target_wallet:
            continue

        if amount_change > 0:
            from_address = find_sender_address(
                record, post_balance.account_index, mint
            ) or UNKNOWN_COUNTERPARTY
            transfers.append(
                TransferEvent(
                    signature=record.signature,
                    timestamp=timestamp,
                    from_address=from_address,
                    to_address=target_wallet,
                    amount=amount_change,
                    direction=TransferDirection.INCOMING,
                )
            )
        else:
            to_address = find_recipient_address(
                record, post_balance.account_index, mint
            ) or UNKNOWN_COUNTERPARTY
            transfers.append(
                TransferEvent(
                    signature=record.signature,
                    timestamp=timestamp,
                    from_address=target_wallet,
                    to_address=to_address,
                    amount=abs(amount_change),
                    direction=TransferDirection.OUTGOING,
                )
            )

    if transfers:
        logger.debug(
            "parser_transfers_found",
            signature=record.signature[:16],
            count=len(transfers),
        )
    return transfers
