"""
Tests for RPC payload normalization and TransferEvent serialization.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from tests.conftest import (
    OTHER_ATA,
    OTHER_WALLET,
    TARGET_ATA,
    TARGET_WALLET,
    token_balance,
    tx_result,
)
from usdc_indexer.core.exceptions import MalformedRecord
from usdc_indexer.output import load_json, render_json
from usdc_indexer.solana_listener.models import (
    SignatureInfo,
    TokenBalanceSnapshot,
    TransactionRecord,
    TransferDirection,
    TransferEvent,
)


def test_signature_info_from_rpc_item():
    info = SignatureInfo.from_rpc_item(
        {"signature": "sigA", "slot": 12, "blockTime": 1_700_000_000, "err": None,
         "confirmationStatus": "confirmed"}
    )
    assert info.signature == "sigA"
    assert info.slot == 12
    assert info.block_time == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)
    assert info.failed is False
    assert info.confirmation_status == "confirmed"


def test_signature_info_missing_block_time_and_opaque_err():
    info = SignatureInfo.from_rpc_item(
        {"signature": "sigB", "slot": 1, "blockTime": None, "err": {"InstructionError": [0, "Custom"]}}
    )
    assert info.block_time is None
    assert info.failed is True


def test_signature_info_missing_fields_raise():
    with pytest.raises(MalformedRecord):
        SignatureInfo.from_rpc_item({"slot": 1})
    with pytest.raises(MalformedRecord):
        SignatureInfo.from_rpc_item({"signature": "x", "slot": "not-a-slot"})


def test_token_balance_prefers_ui_amount_string():
    item = token_balance(3, "0.1", TARGET_WALLET)
    item["uiTokenAmount"]["uiAmount"] = 0.1000000000000000055
    snap = TokenBalanceSnapshot.from_rpc_item(item)
    assert snap.ui_amount == Decimal("0.1")
    assert snap.owner == TARGET_WALLET
    assert snap.account_index == 3


def test_token_balance_null_amount():
    snap = TokenBalanceSnapshot.from_rpc_item(token_balance(0, None))
    assert snap.ui_amount is None
    assert snap.amount_or_zero == Decimal(0)


def test_transaction_record_from_rpc_result():
    raw = tx_result(
        "sig1",
        block_time=1_700_000_000,
        account_keys=[OTHER_WALLET, OTHER_ATA, TARGET_ATA],
        pre=[token_balance(1, "40.0", OTHER_WALLET)],
        post=[token_balance(1, "14.5", OTHER_WALLET), token_balance(2, "25.5", TARGET_WALLET)],
    )
    record = TransactionRecord.from_rpc_result(raw)
    assert record.signature == "sig1"
    assert record.succeeded is True
    assert record.account_keys == [OTHER_WALLET, OTHER_ATA, TARGET_ATA]
    assert len(record.pre_token_balances) == 1
    assert len(record.post_token_balances) == 2
    assert record.pre_balance_for(2) is None
    assert record.post_balance_for(2).ui_amount == Decimal("25.5")


def test_transaction_record_failed_and_missing_meta():
    failed = TransactionRecord.from_rpc_result(
        tx_result("s", block_time=None, account_keys=[TARGET_WALLET], pre=[], post=[],
                  err={"InstructionError": [0, {"Custom": 1}]})
    )
    assert failed.succeeded is False
    no_meta = TransactionRecord.from_rpc_result(
        tx_result("s", block_time=None, account_keys=[TARGET_WALLET], pre=[], post=[], with_meta=False)
    )
    assert no_meta.succeeded is False
    assert no_meta.has_balance_meta is False


def test_transaction_record_includes_loaded_addresses():
    raw = tx_result("s", block_time=None, account_keys=["A", "B"], pre=[], post=[])
    raw["meta"]["loadedAddresses"] = {"writable": ["C"], "readonly": ["D"]}
    record = TransactionRecord.from_rpc_result(raw)
    assert record.account_keys == ["A", "B", "C", "D"]


def test_transaction_record_without_signatures_is_malformed():
    raw = tx_result("s", block_time=None, account_keys=["A"], pre=[], post=[])
    raw["transaction"]["signatures"] = []
    with pytest.raises(MalformedRecord, match="No signature"):
        TransactionRecord.from_rpc_result(raw)


def test_transaction_record_bad_account_key_is_malformed():
    raw = tx_result("s", block_time=None, account_keys=["A"], pre=[], post=[])
    raw["transaction"]["message"]["accountKeys"] = ["A", 42]
    with pytest.raises(MalformedRecord):
        TransactionRecord.from_rpc_result(raw)


def test_transfer_event_json_round_trip_keeps_order_and_precision():
    base = datetime(2026, 10, 16, 9, 30, 15, tzinfo=timezone.utc)
    events = [
        TransferEvent("sigNew", base, OTHER_WALLET, TARGET_WALLET,
                      Decimal("25.500001"), TransferDirection.INCOMING),
        TransferEvent("sigOld", base - timedelta(hours=3), TARGET_WALLET, "Unknown",
                      Decimal("0.000001"), TransferDirection.OUTGOING),
        TransferEvent("sigOffset", datetime(2026, 10, 15, 23, 0, tzinfo=timezone(timedelta(hours=2))),
                      OTHER_WALLET, TARGET_WALLET, Decimal("123456789.123456"),
                      TransferDirection.INCOMING),
    ]
    restored = load_json(render_json(events))
    assert restored == events
    assert [e.timestamp.utcoffset() for e in restored] == [e.timestamp.utcoffset() for e in events]
    assert restored[1].amount == Decimal("0.000001")


def test_transfer_event_to_dict_shape():
    event = TransferEvent("sig", datetime(2026, 1, 1, tzinfo=timezone.utc), "a", "b",
                          Decimal("1.5"), TransferDirection.OUTGOING)
    d = event.to_dict()
    assert d["amount"] == "1.5"
    assert d["direction"] == "outgoing"
    assert d["is_incoming"] is False
    assert d["timestamp"] == "2026-01-01T00:00:00+00:00"


def test_transfer_event_from_dict_invalid():
    with pytest.raises(MalformedRecord):
        TransferEvent.from_dict({"signature": "x"})
