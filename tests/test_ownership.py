"""Tests for the three-state transfer ownership resolver."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from analytics.aggregation import internal_transfer_total, net_income, total_spending
from analytics.ownership import (
    is_internal_transfer,
    is_real_income,
    is_real_spending,
    resolve_transfer,
)
from core.data_loader import build_transactions
from core.models import OwnershipConfig
from core.validation import EngineInputError


def _transfer(tx_id: str, amount: float, source: str | None, target: str | None):
    (transaction,) = build_transactions(
        [
            {
                "id": tx_id,
                "date": "2025-03-01",
                "amount": amount,
                "description": "Transfer",
                "category": "Transfer",
                "kind": "transferInternal",
                "sourceKey": source,
                "targetKey": target,
            }
        ]
    )
    return transaction


@pytest.fixture()
def ownership() -> dict[str, str]:
    return {"checking": "spending", "savings": "spending", "card": "payment"}


def test_spending_accounts_are_internal_in_both_directions(ownership):
    forward = _transfer("t1", -300.0, "checking", "savings")
    backward = _transfer("t2", -300.0, "savings", "checking")

    assert resolve_transfer(forward, ownership) == "internal"
    assert resolve_transfer(backward, ownership) == "internal"
    assert is_internal_transfer(forward, ownership) == is_internal_transfer(backward, ownership)


def test_payment_conduit_counts_as_spending(ownership):
    payment = _transfer("t1", -200.0, "checking", "card")

    assert resolve_transfer(payment, ownership) == "spending"
    assert is_real_spending(payment, ownership)
    assert not is_internal_transfer(payment, ownership)
    assert internal_transfer_total([payment], ownership) == pytest.approx(0.0)
    assert total_spending([payment], ownership) == pytest.approx(200.0)


def test_owned_pair_with_payment_leg_moves_by_sign(ownership):
    accounts = {**ownership, "card2": "payment"}
    card_to_checking_out = _transfer("t1", -120.0, "card", "checking")
    card_to_checking_in = _transfer("t2", 80.0, "card", "checking")
    card_to_card = _transfer("t3", -40.0, "card", "card2")
    legs = [card_to_checking_out, card_to_checking_in, card_to_card]

    assert resolve_transfer(card_to_checking_out, accounts) == "spending"
    assert resolve_transfer(card_to_checking_in, accounts) == "income"
    assert resolve_transfer(card_to_card, accounts) == "spending"
    assert is_real_income(card_to_checking_in, accounts)
    assert net_income(legs, accounts) == pytest.approx(80.0)
    assert total_spending(legs, accounts) == pytest.approx(160.0)


def test_unowned_counterparty_moves_by_sign(ownership):
    outgoing = _transfer("t1", -75.0, "checking", "landlord")
    incoming = _transfer("t2", 75.0, "friend", "checking")

    assert resolve_transfer(outgoing, ownership) == "spending"
    assert resolve_transfer(incoming, ownership) == "income"
    assert is_real_income(incoming, ownership)


def test_missing_keys_mean_real_movement():
    assert resolve_transfer(_transfer("t1", -50.0, None, None)) == "spending"
    assert resolve_transfer(_transfer("t2", 50.0, "checking", None)) == "income"
    assert resolve_transfer(_transfer("t3", 0.0, None, None)) == "ignored"


def test_non_transfers_are_not_applicable():
    (expense,) = build_transactions(
        [{"id": "e1", "date": "2025-03-02", "amount": -12.5, "description": "Cafe", "category": "Dining"}]
    )

    assert resolve_transfer(expense) == "not_applicable"
    assert is_real_spending(expense)
    assert not is_real_income(expense)


def test_unknown_mode_is_treated_as_not_mine(caplog):
    with caplog.at_level(logging.WARNING, logger="clearledger"):
        config = OwnershipConfig.from_mapping({"checking": "spending", "joint": "shared"})

    assert config.mode_for("joint") == "notMine"
    assert config.mode_for("never-seen") == "notMine"
    assert any("Unknown ownership mode" in record.getMessage() for record in caplog.records)


def test_mode_aliases_are_accepted():
    config = OwnershipConfig.from_mapping({"a": "not_mine", "b": "PAYMENT"})

    assert config.mode_for("a") == "notMine"
    assert config.mode_for("b") == "payment"
    assert config.is_owned("b")


def test_ownership_config_is_read_only():
    config = OwnershipConfig.from_mapping({"checking": "spending"})

    with pytest.raises(TypeError):
        config.modes["checking"] = "notMine"


def test_non_mapping_ownership_fails_fast():
    transfer = _transfer("t1", -20.0, "checking", "savings")

    with pytest.raises(EngineInputError):
        internal_transfer_total([transfer], ["checking", "savings"])
