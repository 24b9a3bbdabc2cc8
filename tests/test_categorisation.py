"""Unit tests for category rules, text normalisation and kind inference."""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from analytics.categorisation import (
    display_category,
    infer_kind,
    is_billish_description,
    matches_known_merchant,
    normalize_category_name,
    recategorize,
    resolve_classification,
)
from analytics.categorize import (
    extract_account_label,
    normalize_recurring_label,
    normalize_transfer_account_key,
    parse_institution_and_last4,
)
from core.data_loader import build_transactions


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("bills", "Bills & services"),
        ("groceries", "Groceries"),
        ("  Dining ", "Dining"),
        ("Crypto", "Crypto"),
    ],
)
def test_normalize_category_name(raw, expected):
    assert normalize_category_name(raw) == expected


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("State University tuition", "Education"),
        ("Auto loan servicer", "Loans"),
        ("Acme insurance premium", "Insurance"),
        ("Phone bill", "Bills & services"),
    ],
)
def test_display_category_refines_bills(description, expected):
    assert display_category("Bills & services", description) == expected


def test_display_category_leaves_other_categories_alone():
    assert display_category("Groceries", "University market") == "Groceries"


@pytest.mark.parametrize(
    ("amount", "category", "description", "expected"),
    [
        (-15.99, "Subscriptions", "Streaming", "subscription"),
        (2500.0, "Income", "Payroll", "income"),
        (12.0, "Other", "Amazon refund", "refund"),
        (-35.0, "Fees", "Overdraft fee", "fee"),
        (-100.0, "Transfer", "Transfer to savings", "transferExternal"),
        (-20.0, "Groceries", "Aldi", "expense"),
    ],
)
def test_infer_kind(amount, category, description, expected):
    assert infer_kind(amount, category, description) == expected


def test_infer_kind_treats_keyed_movement_as_transfer():
    assert infer_kind(-50.0, "Other", "Move money", "acct-a", "acct-b") == "transferExternal"


def test_resolve_classification_for_utility_bill():
    classification = resolve_classification("Utilities", "expense", "City Electric Co")

    assert classification.is_bill_like
    assert classification.is_essential
    assert classification.is_recurring_candidate
    assert classification.groups == ("rent_utils",)


def test_transfers_are_never_recurring_candidates():
    classification = resolve_classification("Transfer", "transferExternal", "Credit card payment")

    assert classification.is_transfer
    assert not classification.is_recurring_candidate


def test_payment_descriptions_are_recurring_candidates():
    classification = resolve_classification("Other", "expense", "Home internet")

    assert classification.is_recurring_candidate
    assert not classification.is_bill_like


def test_billish_and_known_merchant_hints():
    assert is_billish_description("Verizon wireless plan")
    assert not is_billish_description("Coffee shop")
    assert matches_known_merchant("Trader Joes #55", "Groceries")
    assert not matches_known_merchant("Trader Joes #55", "Dining")


def test_recategorize_returns_new_transaction():
    (original,) = build_transactions(
        [{"id": "t1", "date": "2025-01-05", "amount": -120.0, "description": "Tuition office", "category": "Other"}]
    )

    moved = recategorize(original, "Bills & services")

    assert moved.id == original.id
    assert moved.category == "Bills & services"
    assert moved.classification.display_category == "Education"
    assert original.category == "Other"
    assert original.date == date(2025, 1, 5)


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("Netflix ending 1234", "netflix"),
        ("Verizon Wireless 0423", "verizon wireless"),
        ("  SPOTIFY   Premium ", "spotify premium"),
        ("1234", ""),
    ],
)
def test_normalize_recurring_label(description, expected):
    assert normalize_recurring_label(description) == expected


def test_normalize_transfer_account_key():
    assert normalize_transfer_account_key("Transfer to Chase Checking 4321") == "chase::4321"
    assert normalize_transfer_account_key("Transfer from Venmo") == "venmo::"


def test_parse_institution_and_last4():
    parsed = parse_institution_and_last4("Chase Visa ending 1234")

    assert parsed.name == "chase"
    assert parsed.last4 == "1234"


def test_account_ending_wording_shares_one_key():
    assert normalize_transfer_account_key("Transfer to Chase ending 1234") == "chase::1234"
    assert normalize_transfer_account_key("Transfer to Chase 1234") == "chase::1234"
    assert normalize_transfer_account_key("Transfer to Chase *1234") == "chase::1234"


def test_extract_account_label_keeps_account_wording():
    parsed = extract_account_label("Transfer to Chase Checking ending 4321")

    assert parsed.name == "chase checking"
    assert parsed.last4 == "4321"
    assert extract_account_label("Transfer from Venmo") == ("venmo", None)
