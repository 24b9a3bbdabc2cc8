"""Tests for ingestion, settings and the engine report facade."""

from __future__ import annotations

import logging
import sys
from datetime import date
from pathlib import Path

import pandas as pd
import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config.log import configure_logging
from config.settings import Settings, get_settings
from core.data_loader import build_transactions, load_transactions, parse_calendar_date
from core.summary_service import prepare_engine_report, prepare_report_from_csv
from core.validation import EngineInputError


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset cached settings and loaded CSVs between tests."""

    for name in list(Settings.model_fields):
        monkeypatch.delenv(f"CLEARLEDGER_{name.upper()}", raising=False)
    get_settings.cache_clear()
    load_transactions.cache_clear()
    yield
    get_settings.cache_clear()
    load_transactions.cache_clear()


@pytest.fixture()
def sample_records() -> list[dict]:
    return [
        {"id": "pay", "date": "2025-01-01", "amount": 3000.0, "description": "Payroll", "category": "Income"},
        {"id": "a", "date": "2025-01-01", "amount": -15.99, "description": "Streaming", "category": "Subscriptions"},
        {"id": "b", "date": "2025-01-15", "amount": -15.99, "description": "Streaming", "category": "Subscriptions"},
        {"id": "c", "date": "2025-02-01", "amount": -15.99, "description": "Streaming", "category": "Subscriptions"},
        {"id": "d", "date": "2025-02-03", "amount": -15.99, "description": "Streaming", "category": "Subscriptions"},
        {
            "id": "save",
            "date": "2025-01-02",
            "amount": -400.0,
            "description": "Transfer to Savings 9876",
            "category": "Transfer",
            "sourceKey": "checking",
            "targetKey": "savings",
        },
    ]


@pytest.fixture()
def sample_csv(sample_records, tmp_path) -> str:
    csv_path = tmp_path / "transactions.csv"
    pd.DataFrame(sample_records).to_csv(csv_path, index=False)
    return str(csv_path)


def test_parse_calendar_date():
    assert parse_calendar_date("2025-02-01T10:30:00Z") == date(2025, 2, 1)
    assert parse_calendar_date(date(2025, 2, 1)) == date(2025, 2, 1)
    assert parse_calendar_date(pd.Timestamp("2025-02-01 08:00")) == date(2025, 2, 1)
    assert parse_calendar_date("2025-02-30") is None
    assert parse_calendar_date("") is None
    assert parse_calendar_date(None) is None


def test_build_transactions_accepts_key_aliases(sample_records):
    transactions = build_transactions(sample_records)
    transfer = transactions[-1]

    assert transfer.kind == "transferExternal"
    assert transfer.source_account_key == "checking"
    assert transfer.target_account_key == "savings"
    assert transactions[1].kind == "subscription"


def test_build_transactions_infers_unknown_kind(caplog):
    with caplog.at_level(logging.WARNING, logger="clearledger"):
        (transaction,) = build_transactions(
            [{"id": "x", "date": "2025-01-01", "amount": -5.0, "description": "Snack", "category": "Dining", "kind": "??"}]
        )

    assert transaction.kind == "expense"
    assert any("unknown kind" in record.getMessage() for record in caplog.records)


@pytest.mark.parametrize(
    "record",
    [
        {"date": "2025-01-01", "amount": -5.0, "description": "No id", "category": "Other"},
        {"id": "x", "date": "2025-01-01", "amount": "lots", "description": "Bad amount", "category": "Other"},
    ],
)
def test_build_transactions_rejects_broken_records(record):
    with pytest.raises(ValueError):
        build_transactions([record])


def test_build_transactions_requires_an_iterable_of_mappings():
    with pytest.raises(EngineInputError):
        build_transactions(None)
    with pytest.raises(EngineInputError):
        build_transactions(["not a mapping"])


def test_load_transactions_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_transactions(tmp_path / "missing.csv")


def test_load_transactions_reads_csv(sample_csv):
    transactions = load_transactions(sample_csv)

    assert [tx.id for tx in transactions] == ["pay", "a", "b", "c", "d", "save"]
    assert transactions[0].source_account_key is None
    assert transactions[-1].target_account_key == "savings"


def test_prepare_engine_report(sample_records):
    transactions = build_transactions(sample_records)
    ownership = {"checking": "spending", "savings": "spending"}

    report = prepare_engine_report(transactions, ownership, {"d": "dismissed"})

    summary = report["summary"]
    assert summary["total_income"] == pytest.approx(3000.0)
    assert summary["total_spending"] == pytest.approx(63.96)
    assert summary["internal_transfers_total"] == pytest.approx(400.0)
    assert summary["subscription_count"] == 4

    (cluster,) = report["duplicate_clusters"]
    assert [tx.id for tx in cluster["suspicious_transactions"]] == ["c"]
    assert report["active_duplicate_ids"] == ["c"]
    assert report["suspicious_summary"]["dismissed"] == 1
    assert report["recurring_series"][0]["key"] == "streaming::subscriptions"
    assert [pair["outbound"].id for pair in report["transfer_pairs"]] == ["save"]


def test_prepare_report_logs_counts(sample_records, caplog):
    transactions = build_transactions(sample_records)

    with caplog.at_level(logging.INFO, logger="clearledger"):
        prepare_engine_report(transactions)

    assert any("Built report for 6 transactions" in record.getMessage() for record in caplog.records)


def test_prepare_report_from_csv(sample_csv):
    report = prepare_report_from_csv(sample_csv, {"checking": "spending", "savings": "spending"})

    assert report["summary"]["total_spending"] == pytest.approx(63.96)
    assert report["category_totals"] == pytest.approx({"Subscriptions": 63.96})


def test_prepare_report_from_empty_csv(tmp_path):
    csv_path = tmp_path / "empty.csv"
    csv_path.write_text("id,date,amount,description,category\n")

    with pytest.raises(ValueError):
        prepare_report_from_csv(csv_path)


def test_prepare_report_from_missing_csv(tmp_path):
    with pytest.raises(FileNotFoundError):
        prepare_report_from_csv(tmp_path / "nope.csv")


def test_report_rejects_non_mapping_ownership(sample_records):
    with pytest.raises(EngineInputError):
        prepare_engine_report(build_transactions(sample_records), ownership=["checking"])


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("CLEARLEDGER_DUPLICATE_MIN_OCCURRENCES", "4")
    monkeypatch.setenv("CLEARLEDGER_LOG_LEVEL", "info")
    get_settings.cache_clear()

    settings = get_settings()

    assert settings.duplicate_min_occurrences == 4
    assert settings.log_level == "info"
    assert settings.duplicate_interval_factor == pytest.approx(0.6)


def test_configure_logging_sets_package_level():
    logger = logging.getLogger("clearledger")
    previous = logger.level
    try:
        configured = configure_logging("debug")
        assert configured is logger
        assert logger.level == logging.DEBUG
    finally:
        logger.setLevel(previous)
