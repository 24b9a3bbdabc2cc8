"""Ingestion of raw transaction records into resolved ``Transaction`` objects."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, Final

import pandas as pd

from analytics.categorisation import infer_kind, resolve_classification
from core.models import TRANSACTION_KINDS, Transaction
from core.validation import EngineInputError

__all__ = ["parse_calendar_date", "build_transactions", "load_transactions"]

logger = logging.getLogger("clearledger.core.data_loader")

_CACHE_SIZE: Final[int] = 8
_DEFAULT_CATEGORY: Final = "Other"

_FIELD_ALIASES: Final[dict[str, tuple[str, ...]]] = {
    "id": ("id", "txn_id"),
    "source_account_key": ("source_account_key", "sourceKey"),
    "target_account_key": ("target_account_key", "targetKey"),
}


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _field(record: Mapping[str, Any], name: str) -> Any:
    for alias in _FIELD_ALIASES.get(name, (name,)):
        value = record.get(alias)
        if not _is_missing(value):
            return value
    return None


def _optional_text(value: Any) -> str | None:
    return None if _is_missing(value) else str(value).strip()


def parse_calendar_date(value: Any) -> date | None:
    """Return the calendar date in ``value`` or ``None`` when it cannot be parsed.

    Strings are read as ``YYYY-MM-DD``; anything after a ``T`` is ignored so
    ISO timestamps keep their calendar day.
    """

    if _is_missing(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip().split("T", 1)[0]
    parsed = pd.to_datetime(text, format="%Y-%m-%d", errors="coerce")
    if pd.isna(parsed):
        return None
    return parsed.date()


def _parse_amount(value: Any, tx_id: str) -> float:
    if _is_missing(value):
        raise ValueError(f"Transaction {tx_id} has no amount")
    try:
        return float(str(value).replace(",", "").replace("$", "")) if isinstance(value, str) else float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Transaction {tx_id} has an unparseable amount: {value!r}") from exc


def _build_transaction(record: Mapping[str, Any], index: int) -> Transaction:
    raw_id = _field(record, "id")
    if raw_id is None:
        raise ValueError(f"Record {index} has no transaction id")
    tx_id = str(raw_id).strip()

    amount = _parse_amount(record.get("amount"), tx_id)
    description = _optional_text(record.get("description")) or ""
    category = _optional_text(record.get("category")) or _DEFAULT_CATEGORY
    source = _optional_text(_field(record, "source_account_key"))
    target = _optional_text(_field(record, "target_account_key"))

    tx_date = parse_calendar_date(record.get("date"))
    if tx_date is None:
        logger.warning("Transaction %s has no usable date (%r)", tx_id, record.get("date"))

    kind = _optional_text(record.get("kind"))
    if kind not in TRANSACTION_KINDS:
        if kind is not None:
            logger.warning("Transaction %s has unknown kind %r; inferring from its fields", tx_id, kind)
        kind = infer_kind(amount, category, description, source, target)

    return Transaction(
        id=tx_id,
        date=tx_date,
        amount=amount,
        description=description,
        category=category,
        kind=kind,
        classification=resolve_classification(category, kind, description),
        source_account_key=source,
        target_account_key=target,
    )


def build_transactions(records: Iterable[Mapping[str, Any]]) -> tuple[Transaction, ...]:
    """Resolve raw records into immutable transactions.

    Parameters
    ----------
    records:
        Mappings with ``id``, ``date``, ``amount``, ``description``,
        ``category`` and optionally ``kind`` plus the transfer account keys
        (``source_account_key``/``sourceKey`` and
        ``target_account_key``/``targetKey``).

    Returns
    -------
    tuple[Transaction, ...]
        Transactions in input order with their classification resolved.
    """

    if records is None or isinstance(records, (str, bytes, Mapping)):
        raise EngineInputError(f"Expected an iterable of records, got {type(records).__name__}")

    transactions = []
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise EngineInputError(f"Record {index} is {type(record).__name__}, expected a mapping")
        transactions.append(_build_transaction(record, index))
    return tuple(transactions)


@lru_cache(maxsize=_CACHE_SIZE)
def load_transactions(csv_path: str | Path) -> tuple[Transaction, ...]:
    """Return the transactions stored in the given CSV path.

    Results are cached to avoid redundant disk reads when a report is
    rebuilt for the same source file several times during a session.
    """

    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    try:
        df = pd.read_csv(path, dtype=str)
    except pd.errors.EmptyDataError:
        logger.warning("CSV file %s is empty", path)
        return ()

    return build_transactions(df.to_dict(orient="records"))
