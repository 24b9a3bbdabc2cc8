"""Recurring bill and subscription clustering."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from typing import TypedDict

import numpy as np

from analytics.categorize import normalize_recurring_label
from config.settings import Settings, get_settings
from core.models import Transaction
from core.validation import require_transactions

__all__ = [
    "RecurringCluster",
    "RecurringEntry",
    "build_recurring_clusters",
    "detect_recurring_series",
]

logger = logging.getLogger("clearledger.analytics.recurring")

_MONTHLY_RANGE = range(28, 32)
_WEEKLY_RANGE = range(6, 9)
_BIWEEKLY_RANGE = range(13, 16)


@dataclass(frozen=True)
class RecurringCluster:
    """Date-sorted members of one recurring charge plus their baseline."""

    key: str
    label: str
    category: str
    members: tuple[Transaction, ...]
    gaps: tuple[int, ...]
    median_interval_days: float
    median_amount: float

    @property
    def transaction_ids(self) -> list[str]:
        return [tx.id for tx in self.members]


class RecurringEntry(TypedDict):
    """Metadata describing a detected recurring charge."""

    key: str
    label: str
    category: str
    occurrences: int
    interval_days: int | None
    interval_label: str
    median_amount: float
    last_amount: float
    last_date: date
    next_date: date | None


def _cluster_key(transaction: Transaction) -> str | None:
    label = normalize_recurring_label(transaction.description)
    if not label:
        return None
    return f"{label}::{transaction.category.lower()}"


def build_recurring_clusters(
    transactions: Iterable[Transaction],
    *,
    settings: Settings | None = None,
) -> list[RecurringCluster]:
    """Group recurring candidates and compute their median baseline.

    Parameters
    ----------
    transactions:
        Resolved transactions in any order.
    settings:
        Thresholds to use; defaults to :func:`config.settings.get_settings`.

    Returns
    -------
    list[RecurringCluster]
        One cluster per normalized label and category with at least
        ``duplicate_min_occurrences`` dated members, in first-seen order.
    """

    items = require_transactions(transactions)
    settings = settings or get_settings()

    grouped: dict[str, list[Transaction]] = {}
    for tx in items:
        if not tx.classification.is_recurring_candidate or tx.date is None:
            continue
        key = _cluster_key(tx)
        if key is None:
            continue
        grouped.setdefault(key, []).append(tx)

    clusters: list[RecurringCluster] = []
    for key, members in grouped.items():
        if len(members) < settings.duplicate_min_occurrences:
            logger.debug("Dropping cluster %s with %d members", key, len(members))
            continue

        ordered = sorted(members, key=lambda tx: tx.date)
        gaps = tuple((curr.date - prev.date).days for prev, curr in zip(ordered, ordered[1:]))
        amounts = np.abs(np.array([tx.amount for tx in ordered], dtype=float))
        median_interval = float(np.median(gaps))
        if median_interval == 0:
            logger.debug("Cluster %s has a zero median interval", key)

        clusters.append(
            RecurringCluster(
                key=key,
                label=ordered[0].description,
                category=ordered[0].category,
                members=tuple(ordered),
                gaps=gaps,
                median_interval_days=median_interval,
                median_amount=float(np.median(amounts)),
            )
        )
    return clusters


def detect_recurring_series(
    transactions: Iterable[Transaction],
    *,
    settings: Settings | None = None,
) -> list[RecurringEntry]:
    """Describe every recurring cluster with its cadence and next expected date."""

    entries: list[RecurringEntry] = []
    for cluster in build_recurring_clusters(transactions, settings=settings):
        interval_days = _resolve_interval(cluster.gaps)
        last = cluster.members[-1]
        next_date = None
        if interval_days is not None:
            next_date = last.date + timedelta(days=interval_days)

        entries.append(
            {
                "key": cluster.key,
                "label": cluster.label,
                "category": cluster.category,
                "occurrences": len(cluster.members),
                "interval_days": interval_days,
                "interval_label": _interval_label(interval_days),
                "median_amount": cluster.median_amount,
                "last_amount": abs(last.amount),
                "last_date": last.date,
                "next_date": next_date,
            }
        )

    entries.sort(key=lambda row: (row["next_date"] is None, row["next_date"] or row["last_date"], -row["median_amount"]))
    return entries


def _resolve_interval(days: Iterable[float]) -> int | None:
    """Return a canonical interval value if the series fits a supported cadence."""

    values = list(days)
    if len(values) == 0:
        return None

    median_interval = float(np.median(values))
    if np.isnan(median_interval) or median_interval <= 0:
        return None

    rounded = int(round(median_interval))
    if rounded in _MONTHLY_RANGE:
        return 30
    if rounded in _BIWEEKLY_RANGE:
        return 14
    if rounded in _WEEKLY_RANGE:
        return 7
    return None


def _interval_label(interval_days: int | None) -> str:
    if interval_days is None:
        return "Irregular"
    if interval_days >= 28:
        return "Monthly"
    if interval_days >= 13:
        return "Bi-weekly"
    return "Weekly"
