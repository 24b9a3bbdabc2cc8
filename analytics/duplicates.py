"""Duplicate and anomalous recurring charge detection."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import date
from typing import TypedDict

from analytics.categorisation import normalize_category_name
from analytics.recurring import RecurringCluster, build_recurring_clusters
from analytics.rules import PHONE_DESCRIPTION_PATTERN, SUBSCRIPTION_CATEGORIES
from config.settings import Settings, get_settings
from core.formatting import format_currency, format_days, format_short_date
from core.models import DecisionMap, Transaction
from core.validation import clean_decisions

__all__ = [
    "DuplicateCluster",
    "SuspiciousSummary",
    "analyze_duplicate_charges",
    "flagged_transaction_ids",
    "active_duplicate_ids",
    "summarize_suspicious",
]

logger = logging.getLogger("clearledger.analytics.duplicates")

# Lower rank wins when several rules flag the same charge.
_SPECIALIZED = 0
_DOUBLE_CHARGE = 1
_FREQUENCY = 2
_AMOUNT = 3
_PARTNER = 4

EXTRA_CHARGE_REASON = "Extra charge this month"


class DuplicateCluster(TypedDict):
    """A recurring cluster with at least one flagged charge."""

    key: str
    label: str
    category: str
    transaction_ids: list[str]
    transactions: list[Transaction]
    median_interval_days: float
    median_amount: float
    suspicious_transaction_ids: list[str]
    reasons: dict[str, str]
    suspicious_transactions: list[Transaction]
    confirmed_transactions: list[Transaction]
    suspicious_total: float
    last_normal_charge_date: date | None


class SuspiciousSummary(TypedDict):
    total: int
    unresolved: int
    confirmed: int
    dismissed: int


class _Flags:
    """Best reason per transaction id, keeping the highest-precedence rule."""

    def __init__(self) -> None:
        self._reasons: dict[str, tuple[int, str]] = {}

    def add(self, transaction: Transaction, rank: int, reason: str) -> None:
        current = self._reasons.get(transaction.id)
        if current is None or rank < current[0]:
            self._reasons[transaction.id] = (rank, reason)

    def __contains__(self, tx_id: object) -> bool:
        return tx_id in self._reasons

    def __bool__(self) -> bool:
        return bool(self._reasons)

    def reasons(self) -> dict[str, str]:
        return {tx_id: reason for tx_id, (_, reason) in self._reasons.items()}


def _partner_reason(other: Transaction) -> str:
    return f"Doesn't match usual pattern - next to a flagged charge on {format_short_date(other.date)}"


def _flag_generic(cluster: RecurringCluster, flags: _Flags, settings: Settings) -> None:
    members = cluster.members
    median_interval = cluster.median_interval_days
    median_amount = cluster.median_amount
    amount_threshold = median_amount * settings.duplicate_amount_factor
    amount_reason = f"Unusual amount - normally {format_currency(median_amount)}"

    def is_outlier(tx: Transaction) -> bool:
        return abs(abs(tx.amount) - median_amount) > amount_threshold

    if is_outlier(members[0]):
        flags.add(members[0], _AMOUNT, amount_reason)

    interval_checks = median_interval > 0
    fast_threshold = median_interval * settings.duplicate_interval_factor
    very_fast_threshold = median_interval * settings.duplicate_fast_interval_factor

    for prev, curr, gap in zip(members, members[1:], cluster.gaps):
        if interval_checks:
            same_amount = abs(abs(curr.amount) - abs(prev.amount)) < settings.same_amount_tolerance
            if same_amount and gap < very_fast_threshold:
                flags.add(
                    curr,
                    _DOUBLE_CHARGE,
                    f"Double charge - also charged {format_days(gap)} after on {format_short_date(prev.date)}",
                )
                flags.add(
                    prev,
                    _DOUBLE_CHARGE,
                    f"Double charge - also charged {format_days(gap)} before on {format_short_date(curr.date)}",
                )
            elif gap < fast_threshold:
                flags.add(
                    curr,
                    _FREQUENCY,
                    f"Unusual frequency - normally charged every {format_days(median_interval)}, "
                    f"but this was {format_days(gap)}",
                )
                flags.add(prev, _PARTNER, _partner_reason(curr))

        if is_outlier(curr):
            flags.add(curr, _AMOUNT, amount_reason)
            flags.add(prev, _PARTNER, _partner_reason(curr))


def _specialized_tolerance(cluster: RecurringCluster, settings: Settings) -> float | None:
    if normalize_category_name(cluster.category) in SUBSCRIPTION_CATEGORIES or all(
        tx.kind == "subscription" for tx in cluster.members
    ):
        return settings.subscription_price_tolerance
    if PHONE_DESCRIPTION_PATTERN.search(cluster.label):
        return settings.phone_price_tolerance
    return None


def _flag_specialized(cluster: RecurringCluster, flags: _Flags, settings: Settings) -> None:
    tolerance = _specialized_tolerance(cluster, settings)
    if tolerance is None:
        return

    baseline = cluster.median_amount
    fast_threshold = cluster.median_interval_days * settings.duplicate_interval_factor
    higher_reason = f"Higher than usual - normally {format_currency(baseline)}"

    by_month: dict[tuple[int, int], list[Transaction]] = {}
    for tx in cluster.members:
        by_month.setdefault((tx.date.year, tx.date.month), []).append(tx)

    for charges in by_month.values():
        if len(charges) < 2:
            continue

        close_ids: set[str] = set()
        for prev, curr in zip(charges, charges[1:]):
            if (curr.date - prev.date).days < fast_threshold:
                close_ids.update((prev.id, curr.id))

        for tx in charges:
            amount = abs(tx.amount)
            if amount > baseline * (1 + tolerance):
                flags.add(tx, _SPECIALIZED, higher_reason)
            elif abs(amount - baseline) <= baseline * tolerance and tx.id in close_ids:
                flags.add(tx, _SPECIALIZED, EXTRA_CHARGE_REASON)


def _last_normal_date(cluster: RecurringCluster, flags: _Flags) -> date | None:
    normal = [tx for tx in cluster.members if tx.id not in flags]
    if normal:
        return normal[-1].date
    return cluster.members[-1].date if cluster.members else None


def analyze_duplicate_charges(
    transactions: Iterable[Transaction],
    decisions: DecisionMap | Mapping[str, str] | None = None,
    *,
    settings: Settings | None = None,
) -> list[DuplicateCluster]:
    """Flag recurring charges that deviate from their own history.

    Parameters
    ----------
    transactions:
        Resolved transactions. Transfers and undated rows never cluster.
    decisions:
        Optional map of transaction id to ``"confirmed"`` or ``"dismissed"``.
        Decisions only gate what is surfaced; baselines ignore them.
    settings:
        Detection thresholds; defaults to the cached environment settings.

    Returns
    -------
    list[DuplicateCluster]
        Clusters with at least one flagged charge, in first-seen order.
    """

    settings = settings or get_settings()
    resolved_decisions = clean_decisions(decisions)

    results: list[DuplicateCluster] = []
    for cluster in build_recurring_clusters(transactions, settings=settings):
        flags = _Flags()
        _flag_generic(cluster, flags, settings)
        _flag_specialized(cluster, flags, settings)
        if not flags:
            logger.debug("Cluster %s has no flagged charges", cluster.key)
            continue

        reasons = flags.reasons()
        flagged = [tx for tx in cluster.members if tx.id in reasons]
        suspicious = [tx for tx in flagged if resolved_decisions.get(tx.id) != "dismissed"]
        confirmed = [tx for tx in flagged if resolved_decisions.get(tx.id) == "confirmed"]

        results.append(
            {
                "key": cluster.key,
                "label": cluster.label,
                "category": cluster.category,
                "transaction_ids": cluster.transaction_ids,
                "transactions": list(cluster.members),
                "median_interval_days": cluster.median_interval_days,
                "median_amount": cluster.median_amount,
                "suspicious_transaction_ids": [tx.id for tx in flagged],
                "reasons": {tx.id: reasons[tx.id] for tx in flagged},
                "suspicious_transactions": suspicious,
                "confirmed_transactions": confirmed,
                "suspicious_total": float(sum(abs(tx.amount) for tx in suspicious)),
                "last_normal_charge_date": _last_normal_date(cluster, flags),
            }
        )
    return results


def flagged_transaction_ids(clusters: Iterable[DuplicateCluster]) -> set[str]:
    """Every flagged id across ``clusters``, regardless of decisions."""

    return {tx_id for cluster in clusters for tx_id in cluster["suspicious_transaction_ids"]}


def active_duplicate_ids(
    clusters: Iterable[DuplicateCluster],
    decisions: DecisionMap | Mapping[str, str] | None = None,
) -> set[str]:
    """Flagged ids that have not been dismissed; confirmed charges stay active."""

    resolved = clean_decisions(decisions)
    return {tx_id for tx_id in flagged_transaction_ids(clusters) if resolved.get(tx_id) != "dismissed"}


def summarize_suspicious(
    clusters: Iterable[DuplicateCluster],
    decisions: DecisionMap | Mapping[str, str] | None = None,
) -> SuspiciousSummary:
    resolved = clean_decisions(decisions)
    flagged = flagged_transaction_ids(clusters)
    confirmed = sum(1 for tx_id in flagged if resolved.get(tx_id) == "confirmed")
    dismissed = sum(1 for tx_id in flagged if resolved.get(tx_id) == "dismissed")
    return {
        "total": len(flagged),
        "unresolved": len(flagged) - dismissed,
        "confirmed": confirmed,
        "dismissed": dismissed,
    }
