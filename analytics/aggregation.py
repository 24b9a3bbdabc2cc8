"""Pure reducers over resolved transactions: totals, category spend and cash flow."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Literal

import numpy as np
import pandas as pd

from analytics.ownership import OwnershipInput, resolve_ownership, resolve_transfer
from analytics.rules import BUDGET_GUIDELINE_RATIOS
from core.models import (
    BudgetGuidanceRow,
    DailyCashflow,
    LargestExpense,
    NeedsVsWants,
    OwnershipConfig,
    SummaryStats,
    Transaction,
    TransferPair,
)
from core.validation import require_transactions

__all__ = [
    "Flow",
    "resolve_flow",
    "build_flow_frame",
    "net_income",
    "total_spending",
    "fee_total",
    "subscription_total",
    "internal_transfer_total",
    "category_totals",
    "top_spending_categories",
    "daily_cashflow_buckets",
    "pair_internal_transfers",
    "budget_guidance",
    "needs_vs_wants",
    "summary_stats",
]

Flow = Literal["income", "spending", "refund", "internal", "ignored"]

_SPENDING_KINDS = frozenset({"expense", "subscription", "fee"})
_FRAME_COLUMNS = [
    "id",
    "date",
    "amount",
    "spend",
    "category",
    "kind",
    "flow",
    "is_subscription",
    "is_essential",
]


def resolve_flow(transaction: Transaction, ownership: OwnershipConfig) -> Flow:
    """Return how ``transaction`` affects income and spending totals."""

    if transaction.is_transfer:
        resolution = resolve_transfer(transaction, ownership)
        if resolution == "internal":
            return "internal"
        if resolution in ("income", "spending"):
            return resolution
        return "ignored"
    if transaction.kind == "income":
        return "income"
    if transaction.kind in _SPENDING_KINDS:
        return "spending"
    if transaction.kind == "refund":
        return "refund"
    return "ignored"


def build_flow_frame(
    transactions: Iterable[Transaction],
    ownership: OwnershipInput = None,
) -> pd.DataFrame:
    """Return one row per transaction with its resolved flow and absolute spend."""

    items = require_transactions(transactions)
    config = resolve_ownership(ownership)
    records = [
        {
            "id": tx.id,
            "date": pd.Timestamp(tx.date) if tx.date is not None else pd.NaT,
            "amount": float(tx.amount),
            "spend": abs(float(tx.amount)),
            "category": tx.category,
            "kind": tx.kind,
            "flow": resolve_flow(tx, config),
            "is_subscription": tx.classification.is_subscription,
            "is_essential": tx.classification.is_essential,
        }
        for tx in items
    ]
    frame = pd.DataFrame.from_records(records, columns=_FRAME_COLUMNS)
    frame["amount"] = frame["amount"].astype(float)
    frame["spend"] = frame["spend"].astype(float)
    return frame


def _sum(series: pd.Series) -> float:
    return float(series.sum()) if not series.empty else 0.0


def net_income(transactions: Iterable[Transaction], ownership: OwnershipInput = None) -> float:
    frame = build_flow_frame(transactions, ownership)
    return _sum(frame.loc[frame["flow"] == "income", "amount"])


def total_spending(transactions: Iterable[Transaction], ownership: OwnershipInput = None) -> float:
    """Gross real spending less refunds credited back."""

    frame = build_flow_frame(transactions, ownership)
    gross = _sum(frame.loc[frame["flow"] == "spending", "spend"])
    refunds = _sum(frame.loc[frame["flow"] == "refund", "spend"])
    return gross - refunds


def fee_total(transactions: Iterable[Transaction], ownership: OwnershipInput = None) -> float:
    frame = build_flow_frame(transactions, ownership)
    mask = (frame["flow"] == "spending") & (frame["kind"] == "fee")
    return _sum(frame.loc[mask, "spend"])


def subscription_total(transactions: Iterable[Transaction], ownership: OwnershipInput = None) -> float:
    frame = build_flow_frame(transactions, ownership)
    mask = (frame["flow"] == "spending") & frame["is_subscription"].astype(bool)
    return _sum(frame.loc[mask, "spend"])


def internal_transfer_total(transactions: Iterable[Transaction], ownership: OwnershipInput = None) -> float:
    frame = build_flow_frame(transactions, ownership)
    return _sum(frame.loc[frame["flow"] == "internal", "spend"])


def category_totals(transactions: Iterable[Transaction], ownership: OwnershipInput = None) -> dict[str, float]:
    """Return absolute real spending keyed by category name."""

    frame = build_flow_frame(transactions, ownership)
    spending = frame[frame["flow"] == "spending"]
    if spending.empty:
        return {}
    totals = spending.groupby("category", sort=False)["spend"].sum()
    return {str(category): float(amount) for category, amount in totals.items()}


def top_spending_categories(
    transactions: Iterable[Transaction],
    ownership: OwnershipInput = None,
    *,
    limit: int = 5,
) -> list[tuple[str, float]]:
    totals = category_totals(transactions, ownership)
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return ranked[:limit]


def daily_cashflow_buckets(
    transactions: Iterable[Transaction],
    ownership: OwnershipInput = None,
) -> list[DailyCashflow]:
    """Bucket real income and spending by calendar date.

    Internal transfers and undated transactions are skipped. Refunds count
    on the income side of the day they arrive.
    """

    frame = build_flow_frame(transactions, ownership)
    frame = frame[(frame["flow"] != "internal") & frame["date"].notna()].copy()
    if frame.empty:
        return []

    frame["income"] = np.where(frame["flow"] == "income", frame["amount"], 0.0)
    frame["income"] += np.where(frame["flow"] == "refund", frame["spend"], 0.0)
    frame["expense"] = np.where(frame["flow"] == "spending", frame["spend"], 0.0)
    frame["inflow"] = np.where(frame["amount"] >= 0, frame["amount"], 0.0)
    frame["outflow"] = np.where(frame["amount"] < 0, frame["spend"], 0.0)

    daily = frame.groupby("date")[["income", "expense", "inflow", "outflow"]].sum().sort_index()

    buckets: list[DailyCashflow] = []
    for day, row in daily.iterrows():
        income = float(row["income"])
        expense = float(row["expense"])
        buckets.append(
            {
                "date": pd.Timestamp(day).date(),
                "income": income,
                "expense": expense,
                "net": income - expense,
                "inflow": float(row["inflow"]),
                "outflow": float(row["outflow"]),
            }
        )
    return buckets


def _same_leg(outbound: Transaction, inbound: Transaction) -> bool:
    if outbound.date is None or inbound.date is None:
        return False
    return outbound.date == inbound.date and round(abs(outbound.amount), 2) == round(abs(inbound.amount), 2)


def pair_internal_transfers(
    transactions: Iterable[Transaction],
    ownership: OwnershipInput = None,
) -> list[TransferPair]:
    """Greedily match outbound and inbound internal transfer legs.

    Each outbound leg takes the first unmatched inbound leg with the same
    absolute amount and date, in list order. Unmatched outbound legs keep
    ``inbound=None``; leftover inbound legs, including zero-amount legs,
    are appended with ``outbound=None``. Undated legs are left out.
    """

    items = require_transactions(transactions)
    config = resolve_ownership(ownership)
    internal = [tx for tx in items if tx.date is not None and resolve_flow(tx, config) == "internal"]
    outbound_legs = [tx for tx in internal if tx.amount < 0]
    available = [tx for tx in internal if tx.amount >= 0]

    pairs: list[TransferPair] = []
    for outbound in outbound_legs:
        match_index = next(
            (index for index, inbound in enumerate(available) if _same_leg(outbound, inbound)),
            None,
        )
        if match_index is None:
            pairs.append({"outbound": outbound, "inbound": None})
            continue
        pairs.append({"outbound": outbound, "inbound": available.pop(match_index)})

    pairs.extend({"outbound": None, "inbound": inbound} for inbound in available)
    return pairs


def budget_guidance(
    transactions: Iterable[Transaction],
    ownership: OwnershipInput = None,
) -> list[BudgetGuidanceRow]:
    """Compare category spend against income-proportional guideline ceilings."""

    items = require_transactions(transactions)
    income = net_income(items, ownership)
    totals = category_totals(items, ownership)

    rows: list[BudgetGuidanceRow] = []
    for category, ratio in BUDGET_GUIDELINE_RATIOS.items():
        actual = totals.get(category, 0.0)
        recommended = income * ratio
        delta = actual - recommended
        rows.append(
            {
                "category": category,
                "actual": actual,
                "recommended_max": recommended,
                "delta": delta,
                "difference_amount": abs(delta),
                "direction": "over" if delta > 0 else "under",
            }
        )
    return rows


def needs_vs_wants(transactions: Iterable[Transaction], ownership: OwnershipInput = None) -> NeedsVsWants:
    frame = build_flow_frame(transactions, ownership)
    spending = frame[frame["flow"] == "spending"]
    essential = spending["is_essential"].astype(bool)
    needs = _sum(spending.loc[essential, "spend"])
    wants = _sum(spending.loc[~essential, "spend"])
    total = needs + wants
    return {
        "needs": needs,
        "wants": wants,
        "essentials_percent": int(round(needs / total * 100)) if total > 0 else 0,
        "other_percent": int(round(wants / total * 100)) if total > 0 else 0,
    }


def summary_stats(transactions: Iterable[Transaction], ownership: OwnershipInput = None) -> SummaryStats:
    items = require_transactions(transactions)
    config = resolve_ownership(ownership)
    frame = build_flow_frame(items, config)

    income = _sum(frame.loc[frame["flow"] == "income", "amount"])
    spending = total_spending(items, config)
    subscriptions = frame[(frame["flow"] == "spending") & frame["is_subscription"].astype(bool)]

    largest: LargestExpense | None = None
    for tx in items:
        if resolve_flow(tx, config) != "spending":
            continue
        if largest is None or abs(tx.amount) > largest["amount"]:
            largest = {
                "amount": abs(tx.amount),
                "description": tx.description,
                "category": tx.category,
                "date": tx.date,
            }

    return {
        "total_income": income,
        "total_spending": spending,
        "net": income - spending,
        "subscription_count": int(len(subscriptions)),
        "total_subscriptions": _sum(subscriptions["spend"]),
        "total_fees": fee_total(items, config),
        "internal_transfers_total": _sum(frame.loc[frame["flow"] == "internal", "spend"]),
        "largest_single_expense": largest,
    }
