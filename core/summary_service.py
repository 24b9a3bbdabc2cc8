"""Core logic for assembling ClearLedger engine reports."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import TypedDict

from analytics.aggregation import (
    budget_guidance,
    category_totals,
    daily_cashflow_buckets,
    needs_vs_wants,
    pair_internal_transfers,
    summary_stats,
    top_spending_categories,
)
from analytics.duplicates import (
    DuplicateCluster,
    SuspiciousSummary,
    active_duplicate_ids,
    analyze_duplicate_charges,
    summarize_suspicious,
)
from analytics.ownership import OwnershipInput, resolve_ownership
from analytics.recurring import RecurringEntry, detect_recurring_series
from config.settings import Settings, get_settings
from core.data_loader import load_transactions
from core.models import (
    BudgetGuidanceRow,
    DailyCashflow,
    DecisionMap,
    NeedsVsWants,
    SummaryStats,
    Transaction,
    TransferPair,
)
from core.validation import clean_decisions, require_transactions

__all__ = ["EngineReport", "prepare_engine_report", "prepare_report_from_csv"]

logger = logging.getLogger("clearledger.core.summary_service")


class EngineReport(TypedDict):
    summary: SummaryStats
    category_totals: dict[str, float]
    top_categories: list[tuple[str, float]]
    daily_cashflow: list[DailyCashflow]
    transfer_pairs: list[TransferPair]
    budget_guidance: list[BudgetGuidanceRow]
    needs_vs_wants: NeedsVsWants
    recurring_series: list[RecurringEntry]
    duplicate_clusters: list[DuplicateCluster]
    active_duplicate_ids: list[str]
    suspicious_summary: SuspiciousSummary


def prepare_engine_report(
    transactions: Iterable[Transaction],
    ownership: OwnershipInput = None,
    decisions: DecisionMap | Mapping[str, str] | None = None,
    settings: Settings | None = None,
) -> EngineReport:
    """Run every aggregation and detector over one transaction list."""

    items = require_transactions(transactions)
    ownership = resolve_ownership(ownership)
    resolved_decisions = clean_decisions(decisions)
    settings = settings or get_settings()

    clusters = analyze_duplicate_charges(items, resolved_decisions, settings=settings)
    suspicious = summarize_suspicious(clusters, resolved_decisions)
    active_ids = active_duplicate_ids(clusters, resolved_decisions)

    logger.info(
        "Built report for %d transactions: %d duplicate clusters, %d unresolved flags",
        len(items),
        len(clusters),
        suspicious["unresolved"],
    )

    return {
        "summary": summary_stats(items, ownership),
        "category_totals": category_totals(items, ownership),
        "top_categories": top_spending_categories(items, ownership),
        "daily_cashflow": daily_cashflow_buckets(items, ownership),
        "transfer_pairs": pair_internal_transfers(items, ownership),
        "budget_guidance": budget_guidance(items, ownership),
        "needs_vs_wants": needs_vs_wants(items, ownership),
        "recurring_series": detect_recurring_series(items, settings=settings),
        "duplicate_clusters": clusters,
        "active_duplicate_ids": sorted(active_ids),
        "suspicious_summary": suspicious,
    }


def prepare_report_from_csv(
    csv_path: str | Path,
    ownership: OwnershipInput = None,
    decisions: DecisionMap | Mapping[str, str] | None = None,
    settings: Settings | None = None,
) -> EngineReport:
    csv_path = Path(csv_path)
    if not csv_path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    transactions = load_transactions(csv_path)
    if not transactions:
        raise ValueError("The provided CSV contains no transactions.")

    return prepare_engine_report(transactions, ownership, decisions, settings)
