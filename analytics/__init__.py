"""Classification, ownership, aggregation and detection helpers for ClearLedger."""

from analytics.accounts import CandidateAccount, detect_account_candidates, infer_account_type_from_label
from analytics.aggregation import (
    budget_guidance,
    category_totals,
    daily_cashflow_buckets,
    fee_total,
    internal_transfer_total,
    needs_vs_wants,
    net_income,
    pair_internal_transfers,
    subscription_total,
    summary_stats,
    top_spending_categories,
    total_spending,
)
from analytics.categorisation import (
    classify_description,
    display_category,
    infer_kind,
    is_bill_like_category,
    is_billish_description,
    is_essential_category,
    is_subscription_category,
    matches_known_merchant,
    normalize_category_name,
    recategorize,
    resolve_classification,
)
from analytics.categorize import normalize_recurring_label, normalize_transfer_account_key, parse_institution_and_last4
from analytics.duplicates import (
    DuplicateCluster,
    SuspiciousSummary,
    active_duplicate_ids,
    analyze_duplicate_charges,
    flagged_transaction_ids,
    summarize_suspicious,
)
from analytics.ownership import is_internal_transfer, is_real_income, is_real_spending, resolve_transfer
from analytics.recurring import RecurringCluster, RecurringEntry, build_recurring_clusters, detect_recurring_series

__all__ = [
    "CandidateAccount",
    "detect_account_candidates",
    "infer_account_type_from_label",
    "budget_guidance",
    "category_totals",
    "daily_cashflow_buckets",
    "fee_total",
    "internal_transfer_total",
    "needs_vs_wants",
    "net_income",
    "pair_internal_transfers",
    "subscription_total",
    "summary_stats",
    "top_spending_categories",
    "total_spending",
    "classify_description",
    "display_category",
    "infer_kind",
    "is_bill_like_category",
    "is_billish_description",
    "is_essential_category",
    "is_subscription_category",
    "matches_known_merchant",
    "normalize_category_name",
    "recategorize",
    "resolve_classification",
    "normalize_recurring_label",
    "normalize_transfer_account_key",
    "parse_institution_and_last4",
    "DuplicateCluster",
    "SuspiciousSummary",
    "active_duplicate_ids",
    "analyze_duplicate_charges",
    "flagged_transaction_ids",
    "summarize_suspicious",
    "is_internal_transfer",
    "is_real_income",
    "is_real_spending",
    "resolve_transfer",
    "RecurringCluster",
    "RecurringEntry",
    "build_recurring_clusters",
    "detect_recurring_series",
]
