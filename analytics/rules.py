"""Static category registry: names, display groups, patterns and budget ratios."""

from __future__ import annotations

import re
from typing import Final, Pattern

__all__ = [
    "CATEGORY_NAMES",
    "CATEGORY_GROUPS",
    "SUBSCRIPTION_CATEGORIES",
    "BILL_CATEGORIES",
    "ESSENTIAL_CATEGORIES",
    "BILLS_CATEGORY",
    "BILL_REFINEMENT_RULES",
    "BILLISH_DESCRIPTION_PATTERNS",
    "KNOWN_MERCHANT_PATTERNS",
    "BUDGET_GUIDELINE_RATIOS",
    "CATEGORY_ALIASES",
    "PAYMENT_DESCRIPTION_PATTERN",
    "PHONE_DESCRIPTION_PATTERN",
]

CATEGORY_NAMES: Final[tuple[str, ...]] = (
    "Income",
    "Rent",
    "Groceries",
    "Dining",
    "Transport",
    "Subscriptions",
    "Utilities",
    "Bills & services",
    "Insurance",
    "Education",
    "Fees",
    "Other",
    "Transfer",
    "Auto",
    "Loans",
    "Health",
)

BILLS_CATEGORY: Final = "Bills & services"

# Group ids shared with the dashboard overview cards.
CATEGORY_GROUPS: Final[dict[str, tuple[str, ...]]] = {
    "Income": (),
    "Rent": ("rent_utils",),
    "Utilities": ("rent_utils",),
    "Groceries": ("groceries_dining",),
    "Dining": ("groceries_dining",),
    "Transport": ("auto",),
    "Auto": ("auto",),
    "Loans": ("other_fees",),
    "Subscriptions": ("subscriptions",),
    "Bills & services": ("bills_services",),
    "Insurance": ("insurance",),
    "Education": ("education",),
    "Fees": ("other_fees",),
    "Other": ("other_fees",),
    "Transfer": ("transfers",),
    "Health": ("insurance",),
}

SUBSCRIPTION_CATEGORIES: Final = frozenset({"Subscriptions"})
BILL_CATEGORIES: Final = frozenset({"Utilities", "Bills & services", "Insurance", "Education"})
ESSENTIAL_CATEGORIES: Final = frozenset(
    {
        "Rent",
        "Groceries",
        "Bills & services",
        "Insurance",
        "Loans",
        "Education",
        "Health",
        "Transport",
        "Auto",
        "Utilities",
    }
)

CATEGORY_ALIASES: Final[dict[str, str]] = {"bills": BILLS_CATEGORY}

# Order matters: the first matching group wins.
BILL_REFINEMENT_RULES: Final[tuple[tuple[str, Pattern[str]], ...]] = (
    ("Education", re.compile(r"tuition|college|university|school|education|bursar", re.IGNORECASE)),
    (
        "Loans",
        re.compile(
            r"loan|lender|servicer|finance|mortgage|car payment|auto payment|repayment",
            re.IGNORECASE,
        ),
    ),
    ("Insurance", re.compile(r"insurance|premium", re.IGNORECASE)),
)

BILLISH_DESCRIPTION_PATTERNS: Final[tuple[Pattern[str], ...]] = (
    re.compile(r"mortgage|rent", re.IGNORECASE),
    re.compile(r"loan\s*payment|repayment|student\s*loan", re.IGNORECASE),
    re.compile(r"car\s*payment|auto\s*payment", re.IGNORECASE),
    re.compile(r"auto\s*insurance|health\s*insurance|insurance\b", re.IGNORECASE),
    re.compile(r"internet|wifi|broadband|isp", re.IGNORECASE),
    re.compile(r"mobile\s*plan|wireless|cell|phone\s*(bill|plan)?", re.IGNORECASE),
    re.compile(r"tuition|bursar", re.IGNORECASE),
    re.compile(r"utility|electric|water|power|gas\s*service|sewer", re.IGNORECASE),
)

KNOWN_MERCHANT_PATTERNS: Final[dict[str, tuple[Pattern[str], ...]]] = {
    "Income": (re.compile(r"payroll|salary|wages|direct\s*deposit|income|employer|paycheck", re.IGNORECASE),),
    "Rent": (re.compile(r"rent|mortgage", re.IGNORECASE),),
    "Utilities": (
        re.compile(r"internet|wifi|broadband|utility|electric|water|power|sewer|gas\s*service", re.IGNORECASE),
    ),
    "Groceries": (
        re.compile(
            r"grocery|groceries|market|supercenter|supermarket|costco|aldi|safeway|trader\s*joes?",
            re.IGNORECASE,
        ),
    ),
    "Dining": (
        re.compile(r"dining|restaurant|cafe|coffee|lunch|dinner|brunch|takeout|food\s*truck", re.IGNORECASE),
    ),
    "Transport": (re.compile(r"fuel|gas\b|uber|lyft|ride|transit|metro|bus|train|pass", re.IGNORECASE),),
    "Auto": (
        re.compile(r"auto\s*(payment|lender|loan)|fuel|gas\s*station|shell|exxon|chevron|bp\b", re.IGNORECASE),
    ),
    "Loans": (
        re.compile(
            r"loan|lender|servicer|finance|mortgage|car\s*payment|auto\s*payment|repayment|student\s*loan",
            re.IGNORECASE,
        ),
    ),
    "Subscriptions": (
        re.compile(
            r"netflix|hulu|disney|prime\s*video|apple\s*tv|spotify|youtube\s*music|icloud|adobe|dropbox",
            re.IGNORECASE,
        ),
    ),
    "Bills & services": (re.compile(r"mobile|wireless|cell|phone|insurance|loan|tuition|bursar", re.IGNORECASE),),
    "Insurance": (re.compile(r"insurance|premium", re.IGNORECASE),),
    "Education": (re.compile(r"tuition|college|university|school|bursar", re.IGNORECASE),),
    "Health": (
        re.compile(r"health|medical|doctor|hospital|pharmacy|prescription|dental|vision", re.IGNORECASE),
    ),
    "Fees": (re.compile(r"fee|surcharge|service\s*fee", re.IGNORECASE),),
    "Other": (re.compile(r"amazon|shopping|retail|pharmacy", re.IGNORECASE),),
    "Transfer": (re.compile(r"transfer|cash\s*app|venmo|paypal", re.IGNORECASE),),
}

# Guidance only; the ratios are not expected to sum to 1.
BUDGET_GUIDELINE_RATIOS: Final[dict[str, float]] = {
    "Rent": 0.3,
    "Transport": 0.15,
    "Subscriptions": 0.05,
    "Dining": 0.1,
    "Bills & services": 0.15,
}

PAYMENT_DESCRIPTION_PATTERN: Final = re.compile(
    r"loan|mortgage|credit|card payment|car payment|auto payment|internet|wifi|phone|cable",
    re.IGNORECASE,
)

PHONE_DESCRIPTION_PATTERN: Final = re.compile(r"\b(phone|wireless|mobile|cell(ular)?)\b", re.IGNORECASE)
