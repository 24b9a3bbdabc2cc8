"""Text normalisation helpers shared by every classifier and detector.

All description and account-label cleanup lives here so that grouping keys
stay consistent between the recurring-charge clusters, the duplicate
detector and account candidate detection.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import NamedTuple

__all__ = [
    "AccountLabel",
    "extract_account_label",
    "normalize_text",
    "normalize_recurring_label",
    "parse_institution_and_last4",
    "normalize_transfer_account_key",
    "strip_transfer_prefix",
    "title_case",
]

_WHITESPACE = re.compile(r"\s+")
_ENDING_SUFFIX = re.compile(r"ending\s*\d{2,4}", re.IGNORECASE)
_SHORT_NUMBER = re.compile(r"\b\d{2,4}\b")
_TRANSFER_PREFIX = re.compile(r"^transfer\s+(to|from)\s+", re.IGNORECASE)

_LAST4 = re.compile(r"ending\s*([0-9]{4})|\*\s*([0-9]{4})|\.\.\.?\s*([0-9]{4})|\b([0-9]{4})\b")
_LAST4_TOKENS = (
    re.compile(r"ending\s*[0-9]{4}"),
    re.compile(r"\*\s*[0-9]{4}"),
    re.compile(r"\.\.\.?\s*[0-9]{4}"),
    re.compile(r"\b[0-9]{4}\b"),
)

_NOISE_WORDS = (
    "transfer",
    "added",
    "from",
    "to",
    "payment",
    "pay",
    "deposit",
    "debit",
    "credit",
    "card",
    "checking",
    "savings",
    "account",
    "wallet",
    "app",
    "loan",
    "auto",
    "cash app",
    "venmo",
    "paypal",
    "visa",
    "mastercard",
)
_NOISE = re.compile(r"\b(" + "|".join(re.escape(word) for word in _NOISE_WORDS) + r")\b", re.IGNORECASE)


class AccountLabel(NamedTuple):
    name: str | None
    last4: str | None


def normalize_text(raw: str | None) -> str:
    """Lower-case ``raw`` and collapse runs of whitespace."""

    if not raw:
        return ""
    return _WHITESPACE.sub(" ", raw.lower()).strip()


@lru_cache(maxsize=1024)
def normalize_recurring_label(description: str) -> str:
    """Return the grouping label for a recurring bill or subscription.

    Parameters
    ----------
    description:
        Raw transaction description.

    Returns
    -------
    str
        Lowercase label with ``ending NNNN`` suffixes and short numeric
        tokens (reference numbers, card endings) removed. An empty string
        means the description carries no usable merchant text.
    """

    if not description:
        return ""

    label = description.lower()
    label = _ENDING_SUFFIX.sub("", label)
    label = _SHORT_NUMBER.sub("", label)
    return normalize_text(label)


def _split_last4(lower: str) -> tuple[str, str | None]:
    match = _LAST4.search(lower)
    last4 = next((group for group in match.groups() if group), None) if match else None
    for pattern in _LAST4_TOKENS:
        lower = pattern.sub(" ", lower)
    return normalize_text(lower), last4


def strip_transfer_prefix(description: str) -> str:
    return _TRANSFER_PREFIX.sub("", description or "").strip()


@lru_cache(maxsize=512)
def extract_account_label(description: str) -> AccountLabel:
    """Return the counterparty wording of a transfer with its account ending removed."""

    label, last4 = _split_last4(strip_transfer_prefix(description).lower())
    return AccountLabel(label or None, last4)


@lru_cache(maxsize=512)
def parse_institution_and_last4(description: str) -> AccountLabel:
    """Extract the institution name and card/account ending from a description."""

    cleaned, last4 = _split_last4((description or "").lower())
    institution = normalize_text(_NOISE.sub(" ", cleaned))
    return AccountLabel(institution or None, last4)


@lru_cache(maxsize=512)
def normalize_transfer_account_key(description: str) -> str:
    """Return a stable ``institution::last4`` identity for a transfer counterparty.

    Descriptions made only of noise words (``Transfer from Venmo``) fall back
    to their prefix-stripped wording.
    """

    parsed = parse_institution_and_last4(description)
    name = parsed.name or extract_account_label(description).name or ""
    return f"{name}::{parsed.last4 or ''}"


def title_case(value: str) -> str:
    return " ".join(part[:1].upper() + part[1:] for part in value.lower().split(" ") if part)
