"""Formatting helpers for ClearLedger reason strings."""

from __future__ import annotations

from datetime import date

__all__ = ["format_currency", "format_short_date", "format_days"]


def format_currency(amount: float) -> str:
    return f"${abs(amount):,.2f}"


def format_short_date(value: date | None) -> str:
    if value is None:
        return "an unknown date"
    return f"{value.strftime('%b')} {value.day}"


def format_days(days: float) -> str:
    rounded = int(round(days))
    unit = "day" if rounded == 1 else "days"
    return f"{rounded} {unit}"
