"""Boundary checks for engine entry points."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from core.models import DUPLICATE_DECISIONS, DecisionMap, Transaction

__all__ = ["EngineInputError", "require_transactions", "require_mapping", "clean_decisions"]

logger = logging.getLogger("clearledger.core.validation")


class EngineInputError(TypeError):
    """Raised when an engine call receives structurally invalid input."""


def require_transactions(transactions: Any) -> list[Transaction]:
    """Return ``transactions`` as a list, failing fast on structural problems."""

    if transactions is None:
        raise EngineInputError("A transaction list is required, got None")
    if isinstance(transactions, (str, bytes, Mapping)) or not isinstance(transactions, Iterable):
        raise EngineInputError(
            f"Expected an iterable of Transaction objects, got {type(transactions).__name__}"
        )

    items = list(transactions)
    for index, item in enumerate(items):
        if not isinstance(item, Transaction):
            raise EngineInputError(
                f"Item {index} is {type(item).__name__}, expected Transaction; "
                "build inputs with core.data_loader.build_transactions"
            )
    return items


def require_mapping(value: Any, name: str) -> Mapping[str, Any]:
    """Return ``value`` as a mapping; ``None`` means an empty mapping."""

    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise EngineInputError(f"{name} must be a mapping, got {type(value).__name__}")
    return value


def clean_decisions(decisions: Any) -> DecisionMap:
    """Drop decision values the engine does not understand."""

    raw = require_mapping(decisions, "decisions")
    cleaned: dict[str, Any] = {}
    for tx_id, decision in raw.items():
        if decision in DUPLICATE_DECISIONS:
            cleaned[str(tx_id)] = decision
        else:
            logger.warning("Ignoring unknown duplicate decision %r for transaction %s", decision, tx_id)
    return cleaned
