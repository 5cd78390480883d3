"""Duplicate detection for repeated statement imports.

The key is deliberately coarse: ISO date, the first 40 characters of the
description and the amount to exactly two decimals. Account is ignored so
that overlapping exports of the same statement collapse even when labeled
differently; rare false positives are accepted in exchange for idempotent
re-imports.

New records are compared only against records already stored. Two identical
rows inside the same file are both kept.
"""

from __future__ import annotations

from collections.abc import Iterable

from .ctv import Transaction
from .normalizers import fmt_amount

_DESCRIPTION_PREFIX = 40


def dedup_key(t: Transaction) -> str:
    """Return the composite ``date|description[:40]|amount`` key for ``t``."""

    return (
        f"{t.date.isoformat()}|{(t.description or '')[:_DESCRIPTION_PREFIX]}|"
        f"{fmt_amount(t.amount)}"
    )


def deduplicate_transactions(
    new: Iterable[Transaction], existing: Iterable[Transaction]
) -> list[Transaction]:
    """Return the records of ``new`` whose key is absent from ``existing``."""

    existing_keys = {dedup_key(t) for t in existing}
    return [t for t in new if dedup_key(t) not in existing_keys]


__all__ = ["dedup_key", "deduplicate_transactions"]
