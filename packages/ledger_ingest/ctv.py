"""Canonical transaction record shared by every import dialect.

Field order (exact):
    - id: string, unique per parsed row (never reused across imports)
    - date: ``datetime.date`` (no time-of-day semantics)
    - month: ``"YYYY-MM"`` bucket derived once from ``date``
    - description: trimmed raw description, never re-normalized
    - amount: signed ``Decimal``; expenses negative, income positive
    - category: category id
    - account: free-text label supplied at upload time
    - bank_source: detected dialect display name (diagnostic only)
    - note: optional free text
    - excluded: omitted from aggregates but retained in storage
    - is_income: derived from the category, may be force-corrected
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type
from decimal import Decimal

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single canonicalized ledger transaction.

    Instances are immutable; edits produce a new record through
    :func:`dataclasses.replace` so that a batch is never half-updated.
    """

    id: str
    date: date_type
    month: str
    description: str
    amount: Decimal
    category: str = UNCATEGORIZED
    account: str = ""
    bank_source: str = ""
    note: str | None = None
    excluded: bool = False
    is_income: bool = False


__all__ = ["Transaction", "UNCATEGORIZED"]
