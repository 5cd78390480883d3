"""Shared pieces of the retailer parsers: item rules, quantities, summaries."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Protocol, TypeVar

from ..normalizers import non_blank_lines, split_csv_line
from ..rules import first_match

_ZERO = Decimal("0")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True, slots=True)
class ItemRule:
    """Keywords mapping an item name to a ``(ledger category, subcategory)`` pair."""

    ledger_cat: str
    sub: str
    keywords: tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(kw in text for kw in self.keywords)


def categorize_item(
    name: str, rules: Sequence[ItemRule], default: tuple[str, str]
) -> tuple[str, str]:
    """Return ``(ledger_cat, sub)`` of the first rule matching ``name``."""

    hit = first_match(((r.matches, (r.ledger_cat, r.sub)) for r in rules), name.lower())
    return hit if hit is not None else default


def parse_quantity(raw: str) -> int:
    """Leading integer of ``raw``; empty, non-numeric or zero counts as 1."""

    m = _LEADING_INT_RE.match(raw or "")
    return (int(m.group(1)) or 1) if m else 1


def header_and_rows(text: str) -> tuple[list[str], list[list[str]]]:
    """Split an export into lower-cased headers and data rows.

    Returns empty lists when the file has no data line.
    """

    lines = non_blank_lines(text)
    if len(lines) < 2:
        return [], []
    headers = [h.replace('"', "").strip().lower() for h in split_csv_line(lines[0])]
    return headers, [split_csv_line(ln.strip()) for ln in lines[1:]]


class RetailerItem(Protocol):
    @property
    def ledger_cat(self) -> str: ...

    @property
    def sub(self) -> str: ...

    @property
    def qty(self) -> int: ...


@dataclass(slots=True)
class SubcategorySummary:
    """Running totals for one retailer subcategory."""

    ledger_cat: str
    sub: str
    total: Decimal = _ZERO
    count: int = 0
    items: list[RetailerItem] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class RetailerSummary:
    """Aggregate view of a retailer export.

    ``total_returns`` is the value of returned items (Walmart) or the sum of
    refunded amounts (Amazon); ``net_spend = total_spend - total_returns``.
    """

    by_category: dict[str, SubcategorySummary]
    total_spend: Decimal
    total_returns: Decimal
    net_spend: Decimal
    active_items: tuple[RetailerItem, ...]
    return_items: tuple[RetailerItem, ...]


I = TypeVar("I", bound="RetailerItem")


def group_by_subcategory(
    items: Iterable[I], amount: Callable[[I], Decimal]
) -> dict[str, SubcategorySummary]:
    """Aggregate ``items`` per subcategory; ``count`` sums quantities."""

    out: dict[str, SubcategorySummary] = {}
    for item in items:
        bucket = out.get(item.sub)
        if bucket is None:
            bucket = out[item.sub] = SubcategorySummary(ledger_cat=item.ledger_cat, sub=item.sub)
        bucket.total += amount(item)
        bucket.count += item.qty
        bucket.items.append(item)
    return out


__all__ = [
    "ItemRule",
    "RetailerItem",
    "SubcategorySummary",
    "RetailerSummary",
    "categorize_item",
    "parse_quantity",
    "header_and_rows",
    "group_by_subcategory",
]
