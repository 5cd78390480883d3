"""Discover card export.

Header: ``Trans. Date, Post Date, Description, Amount, Category``. Charges are
reported positive and payments/credits negative, so the sign is inverted.
"""

from __future__ import annotations

from collections.abc import Sequence

from ...models import ExtractedRow
from ...normalizers import parse_money
from ..utils import cell, column, find_column


def extract(headers: Sequence[str], cols: Sequence[str]) -> ExtractedRow:
    date_idx = find_column(headers, lambda h: "trans" in h)
    raw = parse_money(cell(cols, column(headers, "amount")))
    amount = -raw if raw > 0 else abs(raw)
    return ExtractedRow(
        cell(cols, column(headers, "description")),
        cell(cols, date_idx if date_idx >= 0 else 0),
        amount,
    )
