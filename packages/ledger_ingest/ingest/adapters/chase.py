"""Chase credit card export.

Header: ``Transaction Date, Post Date, Description, Category, Type, Amount,
Memo``. Amounts are already signed (purchases negative).
"""

from __future__ import annotations

from collections.abc import Sequence

from ...models import ExtractedRow
from ...normalizers import parse_money
from ..utils import cell, column


def extract(headers: Sequence[str], cols: Sequence[str]) -> ExtractedRow:
    return ExtractedRow(
        cell(cols, column(headers, "description")),
        cell(cols, column(headers, "transaction date")),
        parse_money(cell(cols, column(headers, "amount"))),
    )
