"""Citi export with split debit/credit columns.

Header: ``Status, Date, Description, Debit, Credit, Member Name``. Only one
of debit/credit is populated per row; a positive credit wins.
"""

from __future__ import annotations

from collections.abc import Sequence

from ...models import ExtractedRow
from ...normalizers import parse_money
from ..utils import cell, column


def extract(headers: Sequence[str], cols: Sequence[str]) -> ExtractedRow:
    debit = parse_money(cell(cols, column(headers, "debit")))
    credit = parse_money(cell(cols, column(headers, "credit")))
    amount = credit if credit > 0 else -debit
    return ExtractedRow(
        cell(cols, column(headers, "description")),
        cell(cols, column(headers, "date")),
        amount,
    )
