"""Capital One checking/savings export.

Header: ``Account Number, Transaction Description, Transaction Date,
Transaction Type, Transaction Amount, Balance``. Amounts are always positive;
``Transaction Type`` carries ``Debit``/``Credit``.
"""

from __future__ import annotations

from collections.abc import Sequence

from ...models import ExtractedRow
from ...normalizers import parse_money
from ..utils import cell, column


def extract(headers: Sequence[str], cols: Sequence[str]) -> ExtractedRow:
    desc = cell(cols, column(headers, "transaction description"))
    date_str = cell(cols, column(headers, "transaction date"))
    typ = cell(cols, column(headers, "transaction type")).strip().lower()
    amt = parse_money(cell(cols, column(headers, "transaction amount")))
    amount = -abs(amt) if typ == "debit" else abs(amt)
    return ExtractedRow(desc, date_str, amount)
