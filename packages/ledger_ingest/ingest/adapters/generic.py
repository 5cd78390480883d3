"""Best-effort extractor for unrecognized exports.

Columns are located by substring search over the header tokens. When no
single signed amount column exists, the amount is synthesized from separate
debit/credit (withdrawal/deposit) columns; a positive credit wins.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from ...models import ExtractedRow
from ...normalizers import parse_money
from ..utils import cell, find_column


def _is_description(h: str) -> bool:
    return any(tok in h for tok in ("desc", "memo", "name", "payee"))


def extract(headers: Sequence[str], cols: Sequence[str]) -> ExtractedRow:
    date_idx = find_column(headers, lambda h: "date" in h)
    desc_idx = find_column(headers, _is_description)
    amt_idx = find_column(headers, lambda h: h in {"amount", "transaction amount"})
    debit_idx = find_column(headers, lambda h: "debit" in h or "withdrawal" in h)
    credit_idx = find_column(headers, lambda h: "credit" in h or "deposit" in h)

    amount = Decimal("0")
    if amt_idx >= 0:
        amount = parse_money(cell(cols, amt_idx))
    elif debit_idx >= 0 or credit_idx >= 0:
        debit = parse_money(cell(cols, debit_idx))
        credit = parse_money(cell(cols, credit_idx))
        amount = credit if credit > 0 else -debit

    return ExtractedRow(
        cell(cols, desc_idx) if desc_idx >= 0 else cell(cols, 1),
        cell(cols, date_idx),
        amount,
    )
