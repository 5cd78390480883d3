"""Wells Fargo checking/credit export (no header row).

Positional columns: ``date, amount, "*", "", description``. Amounts are
already signed.
"""

from __future__ import annotations

from collections.abc import Sequence

from ...models import ExtractedRow
from ...normalizers import parse_money
from ..utils import cell


def extract(headers: Sequence[str], cols: Sequence[str]) -> ExtractedRow:
    date_str = cell(cols, 0).replace('"', "").strip()
    desc = (cell(cols, 4) or cell(cols, 2)).replace('"', "").strip()
    return ExtractedRow(desc, date_str, parse_money(cell(cols, 1)))
