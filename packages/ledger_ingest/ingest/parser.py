"""Bank CSV -> canonical :class:`~ledger_ingest.ctv.Transaction` records.

``parse_csv`` runs detection once, extracts every data row with the selected
dialect, normalizes dates and builds records. Categories are left at the
``Uncategorized`` sentinel; see :mod:`ledger_ingest.categorize`.

Row handling
------------
- Lines with fewer than two cells are ignored.
- A row with an unparsable date or a zero amount is silently skipped
  (header repeats, subtotal lines).
- A row whose extraction raises is recorded as ``"Row <n>: <message>"`` and
  processing continues with the next row.
"""

from __future__ import annotations

import itertools
import time
import uuid

from ..ctv import UNCATEGORIZED, Transaction
from ..logging_setup import get_logger
from ..models import ParseResult
from ..normalizers import month_bucket, non_blank_lines, parse_date, split_csv_line
from .detect import detect_layout

_logger = get_logger("ledger_ingest.ingest.parser")

# Monotonic component of generated ids; combined with wall-clock millis and a
# random suffix so re-imports of the same file never collide.
_ID_COUNTER = itertools.count()


def new_transaction_id(account: str, line_no: int) -> str:
    """Return a fresh, never-reused transaction id."""

    millis = time.time_ns() // 1_000_000
    return f"{account}-{line_no}-{millis}-{next(_ID_COUNTER)}-{uuid.uuid4().hex[:8]}"


def parse_csv(text: str, account: str) -> ParseResult:
    """Parse raw bank CSV ``text`` into transactions labeled with ``account``."""

    lines = non_blank_lines(text)
    if not lines:
        return ParseResult(transactions=[], bank_detected="Unknown", errors=[])

    layout = detect_layout(lines)
    dialect = layout.dialect
    transactions: list[Transaction] = []
    errors: list[str] = []

    for i in range(layout.data_start, len(lines)):
        try:
            cols = split_csv_line(lines[i].strip())
            if len(cols) < 2:
                continue
            row = dialect.extract(layout.headers, cols)
            d = parse_date(row.date_str)
            if d is None or row.amount == 0:
                continue
            transactions.append(
                Transaction(
                    id=new_transaction_id(account, i),
                    date=d,
                    month=month_bucket(d),
                    description=(row.description or "").strip(),
                    amount=row.amount,
                    category=UNCATEGORIZED,
                    account=account,
                    bank_source=dialect.display_name,
                )
            )
        except Exception as exc:  # noqa: BLE001 - one bad row must not abort the file
            _logger.warning("row %d failed to parse: %s", i + 1, exc)
            errors.append(f"Row {i + 1}: {exc}")

    _logger.info(
        "parsed %d transactions from %s export (%d row errors)",
        len(transactions),
        dialect.display_name,
        len(errors),
    )
    return ParseResult(
        transactions=transactions,
        bank_detected=dialect.display_name,
        errors=errors,
    )


__all__ = ["parse_csv", "new_transaction_id"]
