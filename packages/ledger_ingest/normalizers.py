"""Money/date normalizers and CSV line splitting shared by every dialect.

Bank exports disagree on nearly every textual convention: currency symbols,
accounting parentheses, placeholder cells (``-``/``*``), two-digit years and
ISO dates. The helpers here turn those encodings into canonical values and
never raise on malformed input: money degrades to ``0`` and dates to ``None``
so the owning row can be skipped by the caller.
"""

from __future__ import annotations

import csv
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

# ---------------------------------------------------------------------------
# Money
# ---------------------------------------------------------------------------

_ZERO = Decimal("0")
_CURRENCY_NOISE_RE = re.compile(r"[$£€\s\"]")
# Leading numeric prefix, mirroring lenient float parsing ("12.50abc" -> 12.50)
_NUMERIC_PREFIX_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_money(raw: object) -> Decimal:
    """Parse a textual amount into a signed ``Decimal``.

    - Currency symbols, whitespace and embedded quotes are removed.
    - ``(123.45)`` is negative (accounting convention).
    - Thousands separators are dropped.
    - ``""``, ``"-"``, ``"*"`` and anything non-numeric parse to ``0``.
    """

    if raw is None:
        return _ZERO
    s = _CURRENCY_NOISE_RE.sub("", str(raw).strip())
    if not s or s in {"-", "*"}:
        return _ZERO
    negative = s.startswith("(") and s.endswith(")")
    s = s.replace("(", "").replace(")", "").replace(",", "")
    m = _NUMERIC_PREFIX_RE.match(s)
    if m is None:
        return _ZERO
    try:
        value = Decimal(m.group(0))
    except InvalidOperation:
        return _ZERO
    return -value if negative else value


def fmt_amount(d: Decimal) -> str:
    """Format ``d`` with exactly two decimals (half-up), leading minus when negative."""

    q = d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{q:.2f}"


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

_MDY4_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_MDY2_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{2})$")
_ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

# Fallback formats for the long tail of exports (timestamps, month names).
_FALLBACK_FORMATS: tuple[str, ...] = (
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m-%d-%Y",
    "%Y/%m/%d",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
    "%a %b %d %Y",
)


def parse_date(raw: object) -> date | None:
    """Parse a bank date string into a calendar ``date``.

    Recognized forms, in order: ``M/D/YYYY``, ``M/D/YY`` (years below 50 are
    20xx, otherwise 19xx), ISO ``YYYY-MM-DD`` (a plain calendar date, so no
    timezone shift can occur), then a general fallback covering ISO
    timestamps and a handful of textual formats. Returns ``None`` when the
    value cannot be parsed or names an impossible day.
    """

    if raw is None:
        return None
    s = str(raw).strip().replace('"', "")
    if not s:
        return None

    try:
        if m := _MDY4_RE.match(s):
            return date(int(m.group(3)), int(m.group(1)), int(m.group(2)))
        if m := _MDY2_RE.match(s):
            yy = int(m.group(3))
            year = 2000 + yy if yy < 50 else 1900 + yy
            return date(year, int(m.group(1)), int(m.group(2)))
        if m := _ISO_RE.match(s):
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
    except ValueError:
        return None

    return _parse_date_fallback(s)


def _parse_date_fallback(s: str) -> date | None:
    try:
        return datetime.fromisoformat(s.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def month_bucket(d: date) -> str:
    """Return the zero-padded ``YYYY-MM`` bucket for ``d``."""

    return f"{d.year:04d}-{d.month:02d}"


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------

_LINE_BREAK_RE = re.compile(r"\r?\n")


def split_csv_line(line: str) -> list[str]:
    """Split a single CSV line into trimmed cells.

    Quoted fields may contain commas and doubled quotes. Each physical line is
    treated as one record; exports handled here never embed newlines.
    """

    # A field can never be longer than its line; raise the reader limit to match.
    if len(line) > csv.field_size_limit():
        csv.field_size_limit(len(line))
    row = next(csv.reader([line], skipinitialspace=True), [])
    return [cell.strip() for cell in row] or [""]


def non_blank_lines(text: str) -> list[str]:
    """Return the non-blank lines of ``text`` after trimming the file.

    Only LF and CRLF end a line. Form feeds, NEL and the Unicode line and
    paragraph separators stay inside the cell text.
    """

    return [ln for ln in _LINE_BREAK_RE.split(text.strip()) if ln.strip()]


__all__ = [
    "parse_money",
    "fmt_amount",
    "parse_date",
    "month_bucket",
    "split_csv_line",
    "non_blank_lines",
]
