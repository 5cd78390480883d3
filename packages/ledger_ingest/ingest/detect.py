"""Dialect detection for bank CSV exports.

Decision procedure
------------------
1. A first cell that is a bare ``M/D/YYYY`` date means there is no header row:
   the file is the headerless (Wells Fargo) dialect and data starts at line 1.
2. Otherwise the first of the leading 10 lines mentioning ``date``
   (case-insensitive) is the header row and data starts right after it. When
   no such line exists, line 1 is the header.
3. Header cells are de-quoted, trimmed and lower-cased, then matched against
   the ordered dialect signatures; no match falls back to the generic dialect.

Detection never fails; the worst case is the generic dialect.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from ..normalizers import split_csv_line
from .dialects import Dialect, match_signature

_BARE_DATE_RE = re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$")
_DATE_TOKEN_RE = re.compile(r"date", re.IGNORECASE)
_HEADER_SCAN_LINES = 10


@dataclass(frozen=True, slots=True)
class DetectedLayout:
    """Detector output: dialect, normalized header tokens, first data line index."""

    dialect: Dialect
    headers: tuple[str, ...]
    data_start: int


def _normalize_headers(line: str) -> tuple[str, ...]:
    return tuple(h.replace('"', "").strip().lower() for h in split_csv_line(line))


def detect_layout(lines: Sequence[str]) -> DetectedLayout:
    """Classify non-blank CSV ``lines`` into a :class:`DetectedLayout`."""

    if not lines:
        return DetectedLayout(Dialect.GENERIC, (), 0)

    first_cell = split_csv_line(lines[0])[0].replace('"', "").strip()
    if _BARE_DATE_RE.match(first_cell):
        return DetectedLayout(Dialect.WELLS_FARGO, (), 0)

    headers: tuple[str, ...] | None = None
    data_start = 1
    for i, line in enumerate(lines[:_HEADER_SCAN_LINES]):
        if _DATE_TOKEN_RE.search(line):
            headers = _normalize_headers(line)
            data_start = i + 1
            break
    if headers is None:
        headers = _normalize_headers(lines[0])

    return DetectedLayout(match_signature(headers), headers, data_start)


__all__ = ["DetectedLayout", "detect_layout"]
