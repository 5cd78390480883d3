"""Column-access helpers shared by the per-dialect row extractors.

Header tokens reaching the extractors are already lower-cased and trimmed.
Lookups are lenient: a missing column or a short row yields an empty cell,
which the extractors turn into an empty description or a zero amount so the
row is skipped rather than failing.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence


def cell(cols: Sequence[str], idx: int) -> str:
    """Return ``cols[idx]`` or ``""`` when ``idx`` is negative or out of range."""

    if idx < 0 or idx >= len(cols):
        return ""
    return cols[idx] or ""


def column(headers: Sequence[str], name: str) -> int:
    """Return the index of the header equal to ``name`` (``-1`` when absent)."""

    try:
        return list(headers).index(name)
    except ValueError:
        return -1


def find_column(headers: Sequence[str], predicate: Callable[[str], bool]) -> int:
    """Return the index of the first header satisfying ``predicate`` (``-1`` when none)."""

    for idx, h in enumerate(headers):
        if predicate(h):
            return idx
    return -1


__all__ = ["cell", "column", "find_column"]
