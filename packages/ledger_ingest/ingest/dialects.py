"""Known bank CSV dialects and their row extractors.

A :class:`Dialect` is selected once per file by :mod:`.detect` and threaded
through row processing; the extractor is looked up from the member rather
than dispatched on free-form strings.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import Enum
from typing import TypeAlias

from ..models import ExtractedRow
from .adapters import capital_one, chase, citi, discover, generic, wells_fargo

RowExtractor: TypeAlias = Callable[[Sequence[str], Sequence[str]], ExtractedRow]


class Dialect(Enum):
    CAPITAL_ONE = "capital_one"
    CHASE = "chase"
    CITI = "citi"
    DISCOVER = "discover"
    WELLS_FARGO = "wells_fargo"
    GENERIC = "generic"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    @property
    def extractor(self) -> RowExtractor:
        return _EXTRACTORS[self]

    def extract(self, headers: Sequence[str], cols: Sequence[str]) -> ExtractedRow:
        return self.extractor(headers, cols)


_DISPLAY_NAMES: dict[Dialect, str] = {
    Dialect.CAPITAL_ONE: "Capital One",
    Dialect.CHASE: "Chase",
    Dialect.CITI: "Citi",
    Dialect.DISCOVER: "Discover",
    Dialect.WELLS_FARGO: "Wells Fargo",
    Dialect.GENERIC: "generic",
}

_EXTRACTORS: dict[Dialect, RowExtractor] = {
    Dialect.CAPITAL_ONE: capital_one.extract,
    Dialect.CHASE: chase.extract,
    Dialect.CITI: citi.extract,
    Dialect.DISCOVER: discover.extract,
    Dialect.WELLS_FARGO: wells_fargo.extract,
    Dialect.GENERIC: generic.extract,
}


# Ordered header signatures over the comma-joined header tokens; first match
# wins. Wells Fargo is headerless and detected separately.
_SIGNATURES: tuple[tuple[Dialect, Callable[[str], bool]], ...] = (
    (
        Dialect.CAPITAL_ONE,
        lambda h: "transaction description" in h
        and "transaction type" in h
        and "transaction amount" in h,
    ),
    (
        Dialect.CHASE,
        lambda h: "transaction date" in h and "post date" in h and "memo" in h,
    ),
    (
        Dialect.CITI,
        lambda h: "status" in h and "debit" in h and "credit" in h and "member name" in h,
    ),
    (
        Dialect.DISCOVER,
        lambda h: "trans. date" in h or ("trans" in h and "post date" in h and "category" in h),
    ),
)


def match_signature(headers: Sequence[str]) -> Dialect:
    """Return the first dialect whose signature matches ``headers`` (else generic)."""

    joined = ",".join(headers)
    for dialect, predicate in _SIGNATURES:
        if predicate(joined):
            return dialect
    return Dialect.GENERIC


__all__ = ["Dialect", "RowExtractor", "match_signature"]
