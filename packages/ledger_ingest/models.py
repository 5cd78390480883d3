"""Result types and file DTOs for ``ledger_ingest``.

The canonical record itself lives in :mod:`ledger_ingest.ctv`. This module
holds the small value types passed between pipeline stages and the pydantic
models used to validate rule-set files loaded from disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, field_validator

from .ctv import Transaction

# ---------------------------------------------------------------------------
# Pipeline values
# ---------------------------------------------------------------------------


class ExtractedRow(NamedTuple):
    """Fields pulled from one CSV row by a dialect extractor."""

    description: str
    date_str: str
    amount: Decimal
    """Signed amount in the canonical convention (expenses negative)."""


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Output of :func:`ledger_ingest.ingest.parse_csv`.

    ``errors`` holds one ``"Row <n>: <message>"`` string per row whose
    extraction raised; ``n`` is the 1-based index among non-blank lines.
    """

    transactions: list[Transaction]
    bank_detected: str
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ImportSummary:
    """Diagnostic counts for a committed import."""

    bank_detected: str
    added: int
    duplicates_skipped: int
    rule_hits: int
    errors: tuple[str, ...] = ()

    def message(self) -> str:
        parts = [self.bank_detected, f"{self.added} added"]
        if self.duplicates_skipped > 0:
            parts.append(f"{self.duplicates_skipped} dupes skipped")
        if self.rule_hits > 0:
            parts.append(f"{self.rule_hits} auto-categorized")
        if self.errors:
            parts.append(f"{len(self.errors)} rows skipped")
        return " · ".join(parts)


@dataclass(frozen=True, slots=True)
class EditResult:
    """Outcome of a transaction edit, optionally applied to all matches."""

    updated: int
    merchant_key: str
    rule_saved: bool


# ---------------------------------------------------------------------------
# Rule-set file DTOs
# ---------------------------------------------------------------------------


class KeywordGroupModel(BaseModel):
    """One ordered keyword group tagged with a category id."""

    model_config = ConfigDict(strict=True, extra="forbid", str_strip_whitespace=True)

    category: str
    keywords: tuple[str, ...]

    @field_validator("keywords")
    @classmethod
    def _keywords_lowercase(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        # Keywords are matched against lower-cased descriptions; whitespace is
        # significant ("sce " must not match "scented").
        items = tuple(k.lower() for k in v if k)
        if not items:
            raise ValueError("keyword group must contain at least one keyword")
        return items


class RuleSetFile(BaseModel):
    """Top-level schema for a JSON rule-set file.

    ``merchant_map`` keeps file order; earlier substrings take priority.
    """

    model_config = ConfigDict(strict=True, extra="forbid")

    schema_version: int = 1
    merchant_map: dict[str, str] = {}
    income_rules: list[KeywordGroupModel] = []
    savings_transfer_keywords: tuple[str, ...] = ()
    savings_transfer_category: str = "Savings Transfer"
    expense_rules: list[KeywordGroupModel] = []
    income_category_ids: tuple[str, ...] = ()
    default_category: str = "Other"

    @field_validator("merchant_map")
    @classmethod
    def _merchant_keys_lowercase(cls, v: dict[str, str]) -> dict[str, str]:
        return {k.lower(): c.strip() for k, c in v.items() if k}


__all__ = [
    "ExtractedRow",
    "ParseResult",
    "ImportSummary",
    "EditResult",
    "KeywordGroupModel",
    "RuleSetFile",
]
