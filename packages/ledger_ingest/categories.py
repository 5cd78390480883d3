"""Category catalogue, reconciliation and the non-throwing registry.

Exports
-------
- ``Category``: one budget category (id is the stable foreign key used by
  ``Transaction.category``).
- ``DEFAULT_CATEGORIES`` / ``LEGACY_CATEGORY_ALIASES``: built-in data.
- ``reconcile_categories(...)``: pure merge of loaded categories with the
  built-ins plus forced income/excluded flags, run once at load.
- ``CategoryRegistry``: immutable lookup with a neutral fallback for unknown
  ids, plus helpers to add/remove custom categories.
- ``normalize_name(...)`` / ``validate_name(...)``: name hygiene shared by the
  CLI and the registry.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Set
from dataclasses import dataclass, replace

from .logging_setup import get_logger

_logger = get_logger("ledger_ingest.categories")

NEUTRAL_COLOR = "#94a3b8"


class CategoryError(ValueError):
    """Invalid category name, duplicate id, or a protected built-in."""


@dataclass(frozen=True, slots=True)
class Category:
    id: str
    name: str
    color: str = NEUTRAL_COLOR
    exclude_from_budget: bool = False
    is_income: bool = False
    built_in: bool = False
    legacy: bool = False


def _builtin(
    name: str, color: str, *, excluded: bool = False, income: bool = False
) -> Category:
    return Category(
        id=name,
        name=name,
        color=color,
        exclude_from_budget=excluded,
        is_income=income,
        built_in=True,
    )


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    # Income (excluded from budget, shown as income)
    _builtin("W2 Payroll", "#2dd4a7", excluded=True, income=True),
    _builtin("Side Income", "#10b981", excluded=True, income=True),
    _builtin("Transfer Received", "#6ee7b7", excluded=True, income=True),
    _builtin("Interest/Dividends", "#a7f3d0", excluded=True, income=True),
    # Legacy generic income, kept so older records still resolve
    _builtin("Income", "#2dd4a7", excluded=True, income=True),
    # Expenses
    _builtin("Housing", "#e8c547"),
    _builtin("Food", "#f4845f"),
    _builtin("Transport", "#5f9cf4"),
    _builtin("Healthcare", "#7ed9a8"),
    _builtin("Shopping", "#c47ef4"),
    _builtin("Entertainment", "#f47eb4"),
    _builtin("Phone/Internet", "#60a5fa"),
    _builtin("Insurance", "#fb923c"),
    _builtin("Education", "#a78bfa"),
    _builtin("Giving", "#f472b6"),
    _builtin("Coffee / Tea", "#a78bfa"),
    _builtin("Landscape", "#10b981"),
    _builtin("Utilities", "#e8c547"),
    _builtin("Vacation", "#f59e0b"),
    # Pass-through
    _builtin("Investments", "#34d399", excluded=True),
    _builtin("Savings Transfer", "#4ecdc4", excluded=True),
    _builtin("CC Payment", "#64748b", excluded=True),
    _builtin("Other", NEUTRAL_COLOR),
)

# Timestamp-form ids written by older versions. Hidden from listings but
# resolvable forever so historical records keep their name and flags.
LEGACY_CATEGORY_ALIASES: tuple[Category, ...] = (
    Category("Coffee-/-Tea-1771459649923", "Coffee / Tea", "#a78bfa", legacy=True),
    Category("Landscape-1771459661164", "Landscape", "#10b981", legacy=True),
    Category("Utilities-1771459840619", "Utilities", "#e8c547", legacy=True),
    Category("Vacation-1771462459054", "Vacation", "#f59e0b", legacy=True),
)

# Legacy id -> permanent id, applied when loading stored transactions.
CATEGORY_ID_MIGRATION: Mapping[str, str] = {c.id: c.name for c in LEGACY_CATEGORY_ALIASES}

FORCED_INCOME_IDS: frozenset[str] = frozenset(
    {"W2 Payroll", "Side Income", "Transfer Received", "Interest/Dividends", "Income"}
)
FORCED_EXCLUDED_IDS: frozenset[str] = FORCED_INCOME_IDS | {
    "Investments",
    "Savings Transfer",
    "CC Payment",
}


def reconcile_categories(
    loaded: Iterable[Category],
    builtins: Iterable[Category] = DEFAULT_CATEGORIES + LEGACY_CATEGORY_ALIASES,
    *,
    forced_income: Set[str] = FORCED_INCOME_IDS,
    forced_excluded: Set[str] = FORCED_EXCLUDED_IDS,
) -> tuple[Category, ...]:
    """Return the final category list for a session.

    Loaded categories keep their order and edits; missing built-ins are
    appended; forced ids always end up income/excluded. Inputs are not
    modified.
    """

    base = list(loaded)
    seen = {c.id for c in base}
    merged = base + [c for c in builtins if c.id not in seen]
    return tuple(
        replace(
            c,
            is_income=True if c.id in forced_income else c.is_income,
            exclude_from_budget=True if c.id in forced_excluded else c.exclude_from_budget,
        )
        for c in merged
    )


# ---------------------------
# Name normalization/validation
# ---------------------------

_ALLOWED_RE = re.compile(r"^[A-Za-z0-9 &\-/'.+]+$")


def normalize_name(name: str) -> str:
    """Return a trimmed, single-spaced representation of ``name``."""

    return " ".join(name.strip().split())


def validate_name(name: str, *, max_len: int = 64) -> str | None:
    """Return a reason string when ``name`` is unusable, else ``None``."""

    n = normalize_name(name)
    if not n:
        return "Name cannot be empty"
    if len(n) > max_len:
        return f"Name must be at most {max_len} characters"
    if not _ALLOWED_RE.match(n):
        return "Only letters, numbers, spaces, and & - / ' . + are allowed"
    return None


# ---------------------------
# Registry
# ---------------------------


class CategoryRegistry:
    """Immutable id -> :class:`Category` lookup.

    Legacy aliases are indexed first and active categories override them.
    :meth:`resolve` never raises: unknown ids map to a neutral category named
    after the id (grey, not excluded, not income).
    """

    def __init__(self, categories: Iterable[Category] = DEFAULT_CATEGORIES) -> None:
        self._categories: tuple[Category, ...] = tuple(categories)
        by_id: dict[str, Category] = {c.id: c for c in LEGACY_CATEGORY_ALIASES}
        for c in self._categories:
            by_id[c.id] = c
        self._by_id = by_id

    @classmethod
    def from_loaded(cls, loaded: Iterable[Category]) -> CategoryRegistry:
        return cls(reconcile_categories(loaded))

    @property
    def categories(self) -> tuple[Category, ...]:
        """Active (non-legacy) categories in display order."""

        return tuple(c for c in self._categories if not c.legacy)

    def all(self) -> tuple[Category, ...]:
        return self._categories

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._by_id

    def resolve(self, category_id: str) -> Category:
        found = self._by_id.get(category_id)
        if found is not None:
            return found
        return Category(id=category_id, name=category_id)

    def income_ids(self) -> frozenset[str]:
        return frozenset(cid for cid, c in self._by_id.items() if c.is_income)

    def budget_categories(self) -> tuple[Category, ...]:
        return tuple(c for c in self.categories if not c.exclude_from_budget and not c.is_income)

    def income_categories(self) -> tuple[Category, ...]:
        return tuple(c for c in self.categories if c.is_income)

    def add_category(
        self,
        name: str,
        *,
        color: str = NEUTRAL_COLOR,
        exclude_from_budget: bool = False,
        is_income: bool = False,
    ) -> tuple[CategoryRegistry, Category]:
        """Return a registry including a new custom category, and the category.

        The id is the normalized name (stable, never timestamp-based). Ids
        and names colliding case-insensitively with an existing category are
        rejected.
        """

        reason = validate_name(name)
        if reason:
            raise CategoryError(f"Invalid category name: {reason}")
        n = normalize_name(name)
        lowered = n.lower()
        for c in self._categories:
            if c.id.lower() == lowered or c.name.lower() == lowered:
                raise CategoryError(f"Category already exists: {c.id!r}")
        cat = Category(
            id=n,
            name=n,
            color=color,
            exclude_from_budget=exclude_from_budget,
            is_income=is_income,
            built_in=False,
        )
        _logger.info("added category %r", cat.id)
        return CategoryRegistry(self._categories + (cat,)), cat

    def remove_category(self, category_id: str) -> CategoryRegistry:
        """Return a registry without ``category_id``; built-ins are protected.

        Transactions still referencing the id resolve through the fallback.
        """

        target = self._by_id.get(category_id)
        if target is None or target.legacy:
            raise CategoryError(f"Unknown category: {category_id!r}")
        if target.built_in:
            raise CategoryError(f"Built-in category cannot be deleted: {category_id!r}")
        return CategoryRegistry(c for c in self._categories if c.id != category_id)


__all__ = [
    "Category",
    "CategoryError",
    "CategoryRegistry",
    "DEFAULT_CATEGORIES",
    "LEGACY_CATEGORY_ALIASES",
    "CATEGORY_ID_MIGRATION",
    "FORCED_INCOME_IDS",
    "FORCED_EXCLUDED_IDS",
    "NEUTRAL_COLOR",
    "reconcile_categories",
    "normalize_name",
    "validate_name",
]
