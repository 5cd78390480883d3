"""Rule-based categorization engine.

Tiers, first match wins:

1. merchant exact-map (substring containment, table order);
2. income rules, only for ``amount > 0``: the savings-transfer exclusion
   list first, then the ordered income keyword groups;
3. expense keyword groups (any sign);
4. the default category.

Stored merchant rules (keyed by :func:`~ledger_ingest.merchant.merchant_key`)
override the engine on new imports only; see :func:`apply_merchant_rules`.
All functions are pure: they take a :class:`~ledger_ingest.rules.RuleSet`
and return new records.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping, Set
from decimal import Decimal

from .ctv import Transaction
from .logging_setup import get_logger
from .merchant import merchant_key
from .rules import DEFAULT_RULES, RuleSet, first_match

_logger = get_logger("ledger_ingest.categorize")

LEGACY_INCOME_CATEGORY = "Income"
_LEGACY_INCOME_FALLBACK = "W2 Payroll"


def categorize_transaction(
    description: str | None,
    amount: Decimal | int | float,
    rules: RuleSet = DEFAULT_RULES,
) -> str:
    """Return the category id for one description/amount pair."""

    desc = (description or "").lower()

    hit = first_match(rules.merchant_tier(), desc)
    if hit is not None:
        return hit

    if amount > 0:
        hit = first_match(rules.savings_tier(), desc)
        if hit is None:
            hit = first_match(rules.income_tier(), desc)
        if hit is not None:
            return hit

    hit = first_match(rules.expense_tier(), desc)
    return hit if hit is not None else rules.default_category


def categorize_all(
    transactions: Iterable[Transaction],
    rules: RuleSet = DEFAULT_RULES,
    *,
    income_ids: Set[str] | None = None,
) -> list[Transaction]:
    """Categorize every transaction and derive ``is_income`` from the category."""

    ids = income_ids if income_ids is not None else rules.income_category_ids
    out: list[Transaction] = []
    for t in transactions:
        category = categorize_transaction(t.description, t.amount, rules)
        out.append(dataclasses.replace(t, category=category, is_income=category in ids))
    return out


def apply_merchant_rules(
    transactions: Iterable[Transaction],
    merchant_rules: Mapping[str, str],
    *,
    income_ids: Set[str],
) -> tuple[list[Transaction], int]:
    """Overlay stored merchant rules; return ``(records, rule_hits)``.

    ``rule_hits`` counts records whose category actually changed.
    """

    out: list[Transaction] = []
    hits = 0
    for t in transactions:
        rule_cat = merchant_rules.get(merchant_key(t.description)) if merchant_rules else None
        if rule_cat and rule_cat != t.category:
            t = dataclasses.replace(t, category=rule_cat, is_income=rule_cat in income_ids)
            hits += 1
        out.append(t)
    if hits:
        _logger.info("merchant rules re-categorized %d transactions", hits)
    return out, hits


def migrate_income_categories(
    transactions: Iterable[Transaction],
    rules: RuleSet = DEFAULT_RULES,
) -> list[Transaction]:
    """Move records still on the legacy generic ``Income`` category to a subcategory.

    The first matching income keyword group wins; otherwise ``W2 Payroll``.
    Records on any other category are returned unchanged.
    """

    out: list[Transaction] = []
    for t in transactions:
        if t.category != LEGACY_INCOME_CATEGORY:
            out.append(t)
            continue
        hit = first_match(rules.income_tier(), (t.description or "").lower())
        out.append(
            dataclasses.replace(t, category=hit or _LEGACY_INCOME_FALLBACK, is_income=True)
        )
    return out


__all__ = [
    "categorize_transaction",
    "categorize_all",
    "apply_merchant_rules",
    "migrate_income_categories",
    "LEGACY_INCOME_CATEGORY",
]
