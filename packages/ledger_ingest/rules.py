"""Ordered categorization rule tables and the shared first-match scan.

Every rule tier is an ordered sequence of ``(predicate, result)`` pairs and is
evaluated by :func:`first_match`; earlier entries win ties. The built-in
tables are plain immutable data bundled into a :class:`RuleSet` that callers
pass explicitly to the categorization engine. A JSON file with the same shape
can replace the defaults (see :func:`load_rule_set`).
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from os import PathLike
from pathlib import Path
from typing import TypeAlias, TypeVar

from .logging_setup import get_logger
from .models import RuleSetFile

_logger = get_logger("ledger_ingest.rules")

Predicate: TypeAlias = Callable[[str], bool]

T = TypeVar("T")


def first_match(rules: Iterable[tuple[Predicate, T]], text: str) -> T | None:
    """Return the result of the first rule whose predicate accepts ``text``."""

    for predicate, result in rules:
        if predicate(text):
            return result
    return None


def contains(needle: str) -> Predicate:
    return lambda text: needle in text


def contains_any(needles: Iterable[str]) -> Predicate:
    items = tuple(needles)
    return lambda text: any(n in text for n in items)


@dataclass(frozen=True, slots=True)
class KeywordGroup:
    """Ordered keywords mapped to one category; any keyword matching wins."""

    category: str
    keywords: tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(kw in text for kw in self.keywords)


# ---------------------------------------------------------------------------
# Built-in tables
# ---------------------------------------------------------------------------

# Lower-cased description substrings verified against real history. Checked
# before any keyword rule; first match wins, so order matters.
MERCHANT_MAP: tuple[tuple[str, str], ...] = (
    # Coffee / Tea
    ("nespresso usa", "Coffee / Tea"),
    ("tea be honest", "Coffee / Tea"),
    ("buena matcha", "Coffee / Tea"),
    ("dutch bros", "Coffee / Tea"),
    ("koffi", "Coffee / Tea"),
    # Landscape
    ("cortez landscape", "Landscape"),
    # Utilities
    ("nexgen air conditioning", "Utilities"),
    ("scgc", "Utilities"),
    ("so cal edison", "Utilities"),
    ("coachella valley water", "Utilities"),
    ("coachella valley billpay", "Utilities"),
    # Food, local merchants
    ("aldi ", "Food"),
    ("staterbros", "Food"),
    ("alkobar quick stop", "Food"),
    ("otori japanese", "Food"),
    ("pier 88", "Food"),
    ("rubios", "Food"),
    ("baskin", "Food"),
    ("nayax vending", "Food"),
    ("hamachi cathedral", "Food"),
    ("el pollo loco", "Food"),
    ("habit cathedral", "Food"),
    ("beach house yogurt", "Food"),
    ("brandini toffee", "Food"),
    ("thrive market", "Food"),
    ("thrivemarke", "Food"),
    ("p.f. chang", "Food"),
    ("pf chang", "Food"),
    ("wm supercenter", "Food"),
    ("longhorn stk", "Food"),
    ("da andrea", "Food"),
    ("chick-fil-a", "Food"),
    ("in-n-out", "Food"),
    # Entertainment
    ("cinemark", "Entertainment"),
    ("spo cacsports", "Entertainment"),
    ("palm spring lanes", "Entertainment"),
    ("desertcrossing", "Entertainment"),
    ("tiqets", "Entertainment"),
    ("nintendo", "Entertainment"),
    ("big league dreams", "Entertainment"),
    # Shopping
    ("homegoods", "Shopping"),
    ("hobby-lobby", "Shopping"),
    ("hobby lobby", "Shopping"),
    ("ulta ", "Shopping"),
    ("sephora", "Shopping"),
    ("anthropologie", "Shopping"),
    ("thursday boot", "Shopping"),
    ("pypl payin4", "Shopping"),
    ("sheinusserv", "Shopping"),
    ("oldnavy.com", "Shopping"),
    ("children's place", "Shopping"),
    ("world market", "Shopping"),
    ("kiehls", "Shopping"),
    ("kiehl's", "Shopping"),
    ("www.boxlunchgives", "Shopping"),
    ("etsy ", "Shopping"),
    ("marshalls", "Shopping"),
    ("teamfanshop", "Shopping"),
    ("untuckit", "Shopping"),
    ("mathis home", "Shopping"),
    ("calvin klein", "Shopping"),
    ("daiso", "Shopping"),
    ("sp *casely", "Shopping"),
    ("sp+aff brighton", "Shopping"),
    ("sp+aff mattel", "Shopping"),
    # Transport
    ("tmna subscription", "Transport"),
    ("mohica towing", "Transport"),
    ("the toll roads", "Transport"),
    # Giving
    ("tithe.ly", "Giving"),
    ("reveal churc", "Giving"),
    ("thegardenfellowship", "Giving"),
    ("nbs*king's", "Giving"),
    ("99pledg", "Giving"),
    # CC Payment
    ("payment thank you", "CC Payment"),
    ("returned payment", "CC Payment"),
    ("automatic payment", "CC Payment"),
    ("target card srvc", "CC Payment"),
    ("target card payment", "CC Payment"),
    ("target card services", "CC Payment"),
    ("discover e-payment", "CC Payment"),
    ("wf credit card", "CC Payment"),
    ("chase credit card", "CC Payment"),
    ("citi autopay", "CC Payment"),
    # Side Income
    ("atm cash deposit", "Side Income"),
)

# Evaluated only for positive amounts, after the savings-transfer exclusion.
INCOME_RULES: tuple[KeywordGroup, ...] = (
    KeywordGroup(
        "W2 Payroll",
        (
            "payroll",
            "direct deposit",
            "kings sch",
            "best western",
            "1-hr service",
            "1-hr serv",
            "ach credit payroll",
            "salary",
            "wage",
            "dir dep",
        ),
    ),
    KeywordGroup(
        "Interest/Dividends",
        ("interest paid", "interest earned", "dividend", "rewards credit"),
    ),
    KeywordGroup(
        "Transfer Received",
        ("zelle money received", "paypal from", "venmo from"),
    ),
    KeywordGroup(
        "Side Income",
        ("check deposit", "mobile deposit", "cash deposit"),
    ),
)

# Positive amounts that look like income but are internal movements.
SAVINGS_TRANSFER_KEYWORDS: tuple[str, ...] = (
    "deposit from 360",
    "withdrawal from 360",
    "from 360 performance",
    "car charger investment",
    "property tax",
    "final yard payment",
    "deposit from capital one savings",
    "transfer from savings",
    "zelle money received from alexa",  # self-transfer
)

EXPENSE_RULES: tuple[KeywordGroup, ...] = (
    KeywordGroup(
        "Housing",
        (
            "newrez", "shellpoint", "mortgage", "coachella valley billpay",
            "le campanile col", "socalgas", "scgc", "so cal edison", "sce ",
            "edison co", "pg&e", "water bill", "sewer", "trash", "waste", "rent",
            "hoa ", "home insurance", "renters",
        ),
    ),
    KeywordGroup(
        "Transport",
        (
            "toyota ach", "car payment", "auto loan", "shell", "chevron", "bp ",
            "exxon", "mobil", "arco", "circle k", "wawa", "speedway", "fuel",
            "gas station", "ca dmv", "dmv", "uber", "lyft", "parking", "toll",
            "autozone", "jiffy lube", "firestone", "goodyear", "mohica towing",
            "towing", "airline", "southwest air", "delta", "united air",
            "american air",
        ),
    ),
    KeywordGroup(
        "Food",
        (
            "mcdonald", "starbucks", "cardenas", "doordash", "ubereats", "grubhub",
            "pizza", "koffi", "castaneda", "vienna donut", "bakery", "deli",
            "firehouse", "taco bell", "del taco", "chipotle", "panera", "subway",
            "chick-fil", "in-n-out", "jack in the box", "sonic", "applebee",
            "olive garden", "ihop", "denny", "waffle house", "wendys",
            "burger king", "five guys", "shake shack", "panda", "da andrea",
            "restaurant", "dining", "cafe ", "coffee", "costco", "trader joe",
            "sprouts farmers", "safeway", "kroger", "whole foods", "vons",
            "ralphs", "albertson", "food 4 less", "smart final", "grocery",
            "groceries",
        ),
    ),
    KeywordGroup(
        "Healthcare",
        (
            "fit in 42", "kp scal", "kaiser", "doctor", "hospital", "pharmacy",
            "cvs", "walgreens", "rite aid", "dental", "vision", "optometrist",
            "medical", "urgent care", "clinic", "labcorp", "therapist",
            "counseling", "chiropractor", "physical therapy",
        ),
    ),
    KeywordGroup(
        "Shopping",
        (
            "amazon", "walmart", "wal-mart", "target", "best buy", "apple store",
            "apple.com", "nordstrom", "macy", "gap", "old navy", "h&m", "zara",
            "forever 21", "urban outfitter", "marshalls", "tj maxx", "ross dress",
            "five below", "michaels", "hobby lobby", "home depot", "lowes", "ikea",
            "wayfair", "ebay", "etsy", "chewy", "petco", "petsmart",
            "calvin klein", "columbia", "estee lauder", "untuckit", "teamfanshop",
            "mathis home",
        ),
    ),
    KeywordGroup(
        "Entertainment",
        (
            "netflix", "spotify", "hulu", "disney+", "hbo", "max", "peacock",
            "paramount", "apple tv", "youtube premium", "amazon prime", "gaming",
            "steam", "playstation", "xbox", "nintendo", "movie", "theater", "amc",
            "regal", "concert", "ticketmaster", "tiqets", "desertcrossing",
            "wf*desert",
        ),
    ),
    KeywordGroup(
        "Phone/Internet",
        ("verizon", "at&t", "t-mobile", "spectrum mobile", "cricket", "metro pcs"),
    ),
    KeywordGroup(
        "Insurance",
        ("drive ins", "ins prem", "insurance prem", "geico", "state farm", "allstate", "progressive"),
    ),
    KeywordGroup(
        "Education",
        ("scholarshare", "kings school", "le campanile", "king's schools facts"),
    ),
    KeywordGroup(
        "Giving",
        ("tithe.ly", "reveal churc", "church", "charity", "donation"),
    ),
    KeywordGroup(
        "Savings Transfer",
        ("360 performance savings", "withdrawal to 360", "transfer to savings"),
    ),
    KeywordGroup(
        "CC Payment",
        (
            "wf credit card auto pay", "chase credit crd", "discover e-payment",
            "citi card online", "target card srvc", "applecard gsbank",
            "online transfer ref", "payment - thank you", "automatic payment",
            "internet payment - thank you", "directpay full balance",
        ),
    ),
)

INCOME_CATEGORY_IDS: frozenset[str] = frozenset(
    {"W2 Payroll", "Side Income", "Transfer Received", "Interest/Dividends", "Income"}
)


# ---------------------------------------------------------------------------
# Rule set
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Immutable bundle of every tier consulted by the categorization engine."""

    merchant_map: tuple[tuple[str, str], ...] = MERCHANT_MAP
    income_rules: tuple[KeywordGroup, ...] = INCOME_RULES
    savings_transfer_keywords: tuple[str, ...] = SAVINGS_TRANSFER_KEYWORDS
    savings_transfer_category: str = "Savings Transfer"
    expense_rules: tuple[KeywordGroup, ...] = EXPENSE_RULES
    income_category_ids: frozenset[str] = INCOME_CATEGORY_IDS
    default_category: str = "Other"

    def merchant_tier(self) -> Iterator[tuple[Predicate, str]]:
        for needle, category in self.merchant_map:
            yield contains(needle), category

    def savings_tier(self) -> Iterator[tuple[Predicate, str]]:
        yield contains_any(self.savings_transfer_keywords), self.savings_transfer_category

    def income_tier(self) -> Iterator[tuple[Predicate, str]]:
        for group in self.income_rules:
            yield group.matches, group.category

    def expense_tier(self) -> Iterator[tuple[Predicate, str]]:
        for group in self.expense_rules:
            yield group.matches, group.category


DEFAULT_RULES = RuleSet()


def rule_set_from_file(data: RuleSetFile) -> RuleSet:
    """Build a :class:`RuleSet` from a validated file; empty sections keep defaults."""

    return RuleSet(
        merchant_map=tuple(data.merchant_map.items()) or MERCHANT_MAP,
        income_rules=tuple(KeywordGroup(g.category, g.keywords) for g in data.income_rules)
        or INCOME_RULES,
        savings_transfer_keywords=tuple(k.lower() for k in data.savings_transfer_keywords)
        or SAVINGS_TRANSFER_KEYWORDS,
        savings_transfer_category=data.savings_transfer_category,
        expense_rules=tuple(KeywordGroup(g.category, g.keywords) for g in data.expense_rules)
        or EXPENSE_RULES,
        income_category_ids=frozenset(data.income_category_ids) or INCOME_CATEGORY_IDS,
        default_category=data.default_category,
    )


def load_rule_set(path: str | PathLike[str] | None = None) -> RuleSet:
    """Load a rule set from ``path`` or ``LEDGER_RULES_FILE``; defaults when neither is set.

    Raises ``pydantic.ValidationError`` for malformed files.
    """

    src = path or os.getenv("LEDGER_RULES_FILE")
    if not src:
        return DEFAULT_RULES
    p = Path(src)
    data = RuleSetFile.model_validate_json(p.read_text(encoding="utf-8"))
    _logger.info("loaded rule set from %s", p)
    return rule_set_from_file(data)


__all__ = [
    "Predicate",
    "first_match",
    "contains",
    "contains_any",
    "KeywordGroup",
    "MERCHANT_MAP",
    "INCOME_RULES",
    "SAVINGS_TRANSFER_KEYWORDS",
    "EXPENSE_RULES",
    "INCOME_CATEGORY_IDS",
    "RuleSet",
    "DEFAULT_RULES",
    "rule_set_from_file",
    "load_rule_set",
]
