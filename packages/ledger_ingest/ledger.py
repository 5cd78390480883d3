"""The in-memory ledger: transaction history, merchant rules and categories.

``Ledger`` wires the pure pipeline stages together for one session:

- ``import_csv``: parse -> categorize -> merchant-rule overlay -> dedup
  against stored history -> append, then persist.
- ``stage_new_month`` / ``merge_staged``: a comparison batch kept apart from
  history until explicitly merged.
- ``edit_transaction``: single edit, or bulk reclassification of every record
  sharing the edited record's merchant key plus a stored rule for future
  imports.
- ``reconcile_walmart``: re-file Walmart/Target bank charges using a parsed
  Walmart order summary.

The persistence collaborator is optional; without one the ledger lives only
in memory. Persistence failures never interrupt the session.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from decimal import Decimal

from .categories import Category, CategoryRegistry
from .categorize import apply_merchant_rules, categorize_all, migrate_income_categories
from .ctv import Transaction
from .duplicates import deduplicate_transactions
from .ingest import parse_csv
from .logging_setup import get_logger
from .merchant import merchant_key
from .models import EditResult, ImportSummary
from .persistence import LedgerStore
from .retailers.common import RetailerSummary
from .rules import DEFAULT_RULES, RuleSet

_logger = get_logger("ledger_ingest.ledger")

NEW_MONTH_ACCOUNT = "New Month"
NOTE_SEPARATOR = " · "

_WALMART_MARKERS: tuple[str, ...] = ("wal-mart", "walmart", "target")
_GAS_THRESHOLD = 20
_GAS_CATEGORY = "Transport"
_DEFAULT_DOMINANT = "Food"


class EmptyImportError(ValueError):
    """Raised when a file yields no transactions; the ledger is unchanged."""


class UnknownTransactionError(KeyError):
    """Raised when an edit targets an id that is not in the ledger."""


def _append_note(note: str | None, suffix: str) -> str:
    return f"{note}{NOTE_SEPARATOR}{suffix}" if note else suffix


def _is_walmart_charge(t: Transaction) -> bool:
    d = (t.description or "").lower()
    return not t.excluded and any(m in d for m in _WALMART_MARKERS)


def dominant_ledger_category(summary: RetailerSummary, *, skip: str = _GAS_CATEGORY) -> str:
    """Return the ledger category carrying the most retailer spend.

    ``skip`` (fuel) is never a candidate. Ties keep the first category seen;
    an empty summary yields ``Food``.
    """

    split: dict[str, Decimal] = {}
    for sub in summary.by_category.values():
        split[sub.ledger_cat] = split.get(sub.ledger_cat, Decimal("0")) + sub.total
    candidates = [(cat, total) for cat, total in split.items() if cat != skip]
    if not candidates:
        return _DEFAULT_DOMINANT
    return max(candidates, key=lambda kv: kv[1])[0]


class Ledger:
    """Mutable session state over immutable :class:`Transaction` records."""

    def __init__(
        self,
        transactions: Iterable[Transaction] = (),
        *,
        merchant_rules: Mapping[str, str] | None = None,
        registry: CategoryRegistry | None = None,
        rules: RuleSet = DEFAULT_RULES,
        store: LedgerStore | None = None,
    ) -> None:
        self._transactions: list[Transaction] = list(transactions)
        self._merchant_rules: dict[str, str] = dict(merchant_rules or {})
        self.registry = registry if registry is not None else CategoryRegistry()
        self.rules = rules
        self.store = store
        self._staged: list[Transaction] = []

    @classmethod
    def load(cls, store: LedgerStore, *, rules: RuleSet = DEFAULT_RULES) -> Ledger:
        """Seed a ledger from ``store`` and migrate legacy income records."""

        transactions = migrate_income_categories(store.load_transactions(), rules)
        ledger = cls(
            transactions,
            merchant_rules=store.load_merchant_rules(),
            registry=CategoryRegistry(store.load_categories()),
            rules=rules,
            store=store,
        )
        _logger.info(
            "loaded ledger: %d transactions, %d merchant rules",
            len(ledger._transactions),
            len(ledger._merchant_rules),
        )
        return ledger

    # -- read-only views ---------------------------------------------------

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return tuple(self._transactions)

    @property
    def merchant_rules(self) -> dict[str, str]:
        return dict(self._merchant_rules)

    @property
    def staged(self) -> tuple[Transaction, ...]:
        return tuple(self._staged)

    @property
    def income_ids(self) -> frozenset[str]:
        return frozenset(self.rules.income_category_ids) | self.registry.income_ids()

    def get(self, transaction_id: str) -> Transaction:
        for t in self._transactions:
            if t.id == transaction_id:
                return t
        raise UnknownTransactionError(transaction_id)

    # -- imports -----------------------------------------------------------

    def import_csv(self, text: str, account: str) -> ImportSummary:
        """Parse ``text`` and append the records not already stored.

        Raises
        ------
        EmptyImportError
            When the file yields no transactions. Nothing is merged.
        """

        result = parse_csv(text, account)
        if not result.transactions:
            raise EmptyImportError("No transactions found. Check the CSV format.")

        income_ids = self.income_ids
        categorized = categorize_all(result.transactions, self.rules, income_ids=income_ids)
        with_rules, rule_hits = apply_merchant_rules(
            categorized, self._merchant_rules, income_ids=income_ids
        )
        unique = deduplicate_transactions(with_rules, self._transactions)
        skipped = len(with_rules) - len(unique)
        self._transactions.extend(unique)
        _logger.info(
            "import %s: %d added, %d duplicates skipped, %d rule hits",
            result.bank_detected,
            len(unique),
            skipped,
            rule_hits,
        )
        self._save_transactions()
        return ImportSummary(
            bank_detected=result.bank_detected,
            added=len(unique),
            duplicates_skipped=skipped,
            rule_hits=rule_hits,
            errors=tuple(result.errors),
        )

    def stage_new_month(self, text: str) -> int:
        """Parse and categorize a comparison batch without touching history."""

        result = parse_csv(text, NEW_MONTH_ACCOUNT)
        categorized = categorize_all(result.transactions, self.rules, income_ids=self.income_ids)
        if not categorized:
            raise EmptyImportError("No transactions found.")
        self._staged = categorized
        _logger.info("staged %d transactions from %s", len(categorized), result.bank_detected)
        return len(categorized)

    def merge_staged(self) -> int:
        """Append the staged batch to history and clear it; return the count."""

        count = len(self._staged)
        if count:
            self._transactions.extend(self._staged)
            self._staged = []
            self._save_transactions()
        return count

    # -- edits -------------------------------------------------------------

    def match_count(self, transaction_id: str) -> int:
        """Number of *other* records sharing the merchant key of ``transaction_id``."""

        key = merchant_key(self.get(transaction_id).description)
        if not key:
            return 0
        return sum(
            1
            for t in self._transactions
            if t.id != transaction_id and merchant_key(t.description) == key
        )

    def edit_transaction(
        self,
        transaction_id: str,
        *,
        category: str,
        note: str | None = None,
        excluded: bool | None = None,
        apply_to_all: bool = False,
    ) -> EditResult:
        """Update one record, optionally reclassifying all of its merchant.

        With ``apply_to_all`` every record sharing the merchant key gets the
        new category and a merchant rule is stored for future imports. The
        note and excluded flag change on the edited record only. ``note`` and
        ``excluded`` left as ``None`` keep their current values.
        """

        target = self.get(transaction_id)
        key = merchant_key(target.description)
        is_income = self.registry.resolve(category).is_income
        bulk = apply_to_all and bool(key)

        updated = 0
        out: list[Transaction] = []
        for t in self._transactions:
            if t.id == transaction_id:
                t = dataclasses.replace(
                    t,
                    category=category,
                    is_income=is_income,
                    note=t.note if note is None else (note or None),
                    excluded=t.excluded if excluded is None else excluded,
                )
                updated += 1
            elif bulk and merchant_key(t.description) == key:
                t = dataclasses.replace(t, category=category, is_income=is_income)
                updated += 1
            out.append(t)
        self._transactions = out

        if bulk:
            self._merchant_rules[key] = category
            _logger.info("merchant rule saved: %r -> %r (%d updated)", key, category, updated)
            self._save_rules()
        self._save_transactions()
        return EditResult(updated=updated, merchant_key=key, rule_saved=bulk)

    def reconcile_walmart(self, summary: RetailerSummary) -> int:
        """Re-file Walmart/Target bank charges from a Walmart order summary.

        Non-integer Walmart charges above $20 are treated as fuel; everything
        else takes the dominant non-fuel ledger category of the order data.
        Returns the number of records updated.
        """

        target = dominant_ledger_category(summary)
        updated = 0
        out: list[Transaction] = []
        for t in self._transactions:
            if _is_walmart_charge(t):
                magnitude = abs(t.amount)
                if (
                    "walmart" in t.description.lower()
                    and magnitude > _GAS_THRESHOLD
                    and magnitude % 1 != 0
                ):
                    t = dataclasses.replace(
                        t,
                        category=_GAS_CATEGORY,
                        note=_append_note(t.note, "Walmart gas (auto-reconciled)"),
                    )
                else:
                    t = dataclasses.replace(
                        t,
                        category=target,
                        note=_append_note(t.note, "Walmart order reconciled"),
                    )
                updated += 1
            out.append(t)
        if not updated:
            _logger.info("no Walmart bank charges to reconcile")
            return 0
        self._transactions = out
        _logger.info("reconciled %d Walmart bank charges -> %s", updated, target)
        self._save_transactions()
        return updated

    # -- categories --------------------------------------------------------

    def add_category(
        self,
        name: str,
        *,
        color: str | None = None,
        exclude_from_budget: bool = False,
        is_income: bool = False,
    ) -> Category:
        kwargs = {"color": color} if color else {}
        self.registry, cat = self.registry.add_category(
            name, exclude_from_budget=exclude_from_budget, is_income=is_income, **kwargs
        )
        self._save_categories()
        return cat

    def remove_category(self, category_id: str) -> None:
        self.registry = self.registry.remove_category(category_id)
        self._save_categories()

    def reset(self) -> None:
        """Drop all transactions, rules and custom categories."""

        self._transactions = []
        self._merchant_rules = {}
        self._staged = []
        self.registry = CategoryRegistry()
        if self.store is not None:
            self.store.clear_all()

    # -- persistence -------------------------------------------------------

    def _save_transactions(self) -> None:
        if self.store is not None:
            self.store.save_transactions(self._transactions)

    def _save_rules(self) -> None:
        if self.store is not None:
            self.store.save_merchant_rules(self._merchant_rules)

    def _save_categories(self) -> None:
        if self.store is not None:
            self.store.save_categories(self.registry.all())


__all__ = [
    "Ledger",
    "EmptyImportError",
    "UnknownTransactionError",
    "NEW_MONTH_ACCOUNT",
    "dominant_ledger_category",
]
