"""Public interface for the ``ledger_ingest`` package.

This module exposes the ingestion pipeline, the ledger service and the public
models/types as the stable import surface. There is no runtime logic here,
only symbol re-exports.
"""

from .categories import Category, CategoryError, CategoryRegistry, reconcile_categories
from .categorize import (
    apply_merchant_rules,
    categorize_all,
    categorize_transaction,
    migrate_income_categories,
)
from .ctv import UNCATEGORIZED, Transaction
from .duplicates import dedup_key, deduplicate_transactions
from .ingest import DetectedLayout, Dialect, detect_layout, parse_csv
from .ledger import EmptyImportError, Ledger, UnknownTransactionError
from .merchant import merchant_key
from .models import EditResult, ImportSummary, ParseResult
from .normalizers import parse_date, parse_money
from .persistence import LedgerStore
from .rules import DEFAULT_RULES, RuleSet, load_rule_set

__all__ = [
    # Pipeline
    "parse_csv",
    "detect_layout",
    "categorize_transaction",
    "categorize_all",
    "apply_merchant_rules",
    "migrate_income_categories",
    "merchant_key",
    "dedup_key",
    "deduplicate_transactions",
    "parse_money",
    "parse_date",
    # Ledger
    "Ledger",
    "LedgerStore",
    "EmptyImportError",
    "UnknownTransactionError",
    # Categories / rules
    "Category",
    "CategoryError",
    "CategoryRegistry",
    "reconcile_categories",
    "RuleSet",
    "DEFAULT_RULES",
    "load_rule_set",
    # Models / types
    "Transaction",
    "UNCATEGORIZED",
    "Dialect",
    "DetectedLayout",
    "ParseResult",
    "ImportSummary",
    "EditResult",
]
