"""Persistence collaborator for the ledger.

``LedgerStore`` reads and writes transactions, merchant rules and categories
through the SQLAlchemy models owned by ``libs/db`` (``ledger_db``). The core
never sees the storage medium; it only calls the ``load_*``/``save_*`` pairs.

Failure semantics:
- ``save_*`` replace the stored collection in one transaction and return
  ``True``; database or serialization errors are logged and reported as
  ``False`` so the session can continue in memory.
- ``load_*`` return an empty collection (reconciled built-ins for
  categories) when the store cannot be read.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from ledger_db.client import init_schema, session_scope
from ledger_db.models.ledger import LedgerCategory, LedgerMerchantRule, LedgerTransaction
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from .categories import CATEGORY_ID_MIGRATION, FORCED_INCOME_IDS, Category, reconcile_categories
from .ctv import Transaction
from .logging_setup import get_logger
from .normalizers import month_bucket

_logger = get_logger("ledger_ingest.persistence")

_PERSISTENCE_ERRORS = (SQLAlchemyError, InvalidOperation, TypeError, ValueError)


def _to_decimal_2(raw: Any) -> Decimal:
    return Decimal(str(raw)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _row_to_transaction(row: LedgerTransaction) -> Transaction:
    # Legacy timestamp-form ids map to their permanent ids; income ids always
    # carry the income flag regardless of what an older version stored.
    category = CATEGORY_ID_MIGRATION.get(row.category, row.category)
    return Transaction(
        id=row.id,
        date=row.date,
        month=row.month or month_bucket(row.date),
        description=row.description or "",
        amount=Decimal(row.amount),
        category=category,
        account=row.account or "",
        bank_source=row.bank_source or "",
        note=row.note,
        excluded=bool(row.excluded),
        is_income=True if category in FORCED_INCOME_IDS else bool(row.is_income),
    )


def _transaction_to_row(t: Transaction, position: int) -> LedgerTransaction:
    return LedgerTransaction(
        id=t.id,
        date=t.date,
        month=t.month,
        description=t.description,
        amount=_to_decimal_2(t.amount),
        category=t.category,
        account=t.account,
        bank_source=t.bank_source,
        note=t.note,
        excluded=t.excluded,
        is_income=t.is_income,
        position=position,
    )


def _row_to_category(row: LedgerCategory) -> Category:
    return Category(
        id=row.id,
        name=row.name,
        color=row.color,
        exclude_from_budget=bool(row.exclude_from_budget),
        is_income=bool(row.is_income),
        built_in=bool(row.built_in),
        legacy=bool(row.legacy),
    )


class LedgerStore:
    """Durable storage for one ledger, addressed by a SQLAlchemy URL."""

    def __init__(self, database_url: str | None = None, *, create_schema: bool = True) -> None:
        self.database_url = database_url
        if create_schema:
            init_schema(database_url=database_url)

    # -- transactions ------------------------------------------------------

    def load_transactions(self) -> list[Transaction]:
        try:
            with session_scope(database_url=self.database_url) as session:
                rows = session.execute(
                    select(LedgerTransaction).order_by(LedgerTransaction.position)
                ).scalars().all()
                return [_row_to_transaction(r) for r in rows]
        except _PERSISTENCE_ERRORS as e:
            _logger.warning("failed to load transactions: %s", e)
            return []

    def save_transactions(self, transactions: Iterable[Transaction]) -> bool:
        try:
            rows = [_transaction_to_row(t, pos) for pos, t in enumerate(transactions)]
            with session_scope(database_url=self.database_url) as session:
                session.execute(delete(LedgerTransaction))
                session.add_all(rows)
        except _PERSISTENCE_ERRORS as e:
            _logger.warning("failed to save transactions: %s", e)
            return False
        return True

    # -- merchant rules ----------------------------------------------------

    def load_merchant_rules(self) -> dict[str, str]:
        try:
            with session_scope(database_url=self.database_url) as session:
                rows = session.execute(
                    select(LedgerMerchantRule.merchant_key, LedgerMerchantRule.category)
                ).all()
                return {key: cat for key, cat in rows}
        except _PERSISTENCE_ERRORS as e:
            _logger.warning("failed to load merchant rules: %s", e)
            return {}

    def save_merchant_rules(self, rules: Mapping[str, str]) -> bool:
        try:
            rows = [
                LedgerMerchantRule(merchant_key=str(k), category=str(v))
                for k, v in rules.items()
                if k
            ]
            with session_scope(database_url=self.database_url) as session:
                session.execute(delete(LedgerMerchantRule))
                session.add_all(rows)
        except _PERSISTENCE_ERRORS as e:
            _logger.warning("failed to save merchant rules: %s", e)
            return False
        return True

    # -- categories --------------------------------------------------------

    def load_categories(self) -> tuple[Category, ...]:
        """Return stored categories reconciled with the built-ins."""

        try:
            with session_scope(database_url=self.database_url) as session:
                rows = session.execute(
                    select(LedgerCategory).order_by(LedgerCategory.sort_order)
                ).scalars().all()
                loaded = [_row_to_category(r) for r in rows]
        except _PERSISTENCE_ERRORS as e:
            _logger.warning("failed to load categories: %s", e)
            loaded = []
        return reconcile_categories(loaded)

    def save_categories(self, categories: Iterable[Category]) -> bool:
        try:
            rows = [
                LedgerCategory(
                    id=c.id,
                    name=c.name,
                    color=c.color,
                    exclude_from_budget=c.exclude_from_budget,
                    is_income=c.is_income,
                    built_in=c.built_in,
                    legacy=c.legacy,
                    sort_order=pos,
                )
                for pos, c in enumerate(categories)
            ]
            with session_scope(database_url=self.database_url) as session:
                session.execute(delete(LedgerCategory))
                session.add_all(rows)
        except _PERSISTENCE_ERRORS as e:
            _logger.warning("failed to save categories: %s", e)
            return False
        return True

    # -- reset -------------------------------------------------------------

    def clear_all(self) -> bool:
        """Delete every stored transaction, rule and category."""

        try:
            with session_scope(database_url=self.database_url) as session:
                session.execute(delete(LedgerTransaction))
                session.execute(delete(LedgerMerchantRule))
                session.execute(delete(LedgerCategory))
        except SQLAlchemyError as e:
            _logger.warning("failed to clear ledger data: %s", e)
            return False
        return True


__all__ = ["LedgerStore"]
