from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from ledger_ingest.categories import DEFAULT_CATEGORIES, Category
from ledger_ingest.ctv import Transaction
from ledger_ingest.persistence import LedgerStore

from tests.helpers.db import bootstrap_sqlite_db


def _tx(id: str, category: str = "Food", **kw) -> Transaction:
    fields = dict(
        id=id,
        date=date(2024, 3, 1),
        month="2024-03",
        description=f"ROW {id}",
        amount=Decimal("-5.75"),
        category=category,
        account="Checking",
        bank_source="Chase",
    )
    fields.update(kw)
    return Transaction(**fields)


@pytest.fixture
def store(tmp_path: Path) -> LedgerStore:
    return LedgerStore(bootstrap_sqlite_db(tmp_path / "ledger.db"))


def test_transactions_round_trip_in_order(store: LedgerStore):
    txs = [
        _tx("b", note="keep me", excluded=True),
        _tx("a", category="W2 Payroll", amount=Decimal("2000.10"), is_income=True),
    ]

    assert store.save_transactions(txs) is True
    assert store.load_transactions() == txs


def test_save_replaces_previous_contents(store: LedgerStore):
    store.save_transactions([_tx("a"), _tx("b")])
    store.save_transactions([_tx("c")])

    assert [t.id for t in store.load_transactions()] == ["c"]


def test_load_maps_legacy_category_ids_and_income_flags(store: LedgerStore):
    store.save_transactions(
        [
            _tx("a", category="Coffee-/-Tea-1771459649923"),
            _tx("b", category="Side Income", is_income=False),
        ]
    )

    a, b = store.load_transactions()

    assert a.category == "Coffee / Tea"
    assert (b.category, b.is_income) == ("Side Income", True)


def test_merchant_rules_round_trip(store: LedgerStore):
    rules = {"blue bottle coffee": "Coffee / Tea", "netflix.com": "Entertainment"}

    assert store.save_merchant_rules(rules) is True
    assert store.load_merchant_rules() == rules
    store.save_merchant_rules({})
    assert store.load_merchant_rules() == {}


def test_categories_are_reconciled_on_load(store: LedgerStore):
    assert store.load_categories()[: len(DEFAULT_CATEGORIES)] == DEFAULT_CATEGORIES

    store.save_categories([Category("Pet Care", "Pet Care", "#123456"), Category("Income", "Income")])
    loaded = store.load_categories()

    assert loaded[0] == Category("Pet Care", "Pet Care", "#123456")
    assert loaded[1].is_income and loaded[1].exclude_from_budget
    assert {c.id for c in DEFAULT_CATEGORIES} <= {c.id for c in loaded}


def test_clear_all(store: LedgerStore):
    store.save_transactions([_tx("a")])
    store.save_merchant_rules({"k": "Food"})

    assert store.clear_all() is True
    assert store.load_transactions() == []
    assert store.load_merchant_rules() == {}


def test_unreachable_database_degrades_to_empty(tmp_path: Path):
    url = f"sqlite+pysqlite:///{tmp_path / 'missing' / 'dir' / 'ledger.db'}"
    store = LedgerStore(url, create_schema=False)

    assert store.save_transactions([_tx("a")]) is False
    assert store.save_merchant_rules({"k": "Food"}) is False
    assert store.load_transactions() == []
    assert store.load_merchant_rules() == {}
    assert store.load_categories()[: len(DEFAULT_CATEGORIES)] == DEFAULT_CATEGORIES


def test_missing_database_url_is_a_configuration_error():
    with pytest.raises(RuntimeError):
        LedgerStore()


def test_database_url_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    url = bootstrap_sqlite_db(tmp_path / "env.db")
    monkeypatch.setenv("LEDGER_DATABASE_URL", url)

    store = LedgerStore()

    assert store.save_merchant_rules({"k": "Food"})
    assert LedgerStore(url).load_merchant_rules() == {"k": "Food"}
