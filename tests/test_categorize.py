from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledger_ingest.categorize import (
    apply_merchant_rules,
    categorize_all,
    categorize_transaction,
    migrate_income_categories,
)
from ledger_ingest.ctv import Transaction
from ledger_ingest.rules import DEFAULT_RULES, KeywordGroup, RuleSet, first_match


def _tx(description: str, amount: str, *, category: str = "Uncategorized", id: str = "t1"):
    return Transaction(
        id=id,
        date=date(2024, 3, 1),
        month="2024-03",
        description=description,
        amount=Decimal(amount),
        category=category,
    )


def test_first_match_prefers_earlier_rule():
    rules = [(lambda s: "a" in s, "first"), (lambda s: True, "second")]

    assert first_match(rules, "abc") == "first"
    assert first_match(rules, "xyz") == "second"
    assert first_match([], "abc") is None


def test_merchant_map_beats_broader_keyword_rule():
    # "koffi" and "coffee" are both Food keywords; the merchant entry wins.
    assert categorize_transaction("KOFFI COFFEE PALM SPRINGS", Decimal("-6.50")) == "Coffee / Tea"


@pytest.mark.parametrize(
    "description, amount, expected",
    [
        ("STARBUCKS STORE 123", "-5.75", "Food"),
        ("NETFLIX.COM", "-15.49", "Entertainment"),
        ("CHASE CREDIT CRD AUTOPAY", "-500.00", "CC Payment"),
        ("XYZZY PLUGH", "-1.00", "Other"),
        ("", "-1.00", "Other"),
    ],
)
def test_expense_rules_and_default(description, amount, expected):
    assert categorize_transaction(description, Decimal(amount)) == expected


def test_income_rules_only_for_positive_amounts():
    assert categorize_transaction("ACME PAYROLL", Decimal("2000.00")) == "W2 Payroll"
    assert categorize_transaction("ACME PAYROLL", Decimal("-2000.00")) == "Other"


def test_income_groups_are_ordered():
    assert categorize_transaction("INTEREST PAID", Decimal("1.23")) == "Interest/Dividends"
    assert categorize_transaction("ZELLE MONEY RECEIVED JOHN", Decimal("50")) == "Transfer Received"
    assert categorize_transaction("MOBILE DEPOSIT", Decimal("75")) == "Side Income"


def test_savings_transfer_exclusion_precedes_income_rules():
    category = categorize_transaction("DEPOSIT FROM 360 PERFORMANCE SAVINGS", Decimal("500"))

    assert category == "Savings Transfer"
    [t] = categorize_all([_tx("DEPOSIT FROM 360 PERFORMANCE SAVINGS", "500")])
    assert t.is_income is False


def test_categorize_all_derives_is_income_and_keeps_input():
    original = [_tx("ACME PAYROLL", "2000", id="a"), _tx("STARBUCKS", "-5", id="b")]

    out = categorize_all(original)

    assert [(t.category, t.is_income) for t in out] == [("W2 Payroll", True), ("Food", False)]
    assert original[0].category == "Uncategorized"


def test_injected_rule_set_replaces_tables():
    rules = RuleSet(
        merchant_map=(("plugh", "Giving"),),
        expense_rules=(KeywordGroup("Education", ("xyzzy",)),),
        default_category="Uncategorized",
    )

    assert categorize_transaction("XYZZY PLUGH", Decimal("-1"), rules) == "Giving"
    assert categorize_transaction("XYZZY", Decimal("-1"), rules) == "Education"
    assert categorize_transaction("STARBUCKS", Decimal("-1"), rules) == "Uncategorized"
    assert categorize_transaction("STARBUCKS", Decimal("-1"), DEFAULT_RULES) == "Food"


def test_apply_merchant_rules_counts_only_changes():
    txs = categorize_all(
        [
            _tx("STARBUCKS STORE 123", "-5.75", id="a"),
            _tx("STARBUCKS STORE 123", "-4.25", id="b"),
            _tx("NETFLIX.COM", "-15.49", id="c"),
        ]
    )
    rules = {"starbucks store 123": "Coffee / Tea", "netflix.com": "Entertainment"}

    out, hits = apply_merchant_rules(txs, rules, income_ids=DEFAULT_RULES.income_category_ids)

    assert hits == 2
    assert [t.category for t in out] == ["Coffee / Tea", "Coffee / Tea", "Entertainment"]


def test_apply_merchant_rules_recomputes_income_flag():
    [t] = categorize_all([_tx("VENMO CASHOUT", "40")])

    [out], hits = apply_merchant_rules(
        [t], {"venmo cashout": "Side Income"}, income_ids=DEFAULT_RULES.income_category_ids
    )

    assert hits == 1
    assert (out.category, out.is_income) == ("Side Income", True)


def test_migrate_income_categories():
    txs = [
        _tx("INTEREST PAID", "1.23", category="Income", id="a"),
        _tx("MYSTERY CREDIT", "10", category="Income", id="b"),
        _tx("STARBUCKS", "-5", category="Food", id="c"),
    ]

    out = migrate_income_categories(txs)

    assert [(t.category, t.is_income) for t in out] == [
        ("Interest/Dividends", True),
        ("W2 Payroll", True),
        ("Food", False),
    ]


def test_gas_utility_bill_is_housing():
    assert categorize_transaction("SOCALGAS PAYMENT 0301", Decimal("-82.14")) == "Housing"
