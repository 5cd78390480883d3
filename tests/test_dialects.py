"""Sign conventions and detection for every supported bank dialect."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledger_ingest.ingest import Dialect, detect_layout, dialects, parse_csv
from ledger_ingest.normalizers import non_blank_lines

CAPITAL_ONE = """\
Account Number,Transaction Description,Transaction Date,Transaction Type,Transaction Amount,Balance
1234,STARBUCKS STORE 123,03/01/24,Debit,5.75,994.25
1234,ACME PAYROLL,03/02/24,Credit,1000.00,1994.25
"""

CHASE = """\
Transaction Date,Post Date,Description,Category,Type,Amount,Memo
03/01/2024,03/02/2024,STARBUCKS STORE 123,Food & Drink,Sale,-5.75,
03/03/2024,03/03/2024,Payment Thank You-Mobile,,Payment,250.00,
"""

CITI = """\
Status,Date,Description,Debit,Credit,Member Name
Cleared,03/01/2024,STARBUCKS STORE 123,5.75,,JANE DOE
Cleared,03/02/2024,ONLINE PAYMENT,,100.00,JANE DOE
"""

DISCOVER = """\
Trans. Date,Post Date,Description,Amount,Category
03/01/2024,03/02/2024,STARBUCKS STORE 123,5.75,Restaurants
03/05/2024,03/05/2024,INTERNET PAYMENT - THANK YOU,-100.00,Payments and Credits
"""

WELLS_FARGO = """\
"03/01/2024","-5.75","*","","STARBUCKS STORE 123"
"03/02/2024","1000.00","*","","ACME PAYROLL"
"""

GENERIC_SPLIT = """\
Posting Date,Payee,Withdrawal,Deposit
03/01/2024,STARBUCKS STORE 123,5.75,
03/02/2024,ACME PAYROLL,,1000.00
"""


@pytest.mark.parametrize(
    "text, bank, amounts",
    [
        (CAPITAL_ONE, "Capital One", [Decimal("-5.75"), Decimal("1000.00")]),
        (CHASE, "Chase", [Decimal("-5.75"), Decimal("250.00")]),
        (CITI, "Citi", [Decimal("-5.75"), Decimal("100.00")]),
        (DISCOVER, "Discover", [Decimal("-5.75"), Decimal("100.00")]),
        (WELLS_FARGO, "Wells Fargo", [Decimal("-5.75"), Decimal("1000.00")]),
        (GENERIC_SPLIT, "generic", [Decimal("-5.75"), Decimal("1000.00")]),
    ],
)
def test_every_dialect_yields_expenses_negative(text, bank, amounts):
    result = parse_csv(text, "Checking")

    assert result.bank_detected == bank
    assert result.errors == []
    assert [t.amount for t in result.transactions] == amounts
    first = result.transactions[0]
    assert first.description == "STARBUCKS STORE 123"
    assert first.date.month == 3 and first.date.day == 1
    assert first.bank_source == bank
    assert first.account == "Checking"


def test_detect_headerless_file_starts_at_first_line():
    layout = detect_layout(non_blank_lines(WELLS_FARGO))

    assert layout.dialect is Dialect.WELLS_FARGO
    assert layout.headers == ()
    assert layout.data_start == 0


def test_detect_skips_preamble_before_date_header():
    text = "Account: 1234\nExported 3/2024 summary\nDate,Description,Amount\n3/1/2024,COFFEE,-4.00\n"
    layout = detect_layout(non_blank_lines(text))

    assert layout.dialect is Dialect.GENERIC
    assert layout.headers == ("date", "description", "amount")
    assert layout.data_start == 3

    result = parse_csv(text, "Checking")
    assert [(t.date, t.amount) for t in result.transactions] == [
        (date(2024, 3, 1), Decimal("-4.00"))
    ]


def test_detect_without_date_header_uses_first_line():
    layout = detect_layout(["Item,Amount", "coffee,4.00"])

    assert layout.dialect is Dialect.GENERIC
    assert layout.data_start == 1


def test_empty_input_is_unknown_bank():
    result = parse_csv("  \n\n", "Checking")

    assert result.bank_detected == "Unknown"
    assert result.transactions == []
    assert result.errors == []


def test_unparsable_rows_are_skipped_silently():
    text = (
        "Date,Description,Amount\n"
        "3/1/2024,COFFEE,-4.00\n"
        "not a date,JUNK,-1.00\n"
        "3/2/2024,ZERO LINE,0.00\n"
        "TOTAL\n"
        "3/3/2024,TEA,-3.00\n"
    )
    result = parse_csv(text, "Checking")

    assert [t.description for t in result.transactions] == ["COFFEE", "TEA"]
    assert result.errors == []


def test_extraction_failure_is_reported_per_row(monkeypatch: pytest.MonkeyPatch):
    original = dialects._EXTRACTORS[Dialect.GENERIC]

    def _flaky(headers, cols):
        if "BOOM" in cols:
            raise ValueError("bad row")
        return original(headers, cols)

    monkeypatch.setitem(dialects._EXTRACTORS, Dialect.GENERIC, _flaky)
    text = "Date,Description,Amount\n3/1/2024,BOOM,-1.00\n3/2/2024,COFFEE,-4.00\n"

    result = parse_csv(text, "Checking")

    assert result.errors == ["Row 2: bad row"]
    assert [t.description for t in result.transactions] == ["COFFEE"]


def test_transactions_start_uncategorized_with_unique_ids():
    text = "Date,Description,Amount\n3/1/2024,COFFEE,-4.00\n3/1/2024,COFFEE,-4.00\n"
    first = parse_csv(text, "Checking").transactions
    second = parse_csv(text, "Checking").transactions

    ids = [t.id for t in first + second]
    assert len(set(ids)) == 4
    assert {t.category for t in first} == {"Uncategorized"}
    assert first[0].month == "2024-03"


def test_oversized_field_does_not_abort_the_file():
    text = (
        "Date,Description,Amount\n"
        "3/1/2024,COFFEE,-4.00\n"
        f"3/2/2024,{'X' * 200_000},-1.00\n"
        "3/3/2024,TEA,-3.00\n"
    )

    result = parse_csv(text, "Checking")

    assert [len(t.description) for t in result.transactions] == [6, 200_000, 3]
    assert result.errors == []


@pytest.mark.parametrize("sep", ["\x85", "\x0c", "\u2028"])
def test_unicode_separators_stay_inside_the_description(sep):
    text = f"Date,Description,Amount\n3/1/2024,CAFE{sep}LATTE,-4.00\n3/2/2024,TEA,-3.00\n"

    result = parse_csv(text, "Checking")

    assert [t.description for t in result.transactions] == [f"CAFE{sep}LATTE", "TEA"]
    assert result.errors == []
