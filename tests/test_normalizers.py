from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ledger_ingest.normalizers import (
    fmt_amount,
    month_bucket,
    non_blank_lines,
    parse_date,
    parse_money,
    split_csv_line,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("$1,234.56", Decimal("1234.56")),
        ("(123.45)", Decimal("-123.45")),
        ("-$5.00", Decimal("-5.00")),
        ('"42.10"', Decimal("42.10")),
        ("12.50abc", Decimal("12.50")),
        ("-", Decimal("0")),
        ("*", Decimal("0")),
        ("", Decimal("0")),
        ("n/a", Decimal("0")),
        (None, Decimal("0")),
    ],
)
def test_parse_money(raw, expected):
    assert parse_money(raw) == expected


def test_fmt_amount_rounds_half_up_to_two_places():
    assert fmt_amount(Decimal("-5.755")) == "-5.76"
    assert fmt_amount(Decimal("3")) == "3.00"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("3/4/2024", date(2024, 3, 4)),
        ("03/04/2024", date(2024, 3, 4)),
        ("3/4/24", date(2024, 3, 4)),
        ("3/4/99", date(1999, 3, 4)),
        ("2024-03-04", date(2024, 3, 4)),
        ("2024-03-04T10:00:00Z", date(2024, 3, 4)),
        ("Mar 4, 2024", date(2024, 3, 4)),
        ('"3/4/2024"', date(2024, 3, 4)),
    ],
)
def test_parse_date_formats(raw, expected):
    assert parse_date(raw) == expected


@pytest.mark.parametrize("raw", ["not a date", "", None, "2/30/2024", "13/1/2024"])
def test_parse_date_rejects_unparsable_and_impossible_dates(raw):
    assert parse_date(raw) is None


def test_month_bucket_is_zero_padded():
    assert month_bucket(date(2024, 3, 9)) == "2024-03"


def test_split_csv_line_handles_quotes_and_trims_cells():
    assert split_csv_line('"ACME, INC", 12.00 ,"say ""hi"""') == ["ACME, INC", "12.00", 'say "hi"']
    assert split_csv_line("") == [""]


def test_non_blank_lines_drops_blank_and_crlf():
    text = "\r\nDate,Amount\r\n\r\n3/1/2024,1.00\r\n  \r\n"
    assert non_blank_lines(text) == ["Date,Amount", "3/1/2024,1.00"]


@pytest.mark.parametrize("sep", ["\x85", "\x0c", "\u2028", "\x1e"])
def test_only_lf_and_crlf_end_a_line(sep):
    text = f"a,b\r\n3/1/2024,CAFE{sep}LATTE,-4.00\n3/2/2024,TEA,-3.00\n"

    assert non_blank_lines(text) == [
        "a,b",
        f"3/1/2024,CAFE{sep}LATTE,-4.00",
        "3/2/2024,TEA,-3.00",
    ]


def test_split_csv_line_accepts_very_long_fields():
    long_desc = "X" * 200_000

    assert split_csv_line(f'3/1/2024,"{long_desc}",-1.00') == ["3/1/2024", long_desc, "-1.00"]
