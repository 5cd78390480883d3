from __future__ import annotations

import pytest

from ledger_ingest.merchant import merchant_key


def test_merchant_key_strips_reference_numbers_state_and_symbols():
    assert merchant_key("AMAZON.COM*AB12CD3 123456 WA") == "amazon.com ab12cd3"


@pytest.mark.parametrize(
    "description, expected",
    [
        ("STARBUCKS STORE #123", "starbucks store 123"),
        ("SQ *BLUE BOTTLE COFFEE 987654 OAKLAND CA", "sq blue bottle"),
        ("TST* A B COFFEE", "tst coffee"),
        ("  payment@venmo   thanks ", "payment venmo thanks"),
    ],
)
def test_merchant_key_examples(description, expected):
    assert merchant_key(description) == expected


@pytest.mark.parametrize("description", ["", None])
def test_merchant_key_empty(description):
    assert merchant_key(description) == ""


def test_merchant_key_is_idempotent():
    once = merchant_key("WHOLEFDS MKT 10234 PALM DESERT CA")
    assert merchant_key(once) == once
