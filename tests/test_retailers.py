from __future__ import annotations

from decimal import Decimal

import pytest

from ledger_ingest.retailers import (
    categorize_amazon_item,
    parse_amazon_csv,
    parse_walmart_csv,
    summarize_amazon_items,
    summarize_walmart_items,
)
from ledger_ingest.retailers.common import parse_quantity

WALMART_CSV = """Product Name,Quantity,Price,Delivery Status,Product Link
Great Value Whole Milk 1 Gallon,2,$3.48,Delivered,https://walmart.test/1
Great Value Whole Milk 1 Gallon,2,$3.48,Delivered,https://walmart.test/1
Ninja Air Fryer,1,$89.00,Delivered,https://walmart.test/2
Hanes Men's Crew Socks 6-Pack,1,$12.00,Returned,https://walmart.test/3
Gasoline Unleaded,1,$0.00,Delivered,https://walmart.test/4
Widget Gizmo,1,$5.00,Canceled,https://walmart.test/5
"""

AMAZON_NEW_CSV = """Order Date,Order ID,Title,Category,ASIN/ISBN,Quantity,Purchase Price Per Unit,Shipping Charge,Subtotal,Total Charged,Total Refunded
01/05/2024,111-1,Anker USB-C Charger,ELECTRONICS,B0X,1,$19.99,$0.00,$19.99,$21.59,$0.00
01/06/2024,111-2,Project Hail Mary Hardcover,ABIS_BOOK,B0Y,1,$35.00,$0.00,$35.00,$37.80,$37.80
01/07/2024,111-3,Yoga Mat Extra Thick,,B0Z,2,$10.00,$0.00,$20.00,$0.00,$0.00
Order Date,Order ID,Title,Category,ASIN/ISBN,Quantity,Purchase Price Per Unit,Shipping Charge,Subtotal,Total Charged,Total Refunded
01/05/2024,111-1,Anker USB-C Charger,ELECTRONICS,B0X,1,$19.99,$0.00,$19.99,$21.59,$0.00
"""

AMAZON_OLD_CSV = """Order ID,Order Date,Title,Category,Seller,Quantity,Purchase Price Per Unit,Shipping Charge,Total Charged,Tracking Number
112-1,03/01/2023,LEGO Classic Bricks Box,TOYS_AND_GAMES,Amazon.com,1,$29.99,$0.00,$32.39,1Z999
"""


# ---- Walmart ------------------------------------------------------------------


def test_walmart_items_are_categorized_and_deduplicated():
    items = parse_walmart_csv(WALMART_CSV)

    assert [i.name for i in items] == [
        "Great Value Whole Milk 1 Gallon",
        "Ninja Air Fryer",
        "Hanes Men's Crew Socks 6-Pack",
        "Widget Gizmo",
    ]
    milk, fryer, socks, widget = items
    assert (milk.ledger_cat, milk.sub, milk.qty, milk.total) == (
        "Food",
        "Grocery",
        2,
        Decimal("6.96"),
    )
    assert (fryer.ledger_cat, fryer.sub) == ("Shopping", "Appliances")
    assert (socks.sub, socks.is_return, socks.is_active) == ("Clothing", True, False)
    assert (widget.sub, widget.is_return, widget.is_active) == ("Misc", False, False)


def test_walmart_summary_totals():
    summary = summarize_walmart_items(parse_walmart_csv(WALMART_CSV))

    assert summary.total_spend == Decimal("95.96")
    assert summary.total_returns == Decimal("12.00")
    assert summary.net_spend == Decimal("83.96")
    assert set(summary.by_category) == {"Grocery", "Appliances"}
    assert summary.by_category["Grocery"].count == 2
    assert [i.name for i in summary.return_items] == ["Hanes Men's Crew Socks 6-Pack"]


def test_walmart_short_header_names():
    text = "Name,Qty,Price,Status\nBananas,3,0.25,Shopped\nShort,row\n"

    (item,) = parse_walmart_csv(text)

    assert (item.name, item.qty, item.total, item.sub) == ("Bananas", 3, Decimal("0.75"), "Grocery")


@pytest.mark.parametrize(
    "text",
    [
        "Product Name,Quantity,Status\nMilk,1,Delivered\n",
        "Product Name,Quantity,Price,Delivery Status\n",
        "",
    ],
)
def test_walmart_unusable_exports_yield_nothing(text):
    assert parse_walmart_csv(text) == []


# ---- Amazon -------------------------------------------------------------------


def test_amazon_new_layout():
    items = parse_amazon_csv(AMAZON_NEW_CSV)

    assert [i.order_id for i in items] == ["111-1", "111-2", "111-3"]
    charger, book, mat = items
    assert (charger.total, charger.sub) == (Decimal("21.59"), "Electronics")
    assert (book.refunded, book.net_total, book.is_return) == (
        Decimal("37.80"),
        Decimal("0.00"),
        True,
    )
    assert (mat.ledger_cat, mat.sub, mat.total) == ("Shopping", "Sports & Fitness", Decimal("20.00"))
    assert mat.date_str == "01/07/2024"


def test_amazon_summary_counts_refunds_against_spend():
    summary = summarize_amazon_items(parse_amazon_csv(AMAZON_NEW_CSV))

    assert summary.total_spend == Decimal("41.59")
    assert summary.total_returns == Decimal("37.80")
    assert summary.net_spend == Decimal("3.79")
    assert set(summary.by_category) == {"Electronics", "Sports & Fitness"}
    assert summary.by_category["Sports & Fitness"].count == 2
    assert [i.title for i in summary.return_items] == ["Project Hail Mary Hardcover"]


def test_amazon_old_layout():
    (item,) = parse_amazon_csv(AMAZON_OLD_CSV)

    assert (item.ledger_cat, item.sub) == ("Shopping", "Toys & Games")
    assert item.total == Decimal("32.39")
    assert item.refunded == Decimal("0")


def test_amazon_without_title_column():
    assert parse_amazon_csv("Order ID,Category,Total Charged\n1,BOOKS,$5.00\n") == []


def test_amazon_category_code_wins_over_title():
    assert categorize_amazon_item("Kindle Paperwhite Book Cover", "ELECTRONICS") == (
        "Shopping",
        "Electronics",
    )
    assert categorize_amazon_item("Organic Green Tea 100ct", "UNMAPPED") == ("Food", "Grocery")
    assert categorize_amazon_item("Mystery Gadget") == ("Shopping", "Other Amazon")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("3", 3), (" 2 pcs", 2), ("", 1), ("0", 1), ("n/a", 1)],
)
def test_parse_quantity(raw, expected):
    assert parse_quantity(raw) == expected


def test_walmart_export_with_oversized_name_keeps_every_row():
    long_name = "Mega Bundle " + "x" * 200_000
    text = (
        "Product Name,Quantity,Price,Delivery Status\n"
        "Bananas,1,$0.25,Delivered\n"
        f"{long_name},1,$10.00,Delivered\n"
        "Whole Milk,1,$3.48,Delivered\n"
    )

    items = parse_walmart_csv(text)

    assert [i.total for i in items] == [Decimal("0.25"), Decimal("10.00"), Decimal("3.48")]
    assert items[1].name == long_name


def test_amazon_prefers_total_refunded_over_shipping_refund():
    text = (
        "Order Date,Order ID,Title,Category,Quantity,Purchase Price Per Unit,"
        "Subtotal,Shipping Charge Refund,Total Charged,Total Refunded\n"
        "01/05/2024,113-1,Bluetooth Speaker,ELECTRONICS,1,$40.00,$40.00,$5.99,$43.20,$20.00\n"
    )

    (item,) = parse_amazon_csv(text)

    assert item.total == Decimal("43.20")
    assert item.refunded == Decimal("20.00")
    assert item.net_total == Decimal("23.20")
    assert item.is_return and item.is_active
