"""Retailer order-history parsers (Walmart, Amazon).

Independent of the bank pipeline: each parser turns an order export into
categorized line items, and ``summarize_*`` aggregates them per subcategory
with a mapped ledger category for cross-referencing bank charges.
"""

from __future__ import annotations

from .amazon import AmazonItem, categorize_amazon_item, parse_amazon_csv, summarize_amazon_items
from .common import ItemRule, RetailerSummary, SubcategorySummary
from .walmart import WalmartItem, parse_walmart_csv, summarize_walmart_items

__all__ = [
    "AmazonItem",
    "WalmartItem",
    "ItemRule",
    "RetailerSummary",
    "SubcategorySummary",
    "categorize_amazon_item",
    "parse_amazon_csv",
    "parse_walmart_csv",
    "summarize_amazon_items",
    "summarize_walmart_items",
]
