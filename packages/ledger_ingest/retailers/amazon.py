"""Amazon order-history ("Items" report) parser.

Two export layouts are supported:

- new: Order Date, Order ID, Title, Category, ASIN/ISBN, Quantity, Purchase
  Price Per Unit, Shipping Charge, Subtotal, ..., Total Charged, Total Refunded
- old: Order ID, Order Date, Title, Category, Seller, Quantity, Purchase Price
  Per Unit, Shipping Charge, Total Charged, Tracking Number

Amazon's own category codes are consulted before the title keyword rules.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal

from ..ingest.utils import cell, find_column
from ..logging_setup import get_logger
from ..normalizers import fmt_amount, parse_money
from .common import (
    ItemRule,
    RetailerSummary,
    categorize_item,
    group_by_subcategory,
    header_and_rows,
    parse_quantity,
)

_logger = get_logger("ledger_ingest.retailers.amazon")

_ZERO = Decimal("0")
_TITLE_KEY_PREFIX = 50

DEFAULT_ITEM_CATEGORY: tuple[str, str] = ("Shopping", "Other Amazon")

# Amazon category code -> (ledger category, subcategory)
AMAZON_CAT_MAP: Mapping[str, tuple[str, str]] = {
    # Books & Media
    "ABIS_BOOK": ("Entertainment", "Books"),
    "ABIS_MUSIC": ("Entertainment", "Music"),
    "ABIS_VIDEO": ("Entertainment", "Video/Movies"),
    "ABIS_VIDEO_GAMES": ("Entertainment", "Video Games"),
    "VIDEO_GAMES": ("Entertainment", "Video Games"),
    "SOFTWARE": ("Entertainment", "Software"),
    "Audible": ("Entertainment", "Audiobooks"),
    # Electronics & Computers
    "ELECTRONICS": ("Shopping", "Electronics"),
    "COMPUTERS": ("Shopping", "Electronics"),
    # Clothing & Accessories
    "CLOTHING": ("Shopping", "Clothing"),
    "SHOES": ("Shopping", "Clothing"),
    "LUGGAGE": ("Shopping", "Clothing"),
    "WATCHES": ("Shopping", "Clothing"),
    # Home
    "HOME": ("Shopping", "Home & Decor"),
    "HOME_IMPROVEMENT": ("Housing", "Home Improvement"),
    "KITCHEN": ("Shopping", "Kitchen"),
    "TOOLS": ("Housing", "Home Improvement"),
    # Health & Beauty
    "BEAUTY": ("Healthcare", "Health & Beauty"),
    "HEALTH_PERSONAL_CARE": ("Healthcare", "Health & Beauty"),
    # Food
    "GROCERY": ("Food", "Grocery"),
    # Kids
    "BABY": ("Shopping", "Kids & Baby"),
    "TOYS_AND_GAMES": ("Shopping", "Toys & Games"),
    # Other
    "AUTOMOTIVE": ("Transport", "Auto Parts"),
    "SPORTS": ("Healthcare", "Sports & Fitness"),
    "OFFICE_PRODUCTS": ("Education", "Office Supplies"),
    "PET_SUPPLIES": ("Shopping", "Pet Supplies"),
}

# Fallback when the category code is missing or unmapped; first match wins.
TITLE_RULES: tuple[ItemRule, ...] = (
    ItemRule(
        "Entertainment",
        "Books",
        (
            "book", "novel", "guide", "handbook", "textbook", "workbook", "journal ",
            "diary", "coloring book", "activity book", "puzzle book",
        ),
    ),
    ItemRule(
        "Entertainment",
        "Video Games",
        (
            "video game", "nintendo", "playstation", "xbox", "gaming", "steam",
        ),
    ),
    ItemRule(
        "Entertainment",
        "Streaming/Sub",
        (
            "subscription", "prime", "audible", "kindle", "echo", "alexa", "fire tv",
            "fire tablet",
        ),
    ),
    ItemRule(
        "Shopping",
        "Electronics",
        (
            "cable", "charger", "usb", "hdmi", "battery", "batteries", "bluetooth",
            "speaker", "headphone", "earphone", "earbud", "keyboard", "mouse", "monitor",
            "laptop", "tablet", "phone case", "smart plug", "power bank", "ring light",
            "webcam", "printer", "ink cartridge", "router", "wifi", "surge protector",
            "extension cord", "remote", "led strip", "security camera",
        ),
    ),
    ItemRule(
        "Food",
        "Grocery",
        (
            "food", "snack", "coffee", "tea", "supplement", "protein", "vitamin", "grocery",
            "candy", "chocolate", "chips", "crackers", "drink", "juice", "water bottle",
            "protein bar", "energy bar", "gummy", "multivitamin",
        ),
    ),
    ItemRule(
        "Healthcare",
        "Health & Beauty",
        (
            "shampoo", "conditioner", "lotion", "moisturizer", "sunscreen", "vitamin",
            "supplement", "bandage", "first aid", "razor", "skincare", "toothpaste",
            "toothbrush", "deodorant", "face wash", "serum", "hair care", "nail", "mascara",
            "eyeliner", "foundation", "perfume", "cologne", "eye drop", "ibuprofen",
            "tylenol", "advil",
        ),
    ),
    ItemRule(
        "Shopping",
        "Clothing",
        (
            "shirt", "pants", "dress", "shorts", "jacket", "hoodie", "shoes", "sneakers",
            "boots", "sandals", "socks", "underwear", "bra", "leggings", "jeans", "coat",
            "sweater", "hat ", "beanie", "gloves", "scarf",
        ),
    ),
    ItemRule(
        "Shopping",
        "Kids & Baby",
        (
            "baby", "infant", "toddler", "kids ", "children", "diaper", "wipe", "formula",
            "stroller", "car seat", "baby monitor",
        ),
    ),
    ItemRule(
        "Shopping",
        "Toys & Games",
        (
            "lego", "toy ", "toys ", "action figure", "doll", "board game", "card game",
            "puzzle", "playset", "stuffed", "plush",
        ),
    ),
    ItemRule(
        "Shopping",
        "Kitchen",
        (
            "cookware", "pan", "pot ", "knife", "cutting board", "spatula", "whisk", "bowl",
            "plate", "cup ", "mug", "storage container", "food container", "coffee maker",
            "air fryer", "instant pot", "blender", "toaster", "kitchen",
        ),
    ),
    ItemRule(
        "Shopping",
        "Home & Decor",
        (
            "pillow", "blanket", "throw", "curtain", "rug", "lamp", "candle",
            "picture frame", "wall art", "mirror", "shower curtain", "bath mat", "towel",
            "bedding", "sheet set", "duvet", "comforter", "mattress", "furniture", "shelf",
            "organizer", "storage bin", "drawer",
        ),
    ),
    ItemRule(
        "Housing",
        "Home Improvement",
        (
            "drill", "hammer", "screwdriver", "tool set", "paint", "caulk", "tape measure",
            "level ", "power tool", "ladder", "plumbing", "electrical", "light bulb",
            "outlet", "switch", "insulation", "weather strip",
        ),
    ),
    ItemRule(
        "Shopping",
        "Pet Supplies",
        (
            "dog food", "cat food", "pet food", "dog treat", "cat treat", "dog toy",
            "cat toy", "leash", "collar", "cat litter", "pet bed", "aquarium", "bird food",
            "fish food",
        ),
    ),
    ItemRule(
        "Education",
        "Office Supplies",
        (
            "pen ", "pencil", "marker", "notebook", "folder", "binder", "stapler", "tape ",
            "scissors", "printer paper", "sticky note", "planner", "calendar", "whiteboard",
            "desk",
        ),
    ),
    ItemRule(
        "Transport",
        "Auto Parts",
        (
            "car ", "auto ", "tire", "motor oil", "wiper", "windshield", "floor mat",
            "car seat", "car charger", "dash cam", "jumper cable",
        ),
    ),
    ItemRule(
        "Shopping",
        "Sports & Fitness",
        (
            "yoga", "dumbbell", "resistance band", "workout", "exercise", "gym", "running",
            "bicycle", "camping", "hiking", "fishing", "hunting", "golf", "tennis",
            "basketball", "football", "soccer",
        ),
    ),
)


def categorize_amazon_item(title: str, amazon_category: str = "") -> tuple[str, str]:
    mapped = AMAZON_CAT_MAP.get((amazon_category or "").strip())
    if mapped is not None:
        return mapped
    return categorize_item(title or "", TITLE_RULES, DEFAULT_ITEM_CATEGORY)


@dataclass(frozen=True, slots=True)
class AmazonItem:
    title: str
    category: str
    qty: int
    unit_price: Decimal
    total: Decimal
    refunded: Decimal
    net_total: Decimal
    date_str: str
    order_id: str
    ledger_cat: str
    sub: str
    is_return: bool
    is_active: bool


def _locate_columns(headers: list[str]) -> dict[str, int]:
    # The new layout lists "Subtotal" and "Shipping Charge Refund" ahead of
    # "Total Charged" and "Total Refunded"; the totals take precedence.
    total = find_column(headers, lambda h: "total charged" in h)
    if total < 0:
        total = find_column(headers, lambda h: h == "subtotal")
    refund = find_column(headers, lambda h: "total refunded" in h)
    if refund < 0:
        refund = find_column(headers, lambda h: "refund" in h)
    return {
        "title": find_column(
            headers, lambda h: h == "title" or "product name" in h or "item name" in h
        ),
        "category": find_column(headers, lambda h: "category" in h),
        "qty": find_column(headers, lambda h: h == "quantity" or "qty" in h),
        "price": find_column(
            headers,
            lambda h: h == "purchase price per unit" or "unit price" in h or "price per unit" in h,
        ),
        "total": total,
        "refund": refund,
        "date": find_column(headers, lambda h: "order date" in h),
        "order_id": find_column(headers, lambda h: "order id" in h),
    }


def parse_amazon_csv(text: str) -> list[AmazonItem]:
    """Parse an Amazon Items report into categorized items.

    ``total`` is the charged total when positive, else unit price times
    quantity; rows where both are non-positive are skipped. Repeated header
    rows and repeats of ``order_id|title[:50]|total`` are dropped. Returns an
    empty list when no title column exists.
    """

    headers, rows = header_and_rows(text)
    idx = _locate_columns(headers)
    if idx["title"] < 0:
        return []

    items: list[AmazonItem] = []
    seen: set[str] = set()
    for cols in rows:
        if len(cols) < 2:
            continue
        title = cell(cols, idx["title"]).strip()
        if not title or title.lower() == "title":
            continue
        category = cell(cols, idx["category"]).strip()
        qty = parse_quantity(cell(cols, idx["qty"])) if idx["qty"] >= 0 else 1
        unit_price = parse_money(cell(cols, idx["price"])) if idx["price"] >= 0 else _ZERO
        total_raw = (
            parse_money(cell(cols, idx["total"])) if idx["total"] >= 0 else unit_price * qty
        )
        refunded = parse_money(cell(cols, idx["refund"])) if idx["refund"] >= 0 else _ZERO

        total = total_raw if total_raw > 0 else unit_price * qty
        if total <= 0 and unit_price <= 0:
            continue

        order_id = cell(cols, idx["order_id"]).strip()
        key = f"{order_id}|{title[:_TITLE_KEY_PREFIX]}|{fmt_amount(total)}"
        if key in seen:
            continue
        seen.add(key)

        net_total = total - refunded
        ledger_cat, sub = categorize_amazon_item(title, category)
        items.append(
            AmazonItem(
                title=title,
                category=category,
                qty=qty,
                unit_price=unit_price,
                total=total,
                refunded=refunded,
                net_total=net_total,
                date_str=cell(cols, idx["date"]).strip(),
                order_id=order_id,
                ledger_cat=ledger_cat,
                sub=sub,
                is_return=refunded > 0,
                is_active=net_total > 0 or total > 0,
            )
        )

    _logger.info("amazon export: %d items", len(items))
    return items


def summarize_amazon_items(items: Iterable[AmazonItem]) -> RetailerSummary:
    """Group items by subcategory.

    Partially refunded items stay active and count their net total; fully
    refunded items only appear among returns. ``total_returns`` is the sum of
    refunded amounts across all items.
    """

    items = list(items)
    active = [i for i in items if not i.is_return or i.net_total > 0]
    returns = [i for i in items if i.is_return]
    total_spend = sum((i.total for i in active), _ZERO)
    total_refunds = sum((i.refunded for i in items), _ZERO)
    return RetailerSummary(
        by_category=group_by_subcategory(
            active, lambda i: i.net_total if i.net_total > 0 else i.total
        ),
        total_spend=total_spend,
        total_returns=total_refunds,
        net_spend=total_spend - total_refunds,
        active_items=tuple(active),
        return_items=tuple(returns),
    )


__all__ = [
    "AmazonItem",
    "AMAZON_CAT_MAP",
    "TITLE_RULES",
    "DEFAULT_ITEM_CATEGORY",
    "categorize_amazon_item",
    "parse_amazon_csv",
    "summarize_amazon_items",
]
