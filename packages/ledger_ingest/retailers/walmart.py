"""Walmart order-history parser.

Expected export columns: Product Name, Quantity, Price, Delivery Status,
Product Link. Columns are located by substring so renamed exports still work.
Walmart supplies no category codes; items are categorized by keyword only.
"""

from __future__ import annotations

from collections.abc import Iterable
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

_logger = get_logger("ledger_ingest.retailers.walmart")

DEFAULT_ITEM_CATEGORY: tuple[str, str] = ("Other", "Misc")
DEFAULT_STATUS = "Shopped"
_SKIP_STATUSES = frozenset({"canceled", ""})

# First match wins; specific groups come before general ones.
WALMART_RULES: tuple[ItemRule, ...] = (
    # Transport / Fuel
    ItemRule(
        "Transport",
        "Fuel",
        (
            "gasoline", "unleaded", "fuel pump",
        ),
    ),
    # Appliances ahead of groceries ("ninja", "coffee maker")
    ItemRule(
        "Shopping",
        "Appliances",
        (
            "ninja", "air fryer", "instant pot", "coffee maker", "toaster", "microwave",
            "blender", "mixer", "slow cooker", "rice cooker", "waffle maker", "juicer",
            "stand mixer", "keurig", "nespresso", "air purifier", "humidifier",
            "dehumidifier", "space heater", "fan ",
        ),
    ),
    # Food & Grocery
    ItemRule(
        "Food",
        "Grocery",
        (
            "food", "snack", "chip", "cracker", "juice", "water", "coffee", "tea", "soda",
            "candy", "chocolate", "granola", "cereal", "soup", "sauce", "condiment",
            "spice", "seasoning", "pasta", "rice", "bread", "butter", "cheese", "milk",
            "egg", "cookie", "muffin", "croissant", "bagel", "chicken breast", "beef",
            "pork fish", "shrimp", "meat", "produce", "vegetable", "fruit", "frozen meal",
            "flour", "sugar", "salt", "pepper", "oil", "vinegar", "dressing", "mayo",
            "mustard", "ketchup", "honey", "jam", "jelly", "peanut butter", "pretzel",
            "popcorn", "tortilla", "salsa", "hummus", "yogurt", "cream", "protein bar",
            "energy bar", "gatorade", "vitamin water", "kombucha", "olipop", "broth",
            "stock", "canned", "bean", "oat", "banana", "blueberr", "avocado", "orange",
            "lime", "onion", "mushroom", "broccoli", "salad kit", "marketside",
            "prima della", "marshmallow", "aquaphor lip", "fresh hass", "fresh navel",
            "fresh whole", "fresh organic", "fresh banana", "fresh yellow", "applegate",
            "chicken tenders",
        ),
    ),
    # Health & Medical
    ItemRule(
        "Healthcare",
        "Health & Beauty",
        (
            "vitamin", "supplement", "medicine", "pain relief", "tylenol", "advil",
            "ibuprofen", "allergy", "cold", "flu", "bandage", "first aid", "shampoo",
            "conditioner", "body wash", "lotion", "moisturizer", "sunscreen", "deodorant",
            "toothbrush", "toothpaste", "floss", "mouthwash", "razor", "shave", "makeup",
            "mascara", "lipstick", "foundation", "skincare", "face wash", "toner", "serum",
            "nail polish", "perfume", "cologne", "feminine", "tampon", "pad", "pregnancy",
            "eye drop", "systane", "dry eye", "tiger balm", "pain relieving patch",
            "lip repair", "lip balm", "lip stick", "wound", "ointment", "antiseptic",
        ),
    ),
    # Family planning
    ItemRule(
        "Healthcare",
        "Health & Beauty",
        (
            "condom", "trojan", "durex", "lubricated",
        ),
    ),
    # Kids clothing
    ItemRule(
        "Shopping",
        "Kids Clothing",
        (
            "girls ", "boys ", "justice ", "leotard", "ballet", "winnie the pooh girls",
            "winnie the pooh boys", "kids shirt", "children's shirt", "toddler shirt",
            "youth shirt", "kids pants", "girls pants", "boys pants", "girls dress",
            "little girls", "little boys",
        ),
    ),
    # Kids & Baby gear (non-clothing)
    ItemRule(
        "Shopping",
        "Kids & Baby",
        (
            "baby doll", "rocking crib", "baby toy", "toddler toy", "infant toy", "nursery",
            "diaper", "baby wipe", "formula", "sippy", "pacifier", "stroller",
            "baby monitor", "baby gate", "playpen", "bassinet", "highchair", "bouncer",
            "swing", "baby carrier",
        ),
    ),
    # Toys & Games
    ItemRule(
        "Shopping",
        "Toys & Games",
        (
            "toy ", "lego ", "action figure", "board game", "card game", "stuffed animal",
            "plush", "fidget", "slime", "craft kit", "coloring book", "disney stitch",
            "bubble machine", "musical toy", "play set",
        ),
    ),
    # Party & Celebrations
    ItemRule(
        "Entertainment",
        "Celebrations",
        (
            "party", "birthday", "balloon", "party banner", "confetti", "streamer",
            "gift wrap", "tissue paper", "gift bag", "party bow", "party ribbon",
            "party cup", "party plate", "tablecloth", "pinata", "halloween", "christmas",
            "holiday decor", "seasonal decor", "easter", "valentine", "capybara gift",
            "snow roll decoration", "gift card holder",
        ),
    ),
    # Pets
    ItemRule(
        "Shopping",
        "Pet Supplies",
        (
            "dog food", "cat food", "pet food", "dog treat", "cat treat", "puppy", "kitten",
            "bird food", "fish food", "hamster", "pet bed", "dog bed", "cat bed", "leash",
            "collar", "pet toy", "cat litter", "pet cage", "pet bowl", "pet grooming",
            "flea", "heartworm", "aquarium",
        ),
    ),
    # Garden & Outdoors
    ItemRule(
        "Shopping",
        "Garden",
        (
            "garden", "plant seed", "soil", "garden pot", "planter", "fertilizer",
            "garden hose", "garden tool", "lawn", "grass seed", "outdoor furniture",
            "patio", "grill", "bbq", "camping", "garden glove",
        ),
    ),
    # Office & School Supplies
    ItemRule(
        "Education",
        "Supplies",
        (
            "pen ", "pencil", "marker", "highlighter", "notebook", "loose leaf",
            "paper ream", "binder", "folder", "stapler", "tape dispenser", "scissors",
            "glue stick", "eraser", "ruler", "backpack", "poster board", "pen+gear",
            "monofilament cord", "jewelry making", "stamp pad", "ink pad", "index card",
            "flash card",
        ),
    ),
    # Electronics & Tech
    ItemRule(
        "Shopping",
        "Electronics",
        (
            "phone case", "phone charger", "charging cable", "usb cable", "hdmi",
            "aa battery", "aaa battery", "d battery", "bluetooth", "headphone", "earphone",
            "earbud", "speaker", "webcam", "keyboard", "mouse pad", "tablet case",
            "remote control", "smart plug", "power bank", "surge protector",
            "extension cord", "led strip", "ring light",
        ),
    ),
    # Household cleaning & supplies
    ItemRule(
        "Housing",
        "Household",
        (
            "cleaning spray", "all-purpose cleaner", "disinfectant", "bleach",
            "toilet bowl", "bathroom cleaner", "glass cleaner", "floor cleaner", "mop",
            "broom", "dustpan", "vacuum bag", "trash bag", "garbage bag", "ziploc",
            "storage bag", "sandwich bag", "plastic wrap", "aluminum foil", "paper towel",
            "toilet paper", "tissue box", "facial tissue", "napkin", "sponge", "scrub pad",
            "laundry detergent", "fabric softener", "dryer sheet", "dish soap", "hand soap",
            "hand sanitizer", "air freshener", "febreze", "scented candle",
            "storage container", "food container", "tupperware",
        ),
    ),
    # Furniture & Home Decor
    ItemRule(
        "Shopping",
        "Home Decor",
        (
            "throw blanket", "fleece throw", "pillow cover", "decorative pillow", "curtain",
            "window curtain", "rug", "area rug", "wall art", "picture frame", "mirror",
            "lamp", "night light", "wax melt", "scented wax", "vase", "plant pot", "shelf",
            "floating shelf", "hooks", "towel bar", "shower curtain", "bath mat",
            "scallop flange", "home decor collection", "floral arrangement",
            "artificial flower",
        ),
    ),
    # Adult clothing
    ItemRule(
        "Shopping",
        "Clothing",
        (
            "shirt", "pants", "shorts", "dress", "skirt", "jacket", "coat", "hoodie",
            "sweater", "sock", "underwear", "bra ", "shoe", "sandal", "boot", "hat ",
            "beanie", "scarf", "glove", "belt", "legging", "jeans", "denim",
            "flannel shirt", "half slip", "reebok", "women's shirt", "men's shirt",
            "apparel", "george men", "vanity fair", "activewear", "athletic wear",
            "sports bra", "compression", "swimsuit", "pajama", "sleepwear", "robe",
        ),
    ),
    # Grocery catch-all; produce is often just "Fresh X"
    ItemRule(
        "Food",
        "Grocery",
        (
            "fresh ", "organic ", "cage-free", "free-range", "wild-caught", "grass-fed",
        ),
    ),
)


def is_active_status(status: str) -> bool:
    """Blank, canceled and returned items do not count toward spend."""

    s = (status or "").strip().lower()
    return s not in _SKIP_STATUSES and "return" not in s


@dataclass(frozen=True, slots=True)
class WalmartItem:
    name: str
    qty: int
    price: Decimal
    total: Decimal
    status: str
    ledger_cat: str
    sub: str
    is_active: bool
    is_return: bool


def parse_walmart_csv(text: str) -> list[WalmartItem]:
    """Parse a Walmart order export into categorized items.

    Rows with fewer than three cells, no name or a non-positive price are
    skipped, as are repeats of the same ``name|price|status``. Returns an empty
    list when the name or price column cannot be found.
    """

    headers, rows = header_and_rows(text)
    name_idx = find_column(headers, lambda h: "name" in h)
    qty_idx = find_column(headers, lambda h: "quantity" in h or h == "qty")
    price_idx = find_column(headers, lambda h: "price" in h)
    status_idx = find_column(headers, lambda h: "status" in h or "delivery" in h)
    if name_idx < 0 or price_idx < 0:
        return []

    items: list[WalmartItem] = []
    seen: set[str] = set()
    for cols in rows:
        if len(cols) < 3:
            continue
        name = cell(cols, name_idx).strip()
        qty = parse_quantity(cell(cols, qty_idx)) if qty_idx >= 0 else 1
        price = parse_money(cell(cols, price_idx))
        status = cell(cols, status_idx).strip() if status_idx >= 0 else DEFAULT_STATUS
        if not name or price <= 0:
            continue

        key = f"{name}|{fmt_amount(price)}|{status}"
        if key in seen:
            continue
        seen.add(key)

        ledger_cat, sub = categorize_item(name, WALMART_RULES, DEFAULT_ITEM_CATEGORY)
        items.append(
            WalmartItem(
                name=name,
                qty=qty,
                price=price,
                total=price * qty,
                status=status,
                ledger_cat=ledger_cat,
                sub=sub,
                is_active=is_active_status(status),
                is_return="return" in status.lower(),
            )
        )

    _logger.info("walmart export: %d items", len(items))
    return items


def summarize_walmart_items(items: Iterable[WalmartItem]) -> RetailerSummary:
    """Group active items by subcategory; returns reduce net spend."""

    items = list(items)
    active = [i for i in items if i.is_active]
    returns = [i for i in items if i.is_return]
    total_spend = sum((i.total for i in active), Decimal("0"))
    total_returns = sum((i.total for i in returns), Decimal("0"))
    return RetailerSummary(
        by_category=group_by_subcategory(active, lambda i: i.total),
        total_spend=total_spend,
        total_returns=total_returns,
        net_spend=total_spend - total_returns,
        active_items=tuple(active),
        return_items=tuple(returns),
    )


__all__ = [
    "WalmartItem",
    "WALMART_RULES",
    "DEFAULT_ITEM_CATEGORY",
    "is_active_status",
    "parse_walmart_csv",
    "summarize_walmart_items",
]
