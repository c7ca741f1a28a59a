"""
Closed category set, keyword table and merchant table.

The category list is the single source of truth for what the parser may emit.
"Other" is always a member and is the fallback for anything unrecognised.
Singapore vocabulary (hawker food, local transport, local chains) sits next
to the generic terms.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Mapping, Optional

EXPENSE_CATEGORIES: tuple[str, ...] = (
    "Food & Dining",
    "Groceries",
    "Transportation",
    "Entertainment",
    "Housing",
    "Utilities",
    "Health",
    "Clothing",
    "Education",
    "Insurance",
    "Work",
    "Donations",
    "Income",
    "Other",
)

OTHER_CATEGORY = "Other"
INCOME_CATEGORY = "Income"

# ---------------------------------------------------------------------------
# Generic keywords per category
# ---------------------------------------------------------------------------

CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Food & Dining": (
        "coffee", "starbucks", "mcdonalds", "restaurant", "lunch", "dinner", "breakfast",
        "food", "pizza", "burger", "sandwich", "cafe", "bar", "pub", "drink", "beer",
        "wine", "soda", "snack", "eat", "meal", "dine", "dining", "takeout", "delivery",
        "chipotle", "taco bell", "kfc", "subway", "uber eats", "doordash", "grubhub",
        # Singapore hawker fare
        "nasi lemak", "char kway teow", "laksa", "chicken rice", "bak kut teh", "roti prata",
        "mee goreng", "satay", "dim sum", "zi char", "wanton mee", "hokkien mee", "carrot cake",
        "rojak", "cendol", "ice kachang", "kopitiam", "hawker", "food court", "newton",
        "lau pa sat", "maxwell", "old airport road", "tiong bahru", "amoy street",
    ),
    "Groceries": (
        "grocery", "groceries", "supermarket", "walmart", "target", "costco", "safeway",
        "kroger", "produce", "vegetables", "fruits", "meat", "dairy", "bread", "milk",
        "eggs", "shopping", "market", "store", "whole foods", "trader joes",
    ),
    "Transportation": (
        "gas", "fuel", "uber", "taxi", "bus", "train", "parking", "toll", "lyft",
        "metro", "flight", "plane", "airport", "car", "vehicle", "maintenance", "repair",
        "oil change", "tire", "insurance", "registration", "shell", "bp", "exxon", "chevron",
    ),
    "Entertainment": (
        "movie", "cinema", "netflix", "spotify", "game", "concert", "theater", "streaming",
        "hulu", "disney", "amazon prime", "youtube", "music", "books", "magazine", "show",
    ),
    "Housing": (
        "rent", "mortgage", "property", "hoa", "maintenance", "repair", "home",
        "apartment", "house", "lawn", "garden", "furniture", "appliance", "renovation",
    ),
    "Utilities": (
        "electric", "electricity", "water", "phone", "internet", "cable", "utility", "bill",
        "gas bill", "power", "wifi", "cell phone", "landline", "trash", "recycling", "sewer",
    ),
    "Health": (
        "doctor", "pharmacy", "medicine", "hospital", "dental", "prescription", "gym", "fitness",
        "medical", "clinic", "dentist", "therapy", "massage", "vitamin", "supplement", "copay",
    ),
    "Clothing": (
        "clothes", "clothing", "shirt", "pants", "shoes", "dress", "fashion",
        "nike", "adidas", "zara", "h&m", "uniqlo", "jacket", "jeans", "sneakers",
    ),
    "Education": (
        "school", "book", "course", "tuition", "university", "college", "training",
        "education", "textbook", "supplies", "fee", "student", "learning", "workshop",
    ),
    "Insurance": (
        "insurance", "premium", "coverage", "policy", "auto insurance", "health insurance",
        "life insurance", "home insurance", "deductible", "claim",
    ),
    "Work": (
        "office", "supplies", "business", "work", "conference", "equipment",
        "laptop", "computer", "software", "tools", "meeting", "travel", "expense",
    ),
    "Donations": (
        "charity", "donation", "church", "nonprofit", "give", "foundation",
        "tithe", "offering", "fundraiser", "volunteer", "help", "support",
    ),
    "Income": (),
    "Other": (),
}

# ---------------------------------------------------------------------------
# Merchant table (checked before generic keywords; order matters)
# ---------------------------------------------------------------------------

MERCHANT_CATEGORIES: dict[str, str] = {
    # Local food
    "kopitiam": "Food & Dining", "hawker": "Food & Dining", "food court": "Food & Dining",
    "ya kun": "Food & Dining", "toast box": "Food & Dining", "din tai fung": "Food & Dining",
    "newton": "Food & Dining", "lau pa sat": "Food & Dining", "maxwell": "Food & Dining",
    "old airport road": "Food & Dining", "tiong bahru": "Food & Dining",
    # Local transport
    "grab": "Transportation", "gojek": "Transportation", "comfortdelgro": "Transportation",
    "mrt": "Transportation", "lrt": "Transportation", "ez link": "Transportation",
    "cepas": "Transportation", "smrt": "Transportation", "sbs transit": "Transportation",
    # Local grocery
    "ntuc": "Groceries", "fairprice": "Groceries", "cold storage": "Groceries",
    "giant": "Groceries", "sheng siong": "Groceries", "redmart": "Groceries",
    # Local health
    "guardian": "Health", "watsons": "Health", "unity": "Health",
    "polyclinic": "Health", "sgh": "Health", "nuh": "Health", "ttsh": "Health",
    # Local utilities
    "sp group": "Utilities", "city gas": "Utilities", "pub utilities": "Utilities",
    "singtel": "Utilities", "starhub": "Utilities", "m1": "Utilities",
    # International chains
    "starbucks": "Food & Dining", "mcdonalds": "Food & Dining", "kfc": "Food & Dining",
    "uber eats": "Food & Dining", "uber": "Transportation",
    "netflix": "Entertainment", "spotify": "Entertainment",
}

# Display names where plain title-casing reads wrong (acronyms, brand casing)
MERCHANT_DISPLAY_NAMES: dict[str, str] = {
    "mrt": "MRT", "lrt": "LRT", "smrt": "SMRT", "sbs transit": "SBS Transit",
    "ntuc": "NTUC", "fairprice": "FairPrice", "redmart": "RedMart",
    "sgh": "SGH", "nuh": "NUH", "ttsh": "TTSH", "sp group": "SP Group",
    "pub utilities": "PUB", "m1": "M1", "kfc": "KFC", "mcdonalds": "McDonald's",
    "ez link": "EZ-Link", "comfortdelgro": "ComfortDelGro",
}


# ---------------------------------------------------------------------------
# Matching helpers
# ---------------------------------------------------------------------------


@lru_cache(maxsize=4096)
def _term_pattern(term: str) -> re.Pattern[str]:
    # Whole-word match; a trailing plural "s"/"es" is tolerated.
    return re.compile(r"(?<!\w)" + re.escape(term) + r"(?:e?s)?(?!\w)")


def contains_term(text: str, term: str) -> bool:
    """True if ``term`` occurs in ``text`` as a whole word or phrase."""
    if not term:
        return False
    return _term_pattern(term).search(text) is not None


def display_name(merchant_key: str, overrides: Optional[Mapping[str, str]] = None) -> str:
    """Human-facing merchant name for a merchant-table key."""
    names = MERCHANT_DISPLAY_NAMES if overrides is None else overrides
    if merchant_key in names:
        return names[merchant_key]
    return " ".join(w[:1].upper() + w[1:] for w in merchant_key.split())


def is_valid_category(category: str, categories: tuple[str, ...] = EXPENSE_CATEGORIES) -> bool:
    return category in categories


def categories_for_filter(categories: tuple[str, ...] = EXPENSE_CATEGORIES) -> list[str]:
    """Category list for filter dropdowns, prefixed with the catch-all entry."""
    return ["All Categories", *categories]
