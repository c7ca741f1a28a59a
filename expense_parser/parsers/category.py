"""
Category suggestion.

Classification hierarchy (highest priority first):
1. Income        - income transactions short-circuit to "Income"
2. Merchant      - a known brand name is an unambiguous signal
3. Keywords      - generic terms, scored by length and count
4. Other         - nothing matched

A category outside the active closed set is never returned; it collapses to
"Other".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..categories import INCOME_CATEGORY, OTHER_CATEGORY, contains_term
from ..config import DEFAULT_CONFIG, ParserConfig

_INCOME_CONFIDENCE = 0.8
_MERCHANT_CONFIDENCE = 0.95
_OTHER_CONFIDENCE = 0.3
_MAX_KEYWORD_CONFIDENCE = 0.9


@dataclass(frozen=True)
class CategoryMatch:
    category: str
    confidence: float
    reason: Optional[str] = None
    merchant_key: Optional[str] = None  # merchant-table key when a merchant decided it


def find_merchant(text: str, config: ParserConfig = DEFAULT_CONFIG) -> Optional[str]:
    """First merchant-table key present in ``text`` (table order), or None."""
    for merchant in config.merchants:
        if contains_term(text, merchant):
            return merchant
    return None


def suggest_category(
    text: str,
    tx_type: str = "expense",
    config: ParserConfig = DEFAULT_CONFIG,
) -> CategoryMatch:
    """
    Map lowercased ``text`` to one category from ``config.categories``.

    Args:
        text: Lowercased input.
        tx_type: Already-determined transaction type.
        config: Tables to use.

    Returns:
        CategoryMatch with category, confidence and reason.
    """
    # ----- 1. Income -----
    if tx_type == "income":
        category = config.resolve_category(INCOME_CATEGORY)
        return CategoryMatch(category, _INCOME_CONFIDENCE, "Income transaction")

    # ----- 2. Merchant table -----
    merchant = find_merchant(text, config)
    if merchant is not None:
        category = config.resolve_category(config.merchants[merchant])
        return CategoryMatch(
            category, _MERCHANT_CONFIDENCE, f"Known merchant: {merchant}", merchant,
        )

    # ----- 3. Keyword scoring -----
    best_category = OTHER_CATEGORY
    best_score = 0.0
    total_hits = 0

    for category, keywords in config.category_keywords.items():
        if category not in config.categories or category == OTHER_CATEGORY:
            continue
        score = 0.0
        for keyword in keywords:
            if contains_term(text, keyword):
                score += max(1.0, len(keyword) / 5)
                total_hits += 1
        if score > best_score:
            best_score = score
            best_category = category

    # ----- 4. Nothing matched -----
    if total_hits == 0:
        return CategoryMatch(OTHER_CATEGORY, _OTHER_CONFIDENCE, None)

    confidence = min(
        _MAX_KEYWORD_CONFIDENCE,
        max(_OTHER_CONFIDENCE, 0.4 + best_score / total_hits * 0.5),
    )
    return CategoryMatch(best_category, confidence, f"Keyword match: {best_category}")
