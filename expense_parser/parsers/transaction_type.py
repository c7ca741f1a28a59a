"""
Income vs. expense classification.

Keyword hits score 2 when the keyword is longer than five characters (more
specific) and 1 otherwise; verb hits add another 3.  The higher total wins
and confidence is its share of the combined score, capped at 0.95.  With no
signal at all the text is treated as an expense, the common case.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..categories import contains_term
from ..config import DEFAULT_CONFIG, ParserConfig

_MAX_CONFIDENCE = 0.95
_NO_SIGNAL_CONFIDENCE = 0.5
_VERB_WEIGHT = 3


@dataclass(frozen=True)
class TypeClassification:
    type: str  # expense | income
    confidence: float
    income_score: int = 0
    expense_score: int = 0
    reason: Optional[str] = None


def _keyword_score(text: str, keywords: tuple[str, ...]) -> int:
    return sum(2 if len(kw) > 5 else 1 for kw in keywords if contains_term(text, kw))


def _verb_score(text: str, verbs: tuple[str, ...]) -> int:
    return sum(_VERB_WEIGHT for verb in verbs if contains_term(text, verb))


def classify_transaction_type(
    text: str,
    config: ParserConfig = DEFAULT_CONFIG,
) -> TypeClassification:
    """Classify lowercased ``text`` as ``"income"`` or ``"expense"``."""
    income = _keyword_score(text, config.income_keywords) + _verb_score(text, config.income_verbs)
    expense = _keyword_score(text, config.expense_keywords) + _verb_score(text, config.expense_verbs)

    total = income + expense
    if total == 0:
        return TypeClassification("expense", _NO_SIGNAL_CONFIDENCE, 0, 0, None)

    tx_type = "income" if income > expense else "expense"
    confidence = min(_MAX_CONFIDENCE, max(income, expense) / total)
    return TypeClassification(
        tx_type,
        confidence,
        income,
        expense,
        f"Type {tx_type} from keywords (income={income}, expense={expense})",
    )
