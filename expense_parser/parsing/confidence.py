"""Confidence arithmetic for parsed expenses.

The composite ``overall`` score is a fixed-weight linear combination of the
four per-field scores.  Amount and category carry most of the weight because
they are the fields a user is most likely to have to correct.  The weights
and thresholds are tuning knobs, not measured quantities.

This module also holds the small helpers a caller uses to decide what to
show the user: confidence bands, a readable reasoning trace, and a
validation pass over a finished result.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Optional

from ..categories import EXPENSE_CATEGORIES

if TYPE_CHECKING:
    from ..models import ParsedExpense

# ---------------------------------------------------------------------------
# Weights and thresholds
# ---------------------------------------------------------------------------

CONFIDENCE_WEIGHTS: dict[str, float] = {
    "amount": 0.4,
    "description": 0.2,
    "category": 0.3,
    "type": 0.1,
}

# Below this the remote stage is consulted (when enabled)
AI_FALLBACK_THRESHOLD = 0.5

# Below this a UI should ask the user to double-check the result
REVIEW_THRESHOLD = 0.7

_HIGH_BAND = 0.8
_MEDIUM_BAND = 0.6
_VERY_LOW = 0.3


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def clamp(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


def overall_confidence(
    amount: float,
    description: float,
    category: float,
    type: float,
) -> float:
    """Weighted composite of the four field confidences, rounded to 4 places."""
    total = (
        amount * CONFIDENCE_WEIGHTS["amount"]
        + description * CONFIDENCE_WEIGHTS["description"]
        + category * CONFIDENCE_WEIGHTS["category"]
        + type * CONFIDENCE_WEIGHTS["type"]
    )
    return round(clamp(total), 4)


def confidence_level(confidence: float) -> str:
    """Bucket a score into ``"high"``, ``"medium"`` or ``"low"``."""
    if confidence >= _HIGH_BAND:
        return "high"
    if confidence >= _MEDIUM_BAND:
        return "medium"
    return "low"


def build_reasoning(scores: Any, details: Iterable[Optional[str]] = ()) -> str:
    """Readable trace of which heuristics fired.

    ``scores`` is anything with ``amount``, ``category`` and ``overall``
    attributes.  ``details`` are per-extractor notes, kept in order and
    skipped when empty.
    """
    reasons = [d for d in details if d]

    if scores.amount > _HIGH_BAND:
        reasons.append("Amount clearly identified")
    if scores.category > _HIGH_BAND:
        reasons.append("Category matched from context")
    if scores.overall < AI_FALLBACK_THRESHOLD:
        reasons.append("Low confidence - manual review suggested")

    return ". ".join(reasons) or "Basic parsing applied"


def validate_parsed_expense(
    parsed: "ParsedExpense",
    categories: tuple[str, ...] = EXPENSE_CATEGORIES,
) -> tuple[bool, list[str]]:
    """Check a result is fit to save without user correction.

    Returns
    -------
    (is_valid, errors)
        ``errors`` lists human-readable problems; empty when valid.
    """
    errors: list[str] = []

    if not parsed.amount or parsed.amount <= 0:
        errors.append("Invalid amount")
    if not parsed.description or not parsed.description.strip():
        errors.append("Missing description")
    if parsed.category not in categories:
        errors.append("Invalid category")
    if parsed.confidence.overall < _VERY_LOW:
        errors.append("Very low confidence")

    return not errors, errors


def needs_review(parsed: "ParsedExpense", threshold: float = REVIEW_THRESHOLD) -> bool:
    return parsed.confidence.overall < threshold
