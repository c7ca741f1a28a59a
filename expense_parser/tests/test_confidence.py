"""Tests for confidence scoring, reasoning and result validation."""

from __future__ import annotations

from expense_parser.models import ConfidenceScores, ParsedExpense
from expense_parser.parsing.confidence import (
    CONFIDENCE_WEIGHTS,
    build_reasoning,
    confidence_level,
    needs_review,
    overall_confidence,
    validate_parsed_expense,
)


def _expense(amount=12.0, description="Lunch", category="Food & Dining", overall_inputs=(0.9, 0.8, 0.9, 0.9)):
    return ParsedExpense(
        amount=amount,
        description=description,
        category=category,
        type="expense",
        confidence=ConfidenceScores.from_fields(*overall_inputs),
    )


# ── Weighted composite ─────────────────────────────────────────────────────

def test_weights_sum_to_one():
    assert abs(sum(CONFIDENCE_WEIGHTS.values()) - 1.0) < 1e-9


def test_overall_bounds():
    assert overall_confidence(0, 0, 0, 0) == 0.0
    assert overall_confidence(1, 1, 1, 1) == 1.0


def test_overall_deterministic():
    a = overall_confidence(0.6, 0.567, 0.3, 0.5)
    b = overall_confidence(0.6, 0.567, 0.3, 0.5)
    assert a == b


def test_overall_monotonic_in_each_field():
    base = (0.5, 0.5, 0.5, 0.5)
    reference = overall_confidence(*base)
    for i in range(4):
        raised = list(base)
        raised[i] = 0.9
        assert overall_confidence(*raised) > reference


def test_from_fields_clamps_and_recomputes():
    scores = ConfidenceScores.from_fields(1.5, -0.2, 0.5, 0.5)
    assert scores.amount == 1.0
    assert scores.description == 0.0
    assert scores.overall == overall_confidence(1.0, 0.0, 0.5, 0.5)


# ── Bands / reasoning ──────────────────────────────────────────────────────

def test_confidence_level_bands():
    assert confidence_level(0.95) == "high"
    assert confidence_level(0.8) == "high"
    assert confidence_level(0.7) == "medium"
    assert confidence_level(0.59) == "low"


def test_reasoning_high_confidence():
    scores = ConfidenceScores.from_fields(0.95, 0.5, 0.95, 0.5)
    text = build_reasoning(scores, ("Amount from currency symbol", None))
    assert text.startswith("Amount from currency symbol. ")
    assert "Amount clearly identified" in text
    assert "Category matched from context" in text
    assert "manual review" not in text


def test_reasoning_low_confidence():
    scores = ConfidenceScores.from_fields(0.0, 0.5, 0.3, 0.5)
    assert "Low confidence - manual review suggested" in build_reasoning(scores)


def test_reasoning_default():
    scores = ConfidenceScores.from_fields(0.6, 0.6, 0.6, 0.6)
    assert build_reasoning(scores) == "Basic parsing applied"


# ── Validation / review ────────────────────────────────────────────────────

def test_validate_clean_result():
    ok, errors = validate_parsed_expense(_expense())
    assert ok
    assert errors == []


def test_validate_reports_every_problem():
    bad = _expense(amount=0, description="  ", category="Pets", overall_inputs=(0, 0, 0, 0))
    ok, errors = validate_parsed_expense(bad)
    assert not ok
    assert errors == ["Invalid amount", "Missing description", "Invalid category", "Very low confidence"]


def test_validate_against_custom_categories():
    ok, errors = validate_parsed_expense(_expense(category="Pets"), ("Pets", "Other"))
    assert ok


def test_needs_review():
    assert not needs_review(_expense())
    assert needs_review(_expense(overall_inputs=(0.6, 0.5, 0.3, 0.5)))
    assert needs_review(_expense(), threshold=0.99)
