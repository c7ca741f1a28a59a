"""Orchestrator — two-stage expense parsing pipeline.

  Stage 1: Local heuristics (amount, type, category, description, merchant)
           plus fixed-weight confidence scoring.  Always runs, never fails
           on a string input.
  Stage 2: Remote augmentation for low-confidence results.  Optional,
           bounded by a timeout, and any failure falls back to Stage 1.

The local parser is NEVER replaced — it always runs first and its result
is the floor.  The remote answer only wins fields where it is strictly
more confident.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from ..categories import OTHER_CATEGORY
from ..config import DEFAULT_CONFIG, ParserConfig
from ..models import ConfidenceScores, ParsedExpense, ParsingOptions
from ..parsers import (
    MAX_PLAUSIBLE_AMOUNT,
    PLACEHOLDER_DESCRIPTION,
    classify_transaction_type,
    clean_description,
    extract_amount,
    extract_merchant,
    suggest_category,
)
from .confidence import build_reasoning
from .remote import (
    CategorySuggestion,
    RemoteExpensePayload,
    RemoteExpenseParser,
    build_remote_parser,
    validate_category_suggestion,
    validate_remote_payload,
)

logger = logging.getLogger(__name__)

# Category refinement only runs for weak "Other" results
_REFINE_MAX_CONFIDENCE = 0.6


def _require_text(text: Any) -> str:
    if not isinstance(text, str):
        raise TypeError(f"text must be a str, got {type(text).__name__}")
    return text


def _blank_result() -> ParsedExpense:
    return ParsedExpense(
        amount=0.0,
        description=PLACEHOLDER_DESCRIPTION,
        category=OTHER_CATEGORY,
        type="expense",
        confidence=ConfidenceScores.zero(),
        merchant=None,
        reasoning="Empty input",
        parsing_method="manual_fallback",
    )


def parse_local(text: str, config: Optional[ParserConfig] = None) -> ParsedExpense:
    """Run the local heuristics only.  Pure and synchronous.

    Blank input yields a ``manual_fallback`` result with zero confidence
    so the caller knows to ask the user.

    Raises
    ------
    TypeError
        If ``text`` is not a string.
    """
    _require_text(text)
    cfg = config or DEFAULT_CONFIG

    normalized = text.lower().strip()
    if not normalized:
        return _blank_result()

    amount = extract_amount(normalized)
    tx = classify_transaction_type(normalized, cfg)
    category = suggest_category(normalized, tx.type, cfg)
    description = clean_description(normalized, amount.matched_text, cfg)
    merchant = extract_merchant(text.strip(), cfg)

    scores = ConfidenceScores.from_fields(
        amount=amount.confidence,
        description=description.confidence,
        category=category.confidence,
        type=tx.confidence,
    )
    reasoning = build_reasoning(scores, (amount.reason, category.reason, tx.reason))

    logger.debug(
        "[ORCHESTRATOR] Local parse: amount=%.2f category=%s type=%s overall=%.2f",
        amount.amount, category.category, tx.type, scores.overall,
    )

    return ParsedExpense(
        amount=amount.amount,
        description=description.description,
        category=category.category,
        type=tx.type,
        confidence=scores,
        merchant=merchant,
        reasoning=reasoning,
        parsing_method="local",
    )


def merge_results(
    local: ParsedExpense,
    remote: RemoteExpensePayload,
    config: Optional[ParserConfig] = None,
) -> ParsedExpense:
    """Combine a local result with a validated remote payload, field by field.

    The remote value replaces the local one only when its field confidence
    is strictly higher.  Field confidences become the max of both sides and
    ``overall`` is recomputed from them.
    """
    cfg = config or DEFAULT_CONFIG
    lc = local.confidence
    rc = remote.confidence

    remote_category = remote.category
    remote_category_conf = rc.category
    if remote_category not in cfg.categories:
        logger.warning(
            "[ORCHESTRATOR] Remote category %r not in category set; using %s",
            remote_category, OTHER_CATEGORY,
        )
        remote_category = OTHER_CATEGORY
        # A coerced category must not outrank the local guess
        remote_category_conf = min(rc.category, lc.category)

    # Same plausibility bounds as the local extractor
    remote_amount_conf = rc.amount if 0 < remote.amount < MAX_PLAUSIBLE_AMOUNT else 0.0

    remote_description = remote.description.strip()
    remote_description_conf = rc.description if remote_description else 0.0

    def pick(local_value, local_conf, remote_value, remote_conf):
        return remote_value if remote_conf > local_conf else local_value

    scores = ConfidenceScores.from_fields(
        amount=max(lc.amount, remote_amount_conf),
        description=max(lc.description, remote_description_conf),
        category=max(lc.category, remote_category_conf),
        type=max(lc.type, rc.type),
    )

    return ParsedExpense(
        amount=pick(local.amount, lc.amount, remote.amount, remote_amount_conf),
        description=pick(local.description, lc.description, remote_description, remote_description_conf),
        category=pick(local.category, lc.category, remote_category, remote_category_conf),
        type=pick(local.type, lc.type, remote.type, rc.type),
        confidence=scores,
        merchant=remote.merchant or local.merchant,
        reasoning=remote.reasoning or local.reasoning,
        parsing_method="ai_enhanced",
    )


async def parse_expense_text(
    text: str,
    options: Optional[ParsingOptions] = None,
    *,
    remote: Optional[RemoteExpenseParser] = None,
    config: Optional[ParserConfig] = None,
) -> ParsedExpense:
    """Parse free text into a structured expense.

    Parameters
    ----------
    text:
        Raw user input, e.g. ``"coffee 5 bucks starbucks"``.
    options:
        Per-call switches; defaults to AI fallback on below 0.5 overall.
    remote:
        Backend for Stage 2.  When omitted one is built from the
        environment (see ``expense_parser.config``); with no credentials
        the parser stays local.
    config:
        Keyword / category tables; defaults to ``DEFAULT_CONFIG``.

    Returns
    -------
    ParsedExpense
        Never raises for a string input.  Remote problems are logged and
        the local result is returned with ``parsing_method="local"``.
    """
    opts = options or ParsingOptions()
    cfg = config or DEFAULT_CONFIG

    local = parse_local(text, cfg)
    if local.parsing_method == "manual_fallback":
        return local

    if not opts.use_ai_fallback or local.confidence.overall >= opts.confidence_threshold:
        return local

    backend = remote if remote is not None else build_remote_parser()
    if backend is None:
        return local

    timeout = opts.timeout if opts.timeout is not None else backend.timeout
    logger.info(
        "[ORCHESTRATOR] Local confidence %.2f below %.2f; asking %s backend",
        local.confidence.overall, opts.confidence_threshold, backend.name,
    )

    try:
        raw = await asyncio.wait_for(backend.parse(text.strip(), cfg.categories), timeout=timeout)
        payload = validate_remote_payload(raw)
    except asyncio.TimeoutError:
        logger.warning(
            "[ORCHESTRATOR] %s backend timed out after %.1fs; using local result",
            backend.name, timeout,
        )
        return local
    except Exception:
        logger.warning(
            "[ORCHESTRATOR] %s backend failed; using local result", backend.name, exc_info=True,
        )
        return local

    merged = merge_results(local, payload, cfg)
    logger.info(
        "[ORCHESTRATOR] Enhanced: overall %.2f -> %.2f (category=%s)",
        local.confidence.overall, merged.confidence.overall, merged.category,
    )
    return merged


async def refine_category(
    text: str,
    local_category: str,
    local_confidence: float,
    remote: Optional[RemoteExpenseParser] = None,
    *,
    config: Optional[ParserConfig] = None,
) -> CategorySuggestion:
    """Ask the remote backend for a better category than a weak "Other".

    Only consulted when ``local_category`` is "Other" and
    ``local_confidence`` is at most 0.6.  Otherwise, or on any remote
    failure, the local category comes back with ``should_update=False``.
    """
    _require_text(text)
    cfg = config or DEFAULT_CONFIG

    keep = CategorySuggestion(
        suggested_category=local_category,
        confidence=local_confidence,
        reasoning="Local categorization kept",
        should_update=False,
    )

    if local_category != OTHER_CATEGORY or local_confidence > _REFINE_MAX_CONFIDENCE:
        return keep

    backend = remote if remote is not None else build_remote_parser()
    if backend is None:
        return keep

    try:
        raw = await asyncio.wait_for(
            backend.suggest_category(text.strip(), local_category, local_confidence, cfg.categories),
            timeout=backend.timeout,
        )
        suggestion = validate_category_suggestion(raw)
    except Exception:
        logger.warning(
            "[ORCHESTRATOR] Category refinement via %s failed", backend.name, exc_info=True,
        )
        return keep

    if suggestion.suggested_category not in cfg.categories:
        logger.info(
            "[ORCHESTRATOR] Suggested category %r not in category set",
            suggestion.suggested_category,
        )
        return suggestion.model_copy(update={
            "suggested_category": OTHER_CATEGORY,
            "should_update": False,
            "reasoning": "Invalid category suggested, defaulting to Other",
        })

    return suggestion
