"""Two-stage parsing layer — confidence, remote augmentation, orchestration.

Wraps the local heuristics in ``expense_parser.parsers`` with:
- Fixed-weight confidence scoring and review helpers
- Optional remote augmentation (HTTP endpoint, Supabase edge function or Claude)
- Per-field merge of local and remote results
- Orchestrator that ties the stages together
"""

from .confidence import (
    AI_FALLBACK_THRESHOLD,
    CONFIDENCE_WEIGHTS,
    REVIEW_THRESHOLD,
    build_reasoning,
    confidence_level,
    needs_review,
    overall_confidence,
    validate_parsed_expense,
)

# Remote backends + orchestrator are imported lazily by callers
# (use: from expense_parser.parsing.orchestrator import parse_expense_text)
# (use: from expense_parser.parsing.remote import build_remote_parser)

__all__ = [
    "AI_FALLBACK_THRESHOLD",
    "CONFIDENCE_WEIGHTS",
    "REVIEW_THRESHOLD",
    "build_reasoning",
    "confidence_level",
    "needs_review",
    "overall_confidence",
    "validate_parsed_expense",
]
