"""expense_parser — turn free text like "coffee 5 bucks starbucks" into a structured expense.

Usage:
    from expense_parser import parse_expense_text, parse_local

    result = await parse_expense_text("grab to changi airport 18.30")
    result.amount, result.category, result.merchant   # 18.3, "Transportation", "Grab"
"""

from .categories import (
    EXPENSE_CATEGORIES,
    INCOME_CATEGORY,
    OTHER_CATEGORY,
    categories_for_filter,
    is_valid_category,
)
from .config import DEFAULT_CONFIG, ParserConfig, RemoteSettings
from .models import ConfidenceScores, ParsedExpense, ParsingOptions
from .parsing.confidence import (
    build_reasoning,
    confidence_level,
    needs_review,
    validate_parsed_expense,
)
from .parsing.orchestrator import (
    merge_results,
    parse_expense_text,
    parse_local,
    refine_category,
)
from .parsing.remote import (
    CategorySuggestion,
    ClaudeExpenseParser,
    EndpointExpenseParser,
    RemoteExpenseParser,
    RemoteParseError,
    SupabaseFunctionParser,
    build_remote_parser,
)

__all__ = [
    "CategorySuggestion",
    "ClaudeExpenseParser",
    "ConfidenceScores",
    "DEFAULT_CONFIG",
    "EXPENSE_CATEGORIES",
    "EndpointExpenseParser",
    "INCOME_CATEGORY",
    "OTHER_CATEGORY",
    "ParsedExpense",
    "ParserConfig",
    "ParsingOptions",
    "RemoteExpenseParser",
    "RemoteParseError",
    "RemoteSettings",
    "SupabaseFunctionParser",
    "build_reasoning",
    "build_remote_parser",
    "categories_for_filter",
    "confidence_level",
    "is_valid_category",
    "merge_results",
    "needs_review",
    "parse_expense_text",
    "parse_local",
    "refine_category",
    "validate_parsed_expense",
]
