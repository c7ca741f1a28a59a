"""Value types returned by the parser."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Literal, Optional

from .parsing.confidence import AI_FALLBACK_THRESHOLD, clamp, overall_confidence

TransactionType = Literal["expense", "income"]
ParsingMethod = Literal["local", "ai_enhanced", "manual_fallback"]

TRANSACTION_TYPES: tuple[str, ...] = ("expense", "income")


@dataclass(frozen=True)
class ConfidenceScores:
    """Per-field certainty plus the weighted composite (all in [0, 1])."""

    amount: float
    description: float
    category: float
    type: float
    overall: float

    @classmethod
    def from_fields(
        cls,
        amount: float,
        description: float,
        category: float,
        type: float,
    ) -> "ConfidenceScores":
        a, d, c, t = clamp(amount), clamp(description), clamp(category), clamp(type)
        return cls(
            amount=a,
            description=d,
            category=c,
            type=t,
            overall=overall_confidence(a, d, c, t),
        )

    @classmethod
    def zero(cls) -> "ConfidenceScores":
        return cls(0.0, 0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class ParsedExpense:
    """One structured expense/income extracted from free text."""

    amount: float
    description: str
    category: str
    type: TransactionType
    confidence: ConfidenceScores
    merchant: Optional[str] = None
    reasoning: Optional[str] = None
    parsing_method: ParsingMethod = "local"

    def with_method(self, method: ParsingMethod) -> "ParsedExpense":
        return replace(self, parsing_method=method)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ParsingOptions:
    """Per-call switches for :func:`parse_expense_text`.

    ``confidence_threshold`` is the overall score below which the remote
    stage is consulted.  ``timeout`` overrides the remote backend's own
    timeout (seconds).
    """

    use_ai_fallback: bool = True
    confidence_threshold: float = AI_FALLBACK_THRESHOLD
    timeout: Optional[float] = None
