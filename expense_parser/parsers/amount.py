"""
Amount extraction from free-form expense text.

Pattern families, highest priority first:
1. Currency symbol   - "$50", "€25.50"
2. Currency word     - "50 dollars", "20 sgd", "5 bucks"
3. Multiplier        - "5k", "2.5m"
4. Written number    - "twenty dollars", "twenty five bucks"
5. Approximate       - "around 20", "about 15"
6. Bare number       - "lunch 12.50"

The first family that yields a usable value wins; within a family the largest
value wins, since a total usually exceeds line items mentioned alongside it.
Values of a million or more are dropped as phone numbers, account numbers and
the like.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..vocabulary import (
    APPROXIMATE_WORDS,
    CURRENCY_SYMBOLS,
    CURRENCY_WORDS,
    TENS_WORDS,
    WRITTEN_NUMBERS,
)

logger = logging.getLogger(__name__)

MAX_PLAUSIBLE_AMOUNT = 1_000_000


@dataclass(frozen=True)
class AmountMatch:
    """Result of extracting an amount."""

    amount: float  # 0.0 when nothing usable was found
    confidence: float  # 0.0 to 1.0
    matched_text: tuple[str, ...] = field(default_factory=tuple)  # substrings consumed
    reason: Optional[str] = None


# ---------------------------------------------------------------------------
# Pattern matchers (compiled once)
# ---------------------------------------------------------------------------

# A number must be the whole numeric token: "12.345" yields neither 12 nor 345
_START = r"(?<![\w.,])"
_END = r"(?![\d.,]*\w)"

_NUMBER = rf"{_START}(\d[\d,]*(?:\.\d{{1,2}})?)"
_SYMBOL_NUMBER = r"(\d[\d,]*(?:\.\d{1,2})?|\.\d{1,2})"  # "$.50" is half a dollar
_SYMBOLS = re.escape(CURRENCY_SYMBOLS)
_WORDS = "|".join(sorted(CURRENCY_WORDS, key=len, reverse=True))
_UNITS = "|".join(sorted(WRITTEN_NUMBERS, key=len, reverse=True))
_TENS = "|".join(TENS_WORDS)

_CURRENCY_PATTERN = re.compile(rf"[{_SYMBOLS}]\s*{_SYMBOL_NUMBER}{_END}")
_CURRENCY_WORD_PATTERN = re.compile(rf"{_NUMBER}\s*(?:{_WORDS})\b")
_MULTIPLIER_PATTERN = re.compile(rf"{_START}(\d[\d,]*(?:\.\d+)?)\s*([km])\b")
_WRITTEN_PATTERN = re.compile(rf"\b(?:({_TENS})[\s-]+)?({_UNITS})\s*(?:{_WORDS})\b")
_APPROXIMATE_PATTERN = re.compile(
    rf"\b(?:{'|'.join(APPROXIMATE_WORDS)})\s*[{_SYMBOLS}]?\s*{_SYMBOL_NUMBER}{_END}"
)
_STANDALONE_PATTERN = re.compile(rf"{_NUMBER}{_END}")


def _to_number(raw: str) -> Optional[float]:
    try:
        value = float(raw.replace(",", ""))
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _plain(match: re.Match[str]) -> Optional[float]:
    return _to_number(match.group(1))


def _multiplied(match: re.Match[str]) -> Optional[float]:
    base = _to_number(match.group(1))
    if base is None:
        return None
    return base * (1_000 if match.group(2) == "k" else 1_000_000)


def _written(match: re.Match[str]) -> Optional[float]:
    tens, unit = match.group(1), match.group(2)
    value = WRITTEN_NUMBERS[unit]
    if tens:
        value += WRITTEN_NUMBERS[tens]
    return float(value)


_FAMILIES: tuple[tuple[str, re.Pattern[str], Callable[[re.Match[str]], Optional[float]], float], ...] = (
    ("currency symbol", _CURRENCY_PATTERN, _plain, 0.95),
    ("currency word", _CURRENCY_WORD_PATTERN, _plain, 0.90),
    ("multiplier", _MULTIPLIER_PATTERN, _multiplied, 0.85),
    ("written number", _WRITTEN_PATTERN, _written, 0.80),
    ("approximate", _APPROXIMATE_PATTERN, _plain, 0.75),
    ("bare number", _STANDALONE_PATTERN, _plain, 0.60),
)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_amount(text: str) -> AmountMatch:
    """
    Find the most plausible monetary amount in ``text``.

    Args:
        text: Lowercased, trimmed input.

    Returns:
        AmountMatch with the amount, its confidence, and every substring the
        winning pattern family matched (so the description cleaner can drop
        them).  Nothing found gives amount 0 and confidence 0.
    """
    for label, pattern, convert, confidence in _FAMILIES:
        best: Optional[float] = None
        matched: list[str] = []

        for match in pattern.finditer(text):
            value = convert(match)
            if value is None or value <= 0 or value >= MAX_PLAUSIBLE_AMOUNT:
                continue
            matched.append(match.group(0))
            if best is None or value > best:
                best = value

        if best is not None:
            logger.debug("[AMOUNT] %s matched %s -> %.2f", label, matched, best)
            return AmountMatch(
                amount=best,
                confidence=confidence,
                matched_text=tuple(matched),
                reason=f"Amount from {label}",
            )

    return AmountMatch(amount=0.0, confidence=0.0, reason=None)
