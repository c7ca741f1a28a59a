"""Description cleaning: strip the amount and filler words, keep the rest."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from ..config import DEFAULT_CONFIG, ParserConfig
from ..vocabulary import CURRENCY_WORDS

PLACEHOLDER_DESCRIPTION = "Transaction"

_EMPTY_CONFIDENCE = 0.1
_MAX_CONFIDENCE = 0.9

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_CURRENCY_WORD_SET = frozenset(CURRENCY_WORDS)


@dataclass(frozen=True)
class DescriptionResult:
    description: str
    confidence: float


def clean_description(
    text: str,
    matched_amounts: Iterable[str] = (),
    config: ParserConfig = DEFAULT_CONFIG,
) -> DescriptionResult:
    """Produce a short label from ``text`` once amounts and noise are removed.

    Confidence grows with the length of what survives; an empty result falls
    back to the ``"Transaction"`` placeholder at low confidence.
    """
    remaining = text
    for fragment in matched_amounts:
        remaining = remaining.replace(fragment, " ", 1)

    kept = []
    for word in remaining.split():
        core = _NON_ALNUM.sub("", word.lower())
        if not core or core in config.noise_words or core in _CURRENCY_WORD_SET:
            continue
        kept.append(word)

    description = " ".join(kept).strip()
    if not description:
        return DescriptionResult(PLACEHOLDER_DESCRIPTION, _EMPTY_CONFIDENCE)

    description = description[0].upper() + description[1:]
    confidence = min(_MAX_CONFIDENCE, 0.4 + len(description) / 30)
    return DescriptionResult(description, confidence)
