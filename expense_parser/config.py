"""Parser configuration.

Two kinds of configuration live here:

``ParserConfig``
    The immutable keyword / merchant tables the heuristics read.  Built once
    (``DEFAULT_CONFIG``) and shared by reference; a caller with its own
    category list or vocabulary builds another instance and passes it in.

``RemoteSettings``
    Connection details for the optional remote augmentation stage, read from
    the environment:

        EXPENSE_PARSER_ENDPOINT       – any HTTP endpoint speaking {text, categories}
        EXPENSE_PARSER_API_KEY        – bearer token for that endpoint (optional)
        SUPABASE_URL                  – project URL hosting the parse-expense function
        SUPABASE_ANON_KEY             – key used to invoke the function
        ANTHROPIC_API_KEY             – call Claude directly instead
        EXPENSE_PARSER_CLAUDE_MODEL   – model override for the Claude backend
        EXPENSE_PARSER_AI_TIMEOUT     – seconds before a remote call is abandoned

If none of the credentials are present the parser silently stays local.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from .categories import (
    CATEGORY_KEYWORDS,
    EXPENSE_CATEGORIES,
    MERCHANT_CATEGORIES,
    MERCHANT_DISPLAY_NAMES,
    OTHER_CATEGORY,
)
from .vocabulary import (
    EXPENSE_KEYWORDS,
    EXPENSE_VERBS,
    INCOME_KEYWORDS,
    INCOME_VERBS,
    NOISE_WORDS,
)

logger = logging.getLogger(__name__)

DEFAULT_AI_TIMEOUT = 8.0
DEFAULT_CLAUDE_MODEL = "claude-haiku-4-5-20251001"


@dataclass(frozen=True)
class ParserConfig:
    """Read-only tables consumed by the local heuristics."""

    categories: tuple[str, ...] = EXPENSE_CATEGORIES
    category_keywords: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: CATEGORY_KEYWORDS,
    )
    merchants: Mapping[str, str] = field(default_factory=lambda: MERCHANT_CATEGORIES)
    merchant_display_names: Mapping[str, str] = field(
        default_factory=lambda: MERCHANT_DISPLAY_NAMES,
    )
    income_keywords: tuple[str, ...] = INCOME_KEYWORDS
    expense_keywords: tuple[str, ...] = EXPENSE_KEYWORDS
    income_verbs: tuple[str, ...] = INCOME_VERBS
    expense_verbs: tuple[str, ...] = EXPENSE_VERBS
    noise_words: frozenset[str] = NOISE_WORDS

    def __post_init__(self) -> None:
        # "Other" is always part of the closed set
        cats = tuple(self.categories)
        if OTHER_CATEGORY not in cats:
            cats = cats + (OTHER_CATEGORY,)
        object.__setattr__(self, "categories", cats)
        object.__setattr__(
            self, "category_keywords",
            MappingProxyType({k: tuple(v) for k, v in self.category_keywords.items()}),
        )
        object.__setattr__(self, "merchants", MappingProxyType(dict(self.merchants)))
        object.__setattr__(
            self, "merchant_display_names", MappingProxyType(dict(self.merchant_display_names)),
        )
        object.__setattr__(self, "noise_words", frozenset(self.noise_words))

    def resolve_category(self, category: Optional[str]) -> str:
        """Return ``category`` if it is in the closed set, otherwise "Other"."""
        if category and category in self.categories:
            return category
        return OTHER_CATEGORY


DEFAULT_CONFIG = ParserConfig()


@dataclass(frozen=True)
class RemoteSettings:
    """Credentials and limits for the remote augmentation backends."""

    endpoint_url: Optional[str] = None
    endpoint_api_key: Optional[str] = None
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    claude_model: str = DEFAULT_CLAUDE_MODEL
    timeout: float = DEFAULT_AI_TIMEOUT

    @classmethod
    def from_env(cls) -> "RemoteSettings":
        return cls(
            endpoint_url=os.environ.get("EXPENSE_PARSER_ENDPOINT") or None,
            endpoint_api_key=os.environ.get("EXPENSE_PARSER_API_KEY") or None,
            supabase_url=os.environ.get("SUPABASE_URL") or None,
            supabase_key=os.environ.get("SUPABASE_ANON_KEY") or None,
            anthropic_api_key=os.environ.get("ANTHROPIC_API_KEY") or None,
            claude_model=os.environ.get("EXPENSE_PARSER_CLAUDE_MODEL") or DEFAULT_CLAUDE_MODEL,
            timeout=_env_float("EXPENSE_PARSER_AI_TIMEOUT", DEFAULT_AI_TIMEOUT),
        )

    @property
    def any_configured(self) -> bool:
        return bool(
            self.endpoint_url
            or (self.supabase_url and self.supabase_key)
            or self.anthropic_api_key
        )


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("[CONFIG] %s=%r is not a number; using %.1f", name, raw, default)
        return default
    if value <= 0:
        logger.warning("[CONFIG] %s must be positive; using %.1f", name, default)
        return default
    return value
