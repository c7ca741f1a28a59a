"""Best-effort merchant name extraction."""

from __future__ import annotations

import re
from typing import Optional

from ..categories import display_name
from ..config import DEFAULT_CONFIG, ParserConfig
from .category import find_merchant

# Capitalised word: uppercase first letter then lowercase, longer than two chars
_PROPER_NOUN = re.compile(r"^[A-Z][a-z]+")


def extract_merchant(
    text: str,
    config: ParserConfig = DEFAULT_CONFIG,
) -> Optional[str]:
    """Identify a business name in ``text``.

    Known merchants are looked up on the lowercased text; failing that, the
    first capitalised word of the original text is taken.  Returns None when
    neither fires - merchant is optional.
    """
    key = find_merchant(text.lower(), config)
    if key is not None:
        return display_name(key, config.merchant_display_names)

    for word in text.split():
        token = word.strip(".,;:!?()\"'")
        if len(token) > 2 and _PROPER_NOUN.match(token):
            return token
    return None
