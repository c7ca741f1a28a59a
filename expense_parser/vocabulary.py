"""Word lists used by the type classifier, amount extractor and description cleaner."""

from __future__ import annotations

INCOME_KEYWORDS: tuple[str, ...] = (
    "salary", "wage", "income", "earned", "received", "got paid", "paycheck",
    "bonus", "refund", "cashback", "sold", "commission", "freelance",
    "dividend", "interest", "tip", "allowance", "rebate", "settlement", "deposit",
)

EXPENSE_KEYWORDS: tuple[str, ...] = (
    "bought", "purchased", "purchase", "paid", "spent", "cost", "bill", "fee", "charge",
    "subscription", "membership", "rent", "mortgage", "loan", "debt", "tax",
    "fine", "penalty", "donation", "repair", "expense",
)

# Verbs carry more weight than nouns
INCOME_VERBS: tuple[str, ...] = ("earned", "received", "got paid", "made", "won")
EXPENSE_VERBS: tuple[str, ...] = ("spent", "paid", "bought", "purchased", "owe")

NOISE_WORDS: frozenset[str] = frozenset({
    "spent", "paid", "bought", "purchased", "for", "on", "at", "in", "to",
    "from", "with", "and", "the", "a", "an", "is", "was", "were", "be",
    "today", "yesterday", "just", "now", "then",
})

CURRENCY_SYMBOLS = "$€£¥₹₩"

CURRENCY_WORDS: tuple[str, ...] = (
    "dollars", "dollar", "bucks", "buck", "euros", "euro", "pounds", "pound", "sgd", "usd",
)

APPROXIMATE_WORDS: tuple[str, ...] = ("around", "about", "approximately", "roughly")

WRITTEN_NUMBERS: dict[str, int] = {
    "zero": 0, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14, "fifteen": 15,
    "sixteen": 16, "seventeen": 17, "eighteen": 18, "nineteen": 19,
    "twenty": 20, "thirty": 30, "forty": 40, "fifty": 50,
    "sixty": 60, "seventy": 70, "eighty": 80, "ninety": 90,
}

TENS_WORDS: tuple[str, ...] = (
    "twenty", "thirty", "forty", "fifty", "sixty", "seventy", "eighty", "ninety",
)
