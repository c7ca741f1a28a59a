from .amount import MAX_PLAUSIBLE_AMOUNT, AmountMatch, extract_amount
from .category import CategoryMatch, find_merchant, suggest_category
from .description import PLACEHOLDER_DESCRIPTION, DescriptionResult, clean_description
from .merchant import extract_merchant
from .transaction_type import TypeClassification, classify_transaction_type
