"""Latin to Devanagari transliteration for customer forms."""

from aquaflow.services.transliteration.client import (
    TransliterationClient,
    extract_suggestion,
)
from aquaflow.services.transliteration.debouncer import (
    TRANSLITERATED_FIELDS,
    FormTransliterator,
    TrailingDebouncer,
)

__all__ = [
    "TRANSLITERATED_FIELDS",
    "FormTransliterator",
    "TrailingDebouncer",
    "TransliterationClient",
    "extract_suggestion",
]
