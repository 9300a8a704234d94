"""
Services package.

Backup export/import lives in ``aquaflow.services.backup``; it is not
re-exported here because it depends on the repositories, which in turn
depend on the storage services.
"""

from aquaflow.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    StorageConnectionError,
    StorageError,
)
from aquaflow.services.transliteration import (
    FormTransliterator,
    TrailingDebouncer,
    TransliterationClient,
)

__all__ = [
    # Storage services
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "StorageConnectionError",
    "StorageError",
    # Transliteration
    "FormTransliterator",
    "TrailingDebouncer",
    "TransliterationClient",
]
