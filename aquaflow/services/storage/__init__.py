"""
Storage Services Package

Provides the abstract key-value interface and its implementations:
in-memory, JSON files on disk, and Google Sheets.
"""

from aquaflow.services.storage.interface import (
    KeyValueStore,
    StorageConnectionError,
    StorageError,
)
from aquaflow.services.storage.local import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)
from aquaflow.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsKeyValueStore,
)

__all__ = [
    # Interface
    "KeyValueStore",
    # Exceptions
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "GoogleSheetsClient",
    "GoogleSheetsKeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
]
