"""
Abstract Key-Value Storage Interface

Everything AquaFlow persists is a JSON document stored under a string
key: one array per entity collection plus one object for the company
settings. Backends only need to get, set and list keys.

This allows us to:
1. Keep a local JSON-file store for a single shop computer
2. Use in-memory storage for testing
3. Keep the data in Google Sheets so the owner can look at it directly

Backends raise ``StorageError`` subclasses. Repositories decide what a
failure means (see ``aquaflow.repositories.base``).
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class KeyValueStore(ABC):
    """
    Abstract interface for a JSON key-value store.

    Values are anything ``json.dumps`` accepts. ``get`` returns None for
    a missing key rather than raising.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Read the JSON value stored under ``key``.

        Returns:
            The decoded value, or None if the key is absent

        Raises:
            StorageError: If the backend fails or the value is not valid JSON
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Store ``value`` under ``key``, replacing any previous value.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List every key currently stored."""
        pass

    def contains(self, key: str) -> bool:
        return key in self.keys()


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
