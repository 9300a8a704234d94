"""
Collection Repository Base

Each entity type lives under its own key as a JSON array. A repository
reads the whole array, changes it in memory and writes the whole array
back. There is one writer at a time, so no locking is done.

FAILURE SEMANTICS:
- Absent key, backend error or a value that is not a list: empty collection
- A single malformed record: hidden from reads with a warning, but kept
  in storage verbatim. Every write splices it back at its old position.
- Write failure: logged and swallowed, the caller gets no exception
"""

import secrets
import string
from typing import Any, Generic, Optional, TypeVar

from pydantic import ValidationError

from aquaflow.logger import get_logger
from aquaflow.models.ledger import LedgerModel
from aquaflow.services.storage import KeyValueStore, StorageError


RecordT = TypeVar("RecordT", bound=LedgerModel)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_id(length: int = 9) -> str:
    """Random lowercase alphanumeric id for areas, transactions and legacy customers."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


class CollectionRepository(Generic[RecordT]):
    """Typed access to one JSON-array collection in the key-value store."""

    model: type[RecordT]
    collection: str

    def __init__(self, store: KeyValueStore, key_prefix: str = "aquaflow_"):
        self._store = store
        self._key = f"{key_prefix}{self.collection}"
        self._log = get_logger(type(self).__module__).bind(key=self._key)

    @property
    def key(self) -> str:
        return self._key

    def _read_raw(self) -> Optional[list]:
        """
        Stored array as-is.

        Returns:
            The list, or None if the key is absent or does not hold a list

        Raises:
            StorageError: backend failure
        """
        raw = self._store.get(self._key)
        if raw is None:
            return None
        if not isinstance(raw, list):
            self._log.error(
                "collection_corrupt",
                error=f"expected a JSON array, got {type(raw).__name__}",
            )
            return None
        return raw

    def _parse(self, raw: list) -> tuple[list[RecordT], list[tuple[int, Any]]]:
        """Split stored items into parsed records and (position, item) leftovers."""
        records = []
        unparsed = []
        for position, item in enumerate(raw):
            try:
                records.append(self.model.model_validate(item))
            except ValidationError as e:
                unparsed.append((position, item))
                self._log.debug("record_unparsed", position=position, error=str(e))
        return records, unparsed

    def _load(self) -> list[RecordT]:
        """Read and parse the collection, never raising."""
        try:
            raw = self._read_raw()
        except StorageError as e:
            self._log.error("collection_load_failed", error=str(e))
            return []

        if raw is None:
            return []

        records, unparsed = self._parse(raw)
        if unparsed:
            self._log.warning(
                "records_skipped",
                positions=[position for position, _ in unparsed],
            )
        return records

    def unparsed_items(self) -> list[Any]:
        """Stored items that fail validation, exactly as stored."""
        try:
            raw = self._read_raw()
        except StorageError as e:
            self._log.error("collection_load_failed", error=str(e))
            return []
        if raw is None:
            return []
        return [item for _, item in self._parse(raw)[1]]

    def _save(self, records: list[RecordT], keep_unparsed: bool = True) -> bool:
        """
        Write the whole collection. Failures are logged, not raised.

        With ``keep_unparsed`` the stored items that do not parse are
        re-read and written back unchanged. If they cannot be re-read,
        nothing is written.
        """
        payload = [record.to_record() for record in records]
        try:
            if keep_unparsed:
                raw = self._read_raw()
                if raw is not None:
                    for position, item in self._parse(raw)[1]:
                        payload.insert(min(position, len(payload)), item)
            self._store.set(self._key, payload)
            return True
        except StorageError as e:
            self._log.error("collection_write_failed", error=str(e), count=len(records))
            return False

    def export_records(self) -> list[RecordT]:
        """Records in storage order, for backup export."""
        return self._load()

    def replace_all(self, records: list[RecordT]) -> bool:
        """Overwrite the collection wholesale (backup restore)."""
        return self._save(list(records), keep_unparsed=False)

    def _find_index(self, records: list[RecordT], record_id: str) -> Optional[int]:
        for index, record in enumerate(records):
            if getattr(record, "id", None) == record_id:
                return index
        return None

    # Defined last: inside the class body the name shadows the builtin.
    def list(self) -> "list[RecordT]":
        """All records in storage order."""
        return self._load()
