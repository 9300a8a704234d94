"""
Backup Export / Import

Export bundles every collection into one JSON document:

    {"customers": [...], "areas": [...], "transactions": [...], "settings": {...}}

Import is a full, destructive overwrite of all four collections. The
whole payload is parsed and validated first; only then are the
collections written one after another. A payload that fails to parse
writes nothing.
"""

import json
from typing import Any, Union

from pydantic import BaseModel, Field, ValidationError

from aquaflow.logger import get_logger
from aquaflow.models import AppSettings, Area, Customer, ImportResult, Transaction
from aquaflow.repositories import Repositories


log = get_logger(__name__)


class BackupDocument(BaseModel):
    """Shape of an export file."""

    customers: list[Customer] = Field(default_factory=list)
    areas: list[Area] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)
    settings: AppSettings = Field(default_factory=AppSettings)

    def to_payload(self) -> dict[str, Any]:
        return {
            "customers": [c.to_record() for c in self.customers],
            "areas": [a.to_record() for a in self.areas],
            "transactions": [t.to_record() for t in self.transactions],
            "settings": self.settings.to_record(),
        }


class BackupService:
    """Whole-database export and restore."""

    def __init__(self, repos: Repositories):
        self._repos = repos

    def export_document(self) -> BackupDocument:
        for repo in (self._repos.customers, self._repos.areas, self._repos.transactions):
            unparsed = repo.unparsed_items()
            if unparsed:
                log.warning("backup_export_omits_records", key=repo.key, count=len(unparsed))
        return BackupDocument(
            customers=self._repos.customers.export_records(),
            areas=self._repos.areas.export_records(),
            transactions=self._repos.transactions.export_records(),
            settings=self._repos.settings.load(),
        )

    def export_data(self) -> dict[str, Any]:
        """All collections as one JSON-ready mapping."""
        return self.export_document().to_payload()

    def export_json(self, indent: int = 2) -> str:
        return json.dumps(self.export_data(), ensure_ascii=False, indent=indent)

    def import_data(self, payload: Union[str, bytes, dict[str, Any]]) -> ImportResult:
        """
        Replace every collection with the contents of ``payload``.

        Args:
            payload: JSON text or an already-decoded mapping

        Returns:
            ImportResult; on failure nothing has been written
        """
        try:
            data = json.loads(payload) if isinstance(payload, (str, bytes)) else payload
        except json.JSONDecodeError as e:
            log.warning("backup_import_rejected", reason="invalid_json", error=str(e))
            return ImportResult(success=False, message=f"Invalid backup file: {e}")

        if not isinstance(data, dict):
            log.warning("backup_import_rejected", reason="not_an_object")
            return ImportResult(
                success=False,
                message="Invalid backup file: expected a JSON object",
            )

        missing = [k for k in ("customers", "areas", "transactions", "settings") if k not in data]
        if missing:
            log.warning("backup_import_rejected", reason="missing_sections", missing=missing)
            return ImportResult(
                success=False,
                message=f"Invalid backup file: missing {', '.join(missing)}",
            )

        try:
            document = BackupDocument.model_validate(data)
        except ValidationError as e:
            log.warning("backup_import_rejected", reason="invalid_records", error=str(e))
            return ImportResult(success=False, message=f"Invalid backup file: {e}")

        written = [
            self._repos.customers.replace_all(document.customers),
            self._repos.areas.replace_all(document.areas),
            self._repos.transactions.replace_all(document.transactions),
            self._repos.settings.save(document.settings),
        ]
        if not all(written):
            log.error("backup_import_incomplete", written=written)
            return ImportResult(
                success=False,
                message="Restore did not complete: some collections could not be written",
            )

        log.info(
            "backup_imported",
            customers=len(document.customers),
            areas=len(document.areas),
            transactions=len(document.transactions),
        )
        return ImportResult(success=True, message="Data restored successfully")
