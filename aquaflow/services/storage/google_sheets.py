"""
Google Sheets Key-Value Store

Google Sheets can be used as the storage backend because:
1. The owner can look at the raw data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- A cell holds at most 50,000 characters, so large JSON values are split
  over several rows (one row per chunk: key, part number, text)
- No transactions: a value is replaced by deleting its rows and
  appending the new ones
- Every read fetches the whole worksheet
"""

import json
from typing import Any, Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from aquaflow.config import GoogleSheetsSettings, get_settings
from aquaflow.services.storage.interface import (
    KeyValueStore,
    StorageConnectionError,
    StorageError,
)


KV_COLUMNS = ["key", "part", "value"]

# Stay well below the 50,000 character cell limit
CHUNK_SIZE = 45_000


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and retries establishing the connection.
    Reads and writes are not retried.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_store_sheet(self) -> gspread.Worksheet:
        """Get or create the key/value worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.worksheet_name)
        except gspread.WorksheetNotFound:
            sheet = spreadsheet.add_worksheet(
                title=self._settings.worksheet_name,
                rows=100,
                cols=len(KV_COLUMNS),
            )
            sheet.append_row(KV_COLUMNS)
        return sheet


def split_chunks(text: str, size: Optional[int] = None) -> list[str]:
    """Split serialized JSON into cell-sized parts (at least one part)."""
    size = size or CHUNK_SIZE
    if not text:
        return [""]
    return [text[i:i + size] for i in range(0, len(text), size)]


class GoogleSheetsKeyValueStore(KeyValueStore):
    """
    Google Sheets implementation of the key-value store.

    Each value is serialized to JSON and stored as one or more rows of
    ``key | part | value``; parts are joined in order on read.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _rows(self) -> list[list[str]]:
        sheet = self._client.get_store_sheet()
        return sheet.get_all_values()[1:]  # Skip header

    def get(self, key: str) -> Optional[Any]:
        try:
            rows = self._rows()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read {key}: {e}")

        parts = []
        for position, row in enumerate(rows):
            if row and row[0] == key:
                try:
                    part = int(row[1])
                except (IndexError, ValueError):
                    raise StorageError(f"Malformed row for {key}: {row[:2]}")
                parts.append((position, part, row[2] if len(row) > 2 else ""))

        if not parts:
            return None

        # Rows left over from an interrupted rewrite sit above the newest
        # value, which starts at the last part 0.
        numbers = [part for _, part, _ in parts]
        starts = [position for position, part, _ in parts if part == 0]
        if len(set(numbers)) != len(numbers) and starts:
            parts = [p for p in parts if p[0] >= starts[-1]]

        parts.sort(key=lambda p: p[1])
        try:
            return json.loads("".join(text for _, _, text in parts))
        except json.JSONDecodeError as e:
            raise StorageError(f"Corrupt value under {key}: {e}")

    def set(self, key: str, value: Any) -> None:
        """
        Replace the rows for ``key``.

        The new rows are appended before the old ones are deleted, so a
        failed append leaves the previous value readable.
        """
        try:
            text = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise StorageError(f"Value for {key} is not JSON serializable: {e}")

        try:
            sheet = self._client.get_store_sheet()
            all_rows = sheet.get_all_values()
            existing = [
                idx
                for idx, row in enumerate(all_rows[1:], start=2)  # Row 1 is header
                if row and row[0] == key
            ]

            new_rows = [
                [key, str(part), chunk]
                for part, chunk in enumerate(split_chunks(text))
            ]
            sheet.append_rows(new_rows, value_input_option="RAW")

            # Appended rows land below, so old indices stay valid bottom-up
            for idx in reversed(existing):
                sheet.delete_rows(idx)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write {key}: {e}")

    def keys(self) -> list[str]:
        try:
            rows = self._rows()
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list keys: {e}")

        seen: list[str] = []
        for row in rows:
            if row and row[0] and row[0] not in seen:
                seen.append(row[0])
        return seen
