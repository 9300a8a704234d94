"""Company settings repository (a single JSON object, not an array)."""

from pydantic import ValidationError

from aquaflow.logger import get_logger
from aquaflow.models import AppSettings
from aquaflow.services.storage import KeyValueStore, StorageError


log = get_logger(__name__)


class AppSettingsRepository:
    """Load and overwrite the company settings record."""

    collection = "settings"

    def __init__(self, store: KeyValueStore, key_prefix: str = "aquaflow_"):
        self._store = store
        self._key = f"{key_prefix}{self.collection}"

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> AppSettings:
        """Stored settings, or the defaults if absent or unreadable."""
        try:
            raw = self._store.get(self._key)
        except StorageError as e:
            log.error("settings_load_failed", key=self._key, error=str(e))
            return AppSettings()

        if raw is None:
            return AppSettings()
        try:
            return AppSettings.model_validate(raw)
        except ValidationError as e:
            log.error("settings_corrupt", key=self._key, error=str(e))
            return AppSettings()

    def save(self, settings: AppSettings) -> bool:
        """Overwrite the stored record wholesale. Failures are logged, not raised."""
        try:
            self._store.set(self._key, settings.to_record())
            return True
        except StorageError as e:
            log.error("settings_write_failed", key=self._key, error=str(e))
            return False
