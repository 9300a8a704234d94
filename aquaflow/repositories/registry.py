"""All repositories over one key-value store."""

from aquaflow.repositories.app_settings import AppSettingsRepository
from aquaflow.repositories.areas import AreaRepository
from aquaflow.repositories.customers import CustomerRepository
from aquaflow.repositories.transactions import TransactionRepository
from aquaflow.services.storage import KeyValueStore


class Repositories:
    """The four repositories sharing one store and key prefix."""

    def __init__(self, store: KeyValueStore, key_prefix: str = "aquaflow_"):
        self.store = store
        self.key_prefix = key_prefix
        self.customers = CustomerRepository(store, key_prefix=key_prefix)
        self.areas = AreaRepository(store, self.customers, key_prefix=key_prefix)
        self.transactions = TransactionRepository(store, key_prefix=key_prefix)
        self.settings = AppSettingsRepository(store, key_prefix=key_prefix)
