"""
Entity Repositories

Typed CRUD over the four collections kept in the key-value store:
customers, areas, transactions and the company settings.
"""

from aquaflow.repositories.app_settings import AppSettingsRepository
from aquaflow.repositories.areas import AreaRepository
from aquaflow.repositories.base import CollectionRepository, generate_id
from aquaflow.repositories.customers import (
    CustomerRepository,
    next_customer_id,
    parse_reference_date,
)
from aquaflow.repositories.registry import Repositories
from aquaflow.repositories.transactions import TransactionRepository

__all__ = [
    "AppSettingsRepository",
    "AreaRepository",
    "CollectionRepository",
    "CustomerRepository",
    "Repositories",
    "TransactionRepository",
    "generate_id",
    "next_customer_id",
    "parse_reference_date",
]
