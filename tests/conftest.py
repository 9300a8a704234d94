"""Shared fixtures: an in-memory store and everything built on it."""

import pytest

from aquaflow.ledger import LedgerEngine
from aquaflow.models import Area, Customer, TransactionPatch
from aquaflow.repositories import Repositories
from aquaflow.services.storage import InMemoryKeyValueStore


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def repos(store):
    return Repositories(store)


@pytest.fixture
def ledger(repos):
    return LedgerEngine(repos)


@pytest.fixture
def customer(repos):
    """Customer with rate_jar=20, rate_thermos=10 in area North."""
    return repos.customers.upsert(Customer(
        id="2025010001",
        name="Ramesh Kumar",
        area="North",
        mobile="9876543210",
        rate_jar=20,
        rate_thermos=10,
    ))


@pytest.fixture
def populated(repos, customer):
    """Two areas, three customers and a few days of deliveries."""
    repos.areas.replace_all([
        Area(id="area-north", name="North"),
        Area(id="area-south", name="South"),
    ])
    second = repos.customers.upsert(Customer(
        id="2025010002",
        name="anita sharma",
        area="North",
        mobile="9123456780",
        rate_jar=25,
        rate_thermos=15,
    ))
    third = repos.customers.upsert(Customer(
        id="2025010003",
        name="Bharat Stores",
        area="South",
        mobile="9000000001",
        rate_jar=30,
        rate_thermos=0,
    ))
    for patch in [
        TransactionPatch(customer_id=customer.id, date="2025-01-05",
                         jars_delivered=5, payment_amount=50),
        TransactionPatch(customer_id=customer.id, date="2025-01-06",
                         jars_delivered=3, jars_returned=2),
        TransactionPatch(customer_id=second.id, date="2025-01-06",
                         jars_delivered=2, thermos_delivered=1, payment_amount=65),
        TransactionPatch(customer_id=third.id, date="2025-02-01",
                         jars_delivered=10, payment_amount=100),
    ]:
        repos.transactions.upsert(patch)
    return {"first": customer, "second": second, "third": third}
