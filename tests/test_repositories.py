"""Tests for the entity repositories."""

from unittest.mock import MagicMock

import pytest

from aquaflow.models import AppSettings, Area, Customer, Transaction, TransactionPatch
from aquaflow.repositories import AppSettingsRepository, CustomerRepository, Repositories
from aquaflow.services.storage import InMemoryKeyValueStore, StorageError


class TestCollectionLoading:
    """Read failures degrade to empty collections."""

    def test_absent_collection_is_empty(self, repos):
        assert repos.customers.list() == []
        assert repos.areas.list() == []
        assert repos.transactions.list() == []

    def test_corrupt_json_is_empty(self, store, repos):
        store.put_raw("aquaflow_customers", "[{broken")
        assert repos.customers.list() == []

    def test_non_list_value_is_empty(self, store, repos):
        store.set("aquaflow_transactions", {"id": "t1"})
        assert repos.transactions.list() == []

    def test_malformed_record_is_skipped(self, store, repos):
        store.set("aquaflow_transactions", [
            {"id": "t1", "customerId": "c1", "date": "2025-01-05", "jarsDelivered": 2},
            {"id": "t2", "customerId": "c1", "date": "not a date"},
            {"id": "t3", "customerId": "c1", "date": "2025-01-06", "jarsDelivered": -4},
        ])
        assert [t.id for t in repos.transactions.list()] == ["t1"]

    def test_write_keeps_unparsed_records(self, store, repos):
        """Items that do not parse survive later writes unchanged."""
        bad_date = {"id": "t2", "customerId": "c1", "date": "not a date"}
        negative = {"id": "t3", "customerId": "c1", "date": "2025-01-06", "jarsDelivered": -4}
        store.set("aquaflow_transactions", [
            {"id": "t1", "customerId": "c1", "date": "2025-01-05", "jarsDelivered": 2},
            bad_date,
            negative,
        ])

        repos.transactions.upsert(
            TransactionPatch(customer_id="c2", date="2025-01-06", jars_delivered=1)
        )

        stored = store.get("aquaflow_transactions")
        assert stored[1] == bad_date
        assert stored[2] == negative
        assert [item["id"] for item in stored][0] == "t1"
        assert len(stored) == 4
        assert repos.transactions.unparsed_items() == [bad_date, negative]

    def test_legacy_customers_survive_upsert(self, store, repos):
        store.set("aquaflow_customers", [
            {"id": "legacy1", "name": "Old Shop", "area": "North", "startDate": ""},
            {"id": "legacy2", "name": "y" * 250, "area": "North"},
            {"id": "legacy3", "name": "Broken", "rateJar": "twenty"},
        ])

        repos.customers.upsert(Customer(id="2025010001", name="New", area="North"))

        stored_ids = [item["id"] for item in store.get("aquaflow_customers")]
        assert stored_ids == ["legacy1", "legacy2", "legacy3", "2025010001"]
        assert repos.customers.get("legacy1").start_date is None

    def test_unparsed_customer_ids_count_for_sequence(self, store, repos):
        store.set("aquaflow_customers", [
            {"id": "2025010004", "name": "Broken", "rateJar": "twenty"},
        ])
        assert repos.customers.generate_next_id("2025-01-15") == "2025010005"

    def test_unreadable_collection_is_not_overwritten(self, store, repos):
        store.put_raw("aquaflow_customers", "[{broken")

        repos.customers.upsert(Customer(id="c1", name="A", area="North"))

        with pytest.raises(StorageError, match="Corrupt value"):
            store.get("aquaflow_customers")

    def test_restore_replaces_unparsed_records(self, store, repos):
        store.set("aquaflow_areas", [{"id": 7, "name": ["bad"]}])
        assert repos.areas.replace_all([Area(id="a1", name="North")])
        assert store.get("aquaflow_areas") == [{"id": "a1", "name": "North"}]

    def test_backend_read_error_is_empty(self):
        store = MagicMock()
        store.get.side_effect = StorageError("boom")
        assert CustomerRepository(store).list() == []

    def test_keys_use_prefix(self, store):
        repos = Repositories(store, key_prefix="shop1_")
        repos.customers.upsert(Customer(id="c1", name="A", area="North"))
        assert store.keys() == ["shop1_customers"]


class TestWriteFailures:
    """Write failures are logged and swallowed."""

    def test_upsert_does_not_raise_on_write_failure(self):
        store = MagicMock()
        store.get.return_value = []
        store.set.side_effect = StorageError("quota exceeded")

        saved = CustomerRepository(store).upsert(Customer(id="c1", name="A", area="North"))

        assert saved.id == "c1"
        store.set.assert_called_once()

    def test_replace_all_reports_failure(self):
        store = MagicMock()
        store.set.side_effect = StorageError("quota exceeded")
        assert CustomerRepository(store).replace_all([]) is False


class TestCustomerRepository:
    """Tests for customer CRUD."""

    def test_upsert_inserts_with_given_id(self, repos):
        repos.customers.upsert(Customer(id="2025020001", name="A", area="North"))
        assert repos.customers.get("2025020001").name == "A"

    def test_upsert_replaces_by_id(self, repos):
        repos.customers.upsert(Customer(id="c1", name="A", area="North"))
        repos.customers.upsert(Customer(id="c1", name="B", area="South"))

        customers = repos.customers.list()
        assert len(customers) == 1
        assert customers[0].name == "B"
        assert customers[0].area == "South"

    def test_upsert_without_id_generates_one(self, repos):
        saved = repos.customers.upsert(Customer(name="A", area="North"))
        assert len(saved.id) == 9
        assert repos.customers.get(saved.id) is not None

    def test_bulk_insert_appends(self, repos):
        repos.customers.upsert(Customer(id="c0", name="Z", area="North"))
        repos.customers.bulk_insert([
            Customer(id="c1", name="A", area="North"),
            Customer(id="c2", name="B", area="North"),
        ])
        assert [c.id for c in repos.customers.list()] == ["c0", "c1", "c2"]

    def test_delete_keeps_transactions(self, repos, customer):
        repos.transactions.upsert(TransactionPatch(
            customer_id=customer.id, date="2025-01-05", jars_delivered=2,
        ))

        assert repos.customers.delete(customer.id) is True
        assert repos.customers.get(customer.id) is None
        assert len(repos.transactions.for_customer(customer.id)) == 1

    def test_delete_unknown_returns_false(self, repos):
        assert repos.customers.delete("missing") is False


class TestAreaRepository:
    """Tests for areas and the rename cascade."""

    def test_create_area_with_default_name(self, repos):
        area = repos.areas.upsert()
        assert area.name == "New Area"
        assert area.id

    def test_unknown_id_creates_new_area(self, repos):
        area = repos.areas.upsert("does-not-exist", "East")
        assert area.id != "does-not-exist"
        assert repos.areas.names() == ["East"]

    def test_list_sorted_by_name(self, repos):
        for name in ["south", "North", "east"]:
            repos.areas.upsert(name=name)
        assert repos.areas.names() == ["east", "North", "south"]

    def test_rename_cascades_to_customers(self, repos):
        north = repos.areas.upsert(name="North")
        repos.areas.upsert(name="South")
        repos.customers.bulk_insert([
            Customer(id="c1", name="A", area="North"),
            Customer(id="c2", name="B", area="North"),
            Customer(id="c3", name="C", area="South"),
        ])

        repos.areas.upsert(north.id, "North Extension")

        areas = {c.id: c.area for c in repos.customers.list()}
        assert areas == {"c1": "North Extension", "c2": "North Extension", "c3": "South"}
        assert repos.areas.get(north.id).name == "North Extension"

    def test_delete_leaves_customer_labels(self, repos):
        north = repos.areas.upsert(name="North")
        repos.customers.upsert(Customer(id="c1", name="A", area="North"))

        assert repos.areas.delete(north.id) is True
        assert repos.areas.list() == []
        assert repos.customers.get("c1").area == "North"


class TestTransactionRepository:
    """Upsert on (customer_id, date)."""

    def test_upsert_is_idempotent(self, repos):
        patch = TransactionPatch(
            customer_id="c1", date="2025-01-05", jars_delivered=5, payment_amount=50,
        )
        repos.transactions.upsert(patch)
        repos.transactions.upsert(patch)

        stored = repos.transactions.list()
        assert len(stored) == 1
        assert stored[0].jars_delivered == 5
        assert stored[0].payment_amount == 50

    def test_partial_patch_merges(self, repos):
        first = repos.transactions.upsert(TransactionPatch(
            customer_id="c1", date="2025-01-05", jars_delivered=5,
        ))
        merged = repos.transactions.upsert(TransactionPatch(
            customer_id="c1", date="2025-01-05", payment_amount=40,
        ))

        assert merged.id == first.id
        assert merged.jars_delivered == 5
        assert merged.payment_amount == 40

    def test_new_record_defaults_to_zero(self, repos):
        saved = repos.transactions.upsert(TransactionPatch(
            customer_id="c1", date="2025-01-05", payment_amount=40,
        ))
        assert saved.id
        assert saved.jars_delivered == 0
        assert saved.thermos_returned == 0

    def test_different_days_are_separate(self, repos):
        for day in ["2025-01-05", "2025-01-06"]:
            repos.transactions.upsert(TransactionPatch(customer_id="c1", date=day))
        assert len(repos.transactions.for_customer("c1")) == 2
        assert repos.transactions.find("c1", "2025-01-06").date == "2025-01-06"
        assert repos.transactions.find("c1", "2025-01-07") is None

    def test_stored_layout_is_camel_case(self, store, repos):
        repos.transactions.upsert(TransactionPatch(
            customer_id="c1", date="2025-01-05", jars_delivered=1,
        ))
        record = store.get("aquaflow_transactions")[0]
        assert record["customerId"] == "c1"
        assert record["jarsDelivered"] == 1
        assert Transaction.model_validate(record).jars_delivered == 1


class TestAppSettingsRepository:
    """Company settings record."""

    def test_defaults_when_absent(self, repos):
        assert repos.settings.load() == AppSettings()

    def test_defaults_when_corrupt(self, store, repos):
        store.set("aquaflow_settings", {"companyName": ["not", "a", "string"]})
        assert repos.settings.load() == AppSettings()

    def test_save_overwrites(self, repos):
        repos.settings.save(AppSettings(company_name="Ganga Water", company_mobile="99"))
        loaded = repos.settings.load()
        assert loaded.company_name == "Ganga Water"
        assert loaded.bill_footer_note == "Thank you for your business!"

    def test_save_failure_returns_false(self):
        store = MagicMock()
        store.set.side_effect = StorageError("read-only")
        assert AppSettingsRepository(store).save(AppSettings()) is False

    def test_separate_stores_do_not_share(self):
        first = Repositories(InMemoryKeyValueStore())
        second = Repositories(InMemoryKeyValueStore())
        first.areas.replace_all([Area(id="a", name="North")])
        assert second.areas.list() == []
