"""Tests for the supply-sheet draft projection."""

import pytest
from pydantic import ValidationError

from aquaflow.ledger import SupplySheet, fold_stats, project_stats, zero_entry
from aquaflow.models import Customer, CustomerStats, Transaction


DAY = "2025-03-10"

RAMESH = Customer(id="c1", name="Ramesh", area="North", rate_jar=20, rate_thermos=10)
ANITA = Customer(id="c2", name="Anita", area="North", rate_jar=25, rate_thermos=15)
BHARAT = Customer(id="c3", name="Bharat", area="South", rate_jar=30, rate_thermos=5)

HISTORY = [
    Transaction(id="t1", customer_id="c1", date="2025-03-08", jars_delivered=4, payment_amount=30),
    Transaction(id="t2", customer_id="c1", date="2025-03-09", jars_delivered=2, jars_returned=3),
    Transaction(id="t3", customer_id="c1", date=DAY, jars_delivered=3, thermos_delivered=1,
                payment_amount=20),
    Transaction(id="t4", customer_id="c2", date="2025-03-01", jars_delivered=1, payment_amount=25),
]


def open_sheet(customers=(RAMESH, ANITA, BHARAT), history=HISTORY):
    by_id = {c.id: c for c in customers}
    baseline = {
        c.id: fold_stats(c, [t for t in history if t.customer_id == c.id])
        for c in customers
    }
    day_transactions = [t for t in history if t.date == DAY and t.customer_id in by_id]
    return SupplySheet.open(DAY, customers, day_transactions, baseline)


def recompute_with_draft(customer, draft):
    replaced = [
        t for t in HISTORY
        if t.customer_id == customer.id and t.date != DAY
    ] + [draft]
    return fold_stats(customer, replaced)


class TestProjectStats:
    """Incremental projection against a full recompute."""

    @pytest.mark.parametrize("edits", [
        {},
        {"jars_delivered": 7},
        {"jars_returned": 5, "payment_amount": 100},
        {"thermos_delivered": 0, "thermos_returned": 2},
        {"jars_delivered": 0, "jars_returned": 0, "thermos_delivered": 0,
         "thermos_returned": 0, "payment_amount": 0},
    ])
    def test_projection_equals_full_recompute(self, edits):
        sheet = open_sheet()
        for field, value in edits.items():
            sheet.edit("c1", field, value)

        projected = sheet.projected_stats("c1")
        expected = recompute_with_draft(RAMESH, sheet.draft("c1"))

        assert projected == expected

    def test_projection_for_day_without_record(self):
        sheet = open_sheet()
        sheet.edit("c2", "jars_delivered", 4)
        sheet.edit("c2", "payment_amount", 50)

        expected = fold_stats(ANITA, [HISTORY[3], sheet.draft("c2")])
        assert sheet.projected_stats("c2") == expected
        assert expected.total_due == 50

    def test_pure_function(self):
        original = zero_entry("c1", DAY)
        draft = original.model_copy(update={"jars_delivered": 2, "payment_amount": 5})
        result = project_stats(RAMESH, CustomerStats(current_jar_balance=1, total_due=10),
                               original, draft)
        assert result == CustomerStats(current_jar_balance=3, total_due=45)

    def test_unedited_customer_shows_baseline(self):
        sheet = open_sheet()
        assert sheet.projected_stats("c3") == sheet.baseline("c3")

    def test_baseline_is_a_snapshot(self):
        """Edits never move the baseline."""
        sheet = open_sheet()
        before = sheet.baseline("c1").model_copy()
        sheet.edit("c1", "jars_delivered", 10)
        assert sheet.baseline("c1") == before
        assert sheet.original("c1").jars_delivered == 3

    def test_missing_baseline_is_zero(self):
        sheet = SupplySheet.open(DAY, [RAMESH], [], {})
        sheet.edit("c1", "jars_delivered", 2)
        assert sheet.projected_stats("c1").total_due == 40


class TestSupplySheet:
    """Working copy behaviour."""

    def test_areas_sorted_and_first_selected(self):
        sheet = open_sheet()
        assert sheet.areas == ["North", "South"]
        assert sheet.selected_area == "North"
        assert [c.id for c in sheet.customers_in_area()] == ["c1", "c2"]

    def test_select_unknown_area_falls_back(self):
        sheet = open_sheet()
        sheet.select_area("South")
        assert sheet.selected_area == "South"
        sheet.select_area("Nowhere")
        assert sheet.selected_area == "North"

    def test_empty_sheet(self):
        sheet = SupplySheet.open(DAY, [], [], {})
        assert sheet.areas == []
        assert sheet.rows() == []

    def test_draft_starts_as_copy_of_original(self):
        sheet = open_sheet()
        assert sheet.draft("c1") == sheet.original("c1")
        assert sheet.draft("c2") == zero_entry("c2", DAY)
        assert not sheet.has_unsaved_changes

    def test_edit_marks_dirty(self):
        sheet = open_sheet()
        sheet.edit("c2", "jars_delivered", 1)
        assert sheet.has_unsaved_changes
        assert sheet.dirty_customer_ids == ["c2"]
        assert [r.dirty for r in sheet.rows()] == [False, True]

    def test_dirty_patches_carry_every_field(self):
        sheet = open_sheet()
        sheet.edit("c1", "jars_returned", 1)
        [patch] = sheet.dirty_patches()
        assert patch.customer_id == "c1"
        assert patch.date == DAY
        assert patch.supplied_fields() == {
            "jars_delivered": 3,
            "jars_returned": 1,
            "thermos_delivered": 1,
            "thermos_returned": 0,
            "payment_amount": 20,
        }

    def test_edit_rejects_unknown_customer_or_field(self):
        sheet = open_sheet()
        with pytest.raises(KeyError):
            sheet.edit("nobody", "jars_delivered", 1)
        with pytest.raises(KeyError):
            sheet.edit("c1", "rate_jar", 1)

    def test_edit_rejects_negative(self):
        sheet = open_sheet()
        with pytest.raises(ValidationError):
            sheet.edit("c1", "jars_delivered", -1)
        assert not sheet.has_unsaved_changes

    def test_totals_sum_rows(self):
        sheet = open_sheet()
        sheet.edit("c2", "jars_delivered", 2)

        rows = sheet.rows("North")
        totals = sheet.totals("North")

        assert totals.jars_delivered == 5
        assert totals.thermos_delivered == 1
        assert totals.payment == 20
        assert totals.due == sum(r.projected.total_due for r in rows)
        assert totals.jar_balance == sum(r.projected.current_jar_balance for r in rows)
