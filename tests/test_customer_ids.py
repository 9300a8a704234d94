"""Tests for the YYYYMM#### customer id generator."""

from datetime import date, datetime

import pytest

from aquaflow.models import Customer
from aquaflow.repositories import next_customer_id, parse_reference_date


FEBRUARY_IDS = [f"20250200{n:02d}" for n in range(1, 8)]


class TestNextCustomerId:
    """Sequence per calendar month."""

    def test_continues_the_month_sequence(self):
        assert next_customer_id(FEBRUARY_IDS, "2025-02-15") == "2025020008"

    def test_new_month_restarts_at_one(self):
        assert next_customer_id(FEBRUARY_IDS, "2025-03-01") == "2025030001"

    def test_first_id_ever(self):
        assert next_customer_id([], date(2024, 12, 31)) == "2024120001"

    def test_uses_highest_sequence_not_count(self):
        ids = ["2025020001", "2025020009"]
        assert next_customer_id(ids, "2025-02-01") == "2025020010"

    @pytest.mark.parametrize("noise", [
        "abc123xyz",         # random legacy id
        "20250200015",       # 11 characters
        "202502001",         # 9 characters
        "202502ab12",        # non-digit suffix
        "2025010099",        # other month
    ])
    def test_ignores_ids_that_do_not_fit_the_format(self, noise):
        assert next_customer_id(["2025020003", noise], "2025-02-10") == "2025020004"

    def test_unparseable_reference_returns_empty(self):
        assert next_customer_id(FEBRUARY_IDS, "not-a-date") == ""
        assert next_customer_id(FEBRUARY_IDS, None) == ""

    def test_accepts_datetime_and_timestamp_text(self):
        assert next_customer_id([], datetime(2025, 2, 3, 10, 30)) == "2025020001"
        assert next_customer_id([], "2025-02-03T10:30:00") == "2025020001"


class TestParseReferenceDate:

    def test_variants(self):
        assert parse_reference_date("2025-02-15") == date(2025, 2, 15)
        assert parse_reference_date(date(2025, 2, 15)) == date(2025, 2, 15)
        assert parse_reference_date("15/02/2025") is None

    def test_unpadded_month_and_day(self):
        assert parse_reference_date("2025-2-5") == date(2025, 2, 5)
        assert parse_reference_date("2025-2-5T08:00:00") == date(2025, 2, 5)
        assert next_customer_id(FEBRUARY_IDS, "2025-2-5") == "2025020008"

    def test_impossible_dates(self):
        assert parse_reference_date("2025-02-30") is None
        assert parse_reference_date("2025-13-01") is None


class TestRepositoryGenerateNextId:
    """The repository scans every stored customer."""

    def test_generate_from_store(self, repos):
        repos.customers.bulk_insert(
            Customer(id=cid, name=f"C{cid[-1]}", area="North") for cid in FEBRUARY_IDS
        )
        assert repos.customers.generate_next_id("2025-02-15") == "2025020008"
        assert repos.customers.generate_next_id("2025-03-15") == "2025030001"
