"""
Customer Repository and Customer ID Generator

Customer ids look like ``YYYYMM####``: the year and month of the
customer's start date followed by a 4-digit sequence. The sequence
restarts every calendar month, the way a paper ledger is numbered, so
``2025020001`` and ``2025030001`` can both exist.
"""

import re
from datetime import date, datetime
from typing import Iterable, Optional, Union

from aquaflow.models import Customer
from aquaflow.repositories.base import CollectionRepository, generate_id


ID_PREFIX_LENGTH = 6
ID_SEQUENCE_LENGTH = 4
ID_LENGTH = ID_PREFIX_LENGTH + ID_SEQUENCE_LENGTH


_DATE_PREFIX = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:$|[T ])")


def parse_reference_date(value: Union[str, date, None]) -> Optional[date]:
    """
    Accept a date, a datetime or a ``YYYY-MM-DD`` string.

    Unpadded months and days (``2025-2-5``) are accepted and any time
    part is ignored.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    match = _DATE_PREFIX.match(str(value).strip())
    if match is None:
        return None
    try:
        return date(*(int(part) for part in match.groups()))
    except ValueError:
        return None


def next_customer_id(existing_ids: Iterable[str], reference: Union[str, date, None]) -> str:
    """
    Next formatted id for the month of ``reference``.

    Only ids that start with the month prefix and are exactly ten
    characters long (four trailing digits) count towards the sequence.

    Returns:
        ``YYYYMM`` + (highest sequence + 1) zero-padded to four digits,
        or "" if ``reference`` is not a valid date
    """
    ref = parse_reference_date(reference)
    if ref is None:
        return ""

    prefix = f"{ref.year:04d}{ref.month:02d}"
    max_seq = 0
    for customer_id in existing_ids:
        if not customer_id.startswith(prefix) or len(customer_id) != ID_LENGTH:
            continue
        sequence = customer_id[ID_PREFIX_LENGTH:]
        if sequence.isdigit():
            max_seq = max(max_seq, int(sequence))

    return f"{prefix}{max_seq + 1:0{ID_SEQUENCE_LENGTH}d}"


class CustomerRepository(CollectionRepository[Customer]):
    """CRUD over customers. Deleting never touches their transactions."""

    model = Customer
    collection = "customers"

    def get(self, customer_id: str) -> Optional[Customer]:
        for customer in self._load():
            if customer.id == customer_id:
                return customer
        return None

    def generate_next_id(self, reference: Union[str, date, None]) -> str:
        """Next ``YYYYMM####`` id, scanning every stored customer."""
        ids = [c.id for c in self._load()]
        ids.extend(
            item["id"] for item in self.unparsed_items()
            if isinstance(item, dict) and isinstance(item.get("id"), str)
        )
        return next_customer_id(ids, reference)

    def upsert(self, customer: Customer) -> Customer:
        """
        Insert or replace by id.

        A customer carrying an id that is not stored yet (typically a
        freshly generated formatted id) is inserted with exactly that id.
        A customer without an id gets a random one.
        """
        customers = self._load()

        if customer.id:
            index = self._find_index(customers, customer.id)
            if index is not None:
                customers[index] = customer
            else:
                customers.append(customer)
            saved = customer
        else:
            saved = customer.model_copy(update={"id": generate_id()})
            customers.append(saved)

        self._save(customers)
        self._log.info("customer_saved", customer_id=saved.id)
        return saved

    def bulk_insert(self, new_customers: Iterable[Customer]) -> list[Customer]:
        """Append fully-formed customers in a single write (data seeding)."""
        added = list(new_customers)
        customers = self._load()
        customers.extend(added)
        self._save(customers)
        self._log.info("customers_bulk_inserted", count=len(added))
        return added

    def delete(self, customer_id: str) -> bool:
        """
        Hard delete. Transactions for the customer stay in storage as
        orphaned history.

        Returns:
            True if a customer was removed
        """
        customers = self._load()
        remaining = [c for c in customers if c.id != customer_id]
        if len(remaining) == len(customers):
            return False
        self._save(remaining)
        self._log.info("customer_deleted", customer_id=customer_id)
        return True

    def rename_area(self, old_name: str, new_name: str) -> int:
        """
        Rewrite ``area`` on every customer labelled ``old_name``.

        Returns:
            Number of customers changed (nothing is written if 0)
        """
        customers = self._load()
        changed = 0
        for index, customer in enumerate(customers):
            if customer.area == old_name:
                customers[index] = customer.model_copy(update={"area": new_name})
                changed += 1
        if changed:
            self._save(customers)
            self._log.info(
                "area_renamed_on_customers",
                old_name=old_name,
                new_name=new_name,
                count=changed,
            )
        return changed
