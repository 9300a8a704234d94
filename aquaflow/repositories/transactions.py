"""
Transaction Repository

The transaction log is keyed by (customer_id, date): every write is an
upsert on that pair. Transactions are never deleted through normal use.
"""

from typing import Optional

from aquaflow.models import QUANTITY_FIELDS, Transaction, TransactionPatch
from aquaflow.repositories.base import CollectionRepository, generate_id


class TransactionRepository(CollectionRepository[Transaction]):
    """Upsert-by-(customer, day) access to the transaction log."""

    model = Transaction
    collection = "transactions"

    def find(self, customer_id: str, date: str) -> Optional[Transaction]:
        for transaction in self._load():
            if transaction.customer_id == customer_id and transaction.date == date:
                return transaction
        return None

    def for_customer(self, customer_id: str) -> "list[Transaction]":
        return [t for t in self._load() if t.customer_id == customer_id]

    def upsert(self, patch: TransactionPatch) -> Transaction:
        """
        Merge ``patch`` into the record for its (customer_id, date) pair.

        - Existing record: only the fields the patch supplied are
          overwritten; the id and every other field are kept.
        - No record: a new one is created with a random id and zero
          quantities, overridden by the supplied fields.

        Saving the same patch twice leaves exactly one record with the
        patch's values.
        """
        transactions = self._load()
        supplied = patch.supplied_fields()

        existing_index = None
        for index, transaction in enumerate(transactions):
            if transaction.key == (patch.customer_id, patch.date):
                existing_index = index
                break

        if existing_index is not None:
            merged = transactions[existing_index].model_dump()
            merged.update(supplied)
            saved = Transaction.model_validate(merged)
            transactions[existing_index] = saved
        else:
            fields = {name: 0 for name in QUANTITY_FIELDS}
            fields.update(supplied)
            saved = Transaction(
                id=generate_id(),
                customer_id=patch.customer_id,
                date=patch.date,
                **fields,
            )
            transactions.append(saved)

        self._save(transactions)
        self._log.debug(
            "transaction_saved",
            customer_id=saved.customer_id,
            date=saved.date,
            created=existing_index is None,
        )
        return saved
