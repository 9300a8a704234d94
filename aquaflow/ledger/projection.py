"""
Draft Projection Engine

While a day's supply sheet is being edited, balances are shown live
without re-reading history. When the sheet is opened three snapshots are
taken per customer:

- baseline: stats over the full history, including whatever was already
  saved for the selected day
- original: the stored transaction for (customer, day), or a zero entry
- draft: a separate copy of original that receives the edits

The projected stats are the baseline plus the difference between draft
and original:

    projected = baseline + (draft - original)

applied to jar balance, thermos balance and total due (cost delta minus
payment delta). This equals a full recompute with the day's record
replaced by the draft, as long as the baseline is captured once at open
time and never refreshed mid-edit.
"""

from typing import Iterable, Mapping, Optional, Union

from pydantic import BaseModel

from aquaflow.ledger.engine import daily_cost
from aquaflow.models import (
    QUANTITY_FIELDS,
    AppSettings,
    Customer,
    CustomerStats,
    Transaction,
    TransactionPatch,
)


def zero_entry(customer_id: str, day: str) -> Transaction:
    """Stand-in for a (customer, day) pair with nothing stored."""
    return Transaction(id="", customer_id=customer_id, date=day)


def project_stats(
    customer: Customer,
    baseline: CustomerStats,
    original: Transaction,
    draft: Transaction,
) -> CustomerStats:
    """O(1) what-if balances for one customer from an unsaved draft."""
    jar_diff = draft.jar_movement - original.jar_movement
    thermos_diff = draft.thermos_movement - original.thermos_movement

    cost_diff = daily_cost(draft, customer) - daily_cost(original, customer)
    pay_diff = draft.payment_amount - original.payment_amount
    due_diff = cost_diff - pay_diff

    return CustomerStats(
        current_jar_balance=baseline.current_jar_balance + jar_diff,
        current_thermos_balance=baseline.current_thermos_balance + thermos_diff,
        total_due=baseline.total_due + due_diff,
    )


class SheetTotals(BaseModel):
    """Footer of the supply sheet for the visible customers."""

    jars_delivered: int = 0
    jars_returned: int = 0
    thermos_delivered: int = 0
    thermos_returned: int = 0
    payment: float = 0
    due: float = 0
    jar_balance: int = 0
    thermos_balance: int = 0


class SupplySheetRow(BaseModel):
    """One editable line of the supply sheet."""

    customer: Customer
    draft: Transaction
    projected: CustomerStats
    dirty: bool = False


class SupplySheet:
    """
    In-memory working copy of one day's supply sheet.

    Build it with ``SupplySheet.open`` (or ``SupplySheetFlow.open``),
    apply edits with ``edit``, read ``rows``/``totals``, then persist with
    ``dirty_patches``. Nothing here touches storage.
    """

    def __init__(
        self,
        day: str,
        customers: list[Customer],
        originals: dict[str, Transaction],
        baseline: dict[str, CustomerStats],
        settings: Optional[AppSettings] = None,
    ):
        self.day = day
        self.settings = settings or AppSettings()
        self._customers = {c.id: c for c in customers}
        self._order = [c.id for c in customers]
        self._originals = {cid: t.model_copy(deep=True) for cid, t in originals.items()}
        self._drafts = {cid: t.model_copy(deep=True) for cid, t in originals.items()}
        self._baseline = {cid: s.model_copy(deep=True) for cid, s in baseline.items()}
        self._dirty: set[str] = set()
        self.selected_area = self.areas[0] if self.areas else ""

    @classmethod
    def open(
        cls,
        day: str,
        customers: Iterable[Customer],
        day_transactions: Iterable[Transaction],
        baseline: Mapping[str, CustomerStats],
        settings: Optional[AppSettings] = None,
    ) -> "SupplySheet":
        """Snapshot originals and baseline for ``day``."""
        originals = {t.customer_id: t for t in day_transactions if t.date == day}
        return cls(
            day=day,
            customers=list(customers),
            originals=originals,
            baseline=dict(baseline),
            settings=settings,
        )

    # ------------------------------------------------------------------
    # Areas

    @property
    def areas(self) -> list[str]:
        """Distinct customer area labels, sorted."""
        return sorted({c.area for c in self._customers.values()})

    def select_area(self, area: str) -> None:
        """Switch the visible area; unknown areas fall back to the first one."""
        if area in self.areas:
            self.selected_area = area
        else:
            self.selected_area = self.areas[0] if self.areas else ""

    def customers_in_area(self, area: Optional[str] = None) -> list[Customer]:
        area = self.selected_area if area is None else area
        if not area:
            return []
        return [
            self._customers[cid]
            for cid in self._order
            if self._customers[cid].area == area
        ]

    # ------------------------------------------------------------------
    # Snapshots

    def original(self, customer_id: str) -> Transaction:
        stored = self._originals.get(customer_id)
        return stored if stored is not None else zero_entry(customer_id, self.day)

    def draft(self, customer_id: str) -> Transaction:
        current = self._drafts.get(customer_id)
        return current if current is not None else zero_entry(customer_id, self.day)

    def baseline(self, customer_id: str) -> CustomerStats:
        return self._baseline.get(customer_id, CustomerStats.zero())

    # ------------------------------------------------------------------
    # Editing

    def edit(self, customer_id: str, field: str, value: Union[int, float]) -> Transaction:
        """
        Set one quantity on the customer's draft.

        Raises:
            KeyError: unknown customer or field
            pydantic.ValidationError: value rejected by the Transaction schema
        """
        if customer_id not in self._customers:
            raise KeyError(f"Customer not on this sheet: {customer_id}")
        if field not in QUANTITY_FIELDS:
            raise KeyError(f"Not an editable field: {field}")

        data = self.draft(customer_id).model_dump()
        data[field] = value
        updated = Transaction.model_validate(data)

        self._drafts[customer_id] = updated
        self._dirty.add(customer_id)
        return updated

    @property
    def has_unsaved_changes(self) -> bool:
        return bool(self._dirty)

    @property
    def dirty_customer_ids(self) -> list[str]:
        return [cid for cid in self._order if cid in self._dirty]

    def dirty_patches(self) -> list[TransactionPatch]:
        """One full-overwrite patch per edited customer row."""
        return [
            TransactionPatch.from_transaction(self.draft(cid))
            for cid in self.dirty_customer_ids
        ]

    # ------------------------------------------------------------------
    # Projection

    def projected_stats(self, customer_id: str) -> CustomerStats:
        customer = self._customers.get(customer_id)
        if customer is None:
            return CustomerStats.zero()
        return project_stats(
            customer,
            self.baseline(customer_id),
            self.original(customer_id),
            self.draft(customer_id),
        )

    def rows(self, area: Optional[str] = None) -> list[SupplySheetRow]:
        return [
            SupplySheetRow(
                customer=c,
                draft=self.draft(c.id),
                projected=self.projected_stats(c.id),
                dirty=c.id in self._dirty,
            )
            for c in self.customers_in_area(area)
        ]

    def totals(self, area: Optional[str] = None) -> SheetTotals:
        """
        Column sums for the visible customers.

        Balance and due columns are sums of the projected per-row values,
        so the footer always agrees with the rows above it.
        """
        totals = SheetTotals()
        for row in self.rows(area):
            draft = row.draft
            totals.jars_delivered += draft.jars_delivered
            totals.jars_returned += draft.jars_returned
            totals.thermos_delivered += draft.thermos_delivered
            totals.thermos_returned += draft.thermos_returned
            totals.payment += draft.payment_amount
            totals.due += row.projected.total_due
            totals.jar_balance += row.projected.current_jar_balance
            totals.thermos_balance += row.projected.current_thermos_balance
        return totals
