"""
Ledger Service

Binds the pure ledger functions to the repositories. It owns no state:
every call reads the current collections.
"""

from typing import Optional

from aquaflow.ledger.engine import fold_stats
from aquaflow.ledger.queries import (
    build_month_statement,
    build_supply_chart,
    filter_customer_month,
    filter_on_date,
)
from aquaflow.models import CustomerStats, MonthStatement, SupplyChartRow, Transaction
from aquaflow.repositories import Repositories


class LedgerEngine:
    """Balances, range queries and statements over the stored log."""

    def __init__(self, repos: Repositories):
        self._repos = repos

    def compute_stats(self, customer_id: str) -> CustomerStats:
        """Full-history stats; zero stats for an unknown customer."""
        customer = self._repos.customers.get(customer_id)
        if customer is None:
            return CustomerStats.zero()
        return fold_stats(customer, self._repos.transactions.for_customer(customer_id))

    def compute_all_stats(self) -> dict[str, CustomerStats]:
        """Stats for every customer, keyed by id (one read of each collection)."""
        customers = self._repos.customers.list()
        by_customer: dict[str, list[Transaction]] = {c.id: [] for c in customers}
        for t in self._repos.transactions.list():
            if t.customer_id in by_customer:
                by_customer[t.customer_id].append(t)
        return {c.id: fold_stats(c, by_customer[c.id]) for c in customers}

    def total_outstanding(self) -> float:
        return sum(s.total_due for s in self.compute_all_stats().values())

    def transactions_on_date(self, day: str) -> list[Transaction]:
        return filter_on_date(self._repos.transactions.list(), day)

    def transactions_for_customer_in_month(
        self,
        customer_id: str,
        year: int,
        month_index: int,
    ) -> list[Transaction]:
        """``month_index`` is 0-based (0 = January)."""
        return filter_customer_month(
            self._repos.transactions.list(), customer_id, year, month_index
        )

    def month_statement(
        self,
        customer_id: str,
        year: int,
        month: int,
    ) -> Optional[MonthStatement]:
        """
        Monthly bill with a row for every day.

        Args:
            month: calendar month, 1-12

        Returns:
            None if the customer does not exist
        """
        customer = self._repos.customers.get(customer_id)
        if customer is None:
            return None
        transactions = self.transactions_for_customer_in_month(customer_id, year, month - 1)
        return build_month_statement(customer, year, month, transactions)

    def supply_chart(self, day: str, area: str) -> list[SupplyChartRow]:
        return build_supply_chart(
            self._repos.customers.list(),
            area,
            self.transactions_on_date(day),
            self.compute_all_stats(),
        )
