"""
Ledger Engine - Balance & Due Computation

Balances are never stored. They are folded from the full transaction
history of a customer every time they are needed:

    jar balance     = sum(jars delivered - jars returned)
    thermos balance = sum(thermos delivered - thermos returned)
    total due       = sum(daily cost - payment)
    daily cost      = jars delivered * rate_jar + thermos delivered * rate_thermos

Costs always use the customer's *current* rates; there is no rate
snapshot per transaction. ``old_dues`` is not part of ``total_due``.

The fold is a plain sum, so transaction order does not matter.
"""

from typing import Iterable, Optional, Protocol

from aquaflow.models import Customer, CustomerStats, Transaction


class Quantities(Protocol):
    """Anything shaped like a transaction (stored record or draft)."""

    jars_delivered: int
    jars_returned: int
    thermos_delivered: int
    thermos_returned: int
    payment_amount: float


def daily_cost(entry: Quantities, customer: Customer) -> float:
    """Cost of one day's deliveries at the customer's current rates."""
    return (
        entry.jars_delivered * customer.rate_jar
        + entry.thermos_delivered * customer.rate_thermos
    )


def fold_stats(
    customer: Optional[Customer],
    transactions: Iterable[Transaction],
) -> CustomerStats:
    """
    Fold a customer's transactions into running balances.

    Returns zero stats when ``customer`` is None.
    """
    if customer is None:
        return CustomerStats.zero()

    jar_balance = 0
    thermos_balance = 0
    total_due = 0.0

    for t in transactions:
        jar_balance += t.jars_delivered - t.jars_returned
        thermos_balance += t.thermos_delivered - t.thermos_returned
        total_due += daily_cost(t, customer) - t.payment_amount

    return CustomerStats(
        current_jar_balance=jar_balance,
        current_thermos_balance=thermos_balance,
        total_due=total_due,
    )


def parse_iso_parts(value: str) -> Optional[tuple[int, int, int]]:
    """
    Split ``YYYY-MM-DD`` into integers without building a date object.

    Returns None for anything that is not three dash-separated numbers.
    """
    parts = value.split("-")
    if len(parts) != 3:
        return None
    try:
        year, month, day = (int(p) for p in parts)
    except ValueError:
        return None
    return year, month, day
