"""
Range Queries

Filtering of the transaction log by exact date and by calendar month,
plus the monthly statement and the per-area supply chart built on top.

Dates are compared as ``YYYY-MM-DD`` strings or by splitting the string
into integers. No date objects with time zones are involved, so a
transaction can never slide into the neighbouring day or month.
"""

import calendar
from typing import Iterable, Mapping

from aquaflow.ledger.engine import daily_cost, parse_iso_parts
from aquaflow.models import (
    Customer,
    CustomerStats,
    MonthStatement,
    StatementRow,
    SupplyChartRow,
    Transaction,
)


def filter_on_date(transactions: Iterable[Transaction], day: str) -> list[Transaction]:
    """Transactions recorded for exactly ``day``."""
    return [t for t in transactions if t.date == day]


def filter_customer_month(
    transactions: Iterable[Transaction],
    customer_id: str,
    year: int,
    month_index: int,
) -> list[Transaction]:
    """
    Transactions of one customer in one calendar month.

    Args:
        month_index: 0-based month (0 = January)
    """
    matched = []
    for t in transactions:
        if t.customer_id != customer_id:
            continue
        parts = parse_iso_parts(t.date)
        if parts is None:
            continue
        t_year, t_month, _ = parts
        if t_year == year and t_month == month_index + 1:
            matched.append(t)
    return matched


def filter_month(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> list[Transaction]:
    """All transactions in a calendar month (``month`` is 1-12)."""
    matched = []
    for t in transactions:
        parts = parse_iso_parts(t.date)
        if parts is not None and parts[0] == year and parts[1] == month:
            matched.append(t)
    return matched


def month_days(year: int, month: int) -> list[str]:
    """Every ``YYYY-MM-DD`` of a month, in order."""
    _, days_in_month = calendar.monthrange(year, month)
    return [f"{year:04d}-{month:02d}-{day:02d}" for day in range(1, days_in_month + 1)]


def build_month_statement(
    customer: Customer,
    year: int,
    month: int,
    transactions: Iterable[Transaction],
) -> MonthStatement:
    """
    Build the monthly bill for ``customer``.

    There is one row per calendar day. Days without a transaction still
    get a row with zero jars, thermos, amount and payment.

    Args:
        month: calendar month, 1-12
        transactions: the customer's transactions for that month
    """
    by_date: dict[str, Transaction] = {}
    for t in transactions:
        by_date.setdefault(t.date, t)

    statement = MonthStatement(customer=customer, year=year, month=month)

    for day in month_days(year, month):
        t = by_date.get(day)
        jars = t.jars_delivered if t else 0
        thermos = t.thermos_delivered if t else 0
        paid = t.payment_amount if t else 0
        amount = daily_cost(t, customer) if t else 0

        statement.total_amount += amount
        statement.total_paid += paid
        statement.total_jars += jars
        statement.total_thermos += thermos

        statement.rows.append(StatementRow(
            date=day,
            jars=jars,
            thermos=thermos,
            rate_jar=customer.rate_jar,
            rate_thermos=customer.rate_thermos,
            amount=amount,
            paid=paid,
        ))

    return statement


def build_supply_chart(
    customers: Iterable[Customer],
    area: str,
    day_transactions: Iterable[Transaction],
    stats: Mapping[str, CustomerStats],
) -> list[SupplyChartRow]:
    """
    Printable daily sheet for one area: its customers sorted by name,
    each with the day's transaction (if any) and current balances.
    """
    by_customer = {t.customer_id: t for t in day_transactions}
    in_area = sorted(
        (c for c in customers if c.area == area),
        key=lambda c: c.name.casefold(),
    )
    return [
        SupplyChartRow(
            customer=c,
            transaction=by_customer.get(c.id),
            stats=stats.get(c.id, CustomerStats.zero()),
        )
        for c in in_area
    ]
