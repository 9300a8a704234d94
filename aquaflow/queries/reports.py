"""
Report Execution

Read-only aggregations for the dashboard and the analytics view. Every
number is computed from stored data at call time; nothing is cached.

Month and year matching splits the ``YYYY-MM-DD`` string, the same way
the billing queries do.
"""

import calendar
from datetime import date, timedelta
from typing import Iterable, Optional

from aquaflow.ledger import LedgerEngine, filter_month, filter_on_date, parse_iso_parts
from aquaflow.models import (
    ActivityTotals,
    ChartPoint,
    Customer,
    DashboardSummary,
    PeriodSummary,
    Transaction,
    ViewMode,
)
from aquaflow.repositories import Repositories


ALL_AREAS = "All"
UNKNOWN_AREA = "Unknown"
DAILY_WINDOW_DAYS = 14


class ReportError(Exception):
    """Invalid report request."""
    pass


def sum_activity(transactions: Iterable[Transaction]) -> ActivityTotals:
    """Payments, jars delivered and thermos delivered over ``transactions``."""
    totals = ActivityTotals()
    for t in transactions:
        totals.revenue += t.payment_amount
        totals.jars += t.jars_delivered
        totals.thermos += t.thermos_delivered
    return totals


def _point(label: str, transactions: list[Transaction]) -> ChartPoint:
    totals = sum_activity(transactions)
    return ChartPoint(
        label=label,
        value=totals.revenue,
        jars=totals.jars,
        thermos=totals.thermos,
    )


class ReportExecutor:
    """
    Builds dashboard and analytics reports.

    GUARANTEES:
    - Only returns figures derived from stored data
    - An empty store produces all-zero reports, never an error
    """

    def __init__(self, repos: Repositories, ledger: Optional[LedgerEngine] = None):
        self._repos = repos
        self._ledger = ledger or LedgerEngine(repos)

    def dashboard_summary(self, today: date) -> DashboardSummary:
        """Headline figures for ``today`` and the calendar month containing it."""
        customers = self._repos.customers.list()
        transactions = self._repos.transactions.list()
        all_stats = self._ledger.compute_all_stats()

        today_totals = sum_activity(filter_on_date(transactions, today.isoformat()))
        month_totals = sum_activity(filter_month(transactions, today.year, today.month))

        return DashboardSummary(
            total_customers=len(customers),
            total_due=sum(s.total_due for s in all_stats.values()),
            jars_today=today_totals.jars,
            thermos_today=today_totals.thermos,
            payment_today=today_totals.revenue,
            jars_month=month_totals.jars,
            thermos_month=month_totals.thermos,
            payment_month=month_totals.revenue,
        )

    def period_summary(
        self,
        view_mode: ViewMode,
        anchor: date,
        area: str = ALL_AREAS,
    ) -> PeriodSummary:
        """
        Analytics for the day, month or year containing ``anchor``.

        Chart points:
        - daily: the 14 days ending at ``anchor``
        - monthly: every day of the month
        - yearly: every month of the year

        Raises:
            ReportError: for an unknown view mode
        """
        customers = {c.id: c for c in self._repos.customers.list()}
        transactions = [
            t for t in self._repos.transactions.list()
            if self._in_area(t, customers, area)
        ]
        period = [t for t in transactions if self._in_period(t, view_mode, anchor)]

        if view_mode == "daily":
            label = anchor.strftime("%a, %d %B %Y")
            points = []
            for offset in range(DAILY_WINDOW_DAYS - 1, -1, -1):
                day = anchor - timedelta(days=offset)
                points.append(_point(str(day.day), filter_on_date(transactions, day.isoformat())))
        elif view_mode == "monthly":
            label = anchor.strftime("%B %Y")
            _, days_in_month = calendar.monthrange(anchor.year, anchor.month)
            points = []
            for day_number in range(1, days_in_month + 1):
                day = date(anchor.year, anchor.month, day_number)
                points.append(_point(str(day_number), filter_on_date(period, day.isoformat())))
        elif view_mode == "yearly":
            label = str(anchor.year)
            points = [
                _point(calendar.month_abbr[month], filter_month(period, anchor.year, month))
                for month in range(1, 13)
            ]
        else:
            raise ReportError(f"Unknown view mode: {view_mode}")

        return PeriodSummary(
            view_mode=view_mode,
            label=label,
            area=area,
            totals=sum_activity(period),
            points=points,
            by_area=self._by_area(period, customers),
        )

    @staticmethod
    def _in_area(t: Transaction, customers: dict[str, Customer], area: str) -> bool:
        if area == ALL_AREAS:
            return True
        customer = customers.get(t.customer_id)
        return customer is not None and customer.area == area

    @staticmethod
    def _in_period(t: Transaction, view_mode: str, anchor: date) -> bool:
        if view_mode == "daily":
            return t.date == anchor.isoformat()
        parts = parse_iso_parts(t.date)
        if parts is None:
            return False
        if view_mode == "monthly":
            return parts[0] == anchor.year and parts[1] == anchor.month
        if view_mode == "yearly":
            return parts[0] == anchor.year
        return False

    @staticmethod
    def _by_area(
        transactions: list[Transaction],
        customers: dict[str, Customer],
    ) -> dict[str, ActivityTotals]:
        """Per-area totals, highest revenue first."""
        grouped: dict[str, list[Transaction]] = {}
        for t in transactions:
            customer = customers.get(t.customer_id)
            area_name = customer.area if customer and customer.area else UNKNOWN_AREA
            grouped.setdefault(area_name, []).append(t)

        totals = {name: sum_activity(items) for name, items in grouped.items()}
        return dict(sorted(totals.items(), key=lambda item: item[1].revenue, reverse=True))
