"""
Ledger Package

Balance computation, date/month range queries, statements and the
supply-sheet draft projection.
"""

from aquaflow.ledger.engine import daily_cost, fold_stats, parse_iso_parts
from aquaflow.ledger.projection import (
    SheetTotals,
    SupplySheet,
    SupplySheetRow,
    project_stats,
    zero_entry,
)
from aquaflow.ledger.queries import (
    build_month_statement,
    build_supply_chart,
    filter_customer_month,
    filter_month,
    filter_on_date,
    month_days,
)
from aquaflow.ledger.service import LedgerEngine

__all__ = [
    "LedgerEngine",
    "SheetTotals",
    "SupplySheet",
    "SupplySheetRow",
    "build_month_statement",
    "build_supply_chart",
    "daily_cost",
    "filter_customer_month",
    "filter_month",
    "filter_on_date",
    "fold_stats",
    "month_days",
    "parse_iso_parts",
    "project_stats",
    "zero_entry",
]
