"""
Data Models Package

This package contains all Pydantic models used in AquaFlow.
All data flowing through the system must conform to these schemas.
"""

from aquaflow.models.ledger import (
    QUANTITY_FIELDS,
    AppSettings,
    Area,
    Customer,
    CustomerStats,
    ImportResult,
    MonthStatement,
    StatementRow,
    SupplyChartRow,
    Transaction,
    TransactionPatch,
)
from aquaflow.models.reports import (
    ActivityTotals,
    ChartPoint,
    DashboardSummary,
    PeriodSummary,
    RecentPayment,
    ViewMode,
)
from aquaflow.models.validation import (
    ValidationIssue,
    ValidationResult,
)

__all__ = [
    # Ledger records
    "QUANTITY_FIELDS",
    "AppSettings",
    "Area",
    "Customer",
    "CustomerStats",
    "ImportResult",
    "MonthStatement",
    "StatementRow",
    "SupplyChartRow",
    "Transaction",
    "TransactionPatch",
    # Reports
    "ActivityTotals",
    "ChartPoint",
    "DashboardSummary",
    "PeriodSummary",
    "RecentPayment",
    "ViewMode",
    # Validation
    "ValidationIssue",
    "ValidationResult",
]
