"""
Report Models

Read-side shapes for the dashboard and the period analytics view.
They are computed on demand from the ledger and never stored.
"""

from typing import Literal

from pydantic import BaseModel, Field


ViewMode = Literal["daily", "monthly", "yearly"]


class DashboardSummary(BaseModel):
    """Headline numbers shown on the dashboard."""

    total_customers: int = 0
    total_due: float = Field(
        default=0,
        description="Total outstanding: sum of every customer's total_due"
    )
    jars_today: int = 0
    thermos_today: int = 0
    payment_today: float = 0
    jars_month: int = 0
    thermos_month: int = 0
    payment_month: float = 0


class ActivityTotals(BaseModel):
    """Payments collected and units delivered over some set of transactions."""

    revenue: float = 0
    jars: int = 0
    thermos: int = 0


class ChartPoint(BaseModel):
    """One bar/point on the analytics chart."""

    label: str
    value: float = Field(default=0, description="Payments collected")
    jars: int = 0
    thermos: int = 0


class PeriodSummary(BaseModel):
    """Analytics for a day, month or year, optionally limited to one area."""

    view_mode: ViewMode
    label: str
    area: str = "All"
    totals: ActivityTotals = Field(default_factory=ActivityTotals)
    points: list[ChartPoint] = Field(default_factory=list)
    by_area: dict[str, ActivityTotals] = Field(default_factory=dict)


class RecentPayment(BaseModel):
    """A payment line on the collection screen."""

    transaction_id: str
    customer_id: str
    customer_name: str = Field(
        default="Unknown",
        description="'Unknown' when the customer no longer exists"
    )
    date: str
    amount: float
