"""Tests for the dashboard and analytics reports."""

from datetime import date

import pytest

from aquaflow.models import TransactionPatch
from aquaflow.queries import ReportError, ReportExecutor, sum_activity


@pytest.fixture
def reports(repos):
    return ReportExecutor(repos)


class TestDashboardSummary:

    def test_empty_store(self, reports):
        summary = reports.dashboard_summary(date(2025, 1, 6))
        assert summary.total_customers == 0
        assert summary.total_due == 0
        assert summary.jars_month == 0

    def test_today_and_month(self, reports, populated):
        summary = reports.dashboard_summary(date(2025, 1, 6))

        assert summary.total_customers == 3
        assert summary.total_due == 310
        assert summary.jars_today == 5
        assert summary.thermos_today == 1
        assert summary.payment_today == 65
        assert summary.jars_month == 10
        assert summary.payment_month == 115


class TestPeriodSummary:

    def test_daily_window(self, reports, populated):
        summary = reports.period_summary("daily", date(2025, 1, 6))

        assert len(summary.points) == 14
        assert summary.points[-1].label == "6"
        assert summary.points[-1].jars == 5
        assert summary.points[-2].value == 50
        assert summary.totals.jars == 5
        assert summary.totals.revenue == 65

    def test_monthly_points_per_day(self, reports, populated):
        summary = reports.period_summary("monthly", date(2025, 1, 20))

        assert len(summary.points) == 31
        assert summary.label == "January 2025"
        assert summary.totals.jars == 10
        assert summary.totals.revenue == 115

    def test_yearly_points_per_month(self, reports, populated):
        summary = reports.period_summary("yearly", date(2025, 6, 1))

        assert [p.label for p in summary.points][:2] == ["Jan", "Feb"]
        assert len(summary.points) == 12
        assert summary.points[0].jars == 10
        assert summary.points[1].jars == 10
        assert summary.totals.revenue == 215

    def test_area_filter_and_breakdown(self, reports, populated):
        north = reports.period_summary("yearly", date(2025, 1, 1), area="North")
        assert north.totals.jars == 10
        assert set(north.by_area) == {"North"}

        everything = reports.period_summary("yearly", date(2025, 1, 1))
        assert list(everything.by_area) == ["North", "South"]
        assert everything.by_area["South"].revenue == 100

    def test_orphaned_transactions(self, repos, reports, populated):
        repos.transactions.upsert(TransactionPatch(
            customer_id="deleted", date="2025-01-06", payment_amount=500,
        ))

        everything = reports.period_summary("daily", date(2025, 1, 6))
        assert list(everything.by_area)[0] == "Unknown"

        north = reports.period_summary("daily", date(2025, 1, 6), area="North")
        assert north.totals.revenue == 65

    def test_unknown_view_mode(self, reports):
        with pytest.raises(ReportError):
            reports.period_summary("weekly", date(2025, 1, 1))


def test_sum_activity_empty():
    totals = sum_activity([])
    assert (totals.revenue, totals.jars, totals.thermos) == (0, 0, 0)
