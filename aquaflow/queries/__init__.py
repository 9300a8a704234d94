"""Reporting queries package."""

from aquaflow.queries.reports import ReportError, ReportExecutor, sum_activity

__all__ = ["ReportError", "ReportExecutor", "sum_activity"]
