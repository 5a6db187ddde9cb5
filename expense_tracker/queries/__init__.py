"""Aggregation package."""

from expense_tracker.queries.stats import (
    compute_stats,
    totals_by_category,
    totals_by_month,
)

__all__ = ["compute_stats", "totals_by_category", "totals_by_month"]
