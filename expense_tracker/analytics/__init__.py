"""
Analytics package.

aggregate() turns per-category monthly totals into a chronological
series; summarize() windows that series and derives rankings and stats.
"""

from expense_tracker.analytics.aggregator import aggregate, coerce_record, month_label
from expense_tracker.analytics.chart import (
    breakdown_rows,
    format_amount,
    series_chart_rows,
)
from expense_tracker.analytics.errors import (
    AnalyticsError,
    InvalidAggregateError,
    InvalidCategoriesError,
    InvalidWindowError,
    SeriesOrderError,
)
from expense_tracker.analytics.summarizer import (
    rank_categories,
    summarize,
    window_series,
)

__all__ = [
    "aggregate",
    "coerce_record",
    "month_label",
    "breakdown_rows",
    "format_amount",
    "series_chart_rows",
    "AnalyticsError",
    "InvalidAggregateError",
    "InvalidCategoriesError",
    "InvalidWindowError",
    "SeriesOrderError",
    "rank_categories",
    "summarize",
    "window_series",
]
