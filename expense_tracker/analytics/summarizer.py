"""
Windowed Summaries

Takes the chronological series from the aggregator and a timeframe, and
derives what the analytics page shows: the windowed series, per-category
rankings with their share of the total, and the summary tiles.

Edge-case policy:
- An empty window is not an error. It yields zero totals, a zero
  average and no top category.
- Shares are 0 when nothing was spent in the window, never NaN.
- Categories come from the caller's closed list, so a category with no
  spending still gets a zero entry.
"""

import math
from typing import Iterable, Optional, Sequence, Union

from expense_tracker.analytics.errors import (
    InvalidAggregateError,
    InvalidCategoriesError,
    InvalidWindowError,
    SeriesOrderError,
)
from expense_tracker.models.analytics import (
    AnalyticsSummary,
    CategoryRanking,
    MonthBucket,
    SummaryStats,
    Timeframe,
)
from expense_tracker.models.expense import ExpenseCategory


def _resolve_timeframe(timeframe: Union[Timeframe, str]) -> Timeframe:
    try:
        return Timeframe(timeframe)
    except ValueError:
        raise InvalidWindowError(f"Unknown timeframe: {timeframe!r}")


def _resolve_categories(
    categories: Optional[Iterable[Union[ExpenseCategory, str]]],
) -> list[str]:
    if categories is None:
        return [category.value for category in ExpenseCategory]

    names = [
        category.value if isinstance(category, ExpenseCategory) else str(category)
        for category in categories
    ]
    if len(set(names)) != len(names):
        raise InvalidCategoriesError(f"Duplicate categories in {names}")
    return names


def _check_chronological(series: Sequence[MonthBucket]) -> None:
    for previous, current in zip(series, series[1:]):
        if previous.key >= current.key:
            raise SeriesOrderError(
                f"Series is not chronological: {previous.label} "
                f"is followed by {current.label}"
            )


def window_series(
    series: Sequence[MonthBucket],
    timeframe: Union[Timeframe, str],
) -> list[MonthBucket]:
    """
    Slice the trailing buckets selected by a timeframe.

    The slice counts populated buckets, so a sparse history returns the
    last N months that have data. It is never padded.
    """
    months = _resolve_timeframe(timeframe).months
    if months is None:
        return list(series)
    return list(series[-months:])


def rank_categories(
    series: Sequence[MonthBucket],
    categories: Optional[Iterable[Union[ExpenseCategory, str]]] = None,
) -> list[CategoryRanking]:
    """
    Total each known category across the series and rank them.

    Sorted by total descending; ties keep the order of ``categories``.

    Raises:
        InvalidAggregateError: If a total is negative or not finite
    """
    names = _resolve_categories(categories)
    totals = [
        sum(bucket.amount_for(name) for bucket in series)
        for name in names
    ]
    grand_total = sum(totals)
    if not all(math.isfinite(total) and total >= 0 for total in totals + [grand_total]):
        raise InvalidAggregateError(
            f"Category totals must be finite and non-negative: {dict(zip(names, totals))}"
        )

    order = sorted(range(len(names)), key=lambda i: (-totals[i], i))
    return [
        CategoryRanking(
            category=names[i],
            total=totals[i],
            share_of_total=totals[i] / grand_total if grand_total > 0 else 0.0,
        )
        for i in order
    ]


def summarize(
    series: Sequence[MonthBucket],
    timeframe: Union[Timeframe, str] = Timeframe.ALL_TIME,
    known_categories: Optional[Iterable[Union[ExpenseCategory, str]]] = None,
) -> AnalyticsSummary:
    """
    Build the analytics view for one timeframe.

    Args:
        series: Output of aggregate(); must be strictly chronological
        timeframe: Window to apply
        known_categories: Closed, ordered category list
                          (defaults to ExpenseCategory order)

    Raises:
        SeriesOrderError: If the series is out of order or repeats a month
        InvalidWindowError: If the timeframe is not recognised
        InvalidCategoriesError: If the category list repeats a name
        InvalidAggregateError: If the window's totals are negative or overflow
    """
    resolved = _resolve_timeframe(timeframe)
    categories = _resolve_categories(known_categories)
    _check_chronological(series)

    windowed = window_series(series, resolved)
    rankings = rank_categories(windowed, categories)

    grand_total = sum(ranking.total for ranking in rankings)
    bucket_count = len(windowed)
    top = rankings[0] if rankings and rankings[0].total > 0 else None

    stats = SummaryStats(
        grand_total=grand_total,
        average_monthly=grand_total / bucket_count if bucket_count else 0.0,
        top_category=top.category if top else None,
        bucket_count=bucket_count,
    )

    return AnalyticsSummary(
        timeframe=resolved,
        windowed_series=windowed,
        rankings=rankings,
        stats=stats,
    )
