"""
Monthly Aggregation

Folds per-category monthly totals into one bucket per (year, month),
ordered chronologically. This is what the monthly chart is drawn from.

DESIGN DECISION: Aggregation is a pure function of its input.
It never logs, never caches, and never repairs bad records:
a malformed total is rejected so it cannot skew every figure downstream.
"""

import math
from collections import defaultdict
from typing import Any, Iterable, Mapping, Union

from pydantic import ValidationError

from expense_tracker.analytics.errors import InvalidAggregateError
from expense_tracker.models.analytics import MonthBucket, RawAggregate


# Fixed English abbreviations so labels do not depend on the runtime locale
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def month_label(year: int, month: int) -> str:
    """Short display label for a month, e.g. ``Jan 2024``."""
    return f"{MONTH_ABBREVIATIONS[month - 1]} {year:04d}"


def coerce_record(record: Union[RawAggregate, Mapping[str, Any]]) -> RawAggregate:
    """Validate one monthly total, raising InvalidAggregateError when malformed."""
    if isinstance(record, RawAggregate):
        return record
    try:
        return RawAggregate.model_validate(record)
    except ValidationError as e:
        raise InvalidAggregateError(f"Invalid monthly total {record!r}: {e}") from e


def aggregate(
    records: Iterable[Union[RawAggregate, Mapping[str, Any]]],
) -> list[MonthBucket]:
    """
    Group monthly category totals into a chronological series.

    Args:
        records: RawAggregate instances, or raw API mappings
                 (``{"year", "month", "category", "totalAmount"}``)

    Returns:
        One MonthBucket per distinct (year, month), ascending.
        Totals sharing (year, month, category) are summed.

    Raises:
        InvalidAggregateError: If any record is malformed, or a month's
                               category total overflows
    """
    totals: dict[tuple[int, int], dict[str, float]] = defaultdict(
        lambda: defaultdict(float)
    )

    for record in records:
        item = coerce_record(record)
        bucket = totals[(item.year, item.month)]
        bucket[item.category] += item.total_amount
        if not math.isfinite(bucket[item.category]):
            raise InvalidAggregateError(
                f"Total for {item.category} in {month_label(item.year, item.month)} "
                f"overflows"
            )

    return [
        MonthBucket(
            year=year,
            month=month,
            label=month_label(year, month),
            category_totals=dict(category_totals),
        )
        for (year, month), category_totals in sorted(totals.items())
    ]
