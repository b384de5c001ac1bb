"""View-model helpers that turn analytics results into chart and table rows."""

from typing import Iterable, Sequence

from expense_tracker.models.analytics import CategoryRanking, MonthBucket


def series_chart_rows(
    series: Sequence[MonthBucket],
    categories: Iterable[str],
) -> list[dict]:
    """
    One row per month for a stacked bar chart.

    Every category gets a column; months without spending in a
    category show 0.0 rather than a missing key.
    """
    names = [str(getattr(category, "value", category)) for category in categories]
    return [
        {"label": bucket.label, **{name: bucket.amount_for(name) for name in names}}
        for bucket in series
    ]


def breakdown_rows(rankings: Sequence[CategoryRanking]) -> list[dict]:
    """Rows for the category breakdown list, with shares as percentages."""
    return [
        {
            "category": ranking.category,
            "total": ranking.total,
            "percent": round(ranking.share_of_total * 100, 1),
        }
        for ranking in rankings
    ]


def format_amount(value: float, currency_symbol: str = "₹", decimals: int = 2) -> str:
    """Format an amount with grouped thousands, e.g. ``₹1,234.50``."""
    return f"{currency_symbol}{value:,.{decimals}f}"
