"""
Analytics Models

Value types for the analytics pipeline:

    RawAggregate[] -> aggregate() -> MonthBucket[] -> summarize() -> AnalyticsSummary

All of them are derived from the fetched data on every request.
Nothing here is cached or shared between requests.
"""

from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class RawAggregate(BaseModel):
    """
    One per-category monthly total as returned by the analytics endpoint.

    Several entries may share (year, month, category); they are summed
    by the aggregator, never overwritten.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)
    category: str = Field(..., min_length=1)
    total_amount: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        alias="totalAmount",
        description="Sum of the category's expenses in that month"
    )


class MonthBucket(BaseModel):
    """
    Aggregated spending for one (year, month).

    category_totals only holds categories seen in that month;
    an absent category reads as zero through amount_for(). It is a
    read-only view, so a bucket cannot change after aggregation.
    """
    model_config = ConfigDict(frozen=True)

    year: int
    month: int
    label: str
    category_totals: Mapping[str, float] = Field(default_factory=dict, validate_default=True)

    @field_validator("category_totals")
    @classmethod
    def freeze_totals(cls, v: Mapping[str, float]) -> Mapping[str, float]:
        return MappingProxyType(dict(v))

    @field_serializer("category_totals")
    def serialize_totals(self, totals: Mapping[str, float]) -> dict[str, float]:
        return dict(totals)

    @property
    def key(self) -> tuple[int, int]:
        return (self.year, self.month)

    def amount_for(self, category: str) -> float:
        return self.category_totals.get(category, 0.0)

    def total_for(self, categories: Iterable[str]) -> float:
        return sum(self.amount_for(category) for category in categories)


class Timeframe(str, Enum):
    """
    Window applied to the monthly series.

    The "last N" variants keep the trailing N populated buckets,
    not the last N calendar months.
    """
    ALL_TIME = "all"
    LAST_6_MONTHS = "last6Months"
    LAST_3_MONTHS = "last3Months"

    @property
    def months(self) -> Optional[int]:
        """Number of trailing buckets kept, or None for the whole series."""
        return _TIMEFRAME_MONTHS[self]

    @property
    def display_name(self) -> str:
        return _TIMEFRAME_NAMES[self]


_TIMEFRAME_MONTHS = {
    Timeframe.ALL_TIME: None,
    Timeframe.LAST_6_MONTHS: 6,
    Timeframe.LAST_3_MONTHS: 3,
}

_TIMEFRAME_NAMES = {
    Timeframe.ALL_TIME: "All Time",
    Timeframe.LAST_6_MONTHS: "Last 6 Months",
    Timeframe.LAST_3_MONTHS: "Last 3 Months",
}


class CategoryRanking(BaseModel):
    """A category's total within the window and its share of the grand total."""
    model_config = ConfigDict(frozen=True)

    category: str
    total: float = Field(..., ge=0)
    share_of_total: float = Field(..., ge=0.0, le=1.0)


class SummaryStats(BaseModel):
    """Figures for the summary tiles."""
    model_config = ConfigDict(frozen=True)

    grand_total: float = Field(..., ge=0)
    average_monthly: float = Field(..., ge=0)
    top_category: Optional[str] = Field(
        default=None,
        description="Highest-spending category; None when nothing was spent"
    )
    bucket_count: int = Field(..., ge=0)


class AnalyticsSummary(BaseModel):
    """Everything the analytics page renders for one timeframe."""
    model_config = ConfigDict(frozen=True)

    timeframe: Timeframe
    windowed_series: list[MonthBucket] = Field(default_factory=list)
    rankings: list[CategoryRanking] = Field(default_factory=list)
    stats: SummaryStats

    @property
    def has_data(self) -> bool:
        return len(self.windowed_series) > 0
