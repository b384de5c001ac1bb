"""Errors raised by the analytics pipeline when a caller breaks its input contract."""


class AnalyticsError(ValueError):
    """Base exception for analytics input errors."""
    pass


class InvalidAggregateError(AnalyticsError):
    """A monthly category total is malformed (bad month, negative or non-finite amount)."""
    pass


class SeriesOrderError(AnalyticsError):
    """A monthly series is not strictly chronological."""
    pass


class InvalidWindowError(AnalyticsError):
    """The requested timeframe is not a known variant."""
    pass


class InvalidCategoriesError(AnalyticsError):
    """The known-category list is not an ordered set."""
    pass
