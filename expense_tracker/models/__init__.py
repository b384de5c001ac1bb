"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.expense import (
    DateRange,
    Expense,
    ExpenseCategory,
    ExpenseFilters,
    PaymentMode,
)
from expense_tracker.models.analytics import (
    AnalyticsSummary,
    CategoryRanking,
    MonthBucket,
    RawAggregate,
    SummaryStats,
    Timeframe,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "DateRange",
    "Expense",
    "ExpenseCategory",
    "ExpenseFilters",
    "PaymentMode",
    # Analytics models
    "AnalyticsSummary",
    "CategoryRanking",
    "MonthBucket",
    "RawAggregate",
    "SummaryStats",
    "Timeframe",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
