"""
Core Expense Models

These models define the schemas for expense records exchanged with the
remote API and for the filters the list view sends along with a fetch.

DESIGN DECISION: Categories and payment modes are closed enumerations.
Their declaration order is the single ordering used by form validation,
filter menus and analytics ranking tie-breaks.
"""

from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
)


# Longest notes an expense can carry; form limits may be lower, never higher
MAX_NOTES_LENGTH = 500


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Supported expense categories.

    Order matters: analytics rankings break ties by this order.
    """
    RENTAL = "Rental"
    GROCERIES = "Groceries"
    ENTERTAINMENT = "Entertainment"
    TRAVEL = "Travel"
    OTHERS = "Others"


class PaymentMode(str, Enum):
    """How an expense was paid."""
    UPI = "UPI"
    CREDIT_CARD = "Credit Card"
    NET_BANKING = "Net Banking"
    CASH = "Cash"


class DateRange(str, Enum):
    """
    Date-range presets understood by the expenses API.

    The API applies these server-side; start_date() mirrors the rule
    for data sources that filter locally.
    """
    THIS_MONTH = "This Month"
    LAST_30_DAYS = "Last 30 Days"
    LAST_90_DAYS = "Last 90 Days"
    ALL_TIME = "All time"

    def start_date(self, today: date) -> Optional[date]:
        """First date included by this range, or None when unbounded."""
        if self is DateRange.THIS_MONTH:
            return today.replace(day=1)
        if self is DateRange.LAST_30_DAYS:
            return today - timedelta(days=30)
        if self is DateRange.LAST_90_DAYS:
            return today - timedelta(days=90)
        return None


# =============================================================================
# EXPENSE RECORD
# =============================================================================

class Expense(BaseModel):
    """
    A single expense entry.

    Field aliases match the API's JSON (`_id`, `date`, `paymentMode`);
    either the alias or the Python name is accepted on input.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    id: Optional[str] = Field(
        default=None,
        alias="_id",
        description="Identifier assigned by storage"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount in the app currency"
    )
    category: ExpenseCategory
    notes: str = Field(
        default="",
        max_length=MAX_NOTES_LENGTH,
        description="Free-text notes"
    )
    expense_date: date = Field(
        ...,
        alias="date",
        description="Day the money was spent"
    )
    payment_mode: PaymentMode = Field(
        ...,
        alias="paymentMode",
    )

    @field_serializer('amount')
    def serialize_amount(self, amount: Decimal) -> float:
        # The API stores amounts as JSON numbers
        return float(amount)

    def to_api_payload(self) -> dict:
        """JSON body for creating this expense."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})

    def matches_search(self, term: str) -> bool:
        """Case-insensitive match against notes, category and payment mode."""
        needle = term.strip().lower()
        if not needle:
            return True
        return (
            needle in self.notes.lower()
            or needle in self.category.value.lower()
            or needle in self.payment_mode.value.lower()
        )


class ExpenseFilters(BaseModel):
    """
    Filters for the expense list.

    date_range, categories and payment_modes are sent to the data source;
    search_term is applied client-side on the fetched records.
    """

    date_range: Optional[DateRange] = None
    categories: list[ExpenseCategory] = Field(default_factory=list)
    payment_modes: list[PaymentMode] = Field(default_factory=list)
    search_term: str = ""

    def to_query_params(self) -> dict[str, str]:
        """Query-string parameters for the expenses API (empty ones omitted)."""
        params = {}
        if self.date_range:
            params["dateRange"] = self.date_range.value
        if self.categories:
            params["categories"] = ",".join(c.value for c in self.categories)
        if self.payment_modes:
            params["paymentModes"] = ",".join(m.value for m in self.payment_modes)
        return params
