"""
Expense Form Validation

DESIGN DECISION: Each form field is an explicit state record:

    FieldState(value, touched, error)

The error is recomputed by a pure rule function on every change, and
only shown once the field has been touched (blurred or submitted).
There is no loose bag of optional error strings to keep in sync.

IMPORTANT: Validation NEVER silently fixes input.
An amount over the limit is reported, not capped.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from expense_tracker.config import get_settings
from expense_tracker.models.expense import (
    MAX_NOTES_LENGTH,
    Expense,
    ExpenseCategory,
    PaymentMode,
)


class FormField(str, Enum):
    """Fields on the add-expense form."""
    AMOUNT = "amount"
    CATEGORY = "category"
    DATE = "date"
    PAYMENT_MODE = "payment_mode"
    NOTES = "notes"


class FieldErrorKind(str, Enum):
    """Why a field value was rejected."""
    REQUIRED = "required"
    INVALID_NUMBER = "invalid_number"
    NOT_POSITIVE = "not_positive"
    EXCEEDS_MAXIMUM = "exceeds_maximum"
    INVALID_CATEGORY = "invalid_category"
    INVALID_DATE = "invalid_date"
    FUTURE_DATE = "future_date"
    INVALID_PAYMENT_MODE = "invalid_payment_mode"
    TOO_LONG = "too_long"


def _parse_amount(value: Any) -> Optional[Decimal]:
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        return None


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ExpenseValidator:
    """
    Field rules for the add-expense form.

    Limits come from AppSettings unless given explicitly.
    """

    def __init__(
        self,
        max_amount: Optional[float] = None,
        max_notes_length: Optional[int] = None,
        currency_symbol: Optional[str] = None,
    ):
        settings = get_settings().app
        self.max_amount = Decimal(str(
            max_amount if max_amount is not None else settings.max_expense_amount
        ))
        self.max_notes_length = (
            max_notes_length if max_notes_length is not None
            else settings.max_notes_length
        )
        if self.max_notes_length > MAX_NOTES_LENGTH:
            raise ValueError(
                f"Notes limit {self.max_notes_length} exceeds the expense "
                f"record limit of {MAX_NOTES_LENGTH}"
            )
        self.currency_symbol = currency_symbol or settings.currency_symbol

    def validate_field(
        self,
        field: FormField,
        value: Any,
        today: Optional[date] = None,
    ) -> Optional[FieldErrorKind]:
        """
        Check one field value.

        Returns None when the value is acceptable, otherwise the reason.
        """
        if field == FormField.AMOUNT:
            if _is_blank(value):
                return FieldErrorKind.REQUIRED
            amount = _parse_amount(value)
            if amount is None:
                return FieldErrorKind.INVALID_NUMBER
            if amount <= 0:
                return FieldErrorKind.NOT_POSITIVE
            if amount > self.max_amount:
                return FieldErrorKind.EXCEEDS_MAXIMUM
            return None

        if field == FormField.CATEGORY:
            try:
                ExpenseCategory(value)
            except ValueError:
                return FieldErrorKind.INVALID_CATEGORY
            return None

        if field == FormField.DATE:
            if _is_blank(value):
                return FieldErrorKind.REQUIRED
            parsed = _parse_date(value)
            if parsed is None:
                return FieldErrorKind.INVALID_DATE
            if parsed > (today or date.today()):
                return FieldErrorKind.FUTURE_DATE
            return None

        if field == FormField.PAYMENT_MODE:
            try:
                PaymentMode(value)
            except ValueError:
                return FieldErrorKind.INVALID_PAYMENT_MODE
            return None

        if field == FormField.NOTES:
            if value is not None and len(str(value)) > self.max_notes_length:
                return FieldErrorKind.TOO_LONG
            return None

        raise ValueError(f"Unknown form field: {field!r}")

    def message_for(self, field: FormField, kind: FieldErrorKind) -> str:
        """User-facing text for an error on a field."""
        if kind == FieldErrorKind.REQUIRED:
            return f"{_FIELD_LABELS[field]} is required"
        if kind == FieldErrorKind.EXCEEDS_MAXIMUM:
            return f"Amount cannot exceed {self.currency_symbol}{self.max_amount:,.0f}"
        if kind == FieldErrorKind.TOO_LONG:
            return f"Notes cannot exceed {self.max_notes_length} characters"
        return _STATIC_MESSAGES[kind]


_FIELD_LABELS = {
    FormField.AMOUNT: "Amount",
    FormField.CATEGORY: "Category",
    FormField.DATE: "Date",
    FormField.PAYMENT_MODE: "Payment mode",
    FormField.NOTES: "Notes",
}

_STATIC_MESSAGES = {
    FieldErrorKind.INVALID_NUMBER: "Amount must be a number",
    FieldErrorKind.NOT_POSITIVE: "Amount must be greater than 0",
    FieldErrorKind.INVALID_CATEGORY: "Please select a valid category",
    FieldErrorKind.INVALID_DATE: "Please enter a valid date",
    FieldErrorKind.FUTURE_DATE: "Date cannot be in the future",
    FieldErrorKind.INVALID_PAYMENT_MODE: "Please select a valid payment mode",
}


class FieldState(BaseModel):
    """Current value of one form field, whether the user has touched it, and its error."""
    model_config = ConfigDict(frozen=True)

    value: Any = None
    touched: bool = False
    error: Optional[FieldErrorKind] = None


class ExpenseFormState(BaseModel):
    """
    Immutable snapshot of the add-expense form.

    Every transition returns a new state; errors are recomputed
    from the value each time it changes.
    """
    model_config = ConfigDict(frozen=True)

    fields: dict[FormField, FieldState]

    @classmethod
    def initial(
        cls,
        validator: ExpenseValidator,
        today: Optional[date] = None,
    ) -> "ExpenseFormState":
        """Fresh form: empty amount and notes, Others / UPI, dated today."""
        today = today or date.today()
        values = {
            FormField.AMOUNT: "",
            FormField.CATEGORY: ExpenseCategory.OTHERS,
            FormField.DATE: today,
            FormField.PAYMENT_MODE: PaymentMode.UPI,
            FormField.NOTES: "",
        }
        return cls(fields={
            field: FieldState(
                value=value,
                error=validator.validate_field(field, value, today),
            )
            for field, value in values.items()
        })

    def value(self, field: FormField) -> Any:
        return self.fields[field].value

    def change(
        self,
        field: FormField,
        value: Any,
        validator: ExpenseValidator,
        today: Optional[date] = None,
    ) -> "ExpenseFormState":
        """New state with ``field`` set to ``value`` and its error recomputed."""
        current = self.fields[field]
        updated = FieldState(
            value=value,
            touched=current.touched,
            error=validator.validate_field(field, value, today),
        )
        return self.model_copy(update={"fields": {**self.fields, field: updated}})

    def blur(self, field: FormField) -> "ExpenseFormState":
        """New state with ``field`` marked as touched."""
        updated = self.fields[field].model_copy(update={"touched": True})
        return self.model_copy(update={"fields": {**self.fields, field: updated}})

    def touch_all(self) -> "ExpenseFormState":
        return self.model_copy(update={"fields": {
            field: state.model_copy(update={"touched": True})
            for field, state in self.fields.items()
        }})

    @property
    def is_valid(self) -> bool:
        return all(state.error is None for state in self.fields.values())

    def visible_error(
        self,
        field: FormField,
        validator: ExpenseValidator,
    ) -> Optional[str]:
        """Error message to display, only once the field is touched."""
        state = self.fields[field]
        if state.touched and state.error is not None:
            return validator.message_for(field, state.error)
        return None

    def errors(self, validator: ExpenseValidator) -> dict[str, str]:
        """All current errors, touched or not, keyed by field name."""
        return {
            field.value: validator.message_for(field, state.error)
            for field, state in self.fields.items()
            if state.error is not None
        }

    def to_expense(self) -> Expense:
        """
        Build the expense to submit.

        Raises:
            ValueError: If any field still has an error
        """
        if not self.is_valid:
            raise ValueError("Cannot build an expense from an invalid form")
        return Expense(
            amount=_parse_amount(self.value(FormField.AMOUNT)),
            category=ExpenseCategory(self.value(FormField.CATEGORY)),
            notes=str(self.value(FormField.NOTES) or ""),
            expense_date=_parse_date(self.value(FormField.DATE)),
            payment_mode=PaymentMode(self.value(FormField.PAYMENT_MODE)),
        )
