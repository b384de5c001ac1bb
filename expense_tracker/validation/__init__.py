"""Form validation package."""

from expense_tracker.validation.validator import (
    ExpenseFormState,
    ExpenseValidator,
    FieldErrorKind,
    FieldState,
    FormField,
)

__all__ = [
    "ExpenseFormState",
    "ExpenseValidator",
    "FieldErrorKind",
    "FieldState",
    "FormField",
]
