"""Tests for the add-expense form rules and form state."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from expense_tracker.models.expense import MAX_NOTES_LENGTH, ExpenseCategory, PaymentMode
from expense_tracker.validation import (
    ExpenseFormState,
    ExpenseValidator,
    FieldErrorKind,
    FormField,
)


TODAY = date(2024, 5, 17)


@pytest.fixture
def validator():
    return ExpenseValidator(max_amount=100000, max_notes_length=500, currency_symbol="₹")


@pytest.fixture
def form(validator):
    return ExpenseFormState.initial(validator, TODAY)


class TestAmountRule:
    """Tests for the amount field."""

    @pytest.mark.parametrize("value,expected", [
        ("", FieldErrorKind.REQUIRED),
        ("   ", FieldErrorKind.REQUIRED),
        (None, FieldErrorKind.REQUIRED),
        ("abc", FieldErrorKind.INVALID_NUMBER),
        ("nan", FieldErrorKind.INVALID_NUMBER),
        ("0", FieldErrorKind.NOT_POSITIVE),
        ("-5", FieldErrorKind.NOT_POSITIVE),
        ("100000.01", FieldErrorKind.EXCEEDS_MAXIMUM),
        ("250000", FieldErrorKind.EXCEEDS_MAXIMUM),
    ])
    def test_rejected_amounts(self, validator, value, expected):
        assert validator.validate_field(FormField.AMOUNT, value) == expected

    @pytest.mark.parametrize("value", ["0.01", "450.50", "100000", 12, Decimal("99.9")])
    def test_accepted_amounts(self, validator, value):
        assert validator.validate_field(FormField.AMOUNT, value) is None

    def test_over_maximum_is_reported_not_capped(self, validator, form):
        """Test an amount over the limit stays as typed and carries an error."""
        form = form.change(FormField.AMOUNT, "150000", validator)
        assert form.value(FormField.AMOUNT) == "150000"
        assert form.fields[FormField.AMOUNT].error == FieldErrorKind.EXCEEDS_MAXIMUM

    def test_custom_maximum(self):
        validator = ExpenseValidator(max_amount=50, max_notes_length=10, currency_symbol="$")
        assert validator.validate_field(FormField.AMOUNT, "51") == FieldErrorKind.EXCEEDS_MAXIMUM
        assert validator.message_for(
            FormField.AMOUNT, FieldErrorKind.EXCEEDS_MAXIMUM
        ) == "Amount cannot exceed $50"


class TestOtherRules:
    """Tests for category, date, payment mode and notes."""

    def test_category(self, validator):
        assert validator.validate_field(FormField.CATEGORY, "Groceries") is None
        assert validator.validate_field(FormField.CATEGORY, ExpenseCategory.TRAVEL) is None
        assert validator.validate_field(
            FormField.CATEGORY, "Education"
        ) == FieldErrorKind.INVALID_CATEGORY
        assert validator.validate_field(
            FormField.CATEGORY, ""
        ) == FieldErrorKind.INVALID_CATEGORY

    def test_payment_mode(self, validator):
        assert validator.validate_field(FormField.PAYMENT_MODE, "Net Banking") is None
        assert validator.validate_field(
            FormField.PAYMENT_MODE, "Cheque"
        ) == FieldErrorKind.INVALID_PAYMENT_MODE

    @pytest.mark.parametrize("value,expected", [
        (TODAY, None),
        (date(2023, 1, 1), None),
        ("2024-05-01", None),
        (datetime(2024, 5, 17, 23, 59), None),
        (date(2024, 5, 18), FieldErrorKind.FUTURE_DATE),
        ("", FieldErrorKind.REQUIRED),
        ("17/05/2024", FieldErrorKind.INVALID_DATE),
    ])
    def test_date(self, validator, value, expected):
        assert validator.validate_field(FormField.DATE, value, today=TODAY) == expected

    def test_notes_length(self, validator):
        assert validator.validate_field(FormField.NOTES, "") is None
        assert validator.validate_field(FormField.NOTES, None) is None
        assert validator.validate_field(FormField.NOTES, "x" * 500) is None
        assert validator.validate_field(
            FormField.NOTES, "x" * 501
        ) == FieldErrorKind.TOO_LONG

    def test_non_string_notes(self, validator):
        assert validator.validate_field(FormField.NOTES, 12345) is None
        assert validator.validate_field(
            FormField.NOTES, 10 ** 600
        ) == FieldErrorKind.TOO_LONG

    def test_notes_limit_cannot_exceed_record_limit(self):
        """Test a form limit above what an expense can store is refused up front."""
        with pytest.raises(ValueError):
            ExpenseValidator(max_amount=100, max_notes_length=MAX_NOTES_LENGTH + 1)

    def test_notes_at_limit_build_an_expense(self, validator, form):
        form = (
            form.change(FormField.AMOUNT, "10", validator)
            .change(FormField.NOTES, "x" * MAX_NOTES_LENGTH, validator)
        )
        assert form.is_valid
        assert len(form.to_expense().notes) == MAX_NOTES_LENGTH

    def test_unknown_field(self, validator):
        with pytest.raises(ValueError):
            validator.validate_field("colour", "red")


class TestMessages:
    """Tests for user-facing error text."""

    def test_required_names_the_field(self, validator):
        assert validator.message_for(
            FormField.AMOUNT, FieldErrorKind.REQUIRED
        ) == "Amount is required"
        assert validator.message_for(
            FormField.DATE, FieldErrorKind.REQUIRED
        ) == "Date is required"

    def test_limits_in_messages(self, validator):
        assert validator.message_for(
            FormField.AMOUNT, FieldErrorKind.EXCEEDS_MAXIMUM
        ) == "Amount cannot exceed ₹100,000"
        assert validator.message_for(
            FormField.NOTES, FieldErrorKind.TOO_LONG
        ) == "Notes cannot exceed 500 characters"

    def test_every_kind_has_a_message(self, validator):
        for kind in FieldErrorKind:
            assert validator.message_for(FormField.AMOUNT, kind)


class TestFormState:
    """Tests for ExpenseFormState transitions."""

    def test_initial_values(self, form):
        assert form.value(FormField.AMOUNT) == ""
        assert form.value(FormField.CATEGORY) == ExpenseCategory.OTHERS
        assert form.value(FormField.PAYMENT_MODE) == PaymentMode.UPI
        assert form.value(FormField.DATE) == TODAY
        assert form.value(FormField.NOTES) == ""
        assert not any(state.touched for state in form.fields.values())

    def test_initial_form_is_invalid_but_shows_nothing(self, validator, form):
        """Test the empty amount is an error that stays hidden until touched."""
        assert not form.is_valid
        assert form.fields[FormField.AMOUNT].error == FieldErrorKind.REQUIRED
        assert form.visible_error(FormField.AMOUNT, validator) is None

    def test_blur_reveals_error(self, validator, form):
        form = form.blur(FormField.AMOUNT)
        assert form.visible_error(FormField.AMOUNT, validator) == "Amount is required"

    def test_change_recomputes_error(self, validator, form):
        form = form.blur(FormField.AMOUNT).change(FormField.AMOUNT, "abc", validator)
        assert form.visible_error(FormField.AMOUNT, validator) == "Amount must be a number"
        form = form.change(FormField.AMOUNT, "42", validator)
        assert form.fields[FormField.AMOUNT].error is None
        assert form.fields[FormField.AMOUNT].touched
        assert form.is_valid

    def test_transitions_do_not_mutate(self, validator, form):
        changed = form.change(FormField.AMOUNT, "10", validator)
        assert form.value(FormField.AMOUNT) == ""
        assert changed.value(FormField.AMOUNT) == "10"

    def test_touch_all(self, validator, form):
        form = form.touch_all()
        assert all(state.touched for state in form.fields.values())
        assert form.errors(validator) == {"amount": "Amount is required"}

    def test_future_date_with_explicit_today(self, validator, form):
        form = form.change(FormField.DATE, date(2024, 6, 1), validator, today=TODAY)
        assert form.fields[FormField.DATE].error == FieldErrorKind.FUTURE_DATE

    def test_to_expense(self, validator, form):
        form = (
            form.change(FormField.AMOUNT, "450.50", validator)
            .change(FormField.CATEGORY, "Groceries", validator)
            .change(FormField.PAYMENT_MODE, PaymentMode.CASH, validator)
            .change(FormField.NOTES, "  weekly shop ", validator)
        )
        expense = form.to_expense()
        assert expense.amount == Decimal("450.50")
        assert expense.category == ExpenseCategory.GROCERIES
        assert expense.payment_mode == PaymentMode.CASH
        assert expense.expense_date == TODAY
        assert expense.notes == "weekly shop"
        assert expense.id is None

    def test_to_expense_with_numeric_notes(self, validator, form):
        form = form.change(FormField.AMOUNT, "10", validator).change(FormField.NOTES, 42, validator)
        assert form.to_expense().notes == "42"

    def test_to_expense_refuses_invalid_form(self, form):
        with pytest.raises(ValueError):
            form.to_expense()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
