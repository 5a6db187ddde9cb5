"""Tests for candidate validation."""

from decimal import Decimal

import pytest

from expense_tracker.models.expense import ExpenseInput
from expense_tracker.validation import ExpenseValidationError


def make_candidate(**overrides) -> ExpenseInput:
    fields = {
        "amount": "42.50",
        "category": "Food",
        "date": "03/15/2024",
        "description": "",
    }
    fields.update(overrides)
    return ExpenseInput(**fields)


class TestRequiredFields:
    """Errors that block a candidate."""

    def test_valid_candidate(self, validator):
        result = validator.validate(make_candidate())
        assert result.is_valid is True
        assert result.amount == Decimal("42.50")
        assert result.issues == []

    @pytest.mark.parametrize("amount", [None, "", "   "])
    def test_missing_amount(self, validator, amount):
        result = validator.validate(make_candidate(amount=amount))
        assert result.is_valid is False
        assert result.issues[0].field == "amount"
        assert result.issues[0].issue_type == "missing"

    @pytest.mark.parametrize("amount", ["abc", "12..5", "$10"])
    def test_non_numeric_amount(self, validator, amount):
        result = validator.validate(make_candidate(amount=amount))
        assert result.is_valid is False
        assert result.issues[0].issue_type == "not_numeric"

    @pytest.mark.parametrize("amount", ["0", "-5", 0, -0.01, Decimal("0.00")])
    def test_non_positive_amount(self, validator, amount):
        result = validator.validate(make_candidate(amount=amount))
        assert result.is_valid is False
        assert result.issues[0].issue_type == "non_positive"

    @pytest.mark.parametrize("amount", [True, False])
    def test_boolean_amount_is_not_numeric(self, validator, amount):
        result = validator.validate(make_candidate(amount=amount))
        assert result.is_valid is False
        assert result.issues[0].issue_type == "not_numeric"

    @pytest.mark.parametrize("amount", ["1e400", "1e-400", "12345678901234567.89"])
    def test_amount_that_cannot_be_stored(self, validator, amount):
        """Amounts a JSON number can't hold exactly are errors, not warnings."""
        result = validator.validate(make_candidate(amount=amount))
        assert result.is_valid is False
        assert result.error_fields == ["amount"]
        assert result.issues[0].issue_type == "not_storable"
        assert result.amount is None

    @pytest.mark.parametrize("category", [None, "", "  "])
    def test_missing_category(self, validator, category):
        result = validator.validate(make_candidate(category=category))
        assert result.is_valid is False
        assert result.error_fields == ["category"]

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_date(self, validator, value):
        result = validator.validate(make_candidate(date=value))
        assert result.is_valid is False
        assert result.error_fields == ["date"]

    def test_reports_every_failing_field(self, validator):
        result = validator.validate(ExpenseInput())
        assert result.error_fields == ["amount", "category", "date"]
        assert result.error_count == 3

    def test_overlong_description(self, validator):
        result = validator.validate(make_candidate(description="x" * 1001))
        assert result.is_valid is False
        assert result.issues[0].issue_type == "too_long"


class TestWarnings:
    """Issues that are shown but don't block."""

    def test_unparseable_date_is_warning(self, validator):
        result = validator.validate(make_candidate(date="sometime in March"))
        assert result.is_valid is True
        assert result.issues[0].issue_type == "unparseable"
        assert len(result.warnings) == 1

    def test_high_amount_is_warning(self, validator):
        # Fixture ceiling is 10000
        result = validator.validate(make_candidate(amount="20000"))
        assert result.is_valid is True
        assert result.issues[0].issue_type == "suspicious_value"

    def test_custom_category_is_info(self, validator):
        result = validator.validate(make_candidate(category="Pets"))
        assert result.is_valid is True
        assert result.issues[0].severity == "info"
        assert result.warnings == []


class TestValidateOrRaise:
    """Tests for the raising entry point and its error."""

    def test_raises_with_fields(self, validator):
        with pytest.raises(ExpenseValidationError) as exc_info:
            validator.validate_or_raise(make_candidate(amount="-1", date=""))
        error = exc_info.value
        assert error.fields == ["amount", "date"]
        assert len(error.issues) == 2
        assert "greater than zero" in str(error)

    def test_is_value_error(self, validator):
        with pytest.raises(ValueError):
            validator.validate_or_raise(make_candidate(amount=None))

    def test_returns_result_when_valid(self, validator):
        result = validator.validate_or_raise(make_candidate())
        assert result.is_valid is True


class TestParseCandidate:
    """Tests for building candidates from plain mappings."""

    def test_valid_mapping(self, validator):
        candidate = validator.parse_candidate(
            {"amount": 5, "category": "Food", "date": "03/15/2024", "description": None}
        )
        assert candidate.amount == 5
        assert candidate.description == ""

    def test_wrong_types_raise_expense_validation_error(self, validator):
        with pytest.raises(ExpenseValidationError) as exc_info:
            validator.parse_candidate({"amount": "5", "category": 12, "date": ["03/15/2024"]})
        error = exc_info.value
        assert error.fields == ["category", "date"]
        assert all(issue.issue_type == "wrong_type" for issue in error.issues)


class TestSummary:
    """Tests for the user-facing summary."""

    def test_all_clear(self, validator):
        result = validator.validate(make_candidate())
        assert validator.get_user_friendly_summary(result) == "All checks passed."

    def test_errors_and_warnings(self, validator):
        result = validator.validate(make_candidate(amount="0", date="someday"))
        summary = validator.get_user_friendly_summary(result)
        assert "Please fix the following:" in summary
        assert "Amount must be greater than zero" in summary
        assert "Please verify the following:" in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
