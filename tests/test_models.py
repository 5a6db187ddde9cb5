"""
Tests for Expense Tracker models

Test strategy:
1. Unit tests for models, validation, aggregation and formatting
2. Store tests against in-memory and on-disk storage
3. No real user data touched (tmp_path for files)
"""

import json
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from expense_tracker.models.expense import (
    CURRENT_SCHEMA_VERSION,
    Expense,
    ExpenseCategory,
    ExpenseInput,
    ExpenseLedger,
    ValidationIssue,
    ValidationResult,
    fits_json_number,
    parse_amount,
    parse_expense_date,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestExpenseModel:
    """Tests for the Expense record."""

    def test_expense_creation(self):
        """Test Expense creation assigns id and timestamp."""
        expense = Expense(
            amount=Decimal("42.50"),
            category="Food",
            date="03/15/2024",
        )
        assert expense.amount == Decimal("42.50")
        assert expense.description == ""
        assert expense.id
        assert expense.timestamp.tzinfo is not None

    def test_expense_ids_are_unique(self):
        """Test that generated ids differ."""
        a = Expense(amount=1, category="Food", date="03/15/2024")
        b = Expense(amount=1, category="Food", date="03/15/2024")
        assert a.id != b.id

    def test_expense_strips_whitespace(self):
        """Test that whitespace is stripped from text fields."""
        expense = Expense(amount=5, category="  Food ", date=" 03/15/2024 ", description=" lunch ")
        assert expense.category == "Food"
        assert expense.date == "03/15/2024"
        assert expense.description == "lunch"

    @pytest.mark.parametrize("amount", [0, -1, Decimal("-0.01")])
    def test_expense_rejects_non_positive_amount(self, amount):
        """Test that amounts must be greater than zero."""
        with pytest.raises(ValueError):
            Expense(amount=amount, category="Food", date="03/15/2024")

    def test_expense_rejects_empty_category(self):
        with pytest.raises(ValueError):
            Expense(amount=1, category="   ", date="03/15/2024")

    def test_expense_is_frozen(self):
        """Records cannot be edited once created."""
        expense = Expense(amount=1, category="Food", date="03/15/2024")
        with pytest.raises(ValueError):
            expense.amount = Decimal("2")

    def test_float_amount_keeps_decimal_value(self):
        expense = Expense(amount=0.1, category="Food", date="03/15/2024")
        assert expense.amount == Decimal("0.1")

    def test_naive_timestamp_is_utc(self):
        expense = Expense(
            amount=1,
            category="Food",
            date="03/15/2024",
            timestamp=datetime(2024, 3, 15, 10, 0),
        )
        assert expense.timestamp.tzinfo == timezone.utc

    def test_json_amount_is_number(self):
        """Amounts are stored as JSON numbers."""
        expense = Expense(amount=Decimal("42.50"), category="Food", date="03/15/2024")
        data = json.loads(expense.model_dump_json())
        assert data["amount"] == 42.5
        assert set(data) == {"id", "amount", "category", "date", "description", "timestamp"}

    @pytest.mark.parametrize("amount", ["1e400", "1e-400", "12345678901234567.89"])
    def test_rejects_amount_json_cannot_hold(self, amount):
        with pytest.raises(ValueError):
            Expense(amount=Decimal(amount), category="Food", date="03/15/2024")

    def test_in_month_uses_timestamp(self):
        expense = Expense(
            amount=1,
            category="Food",
            date="01/01/2020",
            timestamp=datetime(2024, 3, 31, 23, 59, tzinfo=timezone.utc),
        )
        assert expense.in_month(3, 2024) is True
        assert expense.in_month(1, 2020) is False


class TestExpenseInput:
    """Tests for the candidate model."""

    def test_defaults(self):
        candidate = ExpenseInput()
        assert candidate.amount is None
        assert candidate.category is None
        assert candidate.date is None
        assert candidate.description == ""

    def test_keeps_raw_amount_string(self):
        candidate = ExpenseInput(amount="abc", category="Food", date="03/15/2024")
        assert candidate.amount == "abc"

    def test_keeps_boolean_amount_as_entered(self):
        """Booleans must reach the validator, not be coerced to 1/0."""
        candidate = ExpenseInput(amount=True, category="Food", date="03/15/2024")
        assert candidate.amount is True

    def test_none_description_is_empty(self):
        candidate = ExpenseInput(amount="5", category="Food", date="03/15/2024", description=None)
        assert candidate.description == ""


class TestExpenseLedger:
    """Tests for the persistence envelope."""

    def test_default_version(self):
        ledger = ExpenseLedger()
        assert ledger.schema_version == CURRENT_SCHEMA_VERSION
        assert ledger.expenses == []

    def test_reads_legacy_record_shape(self):
        """Records from the unversioned list format load unchanged."""
        ledger = ExpenseLedger.model_validate({
            "schema_version": 0,
            "expenses": [{
                "id": "1710496800000",
                "amount": 42.5,
                "category": "Food",
                "date": "03/15/2024",
                "description": "",
                "timestamp": "2024-03-15T10:00:00.000Z",
            }],
        })
        expense = ledger.expenses[0]
        assert expense.id == "1710496800000"
        assert expense.amount == Decimal("42.5")
        assert expense.timestamp == datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc)


class TestParsers:
    """Tests for amount and date parsing helpers."""

    @pytest.mark.parametrize("raw,expected", [
        ("42.50", Decimal("42.50")),
        (" 10 ", Decimal("10")),
        ("1,234.5", Decimal("1234.5")),
        (7, Decimal("7")),
        (0.1, Decimal("0.1")),
        ("-3", Decimal("-3")),
    ])
    def test_parse_amount_numbers(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "abc", "$5", "nan", "inf", True])
    def test_parse_amount_rejects(self, raw):
        assert parse_amount(raw) is None

    def test_parse_expense_date_formats(self):
        assert parse_expense_date("03/15/2024").isoformat() == "2024-03-15"
        assert parse_expense_date("2024-03-15").isoformat() == "2024-03-15"
        assert parse_expense_date("2024-03-15T10:00:00.000Z").isoformat() == "2024-03-15"

    @pytest.mark.parametrize("raw,expected", [
        ("42.50", True),
        ("0.1", True),
        ("123456789012.345", True),
        ("1e400", False),
        ("1e-400", False),
        ("12345678901234567.89", False),
    ])
    def test_fits_json_number(self, raw, expected):
        assert fits_json_number(Decimal(raw)) is expected

    @pytest.mark.parametrize("raw", [None, "", "yesterday", "13/45/2024", "03/15"])
    def test_parse_expense_date_rejects(self, raw):
        assert parse_expense_date(raw) is None


class TestExpenseCategories:
    """Tests for the recommended category set."""

    def test_all_categories_exist(self):
        expected = [
            "Food", "Transport", "Shopping", "Entertainment",
            "Health", "Bills", "Education", "Other",
        ]
        assert [c.value for c in ExpenseCategory] == expected

    def test_is_recommended(self):
        assert ExpenseCategory.is_recommended("Food") is True
        assert ExpenseCategory.is_recommended("Pets") is False


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        result = ValidationResult(
            is_valid=False,
            issues=[
                ValidationIssue(
                    field="amount",
                    issue_type="missing",
                    message="Amount is required",
                    severity="error",
                ),
                ValidationIssue(
                    field="date",
                    issue_type="missing",
                    message="Date is required",
                    severity="error",
                ),
            ],
        )
        assert result.has_errors is True
        assert result.error_count == 2
        assert result.error_fields == ["amount", "date"]

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(
            is_valid=True,
            issues=[
                ValidationIssue(
                    field="date",
                    issue_type="unparseable",
                    message="Odd date",
                    severity="warning",
                ),
            ],
        )
        assert result.has_errors is False
        assert result.error_count == 0
        assert result.error_fields == []

    def test_issue_severity_pattern(self):
        with pytest.raises(ValueError):
            ValidationIssue(field="x", issue_type="y", message="z", severity="fatal")


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.EXPENSES_LOADED,
            description="Loaded",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.is_user_action is False

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.expense_added(
            expense_id="abc",
            category="Food",
            amount="42.50",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "expense_added"
        assert log_dict["expense_id"] == "abc"
        assert log_dict["details"]["amount"] == "42.50"
        assert log_dict["correlation_id"] is None

    def test_save_failed_is_error(self):
        event = AuditEventBuilder.save_failed(
            operation="append",
            error_message="disk full",
            rolled_back=True,
        )
        assert event.severity == AuditSeverity.ERROR
        assert event.details == {"operation": "append", "rolled_back": True}

    def test_validation_failed_counts_issues(self):
        event = AuditEventBuilder.validation_failed(
            issues=[{"field": "amount"}, {"field": "date"}],
        )
        assert event.event_type == AuditEventType.VALIDATION_FAILED
        assert "2 issues" in event.description
        assert event.is_user_action is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
