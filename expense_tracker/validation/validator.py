"""
Candidate Validation

DESIGN DECISION: Validation collects every issue instead of stopping at
the first one, so the form can show everything that needs fixing.

ERRORS (block the candidate):
- Amount missing, not numeric, or not greater than zero
- Amount that a stored JSON number cannot hold exactly
- Category missing
- Date missing

WARNINGS (shown, never blocking):
- Date not in a recognised format (it is kept as typed)
- Amount above the configured sanity ceiling

IMPORTANT: Validation NEVER silently fixes issues.
It reports them; the store refuses candidates with errors.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import ValidationError

from expense_tracker.config import AppSettings, get_settings
from expense_tracker.models.expense import (
    ExpenseCategory,
    ExpenseInput,
    ValidationIssue,
    ValidationResult,
    fits_json_number,
    parse_amount,
    parse_expense_date,
)


# Mirrors the Field limits on Expense
MAX_LENGTHS = {
    "category": 100,
    "date": 50,
    "description": 1000,
}


class ExpenseValidationError(ValueError):
    """
    A candidate expense was rejected.

    `fields` names every field with an error-level issue, in the
    order they were found.
    """

    def __init__(self, result: ValidationResult):
        self.result = result
        self.issues = [i for i in result.issues if i.severity == "error"]
        self.fields = result.error_fields
        messages = "; ".join(issue.message for issue in self.issues)
        super().__init__(f"Invalid expense: {messages}")


class ExpenseValidator:
    """Validates candidate expenses before the store accepts them."""

    def __init__(self, settings: Optional[AppSettings] = None):
        self._settings = settings or get_settings().app

    def _validate_amount(
        self,
        raw,
    ) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        issues = []

        if raw is None or (isinstance(raw, str) and not raw.strip()):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="missing",
                message="Amount is required",
                severity="error",
                suggested_fix="Enter how much you spent",
            ))
            return None, issues

        amount = parse_amount(raw)
        if amount is None:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="not_numeric",
                message=f"Amount ({raw!r}) is not a number",
                severity="error",
                suggested_fix="Use digits and an optional decimal point, e.g. 12.50",
            ))
            return None, issues

        if amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="non_positive",
                message="Amount must be greater than zero",
                severity="error",
                suggested_fix="Enter a valid amount greater than 0",
            ))
            return amount, issues

        if not fits_json_number(amount):
            issues.append(ValidationIssue(
                field="amount",
                issue_type="not_storable",
                message=f"Amount ({raw!r}) is too large, too small or too precise to save",
                severity="error",
                suggested_fix="Use at most 15 significant digits, e.g. 1234.56",
            ))
            return None, issues

        max_amount = Decimal(str(self._settings.max_expense_amount))
        if amount > max_amount:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="suspicious_value",
                message=f"Amount ({amount:,.2f}) seems unusually high",
                severity="warning",
                suggested_fix="Please verify this amount is correct",
            ))

        return amount, issues

    def _validate_category(self, category: Optional[str]) -> list[ValidationIssue]:
        if not category:
            return [ValidationIssue(
                field="category",
                issue_type="missing",
                message="Category is required",
                severity="error",
                suggested_fix="Pick a category or type your own",
            )]
        if not ExpenseCategory.is_recommended(category):
            return [ValidationIssue(
                field="category",
                issue_type="custom",
                message=f"Using custom category '{category}'",
                severity="info",
            )]
        return []

    def _validate_date(self, value: Optional[str]) -> list[ValidationIssue]:
        if not value:
            return [ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
                severity="error",
                suggested_fix="Enter the date as MM/DD/YYYY or tap Today",
            )]
        if parse_expense_date(value) is None:
            return [ValidationIssue(
                field="date",
                issue_type="unparseable",
                message=f"Date ({value!r}) is not in MM/DD/YYYY format and will be shown as typed",
                severity="warning",
                suggested_fix="Use MM/DD/YYYY",
            )]
        return []

    def _validate_lengths(self, candidate: ExpenseInput) -> list[ValidationIssue]:
        issues = []
        for field, value in (
            ("category", candidate.category),
            ("date", candidate.date),
            ("description", candidate.description),
        ):
            limit = MAX_LENGTHS[field]
            if value and len(value) > limit:
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="too_long",
                    message=f"{field.capitalize()} is longer than {limit} characters",
                    severity="error",
                    suggested_fix="Shorten it",
                ))
        return issues

    def parse_candidate(self, data: dict[str, Any]) -> ExpenseInput:
        """
        Build a candidate from a plain mapping.

        Raises:
            ExpenseValidationError: If a field has the wrong type
        """
        try:
            return ExpenseInput.model_validate(data)
        except ValidationError as e:
            issues = []
            for error in e.errors():
                field = str(error["loc"][0]) if error["loc"] else "expense"
                issues.append(ValidationIssue(
                    field=field,
                    issue_type="wrong_type",
                    message=f"{field.capitalize()}: {error['msg']}",
                    severity="error",
                ))
            raise ExpenseValidationError(
                ValidationResult(is_valid=False, issues=issues)
            ) from e

    def validate(self, candidate: ExpenseInput) -> ValidationResult:
        """
        Validate a candidate.

        Args:
            candidate: Raw form input

        Returns:
            ValidationResult with all issues found and the parsed amount
        """
        amount, issues = self._validate_amount(candidate.amount)
        issues.extend(self._validate_category(candidate.category))
        issues.extend(self._validate_date(candidate.date))
        issues.extend(self._validate_lengths(candidate))

        warnings = [i.message for i in issues if i.severity == "warning"]
        is_valid = not any(i.severity == "error" for i in issues)

        return ValidationResult(
            is_valid=is_valid,
            amount=amount,
            issues=issues,
            warnings=warnings,
        )

    def validate_or_raise(self, candidate: ExpenseInput) -> ValidationResult:
        """Validate and raise ExpenseValidationError on any error."""
        result = self.validate(candidate)
        if not result.is_valid:
            raise ExpenseValidationError(result)
        return result

    def get_user_friendly_summary(
        self,
        result: ValidationResult,
    ) -> str:
        """
        Generate a short summary of validation results for the form.
        """
        if result.is_valid and not result.warnings:
            return "All checks passed."

        lines = []

        if result.has_errors:
            lines.append("Please fix the following:")
            for issue in result.issues:
                if issue.severity == "error":
                    lines.append(f"   • {issue.message}")
                    if issue.suggested_fix:
                        lines.append(f"     {issue.suggested_fix}")

        if result.warnings:
            if lines:
                lines.append("")
            lines.append("Please verify the following:")
            for warning in result.warnings:
                lines.append(f"   • {warning}")

        return "\n".join(lines)
