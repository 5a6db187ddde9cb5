"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
All data flowing through the system must conform to these schemas.
"""

from expense_tracker.models.expense import (
    CURRENT_SCHEMA_VERSION,
    CategoryTotal,
    Expense,
    ExpenseCategory,
    ExpenseInput,
    ExpenseLedger,
    ExpenseStats,
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

__all__ = [
    # Expense models
    "CURRENT_SCHEMA_VERSION",
    "CategoryTotal",
    "Expense",
    "ExpenseCategory",
    "ExpenseInput",
    "ExpenseLedger",
    "ExpenseStats",
    "ValidationIssue",
    "ValidationResult",
    "fits_json_number",
    "parse_amount",
    "parse_expense_date",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
