"""
Core Data Models for Expense Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce the record invariants at runtime (positive amount, non-empty labels)
2. Be serializable to the single JSON payload kept in storage
3. Keep raw user input (candidates) apart from accepted records

DESIGN DECISION: Records are frozen. There is no edit operation, so an
Expense can only be created by the store and removed as a whole.
"""

import math
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
)


CURRENT_SCHEMA_VERSION = 1


def utc_now() -> datetime:
    """Timezone-aware current instant."""
    return datetime.now(timezone.utc)


def new_expense_id() -> str:
    return str(uuid4())


def fits_json_number(amount: Decimal) -> bool:
    """
    Whether an amount survives being stored as a JSON number.

    Amounts are written as floats, so anything that overflows,
    underflows to zero, or carries more precision than a float keeps
    would come back different (or not at all) on the next load.
    """
    as_float = float(amount)
    if not math.isfinite(as_float):
        return False
    return Decimal(repr(as_float)) == amount


# =============================================================================
# ENUMS - Recommended values
# =============================================================================

class ExpenseCategory(str, Enum):
    """
    Recommended expense categories.

    A record's category is a plain string: these are the quick picks,
    and a free-text label is accepted as an override.
    """
    FOOD = "Food"
    TRANSPORT = "Transport"
    SHOPPING = "Shopping"
    ENTERTAINMENT = "Entertainment"
    HEALTH = "Health"
    BILLS = "Bills"
    EDUCATION = "Education"
    OTHER = "Other"

    @classmethod
    def is_recommended(cls, label: str) -> bool:
        return label in {c.value for c in cls}


# =============================================================================
# CORE EXPENSE MODEL
# =============================================================================

class Expense(BaseModel):
    """
    A persisted expense record.

    `timestamp` is the creation instant and drives ordering and monthly
    aggregation. `date` is whatever calendar date the user typed.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(
        default_factory=new_expense_id,
        min_length=1,
        description="Opaque unique identifier, used as the deletion key"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount spent"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Recommended category or free-text label"
    )
    date: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="User-facing date, expected MM/DD/YYYY"
    )
    description: str = Field(
        default="",
        max_length=1000,
        description="Optional note"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="Creation instant (UTC)"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def coerce_float_amount(cls, v):
        """Go through str so 0.1 stays 0.1 instead of its binary expansion."""
        if isinstance(v, float):
            return Decimal(str(v))
        return v

    @field_validator('amount')
    @classmethod
    def check_storable(cls, v: Decimal) -> Decimal:
        if not fits_json_number(v):
            raise ValueError(f"Amount {v} cannot be stored without losing precision")
        return v

    @field_validator('timestamp')
    @classmethod
    def ensure_timezone(cls, v: datetime) -> datetime:
        """Naive timestamps from older payloads are taken as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_serializer('amount', when_used='json')
    def serialize_amount(self, v: Decimal) -> float:
        # Stored as a JSON number
        return float(v)

    def in_month(self, month: int, year: int) -> bool:
        """Whether the creation timestamp falls in the given month."""
        return self.timestamp.month == month and self.timestamp.year == year


class ExpenseInput(BaseModel):
    """
    A candidate expense, exactly as the user entered it.

    CRITICAL: Nothing here is trusted. The validator decides whether
    it becomes an Expense.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    # Left untyped so the validator sees exactly what was entered
    amount: Any = None
    category: Optional[str] = None
    date: Optional[str] = None
    description: str = ""

    @field_validator('description', mode='before')
    @classmethod
    def none_description_is_empty(cls, v):
        return "" if v is None else v


# =============================================================================
# PERSISTENCE ENVELOPE
# =============================================================================

class ExpenseLedger(BaseModel):
    """
    The single payload stored under the expenses key.

    Version 0 is the legacy unversioned bare list of records;
    version 1 wraps the list with an explicit schema_version.
    """

    schema_version: int = Field(
        default=CURRENT_SCHEMA_VERSION,
        ge=0,
    )
    expenses: list[Expense] = Field(default_factory=list)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'not_numeric', 'non_positive')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        ...,
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = Field(
        default=None,
        description="Suggested fix if available"
    )


class ValidationResult(BaseModel):
    """Result of validating one candidate."""

    validated_at: datetime = Field(
        default_factory=utc_now
    )
    is_valid: bool = Field(
        ...,
        description="True when no error-level issue was found"
    )
    amount: Optional[Decimal] = Field(
        default=None,
        description="Parsed amount when it was numeric"
    )
    issues: list[ValidationIssue] = Field(
        default_factory=list,
        description="All validation issues found"
    )

    # Warnings don't block but should be shown
    warnings: list[str] = Field(
        default_factory=list,
        description="Non-blocking warnings"
    )

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def error_fields(self) -> list[str]:
        """Fields with at least one error, in the order found."""
        fields = []
        for issue in self.issues:
            if issue.severity == "error" and issue.field not in fields:
                fields.append(issue.field)
        return fields


# =============================================================================
# AGGREGATE MODELS
# =============================================================================

class ExpenseStats(BaseModel):
    """Lifetime and single-month totals over a snapshot."""

    month: int = Field(ge=1, le=12)
    year: int = Field(ge=1)
    total: Decimal = Decimal("0")
    monthly_total: Decimal = Decimal("0")
    count: int = Field(default=0, ge=0)
    monthly_count: int = Field(default=0, ge=0)


class CategoryTotal(BaseModel):
    """Total spent in one category."""

    category: str
    total: Decimal
    count: int = Field(ge=0)


def parse_amount(value) -> Optional[Decimal]:
    """
    Parse a raw amount into a Decimal.

    Returns None when the value is not a finite number. Booleans are
    rejected even though they are ints.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, float):
        parsed = Decimal(str(value))
    else:
        text = str(value).strip().replace(",", "")
        if not text:
            return None
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return None
    if not parsed.is_finite():
        return None
    return parsed


INPUT_DATE_FORMATS = ("%m/%d/%Y", "%Y-%m-%d")


def parse_expense_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a user-entered date.

    Accepts MM/DD/YYYY (what the form produces), YYYY-MM-DD and full
    ISO-8601 timestamps. Returns None for anything else.
    """
    if not value:
        return None
    text = value.strip()
    for fmt in INPUT_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None
