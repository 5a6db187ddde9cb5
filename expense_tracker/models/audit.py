"""
Audit Models for Expense Tracker

Every store operation emits an audit event. This provides:
1. Traceability of every change to the expense collection
2. Debugging information when storage misbehaves
3. A record of rejected input and failed writes

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from expense_tracker.models.expense import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Loading
    EXPENSES_LOADED = "expenses_loaded"
    LOAD_FAILED = "load_failed"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Persistence
    EXPENSE_ADDED = "expense_added"
    EXPENSE_DELETED = "expense_deleted"
    DELETE_SKIPPED = "delete_skipped"
    SAVE_FAILED = "save_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context
    expense_id: Optional[str] = Field(
        default=None,
        description="ID of the expense this event relates to"
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one add-form submission)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "expense_id": self.expense_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, "Food", "42.50")
        event = AuditEventBuilder.save_failed("append", error_message)
    """

    @staticmethod
    def expenses_loaded(
        count: int,
        schema_version: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_LOADED,
            correlation_id=correlation_id,
            description=f"Loaded {count} expenses",
            details={
                "count": count,
                "schema_version": schema_version,
            },
        )

    @staticmethod
    def load_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description="Stored expenses could not be read; starting empty",
            error_message=error_message,
        )

    @staticmethod
    def validation_failed(
        issues: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description=f"Expense rejected with {len(issues)} issues",
            details={
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_added(
        expense_id: str,
        category: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            expense_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense added: {category} - {amount}",
            details={
                "category": category,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(
        expense_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            expense_id=expense_id,
            correlation_id=correlation_id,
            description="Expense deleted",
            is_user_action=True,
        )

    @staticmethod
    def delete_skipped(
        expense_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETE_SKIPPED,
            severity=AuditSeverity.DEBUG,
            expense_id=expense_id,
            correlation_id=correlation_id,
            description="Delete requested for an unknown expense; nothing to do",
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        operation: str,
        error_message: str,
        rolled_back: bool,
        expense_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            expense_id=expense_id,
            correlation_id=correlation_id,
            description=f"Saving expenses failed during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
                "rolled_back": rolled_back,
            },
        )
