"""
Audit Logger

DESIGN DECISION: Every store operation is logged.
This provides:
1. Traceability of every change to the expense collection
2. Debugging capability when storage fails
3. A recent-activity feed the UI can show

The audit logger:
- Logs structured JSON through structlog
- Never raises (a logging failure must not break a save or delete)
- Keeps the most recent events in memory
- Supports correlation IDs to trace related events
"""

import logging
from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(level: int = logging.INFO) -> None:
    """Configure stdlib logging and structlog for JSON output."""
    logging.basicConfig(format="%(message)s", level=level)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory ring of recent events (for the activity feed)
    """

    def __init__(self, max_recent_events: int = 100):
        self._logger = structlog.get_logger("expense_tracker.audit")
        self._recent: deque[AuditEvent] = deque(maxlen=max_recent_events)

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Most recent events, newest first."""
        return list(reversed(self._recent))

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the local log write failed.
        """
        self._recent.append(event)

        log_dict = event.to_log_dict()
        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            # Don't raise - audit logging should not break the main flow
            return False
        return True

    def log_expenses_loaded(
        self,
        count: int,
        schema_version: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful load."""
        self.log(AuditEventBuilder.expenses_loaded(
            count=count,
            schema_version=schema_version,
            correlation_id=correlation_id,
        ))

    def log_load_failed(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an unreadable payload."""
        self.log(AuditEventBuilder.load_failed(
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_validation_failed(
        self,
        issues: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected candidate."""
        self.log(AuditEventBuilder.validation_failed(
            issues=issues,
            correlation_id=correlation_id,
        ))

    def log_expense_added(
        self,
        expense_id: str,
        category: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a persisted new expense."""
        self.log(AuditEventBuilder.expense_added(
            expense_id=expense_id,
            category=category,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_expense_deleted(
        self,
        expense_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a persisted deletion."""
        self.log(AuditEventBuilder.expense_deleted(
            expense_id=expense_id,
            correlation_id=correlation_id,
        ))

    def log_delete_skipped(
        self,
        expense_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.delete_skipped(
            expense_id=expense_id,
            correlation_id=correlation_id,
        ))

    def log_save_failed(
        self,
        operation: str,
        error_message: str,
        rolled_back: bool,
        expense_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed persist step."""
        self.log(AuditEventBuilder.save_failed(
            operation=operation,
            error_message=error_message,
            rolled_back=rolled_back,
            expense_id=expense_id,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., one form submission).
    """
    return uuid4()
