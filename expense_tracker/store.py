"""
Expense Store

The store owns the authoritative expense collection and mediates every
read and write against durable storage.

DESIGN DECISIONS:
- The whole collection is one JSON payload under a single key. Every
  mutation rewrites all of it, which caps practical size at small
  personal datasets.
- Mutations (and loads) are serialized through one asyncio.Lock, so two
  callers interleaving never lose an update.
- When a write fails the in-memory change is rolled back by default,
  keeping memory and storage consistent. The error is always re-raised.
- Validation happens before any mutation or I/O.
"""

import asyncio
import json
from datetime import datetime
from typing import Callable, Optional, Union
from uuid import UUID

import structlog
from pydantic import ValidationError

from expense_tracker.audit import AuditLogger
from expense_tracker.models.expense import (
    CURRENT_SCHEMA_VERSION,
    CategoryTotal,
    Expense,
    ExpenseInput,
    ExpenseLedger,
    ExpenseStats,
    new_expense_id,
    utc_now,
)
from expense_tracker.queries import compute_stats, totals_by_category, totals_by_month
from expense_tracker.services.storage import (
    KeyValueStorageInterface,
    StorageReadError,
    StorageWriteError,
)
from expense_tracker.validation import ExpenseValidationError, ExpenseValidator


logger = structlog.get_logger(__name__)

DEFAULT_EXPENSES_KEY = "expenses"


def encode_ledger(expenses: list[Expense]) -> str:
    """Serialize a collection to the versioned payload."""
    ledger = ExpenseLedger(schema_version=CURRENT_SCHEMA_VERSION, expenses=expenses)
    return ledger.model_dump_json()


def decode_ledger(raw: str) -> ExpenseLedger:
    """
    Deserialize a stored payload.

    A bare JSON list is the legacy unversioned format (version 0).

    Raises:
        StorageReadError: If the payload is malformed or from a newer schema
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise StorageReadError(f"Stored expenses are not valid JSON: {e}") from e

    if isinstance(data, list):
        data = {"schema_version": 0, "expenses": data}
    elif not isinstance(data, dict):
        raise StorageReadError(
            f"Stored expenses have unexpected type {type(data).__name__}"
        )

    try:
        ledger = ExpenseLedger.model_validate(data)
    except ValidationError as e:
        raise StorageReadError(
            f"Stored expenses failed validation ({e.error_count()} errors)"
        ) from e

    if ledger.schema_version > CURRENT_SCHEMA_VERSION:
        raise StorageReadError(
            f"Stored expenses use schema version {ledger.schema_version}; "
            f"this build reads up to {CURRENT_SCHEMA_VERSION}"
        )
    return ledger


class ExpenseStore:
    """
    Holds the expense collection and keeps storage in step with it.

    One instance per caller. Nothing here is module-global.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        validator: Optional[ExpenseValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        key: str = DEFAULT_EXPENSES_KEY,
        rollback_on_write_failure: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._storage = storage
        self._validator = validator or ExpenseValidator()
        self._audit_logger = audit_logger
        self._key = key
        self._rollback_on_write_failure = rollback_on_write_failure
        self._clock = clock

        # Newest insertion first
        self._expenses: list[Expense] = []
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._expenses)

    @property
    def key(self) -> str:
        return self._key

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def snapshot(self) -> list[Expense]:
        """
        The collection ordered by timestamp, newest first.

        The sort is stable: equal timestamps keep collection order, which
        puts the most recently appended record first.
        """
        return sorted(self._expenses, key=lambda e: e.timestamp, reverse=True)

    def get(self, expense_id: str) -> Optional[Expense]:
        for expense in self._expenses:
            if expense.id == expense_id:
                return expense
        return None

    def stats(
        self,
        month: Optional[int] = None,
        year: Optional[int] = None,
    ) -> ExpenseStats:
        """
        Lifetime and monthly totals.

        Defaults to the current month and year of the store clock.
        """
        if month is None or year is None:
            now = self._clock()
            month = now.month if month is None else month
            year = now.year if year is None else year
        if not 1 <= month <= 12:
            raise ValueError(f"Month must be between 1 and 12, got {month}")
        if year < 1:
            raise ValueError(f"Year must be positive, got {year}")
        return compute_stats(self._expenses, month, year)

    def category_breakdown(self) -> list[CategoryTotal]:
        return totals_by_category(self._expenses)

    def monthly_totals(self):
        return totals_by_month(self._expenses)

    # -------------------------------------------------------------------------
    # Storage round-trips
    # -------------------------------------------------------------------------

    async def load(self, correlation_id: Optional[UUID] = None) -> list[Expense]:
        """
        Replace the in-memory collection with what storage holds.

        Returns:
            The loaded snapshot (empty if nothing was ever saved)

        Raises:
            StorageReadError: If stored data exists but can't be read.
                The in-memory collection is empty afterwards.
        """
        async with self._lock:
            try:
                raw = await self._storage.get_item(self._key)
                if raw is None or not raw.strip():
                    ledger = ExpenseLedger()
                else:
                    ledger = decode_ledger(raw)
            except StorageReadError as e:
                self._expenses = []
                if self._audit_logger:
                    self._audit_logger.log_load_failed(
                        error_message=str(e),
                        correlation_id=correlation_id,
                    )
                raise

            expenses = self._drop_duplicate_ids(ledger.expenses)
            self._expenses = sorted(expenses, key=lambda e: e.timestamp, reverse=True)

            if self._audit_logger:
                self._audit_logger.log_expenses_loaded(
                    count=len(self._expenses),
                    schema_version=ledger.schema_version,
                    correlation_id=correlation_id,
                )

        return self.snapshot()

    async def append(
        self,
        candidate: Union[ExpenseInput, dict],
        correlation_id: Optional[UUID] = None,
    ) -> Expense:
        """
        Validate a candidate, add it, and persist the collection.

        Raises:
            ExpenseValidationError: If the candidate is invalid. Nothing
                is changed and storage is not touched.
            StorageWriteError: If persisting failed
        """
        try:
            if isinstance(candidate, dict):
                candidate = self._validator.parse_candidate(candidate)
            result = self._validator.validate_or_raise(candidate)
        except ExpenseValidationError as e:
            if self._audit_logger:
                self._audit_logger.log_validation_failed(
                    issues=[
                        {"field": i.field, "type": i.issue_type, "message": i.message}
                        for i in e.issues
                    ],
                    correlation_id=correlation_id,
                )
            raise

        async with self._lock:
            expense = Expense(
                id=self._unused_id(),
                amount=result.amount,
                category=candidate.category,
                date=candidate.date,
                description=candidate.description,
                timestamp=self._clock(),
            )

            previous = self._expenses
            self._expenses = [expense, *previous]
            await self._persist(previous, "append", expense.id, correlation_id)

        if self._audit_logger:
            self._audit_logger.log_expense_added(
                expense_id=expense.id,
                category=expense.category,
                amount=str(expense.amount),
                correlation_id=correlation_id,
            )
        return expense

    async def remove(
        self,
        expense_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Delete a record and persist the collection.

        An unknown id is a no-op: no error and no write.

        Returns:
            True if a record was removed

        Raises:
            StorageWriteError: If persisting failed
        """
        async with self._lock:
            remaining = [e for e in self._expenses if e.id != expense_id]
            if len(remaining) == len(self._expenses):
                if self._audit_logger:
                    self._audit_logger.log_delete_skipped(
                        expense_id=expense_id,
                        correlation_id=correlation_id,
                    )
                return False

            previous = self._expenses
            self._expenses = remaining
            await self._persist(previous, "remove", expense_id, correlation_id)

        if self._audit_logger:
            self._audit_logger.log_expense_deleted(
                expense_id=expense_id,
                correlation_id=correlation_id,
            )
        return True

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _persist(
        self,
        previous: list[Expense],
        operation: str,
        expense_id: str,
        correlation_id: Optional[UUID],
    ) -> None:
        """Write the current collection; on failure optionally restore `previous`."""
        try:
            try:
                await self._storage.set_item(self._key, encode_ledger(self._expenses))
            except OSError as e:
                raise StorageWriteError(str(e)) from e
        except StorageWriteError as e:
            if self._rollback_on_write_failure:
                self._expenses = previous
            if self._audit_logger:
                self._audit_logger.log_save_failed(
                    operation=operation,
                    error_message=str(e),
                    rolled_back=self._rollback_on_write_failure,
                    expense_id=expense_id,
                    correlation_id=correlation_id,
                )
            raise

    def _unused_id(self) -> str:
        taken = {e.id for e in self._expenses}
        expense_id = new_expense_id()
        while expense_id in taken:
            expense_id = new_expense_id()
        return expense_id

    def _drop_duplicate_ids(self, expenses: list[Expense]) -> list[Expense]:
        seen = set()
        unique = []
        for expense in expenses:
            if expense.id in seen:
                logger.warning("duplicate_expense_id", expense_id=expense.id)
                continue
            seen.add(expense.id)
            unique.append(expense)
        return unique
