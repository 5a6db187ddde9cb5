"""Shared fixtures for the expense tracker tests."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from expense_tracker.audit import AuditLogger
from expense_tracker.config import AppSettings
from expense_tracker.services.storage import InMemoryStorage, StorageWriteError
from expense_tracker.store import ExpenseStore
from expense_tracker.validation import ExpenseValidator


class StepClock:
    """Deterministic clock that moves forward one minute per call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(minutes=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + self.step
        return now


class FlakyStorage(InMemoryStorage):
    """In-memory storage whose writes can be switched to fail."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        super().__init__(initial)
        self.fail_writes = False
        self.write_count = 0

    async def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageWriteError("disk full")
        self.write_count += 1
        await super().set_item(key, value)


@pytest.fixture
def app_settings():
    return AppSettings(rollback_on_write_failure=True, max_expense_amount=10000)


@pytest.fixture
def validator(app_settings):
    return ExpenseValidator(app_settings)


@pytest.fixture
def clock():
    return StepClock(datetime(2024, 3, 15, 10, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage():
    return FlakyStorage()


@pytest.fixture
def audit_logger():
    return AuditLogger()


@pytest.fixture
def store(storage, validator, audit_logger, clock):
    return ExpenseStore(
        storage=storage,
        validator=validator,
        audit_logger=audit_logger,
        clock=clock,
    )
