"""
Component Wiring for Expense Tracker

This module builds the storage backend, audit logger, validator and
store from settings. Shells (the Streamlit app, tests, scripts) call
create_app_components() and hold on to the store it returns.
"""

import logging
from typing import Optional

from expense_tracker.audit import AuditLogger, configure_logging
from expense_tracker.config import Settings, StorageSettings, get_settings
from expense_tracker.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
)
from expense_tracker.store import ExpenseStore
from expense_tracker.validation import ExpenseValidator


def create_storage(settings: StorageSettings) -> KeyValueStorageInterface:
    """Pick the storage backend named in settings."""
    if settings.backend == "memory":
        return InMemoryStorage()
    return JsonFileStorage.from_settings(settings)


def create_app_components(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorageInterface] = None,
) -> tuple[ExpenseStore, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use; defaults to the cached global settings
        storage: Storage to use instead of the configured backend

    Returns:
        (expense_store, audit_logger)
    """
    settings = settings or get_settings()
    app_settings = settings.app
    storage_settings = settings.storage

    if app_settings.debug_mode:
        configure_logging(logging.DEBUG)

    audit_logger = AuditLogger()
    store = ExpenseStore(
        storage=storage or create_storage(storage_settings),
        validator=ExpenseValidator(app_settings),
        audit_logger=audit_logger,
        key=storage_settings.expenses_key,
        rollback_on_write_failure=app_settings.rollback_on_write_failure,
    )
    return store, audit_logger
