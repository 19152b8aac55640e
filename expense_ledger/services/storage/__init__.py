"""
Storage Services Package

Provides the abstract storage interface and its SQLAlchemy implementation.
PostgreSQL is the production backend; SQLite runs the same code in tests.
"""

from expense_ledger.services.storage.interface import (
    ConnectionError,
    ConstraintViolationError,
    ExpenseStorageInterface,
    InvalidInputError,
    NotFoundError,
    SchemaError,
    StorageError,
)
from expense_ledger.services.storage.database import (
    POSITIVE_AMOUNT_CHECK,
    DatabaseClient,
    SQLExpenseStorage,
    expenses_table,
)

__all__ = [
    # Interface
    "ExpenseStorageInterface",
    # Exceptions
    "ConnectionError",
    "ConstraintViolationError",
    "InvalidInputError",
    "NotFoundError",
    "SchemaError",
    "StorageError",
    # SQLAlchemy implementation
    "POSITIVE_AMOUNT_CHECK",
    "DatabaseClient",
    "SQLExpenseStorage",
    "expenses_table",
]
