"""Services package."""

from expense_ledger.services.storage import (
    ConnectionError,
    ConstraintViolationError,
    DatabaseClient,
    ExpenseStorageInterface,
    InvalidInputError,
    NotFoundError,
    SchemaError,
    SQLExpenseStorage,
    StorageError,
)

__all__ = [
    "ConnectionError",
    "ConstraintViolationError",
    "DatabaseClient",
    "ExpenseStorageInterface",
    "InvalidInputError",
    "NotFoundError",
    "SchemaError",
    "SQLExpenseStorage",
    "StorageError",
]
