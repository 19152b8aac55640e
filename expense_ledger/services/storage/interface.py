"""
Abstract Storage Interface

DESIGN DECISION: Commands talk to the ledger only through this interface.
This allows us to:
1. Run the same storage code against PostgreSQL and SQLite
2. Keep the command-line layer free of SQL
3. Hand typed Expense models, never raw rows, to callers

The interface is intentionally small. There is no update operation:
an expense is immutable once recorded.
"""

from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from expense_ledger.models.expense import Expense, ExpenseRowSet


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Implementations own their connection and release it in close().
    They can be used as context managers.
    """

    @abstractmethod
    def ensure_schema(self) -> bool:
        """
        Create the expenses table if it does not exist yet.

        Safe to call on every start. Never alters an existing table.

        Returns:
            True if the table was created, False if it already existed

        Raises:
            SchemaError: If the schema could not be inspected or created
        """
        pass

    @abstractmethod
    def add_expense(
        self,
        amount: Union[Decimal, str],
        memo: str,
        created_on: Optional[Union[date, str]] = None,
    ) -> Expense:
        """
        Record a new expense.

        Args:
            amount: Positive amount with at most two decimal places
            memo: Description of the expense
            created_on: Date of the expense, today if omitted

        Returns:
            The stored expense, including its generated id

        Raises:
            ConstraintViolationError: If the database rejects the amount
            InvalidInputError: If amount or date are malformed
        """
        pass

    @abstractmethod
    def list_expenses(self) -> ExpenseRowSet:
        """
        Retrieve every expense in insertion order, with their total.
        """
        pass

    @abstractmethod
    def search_expenses(self, query: str) -> ExpenseRowSet:
        """
        Retrieve expenses whose memo contains query, ignoring case.

        Args:
            query: Substring to look for. An empty string matches every row.

        Returns:
            Matching expenses in insertion order, with their total
        """
        pass

    @abstractmethod
    def delete_expense(self, expense_id: int) -> Expense:
        """
        Delete one expense.

        Args:
            expense_id: The expense's identifier

        Returns:
            The expense as it was before deletion

        Raises:
            NotFoundError: If no expense has that id
        """
        pass

    @abstractmethod
    def clear_expenses(self) -> int:
        """
        Delete every expense.

        Returns:
            Number of rows removed (0 on an empty ledger)
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection."""
        pass

    def __enter__(self) -> "ExpenseStorageInterface":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class SchemaError(StorageError):
    """The expenses table could not be inspected or created."""
    pass


class ConstraintViolationError(StorageError):
    """The database rejected a row that breaks a table constraint."""

    def __init__(self, message: str, constraint: Optional[str] = None):
        super().__init__(message)
        self.constraint = constraint


class InvalidInputError(StorageError):
    """A value could not be converted or stored as the column type."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""

    def __init__(self, expense_id: int):
        super().__init__(f"Expense not found: {expense_id}")
        self.expense_id = expense_id


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
