"""
Main Orchestrator for the Expense Ledger

This module ties storage and audit logging together and defines the
flow behind each ledger command:
1. add    → insert → audit
2. list   → query with total → audit
3. search → query with total → audit
4. delete → atomic delete-returning → audit
5. clear  → delete all → audit

DESIGN DECISION: Storage errors propagate to the caller unchanged.
The flow only records them; deciding what to tell the user is the
command line's job.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from expense_ledger.audit import AuditLogger
from expense_ledger.models.expense import Expense, ExpenseRowSet
from expense_ledger.presentation import format_amount
from expense_ledger.services.storage import (
    ConstraintViolationError,
    DatabaseClient,
    ExpenseStorageInterface,
    InvalidInputError,
    NotFoundError,
    SQLExpenseStorage,
)


class LedgerFlow:
    """
    Orchestrates every ledger command against one storage backend.

    The flow owns the storage: closing the flow closes the connection.
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger

    def add_expense(
        self,
        amount: Union[Decimal, str],
        memo: str,
        created_on: Optional[Union[date, str]] = None,
    ) -> Expense:
        """Record one expense."""
        try:
            expense = self._storage.add_expense(amount, memo, created_on)
        except ConstraintViolationError as e:
            if self._audit_logger:
                self._audit_logger.log_constraint_violation(
                    amount=str(amount),
                    error_message=str(e),
                )
            raise
        except InvalidInputError as e:
            if self._audit_logger:
                self._audit_logger.log_invalid_input(error_message=str(e))
            raise

        if self._audit_logger:
            self._audit_logger.log_expense_added(
                expense_id=expense.id,
                amount=format_amount(expense.amount),
                memo=expense.memo,
            )
        return expense

    def list_expenses(self) -> ExpenseRowSet:
        row_set = self._storage.list_expenses()
        if self._audit_logger:
            self._audit_logger.log_query_executed("list", row_set.count)
        return row_set

    def search_expenses(self, query: str) -> ExpenseRowSet:
        row_set = self._storage.search_expenses(query)
        if self._audit_logger:
            self._audit_logger.log_query_executed(
                "search", row_set.count, search_term=query
            )
        return row_set

    def delete_expense(self, expense_id: int) -> Expense:
        """
        Delete one expense and return what was removed.

        Raises:
            NotFoundError: If no expense has that id
        """
        try:
            expense = self._storage.delete_expense(expense_id)
        except NotFoundError:
            if self._audit_logger:
                self._audit_logger.log_delete_target_not_found(expense_id)
            raise

        if self._audit_logger:
            self._audit_logger.log_expense_deleted(
                expense_id=expense.id,
                amount=format_amount(expense.amount),
                memo=expense.memo,
            )
        return expense

    def clear_expenses(self) -> int:
        removed = self._storage.clear_expenses()
        if self._audit_logger:
            self._audit_logger.log_expenses_cleared(removed)
        return removed

    def close(self) -> None:
        self._storage.close()

    def __enter__(self) -> "LedgerFlow":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


def create_app_components(
    database_url: Optional[str] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> LedgerFlow:
    """
    Build a LedgerFlow wired to the configured database.

    Opens the connection and bootstraps the schema.

    Raises:
        ConnectionError: If the database cannot be reached
        SchemaError: If the expenses table cannot be created
    """
    storage = SQLExpenseStorage(DatabaseClient(url=database_url))
    return LedgerFlow(
        storage=storage,
        audit_logger=audit_logger or AuditLogger(),
    )
