"""
Core Data Models for the Expense Ledger

These models define the shapes of everything the ledger hands around:
rows read back from the database, the row sets returned by queries,
and the results of command-line input validation.

DESIGN DECISION: Rows are converted into typed models once, at the
storage boundary. Nothing above the storage layer looks up columns by name.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class LedgerCommand(str, Enum):
    """Commands understood by the command-line dispatcher."""
    ADD = "add"
    LIST = "list"
    SEARCH = "search"
    DELETE = "delete"
    CLEAR = "clear"


# =============================================================================
# CORE EXPENSE MODEL
# =============================================================================

class Expense(BaseModel):
    """
    A single recorded expense.

    Instances are immutable. The only way to change the ledger is
    through the storage layer's delete/clear operations.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(
        ...,
        gt=0,
        description="Identifier generated by the database"
    )
    amount: Decimal = Field(
        ...,
        description="Amount with two fractional digits"
    )
    memo: str = Field(
        ...,
        description="Free-form description of the expense"
    )
    created_on: date = Field(
        ...,
        description="Calendar date of the expense"
    )


class ExpenseRowSet(BaseModel):
    """
    Ordered result of a list or search query.

    The total is computed by the database and is None only when
    no rows matched.
    """

    expenses: list[Expense] = Field(default_factory=list)
    total: Optional[Decimal] = Field(
        default=None,
        description="Database-computed sum of amount across the rows"
    )

    @computed_field
    @property
    def count(self) -> int:
        return len(self.expenses)

    @property
    def is_empty(self) -> bool:
        return not self.expenses


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in command-line input."""

    field: str = Field(
        ...,
        description="Argument with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format')"
    )
    message: str = Field(
        ...,
        description="One-line message shown to the user"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """
    Result of validating one command's arguments.

    On success the parsed values are carried along so the dispatcher
    never re-parses the raw strings.
    """

    command: LedgerCommand
    issues: list[ValidationIssue] = Field(default_factory=list)

    amount: Optional[Decimal] = None
    memo: Optional[str] = None
    created_on: Optional[date] = None
    query: Optional[str] = None
    expense_ids: list[int] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")
