"""
Data Models Package

This package contains all Pydantic models used by the expense ledger.
Rows leave the storage layer only as these models.
"""

from expense_ledger.models.expense import (
    Expense,
    ExpenseRowSet,
    LedgerCommand,
    ValidationIssue,
    ValidationResult,
)
from expense_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "Expense",
    "ExpenseRowSet",
    "LedgerCommand",
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
