"""
Audit Models for the Expense Ledger

Every command that touches the ledger produces one audit event.
This provides:
1. Traceability of every add, delete and clear
2. Debugging information when a command fails
3. A record of what a delete actually removed

DESIGN DECISION: Audit events are written to the structured log only.
The ledger database holds nothing but the expenses table.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Mutations
    EXPENSE_ADDED = "expense_added"
    EXPENSE_DELETED = "expense_deleted"
    DELETE_TARGET_NOT_FOUND = "delete_target_not_found"
    EXPENSES_CLEARED = "expenses_cleared"
    CONSTRAINT_VIOLATION = "constraint_violation"
    INVALID_INPUT = "invalid_input"

    # Queries
    QUERY_EXECUTED = "query_executed"

    # Command line
    VALIDATION_FAILED = "validation_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which expense is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'expense', 'query')"
    )
    entity_id: Optional[int] = Field(
        default=None,
        description="Expense id this event relates to"
    )

    # Correlation - one id per command invocation
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID shared by all events of one command invocation"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered directly by a user command?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.expense_added(expense_id, amount, memo, correlation_id)
        event = AuditEventBuilder.expenses_cleared(removed, correlation_id)
    """

    @staticmethod
    def expense_added(
        expense_id: int,
        amount: str,
        memo: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_ADDED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense added: {amount}",
            details={
                "amount": amount,
                "memo": memo,
            },
            is_user_action=True,
        )

    @staticmethod
    def expense_deleted(
        expense_id: int,
        amount: str,
        memo: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_DELETED,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"Expense {expense_id} deleted",
            details={
                "amount": amount,
                "memo": memo,
            },
            is_user_action=True,
        )

    @staticmethod
    def delete_target_not_found(
        expense_id: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETE_TARGET_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            entity_id=expense_id,
            correlation_id=correlation_id,
            description=f"No expense with id {expense_id} to delete",
            is_user_action=True,
        )

    @staticmethod
    def expenses_cleared(
        removed: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSES_CLEARED,
            entity_type="expense",
            correlation_id=correlation_id,
            description=f"Cleared {removed} expenses",
            details={"removed": removed},
            is_user_action=True,
        )

    @staticmethod
    def constraint_violation(
        amount: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONSTRAINT_VIOLATION,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            correlation_id=correlation_id,
            description="Insert rejected by positive_amount_check",
            details={"amount": amount},
            error_message=error_message,
        )

    @staticmethod
    def invalid_input(
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVALID_INPUT,
            severity=AuditSeverity.WARNING,
            entity_type="expense",
            correlation_id=correlation_id,
            description="Insert rejected: malformed value",
            error_message=error_message,
        )

    @staticmethod
    def query_executed(
        query_type: str,
        result_count: int,
        correlation_id: UUID,
        search_term: Optional[str] = None,
    ) -> AuditEvent:
        details: dict[str, Any] = {
            "query_type": query_type,
            "result_count": result_count,
        }
        if search_term is not None:
            details["search_term"] = search_term
        return AuditEvent(
            event_type=AuditEventType.QUERY_EXECUTED,
            entity_type="query",
            correlation_id=correlation_id,
            description=f"Query executed: {query_type} returned {result_count} results",
            details=details,
        )

    @staticmethod
    def validation_failed(
        command: str,
        issues: list[dict],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="command",
            correlation_id=correlation_id,
            description=f"{command} rejected with {len(issues)} issues",
            details={
                "command": command,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
