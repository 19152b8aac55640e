"""
Audit Logger

DESIGN DECISION: Every ledger command leaves one structured log line.
This provides:
1. Traceability of what was added and removed
2. Debugging capability when a command is rejected
3. A correlation id tying together everything one invocation did

The audit logger writes JSON to stderr through the standard library.
Standard output stays reserved for the command's own report.
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from expense_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "WARNING") -> None:
    """
    Route log output to stderr at the given level.

    Call once at process start, before the first command runs.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.WARNING),
        force=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Turns ledger outcomes into AuditEvents and writes them to the
    structured log at a level matching their severity.
    """

    def __init__(self, correlation_id: Optional[UUID] = None):
        """
        Initialize audit logger.

        Args:
            correlation_id: Shared by every event this logger writes.
                    A fresh one is created if omitted.
        """
        self.correlation_id = correlation_id or create_correlation_id()
        self._logger = structlog.get_logger("expense_ledger.audit")

    def log(self, event: AuditEvent) -> None:
        """Write one audit event."""
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_expense_added(self, expense_id: int, amount: str, memo: str) -> None:
        self.log(AuditEventBuilder.expense_added(
            expense_id=expense_id,
            amount=amount,
            memo=memo,
            correlation_id=self.correlation_id,
        ))

    def log_expense_deleted(self, expense_id: int, amount: str, memo: str) -> None:
        self.log(AuditEventBuilder.expense_deleted(
            expense_id=expense_id,
            amount=amount,
            memo=memo,
            correlation_id=self.correlation_id,
        ))

    def log_delete_target_not_found(self, expense_id: int) -> None:
        self.log(AuditEventBuilder.delete_target_not_found(
            expense_id=expense_id,
            correlation_id=self.correlation_id,
        ))

    def log_expenses_cleared(self, removed: int) -> None:
        self.log(AuditEventBuilder.expenses_cleared(
            removed=removed,
            correlation_id=self.correlation_id,
        ))

    def log_constraint_violation(self, amount: str, error_message: str) -> None:
        self.log(AuditEventBuilder.constraint_violation(
            amount=amount,
            error_message=error_message,
            correlation_id=self.correlation_id,
        ))

    def log_invalid_input(self, error_message: str) -> None:
        self.log(AuditEventBuilder.invalid_input(
            error_message=error_message,
            correlation_id=self.correlation_id,
        ))

    def log_query_executed(
        self,
        query_type: str,
        result_count: int,
        search_term: Optional[str] = None,
    ) -> None:
        self.log(AuditEventBuilder.query_executed(
            query_type=query_type,
            result_count=result_count,
            search_term=search_term,
            correlation_id=self.correlation_id,
        ))

    def log_validation_failed(self, command: str, issues: list[dict]) -> None:
        self.log(AuditEventBuilder.validation_failed(
            command=command,
            issues=issues,
            correlation_id=self.correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=self.correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    One per command invocation.
    """
    return uuid4()
