"""
Command-Line Dispatcher

    expense add AMOUNT MEMO [DATE]
    expense list
    expense search QUERY
    expense delete ID...
    expense clear

Arguments are validated before the database is opened, so a mistyped
command never touches the ledger. Every recoverable error is reported
as one line on stdout. Only an unreachable database or a failed schema
bootstrap ends the process with a non-zero status.
"""

import sys
from typing import Callable, Optional

import structlog

from expense_ledger.audit import AuditLogger, configure_logging
from expense_ledger.config import get_settings
from expense_ledger.models.expense import LedgerCommand, ValidationResult
from expense_ledger.orchestrator import LedgerFlow, create_app_components
from expense_ledger.presentation import render_row, render_row_set
from expense_ledger.services.storage import (
    POSITIVE_AMOUNT_CHECK,
    ConnectionError,
    ConstraintViolationError,
    InvalidInputError,
    NotFoundError,
    SchemaError,
    StorageError,
)
from expense_ledger.validation import CommandValidator


logger = structlog.get_logger(__name__)

USAGE = """An expense recording system

Commands:

add AMOUNT MEMO [DATE] - record a new expense
clear - delete all expenses
list - list all expenses
delete ID... - remove the expenses with the given ids
search QUERY - list expenses with a matching memo field"""

CLEAR_PROMPT = "This will remove all expenses. Are you sure? (y/n) "


class CommandDispatcher:
    """
    Parses one command line and runs it through a LedgerFlow.

    The flow is built lazily by flow_factory, after validation passes.
    """

    def __init__(
        self,
        flow_factory: Callable[..., LedgerFlow] = create_app_components,
        validator: Optional[CommandValidator] = None,
        confirm: Callable[[str], str] = input,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._flow_factory = flow_factory
        self._validator = validator or CommandValidator()
        self._confirm = confirm
        self._audit_logger = audit_logger or AuditLogger()

    def run(self, argv: list[str]) -> None:
        """
        Run one command.

        Raises:
            ConnectionError: If the database cannot be reached
            SchemaError: If the expenses table cannot be created
        """
        if not argv:
            print(USAGE)
            return

        try:
            command = LedgerCommand(argv[0])
        except ValueError:
            print(USAGE)
            return

        validation = self._validate(command, argv[1:])
        if validation is not None and not validation.is_valid:
            self._audit_logger.log_validation_failed(
                command=command.value,
                issues=[issue.model_dump() for issue in validation.issues],
            )
            print(self._validator.get_user_friendly_summary(validation))
            return

        if command is LedgerCommand.CLEAR and not self._confirmed():
            return

        try:
            with self._flow_factory(audit_logger=self._audit_logger) as flow:
                self._dispatch(flow, command, validation)
        except (ConnectionError, SchemaError):
            raise
        except StorageError as e:
            self._audit_logger.log_error(
                error_type=type(e).__name__,
                error_message=str(e),
                details={"command": command.value},
            )
            print(f"The {command.value} command failed: {e}")

    def _validate(
        self,
        command: LedgerCommand,
        args: list[str],
    ) -> Optional[ValidationResult]:
        if command is LedgerCommand.ADD:
            return self._validator.validate_add(args)
        if command is LedgerCommand.SEARCH:
            return self._validator.validate_search(args)
        if command is LedgerCommand.DELETE:
            return self._validator.validate_delete(args)
        return None

    def _confirmed(self) -> bool:
        return self._confirm(CLEAR_PROMPT).strip().lower() == "y"

    def _dispatch(
        self,
        flow: LedgerFlow,
        command: LedgerCommand,
        validation: Optional[ValidationResult],
    ) -> None:
        if command is LedgerCommand.ADD:
            self._add(flow, validation)
        elif command is LedgerCommand.LIST:
            self._print_lines(render_row_set(flow.list_expenses()))
        elif command is LedgerCommand.SEARCH:
            self._print_lines(render_row_set(flow.search_expenses(validation.query)))
        elif command is LedgerCommand.DELETE:
            for expense_id in validation.expense_ids:
                self._delete(flow, expense_id)
        elif command is LedgerCommand.CLEAR:
            flow.clear_expenses()
            print("All expenses have been deleted.")

    def _add(self, flow: LedgerFlow, validation: ValidationResult) -> None:
        try:
            flow.add_expense(
                validation.amount,
                validation.memo,
                validation.created_on,
            )
        except ConstraintViolationError as e:
            if e.constraint == POSITIVE_AMOUNT_CHECK:
                print("Amount must be greater than zero.")
            else:
                print(f"The expense could not be saved: {e}")
            return
        except InvalidInputError as e:
            print(f"The expense could not be saved: {e}")
            return
        print("The expense has been added.")

    def _delete(self, flow: LedgerFlow, expense_id: int) -> None:
        try:
            expense = flow.delete_expense(expense_id)
        except NotFoundError:
            print(f"There is no expense with the id '{expense_id}'.")
            return
        print("The following expense has been deleted:")
        print(render_row(expense))

    @staticmethod
    def _print_lines(lines) -> None:
        for line in lines:
            print(line)


def main(argv: Optional[list[str]] = None) -> None:
    """Console entry point."""
    configure_logging(get_settings().app.effective_log_level)
    dispatcher = CommandDispatcher()
    try:
        dispatcher.run(sys.argv[1:] if argv is None else argv)
    except (ConnectionError, SchemaError) as e:
        logger.critical("ledger_unavailable", error=str(e))
        sys.exit(f"Expense ledger unavailable: {e}")
