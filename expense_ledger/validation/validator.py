"""
Command-Line Input Validation

DESIGN DECISION: Arguments are checked for shape before any storage call.
This catches typos early with a precise message, and a rejected command
never opens a transaction.

The database constraint stays the authoritative guard. An amount of
"0" has a valid shape, so it passes here and is rejected by
positive_amount_check instead.

IMPORTANT: Validation NEVER silently fixes input.
It reports every problem it finds.
"""

import re
from datetime import date
from decimal import Decimal
from typing import Optional

from expense_ledger.models.expense import (
    LedgerCommand,
    ValidationIssue,
    ValidationResult,
)


AMOUNT_PATTERN = re.compile(r"^\d+(\.\d{0,2})?$")
ID_PATTERN = re.compile(r"^\d+$")


class CommandValidator:
    """
    Validates the positional arguments of each ledger command.

    Every validate_* method returns a ValidationResult. When it is valid,
    the parsed values are filled in and ready for the storage layer.
    """

    def _validate_amount(self, raw: str) -> tuple[Optional[Decimal], list[ValidationIssue]]:
        if not AMOUNT_PATTERN.match(raw):
            return None, [ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message=f"Invalid amount '{raw}'. Use digits with up to two decimal places.",
            )]
        return Decimal(raw), []

    def _validate_date(self, raw: str) -> tuple[Optional[date], list[ValidationIssue]]:
        try:
            return date.fromisoformat(raw), []
        except ValueError:
            return None, [ValidationIssue(
                field="created_on",
                issue_type="invalid_format",
                message=f"Invalid date '{raw}'. Use the YYYY-MM-DD format.",
            )]

    def _validate_id(self, raw: str) -> tuple[Optional[int], list[ValidationIssue]]:
        if not ID_PATTERN.match(raw) or int(raw) == 0:
            return None, [ValidationIssue(
                field="id",
                issue_type="invalid_format",
                message=f"Invalid id '{raw}'. Ids are positive whole numbers.",
            )]
        return int(raw), []

    def validate_add(self, args: list[str]) -> ValidationResult:
        """
        Validate `add AMOUNT MEMO [DATE]`.

        Checks:
        - amount and memo are present
        - amount is digits with at most two decimals
        - date, when given, is YYYY-MM-DD
        """
        result = ValidationResult(command=LedgerCommand.ADD)

        if len(args) < 2 or not args[1].strip():
            result.issues.append(ValidationIssue(
                field="arguments",
                issue_type="missing",
                message="You must provide an amount and memo.",
            ))
            return result

        result.amount, issues = self._validate_amount(args[0])
        result.issues.extend(issues)
        result.memo = args[1]

        if len(args) > 2:
            result.created_on, issues = self._validate_date(args[2])
            result.issues.extend(issues)

        return result

    def validate_search(self, args: list[str]) -> ValidationResult:
        """Validate `search QUERY`. An empty string is a valid query."""
        result = ValidationResult(command=LedgerCommand.SEARCH)
        if not args:
            result.issues.append(ValidationIssue(
                field="query",
                issue_type="missing",
                message="You must provide a search query.",
            ))
            return result

        result.query = args[0]
        return result

    def validate_delete(self, args: list[str]) -> ValidationResult:
        """Validate `delete ID...`. Every id must be well-formed."""
        result = ValidationResult(command=LedgerCommand.DELETE)
        if not args:
            result.issues.append(ValidationIssue(
                field="id",
                issue_type="missing",
                message="You must provide at least one id.",
            ))
            return result

        for raw in args:
            expense_id, issues = self._validate_id(raw)
            if issues:
                result.issues.extend(issues)
            else:
                result.expense_ids.append(expense_id)

        return result

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        One line per error, in the order they were found.
        """
        return "\n".join(
            issue.message for issue in result.issues if issue.severity == "error"
        )
