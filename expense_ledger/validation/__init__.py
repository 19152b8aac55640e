"""Input validation package."""

from expense_ledger.validation.validator import CommandValidator

__all__ = ["CommandValidator"]
