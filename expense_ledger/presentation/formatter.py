"""
Plain-Text Ledger Formatting

Turns row sets into the fixed-width report printed by the CLI:

       1 | 2024-03-01 |       9.99 | coffee
       2 | 2024-03-01 |       5.00 | tea
    ----------------------------------------
    Total                     14.99

Column widths are fixed so the output is stable line by line.
"""

from collections.abc import Iterable, Iterator
from decimal import Decimal

from expense_ledger.models.expense import Expense, ExpenseRowSet


ID_WIDTH = 4
AMOUNT_WIDTH = 10
RULE_WIDTH = 40
TOTAL_LABEL = "Total"
TOTAL_VALUE_WIDTH = 26


def format_amount(amount: Decimal) -> str:
    return f"{amount:.2f}"


def render_row(expense: Expense) -> str:
    return " | ".join([
        f"{expense.id:>{ID_WIDTH}}",
        expense.created_on.isoformat(),
        f"{format_amount(expense.amount):>{AMOUNT_WIDTH}}",
        expense.memo,
    ])


def render_table(expenses: Iterable[Expense]) -> Iterator[str]:
    """Yield one line per expense, in the order given."""
    for expense in expenses:
        yield render_row(expense)


def render_summary(count: int) -> str:
    if count == 0:
        return "There are no expenses."
    if count == 1:
        return "There is 1 expense."
    return f"There are {count} expenses."


def render_total(total: Decimal) -> list[str]:
    """Separator rule followed by the right-aligned total."""
    return [
        "-" * RULE_WIDTH,
        f"{TOTAL_LABEL}{format_amount(total):>{TOTAL_VALUE_WIDTH}}",
    ]


def render_row_set(row_set: ExpenseRowSet) -> Iterator[str]:
    """
    Full report for a list or search: count line, table, total.

    An empty row set produces only the count line.
    """
    yield render_summary(row_set.count)
    if row_set.is_empty:
        return
    yield from render_table(row_set.expenses)
    yield from render_total(row_set.total)
