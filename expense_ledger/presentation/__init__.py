"""
Presentation layer - fixed-width text output for the command line.
"""

from expense_ledger.presentation.formatter import (
    format_amount,
    render_row,
    render_row_set,
    render_summary,
    render_table,
    render_total,
)

__all__ = [
    "format_amount",
    "render_row",
    "render_row_set",
    "render_summary",
    "render_table",
    "render_total",
]
