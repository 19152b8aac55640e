"""
Expense Ledger - Source Package

A personal expense ledger kept in a relational database and driven
from the command line.

DESIGN PRINCIPLES:
1. The database constraint is the final word on valid amounts
2. Every value reaches SQL as a bound parameter
3. Money is Decimal from the table to the screen
4. Fail early, fail visibly
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Expense Ledger Team"
