"""
Splitwise API Client.

Provides:
- List expenses (GET get_expenses)
- Create expenses (POST create_expense)
- Get/delete single expenses
- Currencies and categories lookup

Treats Splitwise errors as loud failures with actionable messages.
"""

from .client import (
    SplitwiseAPIError,
    SplitwiseCategory,
    SplitwiseClient,
    SplitwiseConnectionError,
    SplitwiseCurrency,
    SplitwiseError,
    SplitwiseExpense,
    join_errors,
)

__all__ = [
    "SplitwiseClient",
    "SplitwiseError",
    "SplitwiseAPIError",
    "SplitwiseConnectionError",
    "SplitwiseExpense",
    "SplitwiseCategory",
    "SplitwiseCurrency",
    "join_errors",
]
