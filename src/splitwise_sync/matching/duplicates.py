"""Duplicate detection between source transactions and Splitwise expenses.

A transaction is already in Splitwise when either:

- Provenance: an expense's details carry ``source:<transaction id>``
  (it was created by an earlier sync of this same transaction), or
- Fuzzy: an expense lies within the day and amount tolerance windows
  (it was entered some other way, e.g. by hand).

The fuzzy scan stops at the first expense inside both windows. There is no
best-candidate ranking, and descriptions are not compared.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from splitwise_sync.config import SyncConfig
    from splitwise_sync.sources import Transaction
    from splitwise_sync.splitwise_client import SplitwiseExpense

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchTolerance:
    """Fuzzy match windows. Both comparisons are strict less-than."""

    day_tolerance: int = 2
    amount_tolerance: Decimal = Decimal("1.00")

    @classmethod
    def from_config(cls, config: SyncConfig) -> MatchTolerance:
        return cls(
            day_tolerance=config.day_tolerance,
            amount_tolerance=config.amount_tolerance,
        )


DEFAULT_TOLERANCE = MatchTolerance()


class MatchKind(str, Enum):
    """How a duplicate was detected."""

    PROVENANCE = "provenance"
    FUZZY = "fuzzy"


@dataclass
class DuplicateMatch:
    """An existing expense that a transaction duplicates."""

    expense: SplitwiseExpense
    kind: MatchKind
    days_delta: int | None = None
    amount_delta: Decimal | None = None

    @property
    def detail(self) -> str:
        if self.kind == MatchKind.PROVENANCE:
            return f"expense {self.expense.id} carries provenance tag"
        return (
            f"expense {self.expense.id} within {self.days_delta}d / "
            f"{self.amount_delta:.2f} ({self.expense.description!r})"
        )


class DuplicateDetector:
    """Decides whether a transaction already has a matching expense."""

    def __init__(self, tolerance: MatchTolerance = DEFAULT_TOLERANCE) -> None:
        self.tolerance = tolerance

    def find_duplicate(
        self,
        snapshot: Sequence[SplitwiseExpense],
        transaction: Transaction,
    ) -> DuplicateMatch | None:
        """Find the expense a transaction duplicates.

        Args:
            snapshot: Expenses fetched from Splitwise for this run.
            transaction: Candidate transaction.

        Returns:
            The first match (provenance checked before fuzzy), or None.
        """
        for expense in snapshot:
            if expense.has_provenance_tag(transaction.id):
                return DuplicateMatch(expense=expense, kind=MatchKind.PROVENANCE)

        for expense in snapshot:
            expense_date = expense.date_value()
            expense_cost = expense.cost_value()
            if expense_date is None or expense_cost is None:
                continue

            days_delta = abs((transaction.date - expense_date).days)
            # Outflows are negative in the source but positive costs in Splitwise
            amount_delta = abs(-transaction.amount - expense_cost)

            if (
                days_delta < self.tolerance.day_tolerance
                and amount_delta < self.tolerance.amount_tolerance
            ):
                return DuplicateMatch(
                    expense=expense,
                    kind=MatchKind.FUZZY,
                    days_delta=days_delta,
                    amount_delta=amount_delta,
                )

        return None

    def exists(
        self,
        snapshot: Sequence[SplitwiseExpense],
        transaction: Transaction,
    ) -> bool:
        """Return True if the transaction already has an expense."""
        return self.find_duplicate(snapshot, transaction) is not None


def expense_exists(
    snapshot: Sequence[SplitwiseExpense],
    transaction: Transaction,
    tolerance: MatchTolerance = DEFAULT_TOLERANCE,
) -> bool:
    """Shortcut for DuplicateDetector(tolerance).exists(...)."""
    return DuplicateDetector(tolerance).exists(snapshot, transaction)
