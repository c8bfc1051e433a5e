"""Filter pipeline selecting which source transactions are sync candidates.

Predicates are applied as a conjunction in a fixed order, then the result is
capped to the first ``limit`` survivors:

1. date within [after, before] (inclusive; None = unbounded)
2. expense, or income when explicitly included
3. account name matches the account pattern
4. description matches the description pattern
5. take-first-N prefix cap

The cap runs before duplicate detection and confirmation, so ``limit`` bounds
how many candidates are considered, not how many end up synced.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import date
from itertools import islice
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from splitwise_sync.sources import Transaction

MATCH_ALL = ".*"


def build_regex_smartcase(pattern: str) -> re.Pattern[str]:
    """Compile a pattern with smart case sensitivity.

    Case-insensitive unless the pattern contains an uppercase character, in
    which case it is matched exactly as written.

    Raises:
        re.error: If the pattern is not a valid regular expression.
    """
    has_uppercase = any(c.isupper() for c in pattern)
    flags = 0 if has_uppercase else re.IGNORECASE
    return re.compile(pattern, flags)


@dataclass
class SyncFilterCriteria:
    """Filter settings for one sync run."""

    after: date | None = None
    before: date | None = None
    include_income: bool = False
    account_pattern: re.Pattern[str] = field(
        default_factory=lambda: build_regex_smartcase(MATCH_ALL)
    )
    description_pattern: re.Pattern[str] = field(
        default_factory=lambda: build_regex_smartcase(MATCH_ALL)
    )
    limit: int | None = None

    @classmethod
    def from_strings(
        cls,
        after: date | None = None,
        before: date | None = None,
        include_income: bool = False,
        account: str = MATCH_ALL,
        description: str = MATCH_ALL,
        limit: int | None = None,
    ) -> SyncFilterCriteria:
        """Build criteria from raw pattern strings (smart case applied)."""
        return cls(
            after=after,
            before=before,
            include_income=include_income,
            account_pattern=build_regex_smartcase(account),
            description_pattern=build_regex_smartcase(description),
            limit=limit,
        )

    def matches(self, transaction: Transaction) -> bool:
        """Per-item predicates (everything except the limit)."""
        if self.after is not None and transaction.date < self.after:
            return False
        if self.before is not None and transaction.date > self.before:
            return False
        if not (transaction.is_expense or self.include_income):
            return False
        if not self.account_pattern.search(transaction.account_name):
            return False
        if not self.description_pattern.search(transaction.description):
            return False
        return True


def iter_candidates(
    transactions: Iterable[Transaction],
    criteria: SyncFilterCriteria,
) -> Iterator[Transaction]:
    """Lazily yield transactions passing the criteria, in input order."""
    matching = (t for t in transactions if criteria.matches(t))
    if criteria.limit is None:
        return matching
    return islice(matching, max(criteria.limit, 0))


def filter_transactions(
    transactions: Iterable[Transaction],
    criteria: SyncFilterCriteria,
) -> list[Transaction]:
    """Apply the filter pipeline.

    Args:
        transactions: Full transaction list from the source file.
        criteria: Filter settings.

    Returns:
        Ordered subsequence of the input, at most ``criteria.limit`` long.
    """
    return list(iter_candidates(transactions, criteria))
