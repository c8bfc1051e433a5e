"""Candidate filtering and duplicate detection for transaction sync."""

from splitwise_sync.matching.duplicates import (
    DEFAULT_TOLERANCE,
    DuplicateDetector,
    DuplicateMatch,
    MatchKind,
    MatchTolerance,
    expense_exists,
)
from splitwise_sync.matching.filters import (
    SyncFilterCriteria,
    build_regex_smartcase,
    filter_transactions,
    iter_candidates,
)

__all__ = [
    "DEFAULT_TOLERANCE",
    "DuplicateDetector",
    "DuplicateMatch",
    "MatchKind",
    "MatchTolerance",
    "SyncFilterCriteria",
    "build_regex_smartcase",
    "expense_exists",
    "filter_transactions",
    "iter_candidates",
]
