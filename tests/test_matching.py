"""Tests for candidate filtering and duplicate detection."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from fixtures import make_expense, make_transaction
from splitwise_sync.config import SyncConfig
from splitwise_sync.matching import (
    DuplicateDetector,
    MatchKind,
    MatchTolerance,
    SyncFilterCriteria,
    build_regex_smartcase,
    expense_exists,
    filter_transactions,
)


@pytest.fixture
def transactions():
    """Mixed expenses/incomes across two accounts, in file order."""
    return [
        make_transaction(id="a", date=date(2024, 1, 1), description="Coffee", account_name="Checking"),
        make_transaction(
            id="b",
            date=date(2024, 1, 2),
            amount="1500.00",
            description="Payroll",
            account_name="Checking",
            is_expense=False,
        ),
        make_transaction(id="c", date=date(2024, 1, 3), description="coffee beans", account_name="Visa"),
        make_transaction(id="d", date=date(2024, 1, 4), description="Rent", account_name="Checking"),
        make_transaction(id="e", date=date(2024, 1, 5), description="Market", account_name="Visa"),
    ]


def _ids(txns) -> list[str]:
    return [t.id for t in txns]


class TestSmartCase:
    """Tests for smart case regex compilation."""

    def test_lowercase_pattern_is_case_insensitive(self):
        """All-lowercase pattern matches regardless of case."""
        pattern = build_regex_smartcase("coffee")
        assert pattern.search("Coffee")
        assert pattern.search("coffee")

    def test_uppercase_pattern_is_case_sensitive(self):
        """Any uppercase letter switches to exact-case matching."""
        pattern = build_regex_smartcase("Coffee")
        assert pattern.search("Coffee")
        assert not pattern.search("coffee")

    def test_partial_match(self):
        """Patterns are unanchored unless the user anchors them."""
        assert build_regex_smartcase("ark").search("Market")
        assert not build_regex_smartcase("^ark").search("Market")


class TestFilterTransactions:
    """Tests for the filter pipeline."""

    def test_defaults_exclude_income_only(self, transactions):
        """Default criteria keep every expense in order."""
        result = filter_transactions(transactions, SyncFilterCriteria())
        assert _ids(result) == ["a", "c", "d", "e"]

    def test_include_income(self, transactions):
        result = filter_transactions(transactions, SyncFilterCriteria(include_income=True))
        assert _ids(result) == ["a", "b", "c", "d", "e"]

    def test_no_income_without_flag(self, transactions):
        """No is_expense=False transaction survives without include_income."""
        result = filter_transactions(transactions, SyncFilterCriteria(include_income=False))
        assert all(t.is_expense for t in result)

    def test_date_bounds_inclusive(self, transactions):
        criteria = SyncFilterCriteria(after=date(2024, 1, 3), before=date(2024, 1, 4))
        assert _ids(filter_transactions(transactions, criteria)) == ["c", "d"]

    def test_unbounded_side(self, transactions):
        criteria = SyncFilterCriteria(before=date(2024, 1, 3))
        assert _ids(filter_transactions(transactions, criteria)) == ["a", "c"]

    def test_account_pattern(self, transactions):
        criteria = SyncFilterCriteria.from_strings(account="visa")
        assert _ids(filter_transactions(transactions, criteria)) == ["c", "e"]

    def test_description_pattern_smart_case(self, transactions):
        """Description filter uses smart case independently of account filter."""
        insensitive = SyncFilterCriteria.from_strings(description="coffee")
        sensitive = SyncFilterCriteria.from_strings(description="Coffee")

        assert _ids(filter_transactions(transactions, insensitive)) == ["a", "c"]
        assert _ids(filter_transactions(transactions, sensitive)) == ["a"]

    def test_limit_is_prefix_after_predicates(self, transactions):
        """Limit takes the first N survivors, not the first N inputs."""
        criteria = SyncFilterCriteria.from_strings(account="checking", limit=2)
        assert _ids(filter_transactions(transactions, criteria)) == ["a", "d"]

    def test_limit_zero(self, transactions):
        assert filter_transactions(transactions, SyncFilterCriteria(limit=0)) == []

    def test_result_is_ordered_subsequence(self, transactions):
        """Output preserves the relative order of the input."""
        criteria = SyncFilterCriteria.from_strings(include_income=True, limit=3)
        result = filter_transactions(transactions, criteria)

        positions = [transactions.index(t) for t in result]
        assert positions == sorted(positions)
        assert len(result) <= 3

    def test_pure_function(self, transactions):
        """Filtering does not mutate the input list."""
        before = list(transactions)
        filter_transactions(transactions, SyncFilterCriteria(limit=1))
        assert transactions == before


class TestDuplicateDetector:
    """Tests for duplicate detection."""

    @pytest.fixture
    def detector(self) -> DuplicateDetector:
        return DuplicateDetector()

    def test_provenance_tag_matches_regardless_of_values(self, detector):
        """Exact tag match wins even when date and amount are far off."""
        txn = make_transaction(id="tx123", date=date(2020, 1, 1), amount="-999.99")
        snapshot = [make_expense(date="2024-06-01T00:00:00Z", cost="1.00", details="source:tx123")]

        match = detector.find_duplicate(snapshot, txn)

        assert match is not None
        assert match.kind == MatchKind.PROVENANCE
        assert detector.exists(snapshot, txn) is True

    def test_provenance_tag_with_surrounding_notes(self, detector):
        txn = make_transaction(id="tx123")
        snapshot = [make_expense(date=None, cost=None, details="Groceries split\nsource:tx123")]
        assert detector.exists(snapshot, txn) is True

    def test_provenance_checked_before_fuzzy(self, detector):
        """A tagged expense later in the snapshot beats an earlier fuzzy match."""
        txn = make_transaction(id="tx1")
        snapshot = [
            make_expense(id=1, date="2024-01-10T00:00:00Z", cost="20.00"),
            make_expense(id=2, date=None, cost=None, details="source:tx1"),
        ]

        match = detector.find_duplicate(snapshot, txn)
        assert match.kind == MatchKind.PROVENANCE
        assert match.expense.id == 2

    def test_fuzzy_one_day_apart_matches(self, detector):
        """2024-01-10 / -20.00 vs 2024-01-11 / 20.00 is a duplicate."""
        txn = make_transaction(date=date(2024, 1, 10), amount="-20.00")
        snapshot = [make_expense(date="2024-01-11T00:00:00Z", cost="20.00")]

        match = detector.find_duplicate(snapshot, txn)

        assert match is not None
        assert match.kind == MatchKind.FUZZY
        assert match.days_delta == 1
        assert match.amount_delta == Decimal("0.00")

    def test_fuzzy_two_days_apart_does_not_match(self, detector):
        """Day tolerance is strict: 2 days apart is not a duplicate."""
        txn = make_transaction(date=date(2024, 1, 10), amount="-20.00")
        snapshot = [make_expense(date="2024-01-12T00:00:00Z", cost="20.00")]

        assert detector.exists(snapshot, txn) is False

    def test_fuzzy_amount_boundary(self, detector):
        """Amount tolerance is strict: exactly 1.00 apart is not a duplicate."""
        txn = make_transaction(date=date(2024, 1, 10), amount="-20.00")

        assert detector.exists([make_expense(cost="20.99")], txn) is True
        assert detector.exists([make_expense(cost="21.00")], txn) is False

    def test_sign_flip(self, detector):
        """Source outflows compare against positive Splitwise costs."""
        txn = make_transaction(amount="20.00", is_expense=False)
        assert detector.exists([make_expense(cost="20.00")], txn) is False
        assert detector.exists([make_expense(cost="-20.00")], txn) is True

    def test_unparseable_cost_never_matches(self, detector):
        txn = make_transaction(date=date(2024, 1, 10), amount="-20.00")
        snapshot = [make_expense(date="2024-01-10T00:00:00Z", cost="n/a")]
        assert detector.exists(snapshot, txn) is False

    def test_missing_date_skipped(self, detector):
        txn = make_transaction(date=date(2024, 1, 10), amount="-20.00")
        snapshot = [make_expense(date=None, cost="20.00")]
        assert detector.exists(snapshot, txn) is False

    def test_first_fuzzy_match_wins(self, detector):
        """No best-match ranking: the first expense inside the window is reported."""
        txn = make_transaction(date=date(2024, 1, 10), amount="-20.00")
        snapshot = [
            make_expense(id=1, date="2024-01-11T00:00:00Z", cost="20.90"),
            make_expense(id=2, date="2024-01-10T00:00:00Z", cost="20.00"),
        ]

        assert detector.find_duplicate(snapshot, txn).expense.id == 1

    def test_empty_snapshot(self, detector):
        assert detector.find_duplicate([], make_transaction()) is None

    def test_custom_tolerance(self):
        """Tolerances come from config."""
        config = SyncConfig(day_tolerance=5, amount_tolerance=Decimal("0.10"))
        detector = DuplicateDetector(MatchTolerance.from_config(config))
        txn = make_transaction(date=date(2024, 1, 10), amount="-20.00")

        assert detector.exists([make_expense(date="2024-01-14T00:00:00Z", cost="20.05")], txn)
        assert not detector.exists([make_expense(date="2024-01-10T00:00:00Z", cost="20.50")], txn)

    def test_expense_exists_shortcut(self):
        txn = make_transaction(id="tx9")
        assert expense_exists([make_expense(details="source:tx9")], txn) is True
        assert expense_exists([], txn) is False
