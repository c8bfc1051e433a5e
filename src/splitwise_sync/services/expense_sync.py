"""Transaction → Splitwise expense sync service.

One pass per invocation:

    fetch snapshot → filter → per item: duplicate? → confirm? → create

The snapshot is fetched once. A failure while reading the source file or
fetching the snapshot aborts the run before anything is written; a failure
while creating a single expense is recorded and the run moves on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from splitwise_sync.matching import (
    DuplicateDetector,
    MatchTolerance,
    SyncFilterCriteria,
    filter_transactions,
)
from splitwise_sync.schemas.expense_payload import build_expense_request
from splitwise_sync.sources import SourceRouter
from splitwise_sync.splitwise_client import SplitwiseError

if TYPE_CHECKING:
    from splitwise_sync.config import SyncConfig
    from splitwise_sync.sources import Transaction
    from splitwise_sync.splitwise_client import SplitwiseClient, SplitwiseExpense

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[["Transaction"], bool]


@dataclass
class SyncResult:
    """Result of a sync run."""

    snapshot_size: int = 0
    candidates: int = 0
    duplicates: int = 0
    declined: int = 0
    created: int = 0
    dry_run_skipped: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)
    created_expense_ids: list[int] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def success(self) -> bool:
        """Return True if no expense creation failed."""
        return self.failed == 0


class ExpenseSyncService:
    """Service for syncing source transactions into a Splitwise group.

    The confirmation prompt is injected so the runner can ask on the terminal
    while tests (and --assume-yes) never block on input.
    """

    def __init__(
        self,
        client: SplitwiseClient,
        config: SyncConfig,
        confirm: ConfirmCallback | None = None,
        detector: DuplicateDetector | None = None,
        router: SourceRouter | None = None,
    ) -> None:
        """Initialize the sync service.

        Args:
            client: Client for the Splitwise API.
            config: Sync settings (tolerances, currency, snapshot policy).
            confirm: Per-transaction confirmation prompt. Required unless
                every run uses assume_yes.
            detector: Duplicate detector (defaults to config tolerances).
            router: Source reader router for sync_file.
        """
        self.client = client
        self.config = config
        self.confirm = confirm
        self.detector = detector or DuplicateDetector(MatchTolerance.from_config(config))
        self.router = router or SourceRouter()

    def fetch_snapshot(self, group_id: int) -> list[SplitwiseExpense]:
        """Fetch the group's expenses in one bounded request.

        Raises:
            SplitwiseError: If the fetch fails (fatal for the run).
        """
        expenses = self.client.list_expenses(group_id=group_id, limit=self.config.snapshot_limit)
        if len(expenses) >= self.config.snapshot_limit:
            logger.warning(
                "Snapshot hit the %d expense limit; older expenses are not checked for duplicates",
                self.config.snapshot_limit,
            )
        logger.info("Found %d expenses in Splitwise group %d", len(expenses), group_id)
        return expenses

    def sync_file(
        self,
        path: Path,
        group_id: int,
        criteria: SyncFilterCriteria,
        assume_yes: bool = False,
        dry_run: bool = False,
        source_format: str | None = None,
    ) -> SyncResult:
        """Read a transaction export and sync it.

        The file is fully decoded before any remote call is made.

        Raises:
            TransactionSourceError: If the file cannot be read or decoded.
            SplitwiseError: If the snapshot fetch fails.
        """
        transactions = self.router.read(
            Path(path),
            source_format=source_format,
            default_format=self.config.default_source_format,
        )
        return self.run(transactions, group_id, criteria, assume_yes=assume_yes, dry_run=dry_run)

    def run(
        self,
        transactions: Sequence[Transaction],
        group_id: int,
        criteria: SyncFilterCriteria,
        assume_yes: bool = False,
        dry_run: bool = False,
    ) -> SyncResult:
        """Sync transactions into a Splitwise group.

        Args:
            transactions: Full transaction list from the source.
            group_id: Target Splitwise group.
            criteria: Candidate filter settings.
            assume_yes: Skip the per-item confirmation prompt.
            dry_run: Never write to Splitwise.

        Returns:
            SyncResult with per-outcome counts.

        Raises:
            SplitwiseError: If the snapshot fetch fails.
        """
        if not assume_yes and self.confirm is None:
            raise ValueError("A confirm callback is required unless assume_yes is set")

        start_time = datetime.now()
        result = SyncResult()

        snapshot = self.fetch_snapshot(group_id)
        result.snapshot_size = len(snapshot)

        candidates = filter_transactions(transactions, criteria)
        result.candidates = len(candidates)
        logger.info("%d of %d transactions pass the filters", len(candidates), len(transactions))

        for txn in candidates:
            match = self.detector.find_duplicate(snapshot, txn)
            if match is not None:
                logger.debug("Skipping %s (%s): %s", txn.id, match.kind.value, match.detail)
                result.duplicates += 1
                continue

            if not assume_yes and not self._ask(txn):
                logger.debug("Declined %s", txn.id)
                result.declined += 1
                continue

            if dry_run:
                logger.info("[DRY RUN] Would create expense for %s: %s", txn.id, txn.description)
                result.dry_run_skipped += 1
                continue

            self._commit(txn, group_id, snapshot, result)

        result.duration_ms = int((datetime.now() - start_time).total_seconds() * 1000)

        logger.info(
            "Sync completed: %d candidates, %d duplicates, %d declined, %d created, "
            "%d dry-run, %d failed in %dms",
            result.candidates,
            result.duplicates,
            result.declined,
            result.created,
            result.dry_run_skipped,
            result.failed,
            result.duration_ms,
        )

        return result

    def _ask(self, txn: Transaction) -> bool:
        """Prompt for one transaction; a broken prompt counts as no."""
        try:
            return bool(self.confirm(txn))
        except (EOFError, ValueError) as e:
            logger.debug("Confirmation for %s failed: %s", txn.id, e)
            return False

    def _commit(
        self,
        txn: Transaction,
        group_id: int,
        snapshot: list[SplitwiseExpense],
        result: SyncResult,
    ) -> None:
        """Create the expense for one transaction, isolating failures."""
        try:
            request = build_expense_request(txn, group_id, self.config.currency_code)
            created = self.client.create_expense(request)
        except (SplitwiseError, ValueError) as e:
            logger.warning("Failed creating expense for %s: %s", txn.id, e)
            result.failed += 1
            result.errors.append(f"Transaction {txn.id}: {e}")
            return

        result.created += 1
        result.created_expense_ids.extend(e.id for e in created if e.id is not None)

        if self.config.refresh_snapshot_after_create:
            snapshot.extend(created)
