"""
CLI main entry point.
"""

import argparse
import logging
import re
import sys
from datetime import date
from pathlib import Path

from ..config import Config, create_default_config, load_config
from ..matching import SyncFilterCriteria, build_regex_smartcase
from ..schemas.provenance import PROVENANCE_TAG_PREFIX
from ..services import ExpenseSyncService
from ..sources import SourceRouter, Transaction, TransactionSourceError
from ..splitwise_client import SplitwiseClient, SplitwiseError

logger = logging.getLogger(__name__)

YES_ANSWERS = ("y", "yes")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _date_arg(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date '{value}' (expected YYYY-MM-DD)") from e


def _regex_arg(value: str) -> re.Pattern:
    try:
        return build_regex_smartcase(value)
    except re.error as e:
        raise argparse.ArgumentTypeError(f"invalid regex '{value}': {e}") from e


def create_cli() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="splitwise-sync",
        description="Sync exported bank/card transactions into a Splitwise group",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # sync command
    sync_parser = subparsers.add_parser(
        "sync", help="Create Splitwise expenses for transactions not yet in a group"
    )
    sync_parser.add_argument(
        "file",
        type=Path,
        help="Path to file containing transactions to process",
    )
    sync_parser.add_argument(
        "group_id",
        type=int,
        help="Splitwise group ID to sync transactions with",
    )
    sync_parser.add_argument(
        "--after",
        type=_date_arg,
        help="Limit to transactions after this date, inclusive (YYYY-MM-DD)",
    )
    sync_parser.add_argument(
        "--before",
        type=_date_arg,
        help="Limit to transactions before this date, inclusive (YYYY-MM-DD)",
    )
    sync_parser.add_argument(
        "-a",
        "--account",
        type=_regex_arg,
        default=".*",
        help="Regex filter for transaction account name (smart case)",
    )
    sync_parser.add_argument(
        "-d",
        "--description",
        type=_regex_arg,
        default=".*",
        help="Regex filter for transaction description (smart case)",
    )
    sync_parser.add_argument(
        "--all",
        action="store_true",
        help="Include incomes in addition to expenses",
    )
    sync_parser.add_argument(
        "--limit",
        type=int,
        help="Only process this many transactions",
    )
    sync_parser.add_argument(
        "--assume-yes",
        action="store_true",
        help="Assume yes to all prompts (ie, non-interactive)",
    )
    sync_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Don't write any data back to Splitwise",
    )
    sync_parser.add_argument(
        "--format",
        dest="source_format",
        choices=SourceRouter().formats,
        help="Transaction file format (default: by file suffix)",
    )

    # expenses command
    expenses_parser = subparsers.add_parser("expenses", help="List expenses in a Splitwise group")
    expenses_parser.add_argument(
        "group_id",
        type=int,
        help="Splitwise group ID",
    )
    expenses_parser.add_argument(
        "--after",
        type=_date_arg,
        help="Only expenses dated on/after this date (YYYY-MM-DD)",
    )
    expenses_parser.add_argument(
        "--before",
        type=_date_arg,
        help="Only expenses dated on/before this date (YYYY-MM-DD)",
    )
    expenses_parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Maximum expenses to list (default: 50)",
    )

    # init-config command
    init_parser = subparsers.add_parser("init-config", help="Write a default config file")
    init_parser.add_argument(
        "path",
        type=Path,
        nargs="?",
        help="Where to write the config (default: the --config path)",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing file",
    )

    return parser


def prompt_confirm(txn: Transaction) -> bool:
    """Ask on the terminal whether to sync one transaction."""
    prompt = f"{txn.date}: {txn.amount} @ [{txn.account_name}] {txn.description}  -- Sync? [y/N] "
    answer = input(prompt).strip().lower()
    return answer in YES_ANSWERS


def _build_client(config: Config) -> SplitwiseClient:
    return SplitwiseClient.from_config(config.splitwise)


def cmd_sync(
    config: Config,
    file: Path,
    group_id: int,
    criteria: SyncFilterCriteria,
    assume_yes: bool = False,
    dry_run: bool = False,
    source_format: str | None = None,
    client: SplitwiseClient | None = None,
) -> int:
    """Sync transactions from a file into a Splitwise group.

    Args:
        config: Application configuration.
        file: Transaction export to read.
        group_id: Target Splitwise group.
        criteria: Candidate filters.
        assume_yes: Skip confirmation prompts.
        dry_run: Show what would be created without writing.
        source_format: Force a reader instead of detecting by suffix.
        client: Preconfigured client (built from config when omitted).

    Returns:
        Exit code (0 for a completed run, 1 for a fatal error).
    """
    print(f"🔄 Syncing {file} → Splitwise group {group_id}...")
    if dry_run:
        print("  ℹ️  DRY RUN mode - no expenses will be created")

    service = ExpenseSyncService(
        client=client or _build_client(config),
        config=config.sync,
        confirm=prompt_confirm,
    )

    try:
        result = service.sync_file(
            file,
            group_id,
            criteria,
            assume_yes=assume_yes,
            dry_run=dry_run,
            source_format=source_format,
        )
    except TransactionSourceError as e:
        logger.error(f"Failed to read transactions: {e}")
        print(f"❌ Failed to read transactions: {e}")
        return 1
    except SplitwiseError as e:
        logger.error(f"Failed to fetch Splitwise expenses: {e}")
        print(f"❌ Failed to fetch Splitwise expenses: {e}")
        return 1

    print()
    print("📊 Sync Results")
    print("=" * 40)
    print(f"  Expenses in group:   {result.snapshot_size}")
    print(f"  Candidates:          {result.candidates}")
    print(f"  Already in group:    {result.duplicates}")
    print(f"  Declined:            {result.declined}")
    if dry_run:
        print(f"  Would create:        {result.dry_run_skipped}")
    else:
        print(f"  Created:             {result.created}")
    print(f"  Failed:              {result.failed}")
    print(f"  Duration:            {result.duration_ms}ms")
    print()

    if result.errors:
        print("⚠️  Errors encountered:")
        for error in result.errors:
            print(f"   - {error}")

    print("✓ Sync completed")
    return 0


def cmd_expenses(
    config: Config,
    group_id: int,
    after: date | None = None,
    before: date | None = None,
    limit: int = 50,
    client: SplitwiseClient | None = None,
) -> int:
    """List expenses in a Splitwise group."""
    splitwise = client or _build_client(config)

    try:
        expenses = splitwise.list_expenses(
            group_id=group_id,
            dated_after=after,
            dated_before=before,
            limit=limit,
        )
    except SplitwiseError as e:
        print(f"❌ Failed to list expenses: {e}")
        return 1

    for expense in expenses:
        marker = ""
        if expense.details and PROVENANCE_TAG_PREFIX in expense.details:
            marker = "  🔗"
        expense_date = expense.date_value()
        print(
            f"  💸 [{expense.id}] {expense_date or '?'}  {expense.cost or '?':>10}  "
            f"{expense.description or ''}{marker}"
        )

    print(f"\n✓ Found {len(expenses)} expense(s)")
    return 0


def cmd_init_config(path: Path, force: bool = False) -> int:
    """Write a default configuration file."""
    if path.exists() and not force:
        print(f"❌ {path} already exists (use --force to overwrite)")
        return 1

    create_default_config(path)
    print(f"✓ Wrote default config to {path}")
    print("  ℹ️  Set SPLITWISE_API_KEY in your environment before syncing")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point."""
    parser = create_cli()
    parsed = parser.parse_args(args)

    setup_logging(parsed.verbose)

    if not parsed.command:
        parser.print_help()
        return 1

    if parsed.command == "init-config":
        return cmd_init_config(parsed.path or parsed.config, parsed.force)

    # Load config
    try:
        config = load_config(parsed.config)
    except Exception as e:
        print(f"❌ Failed to load config: {e}")
        return 1

    errors = config.validate()
    if errors:
        print("❌ Invalid configuration:")
        for error in errors:
            print(f"   - {error}")
        return 1

    # Route to command
    if parsed.command == "sync":
        criteria = SyncFilterCriteria(
            after=parsed.after,
            before=parsed.before,
            include_income=parsed.all,
            account_pattern=parsed.account,
            description_pattern=parsed.description,
            limit=parsed.limit,
        )
        return cmd_sync(
            config,
            parsed.file,
            parsed.group_id,
            criteria,
            assume_yes=parsed.assume_yes,
            dry_run=parsed.dry_run,
            source_format=parsed.source_format,
        )
    elif parsed.command == "expenses":
        return cmd_expenses(
            config,
            parsed.group_id,
            after=parsed.after,
            before=parsed.before,
            limit=parsed.limit,
        )
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
