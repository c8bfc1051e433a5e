"""
Chase card CSV export reader.

CSV header (exact keys expected):
Transaction Date, Post Date, Description, Category, Type, Amount, Memo

Chase exports carry no transaction id, so a stable one is derived from the
row contents. Identical rows (same day, amount, description) are told apart
by their occurrence count, so re-exporting the same statement period yields
the same ids.
"""

import csv
import hashlib
import logging
from collections import Counter
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import TextIO

from .base import BaseTransactionReader, Transaction, TransactionSourceError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("Transaction Date", "Description", "Amount")

# Length of the hash prefix used as transaction id
HASH_PREFIX_LENGTH = 16


def compute_row_id(tx_date: date, amount: Decimal, description: str, occurrence: int) -> str:
    """Deterministic id for a CSV row that has no id of its own."""
    parts = [tx_date.isoformat(), f"{amount:.2f}", description.strip().lower(), str(occurrence)]
    digest = hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()
    return f"chase-{digest[:HASH_PREFIX_LENGTH]}"


class ChaseCsvReader(BaseTransactionReader):
    """Reader for Chase credit card CSV exports."""

    def __init__(self, account_name: str = "Chase"):
        self.account_name = account_name

    @property
    def name(self) -> str:
        return "chase"

    @property
    def suffixes(self) -> tuple[str, ...]:
        return (".csv",)

    def read(self, stream: TextIO) -> list[Transaction]:
        reader = csv.DictReader(stream)
        missing = [c for c in REQUIRED_COLUMNS if c not in (reader.fieldnames or [])]
        if missing:
            raise TransactionSourceError(f"Chase CSV is missing columns: {', '.join(missing)}")

        seen: Counter[tuple[date, Decimal, str]] = Counter()
        transactions: list[Transaction] = []

        # Row 1 is the header
        for line_no, row in enumerate(reader, start=2):
            try:
                tx_date = datetime.strptime(row["Transaction Date"].strip(), "%m/%d/%Y").date()
                amount = Decimal(row["Amount"].strip())
            except (AttributeError, ValueError, InvalidOperation) as e:
                raise TransactionSourceError(f"Chase CSV line {line_no} is malformed: {e}") from e

            description = (row["Description"] or "").strip()
            key = (tx_date, amount, description.lower())
            occurrence = seen[key]
            seen[key] += 1

            transactions.append(
                Transaction(
                    id=compute_row_id(tx_date, amount, description, occurrence),
                    date=tx_date,
                    amount=amount,
                    description=description,
                    account_name=self.account_name,
                    is_expense=amount < 0,
                )
            )

        logger.debug("Decoded %d Chase transactions", len(transactions))
        return transactions
