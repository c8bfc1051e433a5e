"""
Mint transaction export reader.

Mint exports are a JSON array of transaction objects with camelCase keys:

    {"id": "...", "date": "2024-03-01", "amount": -45.0,
     "description": "Market", "isExpense": true,
     "accountRef": {"id": "...", "name": "Checking", ...}, ...}

Only the fields needed for syncing are decoded; everything else is ignored.
"""

import json
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, TextIO

from .base import BaseTransactionReader, Transaction, TransactionSourceError

logger = logging.getLogger(__name__)


class MintJsonReader(BaseTransactionReader):
    """Reader for Mint JSON transaction dumps."""

    @property
    def name(self) -> str:
        return "mint"

    @property
    def suffixes(self) -> tuple[str, ...]:
        return (".json",)

    def read(self, stream: TextIO) -> list[Transaction]:
        try:
            raw = json.load(stream)
        except json.JSONDecodeError as e:
            raise TransactionSourceError(f"Invalid Mint JSON: {e}") from e

        if not isinstance(raw, list):
            raise TransactionSourceError(
                f"Mint export must be a JSON array, got {type(raw).__name__}"
            )

        transactions = [self._decode(i, item) for i, item in enumerate(raw)]
        logger.debug("Decoded %d Mint transactions", len(transactions))
        return transactions

    def _decode(self, index: int, item: Any) -> Transaction:
        if not isinstance(item, dict):
            raise TransactionSourceError(f"Mint record {index} is not an object")

        account_ref = _field(item, "accountRef", dict, index)
        amount = _field(item, "amount", (int, float), index)

        try:
            return Transaction(
                id=_field(item, "id", str, index),
                date=date.fromisoformat(_field(item, "date", str, index)),
                # str() first so float amounts keep their printed value
                amount=Decimal(str(amount)),
                description=_field(item, "description", str, index),
                account_name=_field(account_ref, "name", str, index, prefix="accountRef."),
                is_expense=_field(item, "isExpense", bool, index),
            )
        except (ValueError, InvalidOperation) as e:
            raise TransactionSourceError(f"Mint record {index} is malformed: {e}") from e


def _field(
    data: dict,
    key: str,
    expected: type | tuple[type, ...],
    index: int,
    prefix: str = "",
) -> Any:
    """Fetch a required field and check its JSON type."""
    if key not in data:
        raise TransactionSourceError(f"Mint record {index} is missing field '{prefix}{key}'")

    value = data[key]
    # bool is an int subclass; only accept it where a bool is asked for
    if not isinstance(value, expected) or (isinstance(value, bool) and expected is not bool):
        raise TransactionSourceError(
            f"Mint record {index} has invalid '{prefix}{key}': {value!r}"
        )
    return value
