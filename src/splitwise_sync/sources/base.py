"""
Base transaction reader interface and common types.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import TextIO


class TransactionSourceError(Exception):
    """Transaction file could not be read or decoded."""

    pass


@dataclass(frozen=True)
class Transaction:
    """Normalized transaction read from a bank/card export.

    Amount sign follows the source: negative = money out.
    """

    id: str
    date: date
    amount: Decimal
    description: str
    account_name: str
    is_expense: bool


class BaseTransactionReader(ABC):
    """
    Base class for all transaction readers.

    Each reader decodes one vendor export format:
    - Mint JSON dump
    - Chase card CSV
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Format name used on the command line and in logs."""
        pass

    @property
    @abstractmethod
    def suffixes(self) -> tuple[str, ...]:
        """File suffixes this reader claims when no format is given."""
        pass

    @abstractmethod
    def read(self, stream: TextIO) -> list[Transaction]:
        """
        Decode all transactions from an open text stream.

        Raises:
            TransactionSourceError: If the content cannot be decoded
        """
        pass

    def can_read(self, path: Path) -> bool:
        """Check if this reader claims the given file by suffix."""
        return path.suffix.lower() in self.suffixes
