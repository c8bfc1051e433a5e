"""
Source router - chooses the reader for a transaction export.
"""

import logging
from pathlib import Path

from .base import BaseTransactionReader, Transaction, TransactionSourceError
from .chase import ChaseCsvReader
from .mint import MintJsonReader

logger = logging.getLogger(__name__)


class SourceRouter:
    """
    Routes a transaction file to the appropriate reader.

    Selection order:
    1. Explicit format name (--format)
    2. File suffix (.json → mint, .csv → chase)
    3. Configured default format
    """

    def __init__(self, readers: list[BaseTransactionReader] | None = None):
        """Initialize with default readers."""
        self.readers: list[BaseTransactionReader] = readers or [
            MintJsonReader(),
            ChaseCsvReader(),
        ]

    @property
    def formats(self) -> list[str]:
        return [r.name for r in self.readers]

    def get_reader(
        self,
        path: Path,
        source_format: str | None = None,
        default_format: str | None = None,
    ) -> BaseTransactionReader:
        """
        Pick the reader for a file.

        Raises:
            TransactionSourceError: If no reader matches
        """
        if source_format:
            for reader in self.readers:
                if reader.name == source_format:
                    return reader
            raise TransactionSourceError(
                f"Unknown transaction format '{source_format}' "
                f"(supported: {', '.join(self.formats)})"
            )

        for reader in self.readers:
            if reader.can_read(path):
                return reader

        if default_format:
            return self.get_reader(path, source_format=default_format)

        raise TransactionSourceError(f"Cannot determine transaction format for {path}")

    def read(
        self,
        path: Path,
        source_format: str | None = None,
        default_format: str | None = None,
    ) -> list[Transaction]:
        """
        Read all transactions from a file.

        Raises:
            TransactionSourceError: If the file cannot be opened or decoded
        """
        reader = self.get_reader(path, source_format, default_format)
        logger.info("Reading %s transactions from %s", reader.name, path)

        try:
            with open(path, encoding="utf-8", newline="") as f:
                transactions = reader.read(f)
        except OSError as e:
            raise TransactionSourceError(f"Failed to read {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise TransactionSourceError(f"{path} is not valid UTF-8: {e}") from e

        logger.info("Read %d transactions from %s", len(transactions), path)
        return transactions


def read_transactions(
    path: Path,
    source_format: str | None = None,
    default_format: str | None = None,
) -> list[Transaction]:
    """Read a transaction export with the default router."""
    return SourceRouter().read(Path(path), source_format, default_format)
