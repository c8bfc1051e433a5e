"""
Transaction source readers.

Decodes vendor exports into normalized Transaction records:
- Mint JSON dumps
- Chase card CSV exports
"""

from .base import BaseTransactionReader, Transaction, TransactionSourceError
from .chase import ChaseCsvReader
from .mint import MintJsonReader
from .router import SourceRouter, read_transactions

__all__ = [
    "BaseTransactionReader",
    "ChaseCsvReader",
    "MintJsonReader",
    "SourceRouter",
    "Transaction",
    "TransactionSourceError",
    "read_transactions",
]
