"""
Provenance tag constants and utilities (SSOT).

This module defines THE single source of truth for the marker that links a
Splitwise expense back to the transaction it was created from.

Provenance tag:
    "source:{transaction_id}" stored in the expense ``details`` (notes) field.

The tag is matched as a plain substring so that users may add their own
notes around it without breaking deduplication on later runs.
"""

PROVENANCE_TAG_PREFIX = "source:"


def build_provenance_tag(transaction_id: str) -> str:
    """
    Build the provenance tag for a transaction.

    Args:
        transaction_id: Stable identifier from the transaction source

    Returns:
        Tag string, e.g. "source:tx123"
    """
    if not transaction_id:
        raise ValueError("transaction_id is required to build a provenance tag")
    return f"{PROVENANCE_TAG_PREFIX}{transaction_id}"


def contains_provenance_tag(details: str | None, transaction_id: str) -> bool:
    """
    Check whether an expense's details carry the tag for a transaction.

    Args:
        details: Expense details/notes (may be None)
        transaction_id: Transaction identifier to look for

    Returns:
        True if the exact tag substring is present
    """
    if not details or not transaction_id:
        return False
    return build_provenance_tag(transaction_id) in details
