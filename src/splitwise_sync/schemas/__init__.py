"""
SSOT (Single Source of Truth) schemas for the sync pipeline.

These canonical schemas are the ONLY request models and linkage markers
used across all modules.
"""

from .expense_payload import (
    COST_PATTERN,
    CreateExpenseRequest,
    UserShare,
    build_expense_request,
    format_cost,
    format_expense_date,
    validate_expense_request,
)
from .provenance import (
    PROVENANCE_TAG_PREFIX,
    build_provenance_tag,
    contains_provenance_tag,
)

__all__ = [
    # Payload
    "COST_PATTERN",
    "CreateExpenseRequest",
    "UserShare",
    "build_expense_request",
    "format_cost",
    "format_expense_date",
    "validate_expense_request",
    # Provenance
    "PROVENANCE_TAG_PREFIX",
    "build_provenance_tag",
    "contains_provenance_tag",
]
