"""
Splitwise create_expense payload builder (SSOT).

This is THE single builder that maps a source Transaction → Splitwise
create_expense JSON.

Rules:
- cost is the negated transaction amount, fixed to 2 decimal places
- description is copied verbatim
- details always carry the provenance tag
- date is the transaction date at midnight UTC (RFC3339)
- split equally unless explicit user shares are given
- category is left unset (Splitwise picks its default)
"""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, time, timezone
from decimal import Decimal
from typing import Any

from ..sources.base import Transaction
from .provenance import build_provenance_tag

logger = logging.getLogger(__name__)

COST_PATTERN = re.compile(r"^-?\d+\.\d{2}$")

DEFAULT_REPEAT_INTERVAL = "never"


@dataclass
class UserShare:
    """
    Explicit share of an expense for one user.

    Maps to the flattened users__{i}__* fields of create_expense.
    """

    user_id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    paid_share: str | None = None
    owed_share: str | None = None

    def to_fields(self, index: int) -> dict[str, str]:
        """Flatten to users__{index}__{field} form fields."""
        result: dict[str, str] = {}
        for field_name in (
            "user_id",
            "first_name",
            "last_name",
            "email",
            "paid_share",
            "owed_share",
        ):
            value = getattr(self, field_name)
            if value is not None:
                result[f"users__{index}__{field_name}"] = str(value)
        return result


@dataclass
class CreateExpenseRequest:
    """
    Request body for POST create_expense.
    """

    # Required fields
    cost: str  # "-?\d+\.\d{2}"
    description: str
    group_id: int

    date: str | None = None  # RFC3339
    details: str | None = None
    currency_code: str | None = None
    category_id: int | None = None
    repeat_interval: str = DEFAULT_REPEAT_INTERVAL
    split_equally: bool = True
    users: list[UserShare] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to Splitwise API JSON format."""
        result: dict[str, Any] = {
            "cost": self.cost,
            "description": self.description,
            "group_id": self.group_id,
            "repeat_interval": self.repeat_interval,
            "split_equally": self.split_equally,
        }

        optional_fields = [
            ("date", self.date),
            ("details", self.details),
            ("currency_code", self.currency_code),
            ("category_id", self.category_id),
        ]
        for field_name, value in optional_fields:
            if value is not None:
                result[field_name] = value

        for i, share in enumerate(self.users):
            result.update(share.to_fields(i))

        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def format_cost(amount: Decimal) -> str:
    """Format a decimal amount with exactly two decimal places."""
    return f"{amount:.2f}"


def format_expense_date(transaction: Transaction) -> str:
    """Transaction date at 00:00 UTC as an RFC3339 timestamp."""
    midnight = datetime.combine(transaction.date, time.min, tzinfo=timezone.utc)
    return midnight.strftime("%Y-%m-%dT%H:%M:%SZ")


def build_expense_request(
    transaction: Transaction,
    group_id: int,
    currency_code: str = "USD",
) -> CreateExpenseRequest:
    """
    Build a create_expense request from a source transaction.

    Outflows are negative in the source, so the cost is the negated amount:
    a -45.00 card purchase becomes a "45.00" expense.

    Args:
        transaction: Transaction to sync
        group_id: Target Splitwise group
        currency_code: Currency for the expense (no conversion is done)

    Returns:
        CreateExpenseRequest ready for SplitwiseClient.create_expense
    """
    return CreateExpenseRequest(
        cost=format_cost(-transaction.amount),
        description=transaction.description,
        details=build_provenance_tag(transaction.id),
        date=format_expense_date(transaction),
        currency_code=currency_code,
        group_id=group_id,
        split_equally=True,
    )


def validate_expense_request(request: CreateExpenseRequest) -> list[str]:
    """
    Validate a create_expense request meets API requirements.

    Args:
        request: The request to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors: list[str] = []

    if not request.cost:
        errors.append("cost is required")
    elif not COST_PATTERN.match(request.cost):
        errors.append(f"cost must have exactly 2 decimal places, got: {request.cost}")

    if not request.description:
        errors.append("description is required")

    if request.group_id is None:
        errors.append("group_id is required")

    for i, share in enumerate(request.users):
        if share.user_id is None and not share.email:
            errors.append(f"users[{i}] needs user_id or email")

    return errors
