"""
Splitwise API client implementation.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import SplitwiseConfig
from ..schemas.expense_payload import CreateExpenseRequest, validate_expense_request
from ..schemas.provenance import contains_provenance_tag

logger = logging.getLogger(__name__)


class SplitwiseError(Exception):
    """Base exception for Splitwise client errors."""

    pass


class SplitwiseAPIError(SplitwiseError):
    """API returned an error response."""

    def __init__(
        self,
        status_code: int,
        message: str,
        response_body: str | None = None,
        errors: dict | list | None = None,
    ):
        self.status_code = status_code
        self.message = message
        self.response_body = response_body
        self.errors = errors or {}

        detail_str = join_errors(errors) if has_errors(errors) else message
        super().__init__(f"Splitwise API error {status_code}: {detail_str}")


class SplitwiseConnectionError(SplitwiseError):
    """Failed to connect to Splitwise."""

    pass


def has_errors(errors: object) -> bool:
    """Check if a structured error payload actually carries messages.

    Splitwise returns ``"errors": {}`` (or ``[]``) on success, so an empty
    container is not a failure.
    """
    if not errors:
        return False
    if isinstance(errors, dict):
        return any(bool(v) for v in errors.values())
    return True


def join_errors(errors: object) -> str:
    """Join a structured error payload into one human-readable message.

    {"base": ["Invalid cost", "Missing group"]} → "base: [Invalid cost; Missing group];"
    """
    if isinstance(errors, dict):
        parts = []
        for key, msgs in errors.items():
            if isinstance(msgs, list):
                text = "; ".join(str(m) for m in msgs)
            else:
                text = str(msgs)
            parts.append(f"{key}: [{text}];")
        return "".join(parts)
    if isinstance(errors, list):
        return "; ".join(str(e) for e in errors)
    return str(errors)


def _format_timestamp(value: date | datetime | str) -> str:
    """Format a date or datetime as an RFC3339 UTC timestamp."""
    if isinstance(value, str):
        return value
    if not isinstance(value, datetime):
        value = datetime.combine(value, datetime.min.time(), tzinfo=timezone.utc)
    elif value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class SplitwiseExpense:
    """Splitwise expense representation.

    Only the fields the sync pipeline reads are typed; ``date`` and ``cost``
    are kept as the raw strings the API returned and parsed on demand, since
    the remote data is not guaranteed to be well formed.
    """

    id: int | None
    date: str | None = None
    cost: str | None = None
    description: str | None = None
    details: str | None = None
    group_id: int | None = None
    currency_code: str | None = None
    deleted_at: str | None = None

    @classmethod
    def from_api(cls, data: dict) -> "SplitwiseExpense":
        """Build from an API expense object."""
        raw_id = data.get("id")
        raw_group = data.get("group_id")
        return cls(
            id=int(raw_id) if raw_id is not None else None,
            date=data.get("date"),
            cost=data.get("cost"),
            description=data.get("description"),
            details=data.get("details"),
            group_id=int(raw_group) if raw_group is not None else None,
            currency_code=data.get("currency_code"),
            deleted_at=data.get("deleted_at"),
        )

    def date_value(self) -> date | None:
        """Calendar date (UTC) of the expense, or None if missing/unparseable."""
        if not self.date:
            return None
        try:
            parsed = datetime.fromisoformat(self.date.replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unparseable date on expense %s: %r", self.id, self.date)
            return None
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc)
        return parsed.date()

    def cost_value(self) -> Decimal | None:
        """Numeric cost, or None if missing/unparseable."""
        if self.cost is None:
            return None
        try:
            value = Decimal(self.cost.strip())
        except (InvalidOperation, AttributeError):
            logger.debug("Unparseable cost on expense %s: %r", self.id, self.cost)
            return None
        if not value.is_finite():
            return None
        return value

    def has_provenance_tag(self, transaction_id: str) -> bool:
        """Return True if this expense was created from the given transaction."""
        return contains_provenance_tag(self.details, transaction_id)


@dataclass
class SplitwiseCategory:
    """Splitwise expense category representation."""

    id: int
    name: str
    subcategories: list["SplitwiseCategory"] = field(default_factory=list)

    @classmethod
    def from_api(cls, data: dict) -> "SplitwiseCategory":
        return cls(
            id=int(data.get("id", 0)),
            name=data.get("name", ""),
            subcategories=[cls.from_api(sub) for sub in data.get("subcategories") or []],
        )


@dataclass
class SplitwiseCurrency:
    """Splitwise supported currency."""

    currency_code: str
    unit: str | None = None


class SplitwiseClient:
    """
    Client for the Splitwise API (v3.0).

    Features:
    - List and create expenses
    - Get/delete single expenses
    - Currencies and categories lookup
    - Automatic retry with backoff for reads
    """

    DEFAULT_TIMEOUT = 30

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
    ):
        """
        Initialize Splitwise client.

        Args:
            base_url: API root (e.g., "https://secure.splitwise.com/api/v3.0/")
            api_key: Personal API key, sent as bearer token
            timeout: Request timeout in seconds
            max_retries: Maximum retry attempts
            backoff_factor: Backoff factor for retries
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )

        # create_expense is not idempotent; only reads are retried
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @classmethod
    def from_config(cls, config: SplitwiseConfig) -> "SplitwiseClient":
        """Build a client from SplitwiseConfig."""
        return cls(
            base_url=config.base_url,
            api_key=config.api_key,
            timeout=config.timeout,
            max_retries=config.max_retries,
        )

    def _request(
        self,
        method: str,
        endpoint: str,
        params: dict | None = None,
        json_data: dict | None = None,
    ) -> requests.Response:
        """Make an API request with error handling."""
        url = f"{self.base_url}/{endpoint}"

        logger.debug(f"API Request: {method} {url}")
        if json_data:
            logger.debug(f"Request body: {json.dumps(json_data, indent=2)}")

        try:
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_data,
                timeout=self.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error to {url}: {e}")
            raise SplitwiseConnectionError(
                f"Failed to connect to Splitwise at {self.base_url}: {e}"
            ) from e
        except requests.exceptions.Timeout as e:
            logger.error(f"Timeout for {url}: {e}")
            raise SplitwiseConnectionError(f"Request to Splitwise timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error for {url}: {e}")
            raise SplitwiseError(f"Request failed: {e}") from e

        logger.debug(f"Response status: {response.status_code}")

        if not response.ok:
            raise self._error_from_response(response)

        return response

    def _error_from_response(self, response: requests.Response) -> SplitwiseAPIError:
        """Decode Splitwise error bodies.

        401 → {"error": "..."}
        403/404 → {"errors": {"base": ["..."]}}
        """
        error_body = response.text
        errors: dict | list = {}

        try:
            error_json = response.json()
        except ValueError:
            error_json = None

        if response.status_code == 401 and isinstance(error_json, dict):
            message = error_json.get("error") or response.reason
        elif response.status_code in (403, 404) and isinstance(error_json, dict):
            errors = error_json.get("errors") or {}
            base = errors.get("base") if isinstance(errors, dict) else None
            message = "; ".join(base) if base else response.reason
        else:
            message = f"unexpected HTTP status code: {response.status_code}"
            if isinstance(error_json, dict):
                errors = error_json.get("errors") or {}

        logger.error(f"API Error {response.status_code}: {message}")
        logger.debug(f"Full response body: {error_body}")

        return SplitwiseAPIError(
            status_code=response.status_code,
            message=message,
            response_body=error_body,
            errors=errors,
        )

    def _raise_for_errors(self, data: dict, status_code: int) -> None:
        """Raise if a 200 response carries a non-empty errors payload."""
        errors = data.get("errors")
        if has_errors(errors):
            raise SplitwiseAPIError(
                status_code=status_code,
                message=join_errors(errors),
                errors=errors,
            )

    def test_connection(self) -> bool:
        """Test connection and credentials."""
        try:
            self.get_current_user()
            return True
        except SplitwiseError:
            return False

    def get_current_user(self) -> dict:
        """Get the user the API key belongs to."""
        response = self._request("GET", "get_current_user")
        return response.json().get("user", {})

    def list_expenses(
        self,
        group_id: int | None = None,
        dated_after: date | datetime | str | None = None,
        dated_before: date | datetime | str | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> list[SplitwiseExpense]:
        """
        List expenses, optionally filtered by group and date range.

        A single request is made; the caller picks a limit large enough for
        its needs.

        Args:
            group_id: Only expenses in this group
            dated_after: Only expenses dated on/after this
            dated_before: Only expenses dated on/before this
            limit: Max results (Splitwise defaults to 20; 0 means no limit)
            offset: Results to skip

        Returns:
            List of SplitwiseExpense objects
        """
        params: dict[str, Any] = {}
        if group_id is not None:
            params["group_id"] = group_id
        if dated_after is not None:
            params["dated_after"] = _format_timestamp(dated_after)
        if dated_before is not None:
            params["dated_before"] = _format_timestamp(dated_before)
        if limit is not None:
            params["limit"] = limit
        if offset is not None:
            params["offset"] = offset

        response = self._request("GET", "get_expenses", params=params)
        data = response.json()

        expenses = [SplitwiseExpense.from_api(item) for item in data.get("expenses") or []]
        logger.debug("Listed %d expenses (group_id=%s)", len(expenses), group_id)
        return expenses

    def get_expense(self, expense_id: int) -> SplitwiseExpense | None:
        """Get an expense by ID."""
        try:
            response = self._request("GET", f"get_expense/{expense_id}")
        except SplitwiseAPIError as e:
            if e.status_code == 404:
                return None
            raise

        data = response.json().get("expense")
        return SplitwiseExpense.from_api(data) if data else None

    def create_expense(self, request: CreateExpenseRequest) -> list[SplitwiseExpense]:
        """
        Create an expense in Splitwise.

        Explicit user shares always take priority over an equal split.

        Args:
            request: Expense request payload

        Returns:
            Created expense(s)

        Raises:
            SplitwiseAPIError: If the API reports errors
            ValueError: If the request is invalid
        """
        validation_errors = validate_expense_request(request)
        if validation_errors:
            raise ValueError(f"Invalid expense request: {'; '.join(validation_errors)}")

        request.split_equally = not request.users

        response = self._request("POST", "create_expense", json_data=request.to_dict())
        data = response.json()
        self._raise_for_errors(data, response.status_code)

        expenses = [SplitwiseExpense.from_api(item) for item in data.get("expenses") or []]
        for expense in expenses:
            logger.info(f"Created Splitwise expense id={expense.id}")
        return expenses

    def delete_expense(self, expense_id: int) -> bool:
        """
        Delete an expense.

        Returns:
            True if deleted

        Raises:
            SplitwiseAPIError: If the API reports errors or no success flag
        """
        response = self._request("POST", f"delete_expense/{expense_id}")
        data = response.json()

        if data.get("success"):
            logger.info(f"Deleted Splitwise expense id={expense_id}")
            return True

        self._raise_for_errors(data, response.status_code)
        raise SplitwiseAPIError(
            status_code=response.status_code,
            message=f"unknown error deleting expense: {expense_id}",
        )

    def get_currencies(self) -> list[SplitwiseCurrency]:
        """List currencies supported by Splitwise."""
        response = self._request("GET", "get_currencies")
        return [
            SplitwiseCurrency(currency_code=item.get("currency_code", ""), unit=item.get("unit"))
            for item in response.json().get("currencies") or []
        ]

    def get_categories(self) -> list[SplitwiseCategory]:
        """List expense categories (with subcategories)."""
        response = self._request("GET", "get_categories")
        return [SplitwiseCategory.from_api(item) for item in response.json().get("categories") or []]
