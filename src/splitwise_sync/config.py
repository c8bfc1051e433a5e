"""
Configuration management (SSOT).

This module defines ALL configuration for the splitwise-sync application.
All config keys are defined here; no other module should invent config keys.

Key invariants:
- The API client is always built from an explicit SplitwiseConfig
  (no process-wide default client)
- Match tolerances and the currency code live in SyncConfig only
"""

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path

import yaml

DEFAULT_BASE_URL = "https://secure.splitwise.com/api/v3.0/"


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


@dataclass
class SplitwiseConfig:
    """Splitwise API configuration.

    The API key is sent as a bearer token. It is normally sourced from
    the SPLITWISE_API_KEY environment variable rather than the YAML file.
    """

    base_url: str = DEFAULT_BASE_URL
    api_key: str = ""
    # Request timeout (seconds)
    timeout: int = 30
    # Max retries for 429/5xx responses
    max_retries: int = 3


@dataclass
class SyncConfig:
    """Transaction sync settings."""

    # Fuzzy match window: days apart must be strictly less than this
    day_tolerance: int = 2
    # Fuzzy match window: amount difference must be strictly less than this
    amount_tolerance: Decimal = field(default_factory=lambda: Decimal("1.00"))
    # Single currency used for every created expense (no conversion)
    currency_code: str = "USD"
    # Upper bound for the one-shot snapshot fetch (no pagination)
    snapshot_limit: int = 10000
    # Append created expenses to the in-run snapshot
    refresh_snapshot_after_create: bool = False
    # Reader used when the file suffix does not identify the format
    default_source_format: str = "mint"


@dataclass
class Config:
    """Application configuration (SSOT)."""

    splitwise: SplitwiseConfig = field(default_factory=SplitwiseConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)

    def validate(self) -> list[str]:
        """Validate configuration completeness and consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if not self.splitwise.base_url:
            errors.append("splitwise.base_url is required")
        if not self.splitwise.api_key:
            errors.append("splitwise.api_key is required (set SPLITWISE_API_KEY)")

        if self.sync.day_tolerance < 0:
            errors.append("sync.day_tolerance must be >= 0")
        if self.sync.amount_tolerance < 0:
            errors.append("sync.amount_tolerance must be >= 0")
        if self.sync.snapshot_limit <= 0:
            errors.append("sync.snapshot_limit must be positive")
        if not self.sync.currency_code:
            errors.append("sync.currency_code is required")

        return errors


def _parse_decimal(value: object, key: str) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ConfigValidationError(f"{key} must be a decimal, got: {value!r}") from e


def load_config(config_path: Path) -> Config:
    """
    Load configuration from YAML file.

    Environment variables can override config values:
    - SPLITWISE_API_KEY
    - SPLITWISE_URL
    - SPLITWISE_CURRENCY
    """
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    else:
        data = {}

    # Splitwise config
    splitwise_data = data.get("splitwise", {})
    splitwise = SplitwiseConfig(
        base_url=os.environ.get("SPLITWISE_URL", splitwise_data.get("base_url", DEFAULT_BASE_URL)),
        api_key=os.environ.get("SPLITWISE_API_KEY", splitwise_data.get("api_key", "")),
        timeout=int(splitwise_data.get("timeout", 30)),
        max_retries=int(splitwise_data.get("max_retries", 3)),
    )

    # Sync config
    sync_data = data.get("sync", {})
    sync = SyncConfig(
        day_tolerance=int(sync_data.get("day_tolerance", 2)),
        amount_tolerance=_parse_decimal(
            sync_data.get("amount_tolerance", "1.00"), "sync.amount_tolerance"
        ),
        currency_code=os.environ.get("SPLITWISE_CURRENCY", sync_data.get("currency_code", "USD")),
        snapshot_limit=int(sync_data.get("snapshot_limit", 10000)),
        refresh_snapshot_after_create=bool(
            sync_data.get("refresh_snapshot_after_create", False)
        ),
        default_source_format=sync_data.get("default_source_format", "mint"),
    )

    return Config(splitwise=splitwise, sync=sync)


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    default_config = """# splitwise-sync configuration
#
# The API key is read from SPLITWISE_API_KEY when set; keep it out of this
# file if the file is shared.

splitwise:
  base_url: "https://secure.splitwise.com/api/v3.0/"
  api_key: ""
  timeout: 30
  max_retries: 3

sync:
  day_tolerance: 2                         # Fuzzy match: days apart < this
  amount_tolerance: "1.00"                 # Fuzzy match: amount delta < this
  currency_code: "USD"                     # Currency for every created expense
  snapshot_limit: 10000                    # Max expenses fetched per run
  refresh_snapshot_after_create: false     # Dedupe against expenses created this run
  default_source_format: "mint"            # mint | chase
"""

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        f.write(default_config)
