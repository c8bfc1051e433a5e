"""Test fixtures and utilities."""

import json
from pathlib import Path

import pytest

from fixtures import SAMPLE_CHASE_CSV, SAMPLE_MINT_TRANSACTIONS


@pytest.fixture
def sample_mint_file(tmp_path) -> Path:
    """Mint JSON export on disk."""
    path = tmp_path / "transactions.json"
    path.write_text(json.dumps(SAMPLE_MINT_TRANSACTIONS), encoding="utf-8")
    return path


@pytest.fixture
def sample_chase_file(tmp_path) -> Path:
    """Chase CSV export on disk."""
    path = tmp_path / "chase.csv"
    path.write_text(SAMPLE_CHASE_CSV, encoding="utf-8")
    return path
