"""
CLI runner module.

Provides commands:
- sync: Create Splitwise expenses for new transactions
- expenses: List expenses in a group
- init-config: Write a default config file
"""

from .main import create_cli, main

__all__ = [
    "create_cli",
    "main",
]
