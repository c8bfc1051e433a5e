"""
Bank export → Duplicate check → Confirmation → Splitwise expense

A typed Splitwise API client plus a sync pipeline that reconciles exported
bank/card transactions against a Splitwise group and creates the expenses
that are missing.
"""

__version__ = "0.1.0"
