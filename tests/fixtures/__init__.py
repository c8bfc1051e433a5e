"""
Shared test data and builders.

This module provides:
- Sample Mint JSON and Chase CSV exports
- Transaction and SplitwiseExpense builders
- Splitwise API expense JSON
"""

from datetime import date
from decimal import Decimal

from splitwise_sync.sources import Transaction
from splitwise_sync.splitwise_client import SplitwiseExpense

SAMPLE_MINT_TRANSACTIONS = [
    {
        "type": "CashAndCreditTransaction",
        "id": "83817592_1510429483_0",
        "accountId": "83817592_1510429483",
        "accountRef": {
            "id": "83817592_1510429483",
            "name": "Checking",
            "type": "BankAccount",
            "hiddenFromPlanningAndTrends": False,
        },
        "date": "2024-03-01",
        "description": "Market",
        "category": {
            "id": "83817592_701",
            "name": "Groceries",
            "categoryType": "EXPENSE",
            "parentId": "83817592_7",
            "parentName": "Food & Dining",
        },
        "amount": -45.0,
        "status": "MANUAL",
        "matchState": "NOT_MATCHED",
        "isReviewed": False,
        "merchantId": None,
        "etag": "abc",
        "isExpense": True,
        "isPending": False,
        "discretionaryType": "NONE",
        "isLinkedToRule": False,
        "transactionReviewState": "NOT_APPLICABLE",
        "lastUpdatedDate": "2024-03-02T10:11:12Z",
    },
    {
        "type": "CashAndCreditTransaction",
        "id": "83817592_1510429483_1",
        "accountRef": {"id": "83817592_1510429483", "name": "Checking"},
        "date": "2024-03-03",
        "description": "Payroll",
        "amount": 2500.0,
        "isExpense": False,
    },
    {
        "type": "CashAndCreditTransaction",
        "id": "83817592_2210000001_0",
        "accountRef": {"id": "83817592_2210000001", "name": "Visa Card"},
        "date": "2024-03-05",
        "description": "Coffee Shop",
        "amount": -4.75,
        "isExpense": True,
    },
]

SAMPLE_CHASE_CSV = """Transaction Date,Post Date,Description,Category,Type,Amount,Memo
03/01/2024,03/02/2024,WHOLEFDS MKT,Groceries,Sale,-45.00,
03/04/2024,03/05/2024,Payment Thank You,,Payment,500.00,
03/05/2024,03/06/2024,STARBUCKS,Food & Drink,Sale,-4.75,
03/05/2024,03/06/2024,STARBUCKS,Food & Drink,Sale,-4.75,
"""


def make_transaction(
    id: str = "tx1",
    date: date = date(2024, 1, 10),
    amount: str | Decimal = "-20.00",
    description: str = "Market",
    account_name: str = "Checking",
    is_expense: bool = True,
) -> Transaction:
    """Build a Transaction with sensible defaults."""
    return Transaction(
        id=id,
        date=date,
        amount=Decimal(amount),
        description=description,
        account_name=account_name,
        is_expense=is_expense,
    )


def make_expense(
    id: int = 1,
    date: str | None = "2024-01-10T00:00:00Z",
    cost: str | None = "20.00",
    description: str | None = "Market",
    details: str | None = None,
) -> SplitwiseExpense:
    """Build a SplitwiseExpense with sensible defaults."""
    return SplitwiseExpense(
        id=id,
        date=date,
        cost=cost,
        description=description,
        details=details,
        group_id=42,
        currency_code="USD",
    )


def expense_json(
    id: int = 1,
    date: str = "2024-01-10T00:00:00Z",
    cost: str = "20.00",
    description: str = "Market",
    details: str | None = None,
) -> dict:
    """Expense object as the Splitwise API returns it (trimmed)."""
    return {
        "id": id,
        "group_id": 42,
        "description": description,
        "details": details,
        "cost": cost,
        "currency_code": "USD",
        "date": date,
        "repeat_interval": "never",
        "created_at": "2024-01-11T08:00:00Z",
        "deleted_at": None,
        "users": [],
    }
