"""Services for the splitwise-sync pipeline."""

from splitwise_sync.services.expense_sync import ExpenseSyncService, SyncResult

__all__ = ["ExpenseSyncService", "SyncResult"]
