"""ORM tables: the transaction ledger and per-category budgets and upload times."""

from .finance import Base, CategoryBudgetRecord, LedgerTransaction, UserUploadRecord

__all__ = ["Base", "LedgerTransaction", "CategoryBudgetRecord", "UserUploadRecord"]
