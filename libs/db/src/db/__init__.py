"""Ledger database schema and session helpers.

``metadata`` is the target for Alembic (``libs/db/alembic/env.py``);
``db.client`` owns the engine and ``session_scope``.
"""

from __future__ import annotations

from .models.finance import Base, CategoryBudgetRecord, LedgerTransaction, UserUploadRecord

metadata = Base.metadata

__all__ = [
    "Base",
    "metadata",
    "LedgerTransaction",
    "CategoryBudgetRecord",
    "UserUploadRecord",
]
