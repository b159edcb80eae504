from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    BigInteger,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# SQLite only auto-increments INTEGER PRIMARY KEY (rowid alias)
_ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


# ---------------------------
# Core: transactions (the ledger)
# ---------------------------


class LedgerTransaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True, autoincrement=True)
    # Tenant scope; every query filters on it
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # Signed: positive = credit, negative = debit. Type is derived, never stored.
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    # Possibly multi-label ("FOOD-GROCERY SHOPPING")
    category: Mapped[str] = mapped_column(String, nullable=False, server_default="Other")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.current_timestamp()
    )

    __table_args__ = (Index("ix_transactions_user_date", "user_id", "date"),)


# ---------------------------
# Reference: category_budget
# ---------------------------


class CategoryBudgetRecord(Base):
    __tablename__ = "category_budget"

    id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    # A single category label, not a hyphen-joined combination
    category: Mapped[str] = mapped_column(String, nullable=False)
    budget: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.current_timestamp()
    )

    __table_args__ = (UniqueConstraint("user_id", "category", name="uq_category_budget_user"),)


# ---------------------------
# Per-user: user_uploads
# ---------------------------


class UserUploadRecord(Base):
    __tablename__ = "user_uploads"

    id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    # When the user last imported a statement
    last_upload_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
    )


__all__ = [
    "Base",
    "LedgerTransaction",
    "CategoryBudgetRecord",
    "UserUploadRecord",
]
