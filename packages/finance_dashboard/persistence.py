# ruff: noqa: I001
"""Persistence integration for finance_dashboard.

Functions here read and write the ledger owned by ``libs/db`` through
SQLAlchemy sessions supplied by the caller (see ``db.client.session_scope``);
committing is the caller's job. Every query is scoped by ``user_id``.

Row shapes coming back from a store (or from an exported JSON dump) are
reconciled into the canonical :class:`~finance_dashboard.models.Transaction`
by :class:`LedgerRow` only. Older tables used capitalized column names
(``Description``, ``Amount``, ``Category``); both spellings are accepted on
read, and writes always use the lowercase names.

Concurrency: import de-duplication is check-then-act against a ledger
snapshot read earlier in the same session. A concurrent session inserting the
same rows in between can still produce duplicates; there is no uniqueness
constraint on the identity key.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, datetime
from datetime import date as date_type
from decimal import Decimal
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from db.models.finance import CategoryBudgetRecord, LedgerTransaction, UserUploadRecord
from .categorization import DEFAULT_RULES, KeywordRule, get_category
from .dates import normalize_date
from .logging_setup import get_logger
from .models import DEFAULT_CATEGORY, LABEL_SEPARATOR, CategoryBudget, Transaction

logger = get_logger("finance_dashboard.persistence")

DEFAULT_PAGE_SIZE = 1000


# ---------------------------------------------------------------------------
# Boundary row model
# ---------------------------------------------------------------------------


class LedgerRow(BaseModel):
    """A ledger row as stored, validated into canonical field names."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, str_strip_whitespace=True)

    id: int | None = None
    user_id: str | None = None
    date: str
    description: str = Field(
        default="", validation_alias=AliasChoices("description", "Description")
    )
    amount: Decimal = Field(
        default=Decimal(0), validation_alias=AliasChoices("amount", "Amount")
    )
    category: str = Field(
        default=DEFAULT_CATEGORY, validation_alias=AliasChoices("category", "Category")
    )

    @field_validator("date", mode="before")
    @classmethod
    def _canonical_date(cls, v: Any) -> str:
        # Stores may hand back DATE values or ISO timestamps
        if isinstance(v, str) and "T" in v:
            v = v.split("T", 1)[0]
        normalized = normalize_date(v)
        if normalized is None:
            raise ValueError(f"unparseable ledger date: {v!r}")
        return normalized

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_or_zero(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return Decimal(0)
        return v

    @field_validator("category", mode="before")
    @classmethod
    def _category_or_other(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_CATEGORY
        return v

    def to_transaction(self) -> Transaction:
        return Transaction(
            id=self.id,
            date=self.date,
            description=self.description,
            amount=self.amount,
            category=self.category,
        )

    @classmethod
    def from_transaction(cls, t: Transaction, *, user_id: str) -> LedgerRow:
        return cls(
            id=t.id,
            user_id=user_id,
            date=t.date,
            description=t.description,
            amount=t.amount,
            category=t.category,
        )

    def to_record(self) -> dict[str, Any]:
        """Lowercase column mapping suitable for an insert (``id`` omitted)."""

        return {
            "user_id": self.user_id,
            "date": date_type.fromisoformat(self.date),
            "description": self.description,
            "amount": self.amount,
            "category": self.category,
        }


def rows_to_transactions(records: Iterable[Mapping[str, Any]]) -> list[Transaction]:
    """Validate raw ledger rows (either key casing) into transactions."""

    return [LedgerRow.model_validate(dict(r)).to_transaction() for r in records]


# ---------------------------------------------------------------------------
# Ledger reads
# ---------------------------------------------------------------------------


def load_ledger(
    session: Session,
    *,
    user_id: str,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> list[Transaction]:
    """Return the user's full ledger, newest first, reading page by page."""

    if page_size < 1:
        raise ValueError("page_size must be >= 1")

    base = (
        select(
            LedgerTransaction.id,
            LedgerTransaction.user_id,
            LedgerTransaction.date,
            LedgerTransaction.description,
            LedgerTransaction.amount,
            LedgerTransaction.category,
        )
        .where(LedgerTransaction.user_id == user_id)
        .order_by(LedgerTransaction.date.desc(), LedgerTransaction.id.desc())
    )

    ledger: list[Transaction] = []
    offset = 0
    while True:
        page = session.execute(base.limit(page_size).offset(offset)).mappings().all()
        ledger.extend(rows_to_transactions(page))
        if len(page) < page_size:
            break
        offset += page_size
    logger.debug("loaded %d ledger rows for user %s", len(ledger), user_id)
    return ledger


# ---------------------------------------------------------------------------
# Ledger writes
# ---------------------------------------------------------------------------


def insert_transactions(
    session: Session,
    *,
    user_id: str,
    transactions: Iterable[Transaction],
) -> int:
    """Insert staged transactions for ``user_id``; returns the number inserted."""

    rows = [
        LedgerTransaction(**LedgerRow.from_transaction(t, user_id=user_id).to_record())
        for t in transactions
    ]
    if not rows:
        return 0
    session.add_all(rows)
    session.flush()
    logger.info("inserted %d transactions for user %s", len(rows), user_id)
    return len(rows)


def _get_owned(session: Session, *, user_id: str, transaction_id: int) -> LedgerTransaction:
    row = session.execute(
        select(LedgerTransaction).where(
            LedgerTransaction.id == transaction_id,
            LedgerTransaction.user_id == user_id,
        )
    ).scalar_one_or_none()
    if row is None:
        raise LookupError(f"transaction {transaction_id} not found for user {user_id!r}")
    return row


def update_transaction(
    session: Session,
    *,
    user_id: str,
    transaction_id: int,
    date: str,
    description: str,
    amount: Decimal,
    rules: Sequence[KeywordRule] = DEFAULT_RULES,
) -> Transaction:
    """Replace every field of a ledger row; the category is recomputed.

    Raises ``LookupError`` when the id does not exist in the user's ledger and
    ``ValueError`` for an unparseable date or blank description.
    """

    canonical = normalize_date(date)
    if canonical is None:
        raise ValueError(f"invalid date: {date!r}")
    desc = description.strip()
    if not desc:
        raise ValueError("description must be non-empty")

    row = _get_owned(session, user_id=user_id, transaction_id=transaction_id)
    row.date = date_type.fromisoformat(canonical)
    row.description = desc
    row.amount = Decimal(str(amount))
    row.category = get_category(desc, rules)
    session.flush()
    return Transaction(
        id=row.id,
        date=canonical,
        description=row.description,
        amount=row.amount,
        category=row.category,
    )


def delete_transaction(session: Session, *, user_id: str, transaction_id: int) -> bool:
    """Delete a ledger row; ``False`` when it did not exist."""

    result = session.execute(
        delete(LedgerTransaction).where(
            LedgerTransaction.id == transaction_id,
            LedgerTransaction.user_id == user_id,
        )
    )
    return bool(result.rowcount)


# ---------------------------------------------------------------------------
# Category budgets
# ---------------------------------------------------------------------------


def _normalize_budget_category(category: str) -> str:
    c = " ".join(category.strip().split())
    if not c:
        raise ValueError("budget category cannot be empty")
    if LABEL_SEPARATOR in c:
        raise ValueError(f"budget category must be a single label (no {LABEL_SEPARATOR!r})")
    return c


def load_budgets(session: Session, *, user_id: str) -> list[CategoryBudget]:
    rows = session.execute(
        select(CategoryBudgetRecord)
        .where(CategoryBudgetRecord.user_id == user_id)
        .order_by(CategoryBudgetRecord.category)
    ).scalars()
    return [CategoryBudget(category=r.category, monthly_target=r.budget) for r in rows]


def upsert_budget(
    session: Session,
    *,
    user_id: str,
    category: str,
    monthly_target: Decimal,
) -> CategoryBudget:
    """Create or replace the monthly target for one category label."""

    label = _normalize_budget_category(category)
    target = Decimal(str(monthly_target))
    if target < 0:
        raise ValueError("monthly target must be >= 0")

    row = session.execute(
        select(CategoryBudgetRecord).where(
            CategoryBudgetRecord.user_id == user_id,
            CategoryBudgetRecord.category == label,
        )
    ).scalar_one_or_none()
    if row is None:
        session.add(CategoryBudgetRecord(user_id=user_id, category=label, budget=target))
    else:
        row.budget = target
    session.flush()
    return CategoryBudget(category=label, monthly_target=target)


def delete_budget(session: Session, *, user_id: str, category: str) -> bool:
    """Remove the budget for ``category``, matched the way :func:`upsert_budget` stores it."""

    label = _normalize_budget_category(category)
    result = session.execute(
        delete(CategoryBudgetRecord).where(
            CategoryBudgetRecord.user_id == user_id,
            CategoryBudgetRecord.category == label,
        )
    )
    return bool(result.rowcount)


# ---------------------------------------------------------------------------
# Upload history
# ---------------------------------------------------------------------------


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timezone-aware columns back naive
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value.astimezone(UTC)


def record_upload(session: Session, *, user_id: str, at: datetime | None = None) -> datetime:
    """Store ``at`` (default: now) as the user's last statement upload time."""

    stamp = _as_utc(at) if at is not None else datetime.now(UTC)
    row = session.execute(
        select(UserUploadRecord).where(UserUploadRecord.user_id == user_id)
    ).scalar_one_or_none()
    if row is None:
        session.add(UserUploadRecord(user_id=user_id, last_upload_at=stamp))
    else:
        row.last_upload_at = stamp
    session.flush()
    return stamp


def load_last_upload(session: Session, *, user_id: str) -> datetime | None:
    value = session.execute(
        select(UserUploadRecord.last_upload_at).where(UserUploadRecord.user_id == user_id)
    ).scalar_one_or_none()
    return _as_utc(value) if value is not None else None


__all__ = [
    "LedgerRow",
    "rows_to_transactions",
    "load_ledger",
    "insert_transactions",
    "update_transaction",
    "delete_transaction",
    "load_budgets",
    "upsert_budget",
    "delete_budget",
    "record_upload",
    "load_last_upload",
]
