"""Data models and type aliases for ``finance_dashboard``.

The ledger record (:class:`Transaction`) and every derived aggregate are
frozen dataclasses. Money is carried as :class:`~decimal.Decimal`; statistics
(z-scores, interval means) are plain ``float``. Derived objects have no
identity of their own; they are recomputed from a ledger snapshot on every
analysis call and never persisted.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Literal, TypeAlias

TransactionType: TypeAlias = Literal["credit", "debit"]
Severity: TypeAlias = Literal["moderate", "severe"]

DEFAULT_CATEGORY = "Other"
LABEL_SEPARATOR = "-"


def split_labels(category: str | None) -> list[str]:
    """Split a possibly multi-label category string into its labels.

    ``"FOOD-GROCERY SHOPPING"`` yields ``["FOOD", "GROCERY SHOPPING"]``. Empty
    fragments are dropped; when nothing remains the result is ``["Other"]``.
    """

    raw = category or DEFAULT_CATEGORY
    labels = [part for part in raw.split(LABEL_SEPARATOR) if part]
    return labels or [DEFAULT_CATEGORY]


# ---------------------------------------------------------------------------
# Ledger record
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single ledger (or staged) transaction.

    ``type`` is derived from the sign of ``amount`` and is not a field, so it
    can never disagree with it: ``credit`` iff ``amount >= 0``.

    ``id`` is assigned by the persistence layer and is ``None`` for staged
    candidates. ``recurring`` is a display hint set by
    :func:`finance_dashboard.recurring.detect_recurring`; it is not ledger
    truth.
    """

    date: str
    description: str
    amount: Decimal
    category: str = DEFAULT_CATEGORY
    id: int | None = None
    recurring: bool | None = None

    @property
    def type(self) -> TransactionType:
        return "credit" if self.amount >= 0 else "debit"

    @property
    def is_credit(self) -> bool:
        return self.amount >= 0

    @property
    def is_debit(self) -> bool:
        return self.amount < 0

    @property
    def labels(self) -> list[str]:
        return split_labels(self.category)


# ---------------------------------------------------------------------------
# Derived aggregates
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Summary:
    total_income: Decimal
    total_expenses: Decimal
    net_savings: Decimal


@dataclass(frozen=True, slots=True)
class MonthlyAggregate:
    """Income/expense totals for one ``YYYY-MM`` month (expense is positive)."""

    month_key: str
    income: Decimal
    expense: Decimal
    savings: Decimal


@dataclass(frozen=True, slots=True)
class MonthlySummaryRow:
    """A row of the month-by-month summary table.

    ``balance`` is the cumulative savings up to and including this month.
    Ratios are ``0`` for months without revenue.
    """

    month_key: str
    month_label: str
    revenue: Decimal
    expense: Decimal
    savings: Decimal
    expense_ratio: float
    savings_ratio: float
    balance: Decimal


@dataclass(frozen=True, slots=True)
class MonthlyTotals:
    revenue: Decimal
    expense: Decimal
    savings: Decimal
    avg_revenue: Decimal
    avg_expense: Decimal
    avg_savings: Decimal


@dataclass(frozen=True, slots=True)
class CategorySummary:
    category: str
    income: Decimal
    expense: Decimal


@dataclass(frozen=True, slots=True)
class RecurringPattern:
    """A group of same-description transactions with regular spacing."""

    key: str
    count: int
    avg_interval_days: float
    last_date: str


@dataclass(frozen=True, slots=True)
class RecurringResult:
    patterns: list[RecurringPattern]
    # Copy of the input with ``recurring=True`` on members of accepted groups
    transactions: list[Transaction]

    @property
    def count(self) -> int:
        return len(self.patterns)


@dataclass(frozen=True, slots=True)
class AnomalyResult:
    transaction_id: int | None
    date: str
    description: str
    amount: Decimal
    category: str
    z_score: float
    severity: Severity


@dataclass(frozen=True, slots=True)
class ForecastPoint:
    month: str
    projected_income: Decimal
    projected_expense: Decimal
    projected_savings: Decimal
    method: str


@dataclass(frozen=True, slots=True)
class ForecastResult:
    points: list[ForecastPoint] = field(default_factory=list)
    next_month: ForecastPoint | None = None

    @property
    def is_empty(self) -> bool:
        return self.next_month is None


@dataclass(frozen=True, slots=True)
class CategoryBudget:
    category: str
    monthly_target: Decimal


@dataclass(frozen=True, slots=True)
class BudgetVariance:
    """Actual spend against a monthly category target.

    ``variance`` is positive when spending exceeded the target. ``percent`` is
    ``actual / target`` and ``None`` for a zero target.
    """

    category: str
    month_key: str
    actual: Decimal
    target: Decimal
    variance: Decimal
    percent: float | None


@dataclass(frozen=True, slots=True)
class AnalyticsResult:
    """Everything the dashboard renders for one ledger snapshot."""

    summary: Summary
    monthly: list[MonthlyAggregate]
    categories: list[CategorySummary]
    recurring: RecurringResult
    anomalies: list[AnomalyResult]
    forecast: ForecastResult

    @property
    def transactions(self) -> Sequence[Transaction]:
        # The annotated ledger (``recurring`` filled in)
        return self.recurring.transactions


__all__ = [
    "DEFAULT_CATEGORY",
    "LABEL_SEPARATOR",
    "split_labels",
    "TransactionType",
    "Severity",
    "Transaction",
    "Summary",
    "MonthlyAggregate",
    "MonthlySummaryRow",
    "MonthlyTotals",
    "CategorySummary",
    "RecurringPattern",
    "RecurringResult",
    "AnomalyResult",
    "ForecastPoint",
    "ForecastResult",
    "CategoryBudget",
    "BudgetVariance",
    "AnalyticsResult",
]
