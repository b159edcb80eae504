"""Ledger aggregates: totals, monthly rollups and category breakdowns.

Every function here is a pure computation over a ledger snapshot and is
recomputed from scratch on each call. Expenses are reported as positive
magnitudes.

Multi-label categories (``"FOOD-GROCERY SHOPPING"``) contribute their full
amount to *each* label in :func:`aggregate_categories`. Category totals
therefore do not sum to the ledger total; this is the intended "facet" view.

:func:`build_analytics` is the single entry point that runs the whole
pipeline (including recurrence, anomaly and forecast computations) once.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import date
from decimal import Decimal

from .anomalies import detect_anomalies
from .dates import month_key
from .models import (
    AnalyticsResult,
    CategorySummary,
    MonthlyAggregate,
    MonthlySummaryRow,
    MonthlyTotals,
    Summary,
    Transaction,
)
from .recurring import detect_recurring
from .settings import AnalyticsSettings

_CANONICAL_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ZERO = Decimal(0)


def summarize(transactions: Sequence[Transaction]) -> Summary:
    total_income = _ZERO
    total_expenses = _ZERO
    for t in transactions:
        if t.is_credit:
            total_income += t.amount
        else:
            total_expenses += abs(t.amount)
    return Summary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_savings=total_income - total_expenses,
    )


def _monthly_totals(transactions: Sequence[Transaction]) -> dict[str, list[Decimal]]:
    """Return ``{YYYY-MM: [income, expense]}`` over canonically dated rows."""

    totals: dict[str, list[Decimal]] = {}
    for t in transactions:
        if not _CANONICAL_DATE_RE.match(t.date):
            continue
        entry = totals.setdefault(month_key(t.date), [_ZERO, _ZERO])
        if t.is_credit:
            entry[0] += t.amount
        else:
            entry[1] += abs(t.amount)
    return totals


def aggregate_monthly(transactions: Sequence[Transaction]) -> list[MonthlyAggregate]:
    """Income/expense per ``YYYY-MM`` month, ascending by month.

    Rows whose date is not exactly ``YYYY-MM-DD`` are excluded. Lexicographic
    ordering of the month keys is chronological because they are zero-padded.
    """

    totals = _monthly_totals(transactions)
    return [
        MonthlyAggregate(month_key=key, income=inc, expense=exp, savings=inc - exp)
        for key, (inc, exp) in sorted(totals.items())
    ]


def aggregate_categories(transactions: Sequence[Transaction]) -> list[CategorySummary]:
    """Income/expense per category label, sorted by expense descending."""

    by_label: dict[str, list[Decimal]] = {}
    for t in transactions:
        for label in t.labels:
            entry = by_label.setdefault(label, [_ZERO, _ZERO])
            if t.is_credit:
                entry[0] += t.amount
            else:
                entry[1] += abs(t.amount)
    summaries = [
        CategorySummary(category=label, income=inc, expense=exp)
        for label, (inc, exp) in by_label.items()
    ]
    # Stable sort keeps first-seen order among equal expenses
    summaries.sort(key=lambda c: c.expense, reverse=True)
    return summaries


# ---------------------------------------------------------------------------
# Month-by-month summary table
# ---------------------------------------------------------------------------


def _month_label(key: str) -> str:
    year, month = key.split("-")
    return f"{year}-{date(int(year), int(month), 1):%b}"


def monthly_summary_table(
    transactions: Sequence[Transaction],
    *,
    year: str | None = None,
    category: str | None = None,
) -> list[MonthlySummaryRow]:
    """Monthly revenue/expense/savings with ratios and a running balance.

    Parameters
    ----------
    year:
        Optional ``YYYY`` filter applied to the transaction date.
    category:
        Optional category label; a transaction matches when the label is one
        of its hyphen-separated labels.
    """

    filtered = [
        t
        for t in transactions
        if (year is None or t.date.startswith(f"{year}-"))
        and (category is None or category in t.labels)
    ]

    rows: list[MonthlySummaryRow] = []
    balance = _ZERO
    for agg in aggregate_monthly(filtered):
        balance += agg.savings
        revenue = agg.income
        rows.append(
            MonthlySummaryRow(
                month_key=agg.month_key,
                month_label=_month_label(agg.month_key),
                revenue=revenue,
                expense=agg.expense,
                savings=agg.savings,
                expense_ratio=float(agg.expense / revenue) if revenue > 0 else 0.0,
                savings_ratio=float(agg.savings / revenue) if revenue > 0 else 0.0,
                balance=balance,
            )
        )
    return rows


def monthly_totals(rows: Sequence[MonthlySummaryRow]) -> MonthlyTotals:
    """Grand totals and per-month averages of a monthly summary table."""

    revenue = sum((r.revenue for r in rows), _ZERO)
    expense = sum((r.expense for r in rows), _ZERO)
    savings = revenue - expense
    count = len(rows)
    return MonthlyTotals(
        revenue=revenue,
        expense=expense,
        savings=savings,
        avg_revenue=revenue / count if count else _ZERO,
        avg_expense=expense / count if count else _ZERO,
        avg_savings=savings / count if count else _ZERO,
    )


# ---------------------------------------------------------------------------
# Full pipeline
# ---------------------------------------------------------------------------


def build_analytics(
    transactions: Sequence[Transaction],
    settings: AnalyticsSettings | None = None,
) -> AnalyticsResult:
    """Run every dashboard computation once over ``transactions``.

    The input is not modified; the recurrence-annotated ledger is available as
    ``result.transactions``.
    """

    from .forecast import build_forecast  # forecast.py imports aggregate_monthly

    cfg = settings or AnalyticsSettings()
    recurring = detect_recurring(transactions)
    return AnalyticsResult(
        summary=summarize(transactions),
        monthly=aggregate_monthly(transactions),
        categories=aggregate_categories(transactions),
        recurring=recurring,
        anomalies=detect_anomalies(
            transactions, z_moderate=cfg.z_moderate, z_severe=cfg.z_severe
        ),
        forecast=build_forecast(transactions, window=cfg.forecast_window),
    )


__all__ = [
    "summarize",
    "aggregate_monthly",
    "aggregate_categories",
    "monthly_summary_table",
    "monthly_totals",
    "build_analytics",
]
