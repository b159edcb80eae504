"""Monthly category budgets and their variance against actual spend."""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from . import dates
from .models import BudgetVariance, CategoryBudget, Transaction


def category_spend(transactions: Sequence[Transaction], month: str, category: str) -> Decimal:
    """Sum of debit magnitudes in ``month`` (``YYYY-MM``) carrying the ``category`` label."""

    actual = Decimal(0)
    for t in transactions:
        if t.is_debit and dates.month_key(t.date) == month and category in t.labels:
            actual += abs(t.amount)
    return actual


def compute_budget_variance(
    transactions: Sequence[Transaction],
    budgets: Sequence[CategoryBudget],
    month_key: str,
    category: str,
) -> BudgetVariance | None:
    """Return the variance for ``category`` in ``month_key``, or ``None`` without a budget."""

    budget = next((b for b in budgets if b.category == category), None)
    if budget is None:
        return None
    actual = category_spend(transactions, month_key, category)
    target = budget.monthly_target
    return BudgetVariance(
        category=category,
        month_key=month_key,
        actual=actual,
        target=target,
        variance=actual - target,
        percent=float(actual / target) if target > 0 else None,
    )


def budget_report(
    transactions: Sequence[Transaction],
    budgets: Sequence[CategoryBudget],
    month_key: str,
) -> list[BudgetVariance]:
    """Variance for every budget in ``month_key``, in budget order."""

    report: list[BudgetVariance] = []
    for b in budgets:
        v = compute_budget_variance(transactions, budgets, month_key, b.category)
        if v is not None:
            report.append(v)
    return report


__all__ = ["category_spend", "compute_budget_variance", "budget_report"]
