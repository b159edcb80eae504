"""Next-month projection from a simple moving average.

Monthly income and expense are averaged independently over the trailing
``window`` months (unweighted, no seasonality). The projection targets the
calendar month after the latest observed month. With no monthly data, or a
malformed latest month key, the result is empty rather than a guess.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from decimal import Decimal

from .analytics import aggregate_monthly
from .models import ForecastPoint, ForecastResult, Transaction

_MONTH_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")


def moving_average(values: Sequence[Decimal], window: int) -> Decimal | None:
    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")
    tail = list(values[-window:])
    if not tail:
        return None
    return sum(tail, Decimal(0)) / len(tail)


def next_month_key(month_key: str) -> str | None:
    """``"2025-12"`` → ``"2026-01"``; ``None`` for a malformed key."""

    m = _MONTH_KEY_RE.match(month_key)
    if not m:
        return None
    year, month = int(m.group(1)), int(m.group(2))
    if not 1 <= month <= 12:
        return None
    if month == 12:
        return f"{year + 1:04d}-01"
    return f"{year:04d}-{month + 1:02d}"


def build_forecast(transactions: Sequence[Transaction], window: int = 3) -> ForecastResult:
    """Project income, expense and savings for the month after the latest one."""

    if window < 1:
        raise ValueError(f"window must be >= 1, got {window}")

    monthly = aggregate_monthly(transactions)
    if not monthly:
        return ForecastResult()

    target = next_month_key(monthly[-1].month_key)
    if target is None:
        return ForecastResult()

    projected_income = moving_average([m.income for m in monthly], window) or Decimal(0)
    projected_expense = moving_average([m.expense for m in monthly], window) or Decimal(0)

    point = ForecastPoint(
        month=target,
        projected_income=projected_income,
        projected_expense=projected_expense,
        projected_savings=projected_income - projected_expense,
        method=f"moving-average-{window}",
    )
    return ForecastResult(points=[point], next_month=point)


__all__ = ["moving_average", "next_month_key", "build_forecast"]
