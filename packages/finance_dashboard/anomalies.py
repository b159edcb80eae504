"""Per-category z-score anomaly detection on expenses.

Only debit transactions are considered, grouped by their category string and
measured by absolute amount. A category needs at least five observations and
a non-zero standard deviation before its statistics are used; otherwise it is
left out of the results.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from statistics import fmean, pstdev

from .models import AnomalyResult, Severity, Transaction

MIN_SAMPLES = 5


@dataclass(frozen=True, slots=True)
class _CategoryStats:
    mean: float
    std: float


def _compute_stats(values: Sequence[float]) -> _CategoryStats | None:
    if len(values) < MIN_SAMPLES:
        return None
    std = pstdev(values)
    if std == 0:
        return None
    return _CategoryStats(mean=fmean(values), std=std)


def detect_anomalies(
    transactions: Sequence[Transaction],
    *,
    z_moderate: float = 2.0,
    z_severe: float = 3.0,
) -> list[AnomalyResult]:
    """Flag expenses whose z-score within their category reaches ``z_moderate``.

    Results at or above ``z_severe`` are ``"severe"``, the rest
    ``"moderate"``. The list is sorted by z-score, highest first.
    """

    values_by_category: dict[str, list[float]] = {}
    for t in transactions:
        if t.is_debit:
            values_by_category.setdefault(t.category, []).append(float(abs(t.amount)))

    stats_by_category: dict[str, _CategoryStats] = {}
    for category, values in values_by_category.items():
        stats = _compute_stats(values)
        if stats is not None:
            stats_by_category[category] = stats

    anomalies: list[AnomalyResult] = []
    for t in transactions:
        if not t.is_debit:
            continue
        stats = stats_by_category.get(t.category)
        if stats is None:
            continue
        z = (float(abs(t.amount)) - stats.mean) / stats.std
        if z < z_moderate:
            continue
        severity: Severity = "severe" if z >= z_severe else "moderate"
        anomalies.append(
            AnomalyResult(
                transaction_id=t.id,
                date=t.date,
                description=t.description,
                amount=t.amount,
                category=t.category,
                z_score=z,
                severity=severity,
            )
        )

    anomalies.sort(key=lambda a: a.z_score, reverse=True)
    return anomalies


__all__ = ["MIN_SAMPLES", "detect_anomalies"]
