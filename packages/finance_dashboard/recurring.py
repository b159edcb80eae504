"""Recurring transaction detection (subscriptions, payroll, rent).

Transactions are grouped by a normalized description key. A group is a
recurring pattern when it has at least three members and the day gaps between
consecutive occurrences are regular: the coefficient of variation
(population std / mean) of the positive gaps is below ``0.5``.

Detection is pure: the caller's transactions are left untouched and an
annotated copy is returned with ``recurring=True`` on every member of an
accepted group.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import replace
from statistics import fmean, pstdev

from .dates import days_between
from .models import RecurringPattern, RecurringResult, Transaction

MIN_OCCURRENCES = 3
MAX_COEFFICIENT_OF_VARIATION = 0.5

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_WS_RE = re.compile(r"\s+")


def normalize_description(description: str) -> str:
    """Lower-case, replace punctuation with spaces and collapse whitespace."""

    s = _NON_ALNUM_RE.sub(" ", description.lower())
    return _WS_RE.sub(" ", s).strip()


def _positive_gaps(members: Sequence[Transaction]) -> list[int]:
    gaps: list[int] = []
    for prev, curr in zip(members, members[1:]):
        diff = days_between(prev.date, curr.date)
        if diff is not None and diff > 0:
            gaps.append(diff)
    return gaps


def detect_recurring(transactions: Sequence[Transaction]) -> RecurringResult:
    """Find recurring patterns and return them with an annotated ledger copy.

    Patterns are listed in order of each group's first appearance in
    ``transactions``. ``avg_interval_days`` is rounded to one decimal.
    """

    groups: dict[str, list[int]] = {}
    for pos, t in enumerate(transactions):
        groups.setdefault(normalize_description(t.description), []).append(pos)

    patterns: list[RecurringPattern] = []
    recurring_positions: set[int] = set()

    for key, positions in groups.items():
        if len(positions) < MIN_OCCURRENCES:
            continue
        ordered = sorted(positions, key=lambda p: transactions[p].date)
        members = [transactions[p] for p in ordered]
        gaps = _positive_gaps(members)
        if not gaps:
            continue
        avg = fmean(gaps)
        cov = pstdev(gaps) / avg
        if cov >= MAX_COEFFICIENT_OF_VARIATION:
            continue
        patterns.append(
            RecurringPattern(
                key=key,
                count=len(members),
                avg_interval_days=round(avg, 1),
                last_date=members[-1].date,
            )
        )
        recurring_positions.update(positions)

    annotated = [
        replace(t, recurring=True) if pos in recurring_positions else t
        for pos, t in enumerate(transactions)
    ]
    return RecurringResult(patterns=patterns, transactions=annotated)


__all__ = [
    "MIN_OCCURRENCES",
    "MAX_COEFFICIENT_OF_VARIATION",
    "normalize_description",
    "detect_recurring",
]
