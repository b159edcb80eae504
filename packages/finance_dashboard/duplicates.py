"""Duplicate detection for staged statement transactions.

A transaction's identity for de-duplication is structural: the trimmed date,
the trimmed lower-cased description and the amount rounded to two decimals.
Staged candidates have no database id yet, so ids cannot be used. Category is
deliberately left out of the key, so re-importing a row whose derived
category has since changed still counts as a duplicate.

Known limitation: two genuinely distinct transactions with the same date,
description and amount (e.g. two identical coffees on one day) share a key,
and the second is reported as a duplicate.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .models import Transaction

_CENTS = Decimal("0.01")


def make_transaction_key(t: Transaction) -> str:
    """Return the ``date|description|amount`` identity key for ``t``."""

    date = t.date.strip()
    desc = t.description.strip().lower()
    amount = Decimal(str(t.amount)).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return f"{date}|{desc}|{amount:.2f}"


def existing_keys_for(ledger: Iterable[Transaction]) -> set[str]:
    return {make_transaction_key(t) for t in ledger}


@dataclass(frozen=True, slots=True)
class DedupeResult:
    new_ones: list[Transaction]
    duplicate_count: int


def filter_duplicate_staged(
    staged: Sequence[Transaction],
    existing_keys: set[str] | frozenset[str],
) -> DedupeResult:
    """Partition ``staged`` into new transactions and a duplicate count.

    ``new_ones`` keeps the input order. Only membership in ``existing_keys``
    is checked; duplicates within ``staged`` itself are kept.
    """

    new_ones: list[Transaction] = []
    duplicate_count = 0
    for t in staged:
        if make_transaction_key(t) in existing_keys:
            duplicate_count += 1
        else:
            new_ones.append(t)
    return DedupeResult(new_ones=new_ones, duplicate_count=duplicate_count)


__all__ = [
    "make_transaction_key",
    "existing_keys_for",
    "DedupeResult",
    "filter_duplicate_staged",
]
