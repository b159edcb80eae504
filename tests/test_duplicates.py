from __future__ import annotations

from decimal import Decimal

from finance_dashboard.duplicates import (
    existing_keys_for,
    filter_duplicate_staged,
    make_transaction_key,
)
from tests.helpers.ledger import tx


def test_key_trims_lowercases_and_rounds_to_cents() -> None:
    t = tx(" 2025-03-01 ", "  ATM WDL ", "-5000")
    assert make_transaction_key(t) == "2025-03-01|atm wdl|-5000.00"

    rounded = tx("2025-03-01", "X", "10.005")
    assert make_transaction_key(rounded) == "2025-03-01|x|10.01"


def test_key_ignores_category_and_id() -> None:
    a = tx("2025-03-01", "ZOMATO", "-350", "FOOD", id=7)
    b = tx("2025-03-01", "zomato", "-350.00", "Other")
    assert make_transaction_key(a) == make_transaction_key(b)


def test_key_distinguishes_sign() -> None:
    assert make_transaction_key(tx("2025-03-01", "X", "10")) != make_transaction_key(
        tx("2025-03-01", "X", "-10")
    )


def test_filter_splits_new_from_existing() -> None:
    ledger = [tx("2025-03-01", "ATM WDL", "-5000", "CASH WITHDRAWAL", id=1)]
    staged = [
        tx("2025-03-01", "ATM WDL", "-5000", "CASH WITHDRAWAL"),
        tx("2025-03-02", "SALARY ACME CORP", "100000", "SALARY"),
    ]

    result = filter_duplicate_staged(staged, existing_keys_for(ledger))

    assert result.duplicate_count == 1
    assert [t.description for t in result.new_ones] == ["SALARY ACME CORP"]


def test_counts_are_conserved_and_order_kept() -> None:
    existing = {make_transaction_key(tx("2025-03-02", "B", "2"))}
    staged = [tx("2025-03-01", "A", "1"), tx("2025-03-02", "B", "2"), tx("2025-03-03", "C", "3")]

    result = filter_duplicate_staged(staged, existing)

    assert len(result.new_ones) + result.duplicate_count == len(staged)
    assert [t.amount for t in result.new_ones] == [Decimal("1"), Decimal("3")]


def test_identical_rows_within_one_statement_are_both_kept() -> None:
    staged = [tx("2025-03-01", "COFFEE", "-150"), tx("2025-03-01", "COFFEE", "-150")]
    result = filter_duplicate_staged(staged, set())
    assert len(result.new_ones) == 2
    assert result.duplicate_count == 0
