from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from finance_dashboard.categorization import KeywordRule
from finance_dashboard.statement import (
    StatementParsed,
    StatementParseError,
    StatementRejected,
    find_header_row,
    parse_amount_cell,
    parse_statement,
    process_statement,
)
from tests.helpers.ledger import PREAMBLE_ROWS

HEADER = ["Date", "Narration", "Withdrawal Amt.", "Deposit Amt."]


def test_header_is_found_after_a_preamble() -> None:
    assert find_header_row(PREAMBLE_ROWS) == 3


def test_preamble_statement_parses_into_signed_categorized_rows() -> None:
    result = parse_statement(PREAMBLE_ROWS)

    assert isinstance(result, StatementParsed)
    assert result.ok is True
    assert result.header_row_index == 3
    # blank row + footer row
    assert result.skipped_rows == 2

    atm, salary, swiggy = result.transactions
    assert atm.date == "2025-03-01"
    assert atm.description == "ATM WDL"
    assert atm.amount == Decimal("-5000")
    assert atm.type == "debit"
    assert atm.category == "CASH WITHDRAWAL"

    assert salary.date == "2025-03-02"
    assert salary.amount == Decimal("100000.00")
    assert salary.type == "credit"
    assert salary.category == "SALARY"

    assert swiggy.date == "2025-03-05"
    assert swiggy.amount == Decimal("-1500.50")
    assert swiggy.category == "FOOD-GROCERY SHOPPING"

    assert all(t.id is None and t.recurring is None for t in result.transactions)


def test_header_matching_ignores_case_and_whitespace() -> None:
    rows = [
        ["  DATE ", "narration", " WITHDRAWAL AMT. ", "deposit amt."],
        ["2025-04-01", "NETFLIX", "649", ""],
    ]
    [t] = process_statement(rows)
    assert t.amount == Decimal("-649")
    assert t.category == "ENTERTAINMENT"


def test_columns_may_be_in_any_order() -> None:
    rows = [
        ["Deposit Amt.", "Value Dt", "Narration", "Date", "Withdrawal Amt."],
        ["", "02/04/25", "ZOMATO", "01/04/25", "350"],
    ]
    [t] = process_statement(rows)
    assert t.date == "2025-04-01"
    assert t.amount == Decimal("-350")


def test_deposit_wins_when_both_amounts_are_present() -> None:
    rows = [HEADER, ["2025-04-01", "REFUND", "100", "250"]]
    [t] = process_statement(rows)
    assert t.amount == Decimal("250")


def test_rows_without_date_narration_or_movement_are_skipped() -> None:
    rows = [
        HEADER,
        ["", "NO DATE", "10", ""],
        ["2025-04-01", "", "10", ""],
        ["pending", "BAD DATE", "10", ""],
        ["2025-04-01", "NO MOVEMENT", "0", "0.00"],
        ["2025-04-02", "KEPT", "10", ""],
    ]
    result = parse_statement(rows)
    assert isinstance(result, StatementParsed)
    assert [t.description for t in result.transactions] == ["KEPT"]
    assert result.skipped_rows == 5


def test_short_rows_are_padded_with_blanks() -> None:
    rows = [HEADER, ["2025-04-02", "ATM WDL", "200"]]
    [t] = process_statement(rows)
    assert t.amount == Decimal("-200")


def test_spreadsheet_date_cells_are_accepted() -> None:
    rows = [HEADER, [datetime(2025, 4, 3), "SALARY", None, 5000]]
    [t] = process_statement(rows)
    assert t.date == "2025-04-03"
    assert t.amount == Decimal("5000")


def test_custom_rules_are_used_for_categories() -> None:
    rows = [HEADER, ["2025-04-02", "BLUE TOKAI", "300", ""]]
    [t] = process_statement(rows, [KeywordRule("TOKAI", "COFFEE")])
    assert t.category == "COFFEE"


def test_empty_document_is_rejected() -> None:
    result = parse_statement([])
    assert isinstance(result, StatementRejected)
    assert result.ok is False


def test_missing_header_is_rejected_with_reason() -> None:
    rows = [["Account summary"], ["Opening balance", "1000"]]
    result = parse_statement(rows)
    assert isinstance(result, StatementRejected)
    assert "Could not find transaction headers" in result.reason


def test_missing_amount_columns_are_listed() -> None:
    rows = [["Date", "Narration", "Amount"], ["2025-04-01", "X", "10"]]
    result = parse_statement(rows)
    assert isinstance(result, StatementRejected)
    assert "withdrawal amt." in result.reason
    assert "deposit amt." in result.reason


def test_process_statement_raises_on_rejection() -> None:
    with pytest.raises(StatementParseError, match="Could not find transaction headers"):
        process_statement([["nothing here"]])


@pytest.mark.parametrize(
    ("cell", "expected"),
    [
        ("1,00,000.00", Decimal("100000.00")),
        ("₹ 2,500", Decimal("2500")),
        ("350.75 Dr", Decimal("350.75")),
        (1200, Decimal("1200")),
        (99.5, Decimal("99.5")),
        ("", Decimal(0)),
        (None, Decimal(0)),
        ("abc", Decimal(0)),
        ("12.3.4", Decimal("12.3")),
    ],
)
def test_parse_amount_cell(cell: object, expected: Decimal) -> None:
    assert parse_amount_cell(cell) == expected
