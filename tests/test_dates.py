from __future__ import annotations

from datetime import date, datetime

import pytest

from finance_dashboard.dates import (
    days_between,
    format_date,
    format_display_date,
    month_key,
    normalize_date,
    parse_date,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2025-03-01", date(2025, 3, 1)),
        ("2025-3-1", date(2025, 3, 1)),
        ("01/03/2025", date(2025, 3, 1)),
        ("1/3/25", date(2025, 3, 1)),
        ("05-Mar-25", date(2025, 3, 5)),
        ("05-mar-2025", date(2025, 3, 5)),
        ("  2025-12-31  ", date(2025, 12, 31)),
    ],
)
def test_parse_date_supported_patterns(raw: str, expected: date) -> None:
    assert parse_date(raw) == expected


def test_slash_dates_are_day_first() -> None:
    # 02/03 is 2 March, never 3 February
    assert parse_date("02/03/2025") == date(2025, 3, 2)


def test_parse_date_accepts_spreadsheet_date_cells() -> None:
    assert parse_date(datetime(2025, 3, 1, 13, 45)) == date(2025, 3, 1)
    assert parse_date(date(2024, 2, 29)) == date(2024, 2, 29)


@pytest.mark.parametrize("raw", ["invalid-date", "", "   ", None, 45000, "31/04/2025", "2025-02-30"])
def test_parse_date_rejects_garbage_and_impossible_days(raw: object) -> None:
    assert parse_date(raw) is None


def test_parse_date_falls_back_to_general_parser() -> None:
    assert parse_date("March 7, 2025") == date(2025, 3, 7)


@pytest.mark.parametrize("raw", ["12", "Mar 2025", "2025", "March 7"])
def test_partial_dates_are_rejected_not_completed_from_today(raw: str) -> None:
    assert parse_date(raw) is None


def test_general_parser_keeps_day_first_convention() -> None:
    assert parse_date("01/03/2025 10:15") == date(2025, 3, 1)
    assert parse_date("2025-03-01T10:15:00") == date(2025, 3, 1)


def test_parse_then_format_round_trip_is_identity() -> None:
    for s in ("2025-01-01", "2024-02-29", "1999-12-31"):
        parsed = parse_date(s)
        assert parsed is not None
        assert format_date(parsed) == s


def test_normalize_date_pads_to_canonical_form() -> None:
    assert normalize_date("1/3/25") == "2025-03-01"
    assert normalize_date("nope") is None


def test_format_display_date() -> None:
    assert format_display_date("2025-03-01") == "03/01/2025"
    # Not canonical: returned unchanged
    assert format_display_date("March 1") == "March 1"


def test_month_key_and_days_between() -> None:
    assert month_key("2025-03-15") == "2025-03"
    assert days_between("2025-01-31", "2025-03-01") == 29
    assert days_between("05-Mar-25", "2025-03-10") == 5
    assert days_between("pending", "2025-03-10") is None
