"""Bank statement rows → staged :class:`~finance_dashboard.models.Transaction`.

Input is a decoded spreadsheet: an ordered list of rows, each a list of cell
values (strings, numbers, ``None`` for blanks, or ``date``/``datetime`` for
date cells the decoder already recognised). Bank exports usually prepend a
variable number of title/account rows, so the header row is located by
scanning from the top for the first row containing both a ``date`` and a
``narration`` cell (case-insensitive, whitespace-trimmed).

Contract
--------
The document is rejected when it has no rows, when no header row is found,
or when the header lacks any of the required columns::

    date, narration, withdrawal amt., deposit amt.

Individual data rows that are blank, footer/separator rows (first cell starts
with ``*``), rows without a date or narration, rows with an unparseable date,
and rows with neither a withdrawal nor a deposit are dropped silently. The
caller's review step surfaces the resulting count.

Two entry points share the same logic:

- :func:`parse_statement` returns a tagged result (:class:`StatementParsed` or
  :class:`StatementRejected`) so callers branch on ``result.ok``.
- :func:`process_statement` returns the transactions or raises
  :class:`StatementParseError`.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Literal, TypeAlias

from .categorization import DEFAULT_RULES, KeywordRule, get_category
from .dates import format_date, parse_date
from .logging_setup import get_logger
from .models import Transaction

logger = get_logger("finance_dashboard.statement")

Row: TypeAlias = Sequence[Any]

DATE_COLUMN = "date"
NARRATION_COLUMN = "narration"
WITHDRAWAL_COLUMN = "withdrawal amt."
DEPOSIT_COLUMN = "deposit amt."
REQUIRED_COLUMNS: tuple[str, ...] = (
    DATE_COLUMN,
    NARRATION_COLUMN,
    WITHDRAWAL_COLUMN,
    DEPOSIT_COLUMN,
)

_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER_RE = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")


class StatementParseError(ValueError):
    """The document as a whole could not be read as a bank statement."""


@dataclass(frozen=True, slots=True)
class StatementParsed:
    transactions: list[Transaction]
    header_row_index: int
    skipped_rows: int = 0
    ok: Literal[True] = field(default=True, init=False)


@dataclass(frozen=True, slots=True)
class StatementRejected:
    reason: str
    ok: Literal[False] = field(default=False, init=False)


StatementResult: TypeAlias = StatementParsed | StatementRejected


# ---------------------------------------------------------------------------
# Cell helpers
# ---------------------------------------------------------------------------


def _cell_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _is_blank(value: Any) -> bool:
    return _cell_text(value) == ""


def parse_amount_cell(value: Any) -> Decimal:
    """Parse a withdrawal/deposit cell; blank or unparseable cells are ``0``.

    Everything but digits, ``.`` and ``-`` is stripped first (currency signs,
    thousands separators, ``Cr``/``Dr`` markers), then the leading numeric
    prefix is taken.
    """

    if value is None or isinstance(value, bool):
        return Decimal(0)
    cleaned = _NON_NUMERIC_RE.sub("", str(value))
    m = _LEADING_NUMBER_RE.match(cleaned)
    if not m:
        return Decimal(0)
    try:
        return Decimal(m.group(0))
    except InvalidOperation:
        return Decimal(0)


def find_header_row(rows: Sequence[Row]) -> int | None:
    """Return the index of the first row holding both date and narration cells."""

    for i, row in enumerate(rows):
        cells = {_cell_text(c).lower() for c in row}
        if DATE_COLUMN in cells and NARRATION_COLUMN in cells:
            return i
    return None


def _column_index(header: Sequence[str], name: str) -> int | None:
    try:
        return header.index(name)
    except ValueError:
        return None


def _cell(row: Row, idx: int) -> Any:
    return row[idx] if idx < len(row) else None


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _row_to_transaction(
    row: Row,
    *,
    date_idx: int,
    narration_idx: int,
    withdrawal_idx: int,
    deposit_idx: int,
    rules: Sequence[KeywordRule],
) -> Transaction | None:
    if not row or all(_is_blank(c) for c in row):
        return None
    if _cell_text(row[0]).startswith("*"):
        return None

    date_raw = _cell(row, date_idx)
    description = _cell_text(_cell(row, narration_idx))
    if _is_blank(date_raw) or not description:
        return None

    parsed = parse_date(date_raw)
    if parsed is None:
        return None

    withdrawal = parse_amount_cell(_cell(row, withdrawal_idx))
    deposit = parse_amount_cell(_cell(row, deposit_idx))
    if deposit > 0:
        amount = deposit
    elif withdrawal > 0:
        amount = -withdrawal
    else:
        # No cash movement recorded on this row
        return None

    return Transaction(
        date=format_date(parsed),
        description=description,
        amount=amount,
        category=get_category(description, rules),
    )


def parse_statement(
    rows: Sequence[Row],
    rules: Sequence[KeywordRule] = DEFAULT_RULES,
) -> StatementResult:
    """Parse decoded statement rows into staged transactions.

    Returns :class:`StatementRejected` (never raises) when the document cannot
    be read; see the module docstring for the exact conditions.
    """

    if not rows:
        return StatementRejected("The statement contains no rows.")

    header_idx = find_header_row(rows)
    if header_idx is None:
        return StatementRejected(
            "Could not find transaction headers (e.g., 'Date', 'Narration') in the file. "
            "The parser looks for a row containing these keywords to identify where "
            "transactions begin."
        )

    header = [_cell_text(c).lower() for c in rows[header_idx]]
    columns: dict[str, int] = {}
    for name in REQUIRED_COLUMNS:
        idx = _column_index(header, name)
        if idx is not None:
            columns[name] = idx
    missing = [name for name in REQUIRED_COLUMNS if name not in columns]
    if missing:
        return StatementRejected(
            "Could not find all required columns: 'Date', 'Narration', 'Withdrawal Amt.', "
            "and 'Deposit Amt.' in the header row. Missing: " + ", ".join(missing)
        )

    transactions: list[Transaction] = []
    skipped = 0
    for row in rows[header_idx + 1 :]:
        tx = _row_to_transaction(
            row,
            date_idx=columns[DATE_COLUMN],
            narration_idx=columns[NARRATION_COLUMN],
            withdrawal_idx=columns[WITHDRAWAL_COLUMN],
            deposit_idx=columns[DEPOSIT_COLUMN],
            rules=rules,
        )
        if tx is None:
            skipped += 1
        else:
            transactions.append(tx)

    logger.debug("statement header at row %d; %d rows skipped", header_idx, skipped)
    logger.info("parsed %d transactions from statement", len(transactions))
    return StatementParsed(
        transactions=transactions, header_row_index=header_idx, skipped_rows=skipped
    )


def process_statement(
    rows: Sequence[Row],
    rules: Sequence[KeywordRule] = DEFAULT_RULES,
) -> list[Transaction]:
    """Like :func:`parse_statement` but raise :class:`StatementParseError` on rejection."""

    result = parse_statement(rows, rules)
    if isinstance(result, StatementRejected):
        raise StatementParseError(result.reason)
    return result.transactions


__all__ = [
    "REQUIRED_COLUMNS",
    "StatementParseError",
    "StatementParsed",
    "StatementRejected",
    "StatementResult",
    "parse_amount_cell",
    "find_header_row",
    "parse_statement",
    "process_statement",
]
