# ruff: noqa: I001
"""Public API and orchestration for ``finance_dashboard``.

This module ties the pure pieces together for callers (the CLI, a view
layer, scripts):

- :func:`stage_statement` decodes a statement file and parses it into staged
  candidates (tagged result, no exceptions for bad documents).
- :func:`commit_staged` de-duplicates staged candidates against the stored
  ledger and inserts the remainder.
- :func:`analyze_ledger` / :func:`analyze_records` run the analytics pipeline
  over a stored ledger or an exported JSON dump.
- :func:`to_plain` turns results into JSON-friendly values for a view layer.

DB imports are local within functions so the pure analytics surface does not
require a configured database.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from os import PathLike
from typing import TYPE_CHECKING, Any

from .analytics import build_analytics
from .categorization import DEFAULT_RULES, KeywordRule
from .duplicates import existing_keys_for, filter_duplicate_staged
from .ingest import load_statement_rows
from .logging_setup import get_logger
from .models import AnalyticsResult, Transaction
from .settings import AnalyticsSettings
from .statement import Row, StatementResult, parse_statement

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = get_logger("finance_dashboard.api")

_CENTS = Decimal("0.01")


# ---------------------------------------------------------------------------
# Staging and import
# ---------------------------------------------------------------------------


def stage_statement(
    source: str | PathLike[str] | Sequence[Row],
    *,
    rules: Sequence[KeywordRule] = DEFAULT_RULES,
) -> StatementResult:
    """Parse a statement file (or already-decoded rows) into staged candidates.

    Parameters
    ----------
    source:
        Path to an ``.xlsx``/``.xlsm``/``.csv`` statement, or the decoded rows.
    rules:
        Keyword table used to categorize each row.

    Returns
    -------
    StatementResult
        :class:`~finance_dashboard.statement.StatementParsed` or
        :class:`~finance_dashboard.statement.StatementRejected`. File-system
        errors (missing file, unsupported extension) still raise.
    """

    rows = load_statement_rows(source) if isinstance(source, (str, PathLike)) else source
    return parse_statement(rows, rules)


@dataclass(frozen=True, slots=True)
class CommitResult:
    inserted: int
    duplicates: int
    message: str
    uploaded_at: datetime | None = None


def _commit_message(staged: int, inserted: int, duplicates: int) -> str:
    if staged == 0:
        return "No staged transactions to import."
    if inserted == 0:
        return (
            f"All {staged} staged transactions are duplicates of existing records. "
            "Nothing inserted."
        )
    if duplicates:
        return f"Inserted {inserted} new transactions. Skipped {duplicates} duplicates."
    return f"Inserted {inserted} new transactions."


def commit_staged(
    session: Session,
    *,
    user_id: str,
    staged: Sequence[Transaction],
) -> CommitResult:
    """Insert the staged candidates that are not already in the user's ledger.

    The duplicate check reads the ledger and then inserts within the same
    session; it is not atomic with respect to other sessions importing the
    same statement concurrently. The caller commits (``session_scope`` does
    this on exit).

    Every call counts as an upload and updates the user's last-upload time,
    even when nothing new is inserted.
    """

    from .persistence import insert_transactions, load_ledger, record_upload

    uploaded_at = record_upload(session, user_id=user_id)
    if not staged:
        return CommitResult(
            inserted=0,
            duplicates=0,
            message=_commit_message(0, 0, 0),
            uploaded_at=uploaded_at,
        )

    ledger = load_ledger(session, user_id=user_id)
    dedupe = filter_duplicate_staged(staged, existing_keys_for(ledger))
    inserted = 0
    if dedupe.new_ones:
        inserted = insert_transactions(session, user_id=user_id, transactions=dedupe.new_ones)
    logger.info(
        "commit for user %s: %d inserted, %d duplicates",
        user_id,
        inserted,
        dedupe.duplicate_count,
    )
    return CommitResult(
        inserted=inserted,
        duplicates=dedupe.duplicate_count,
        message=_commit_message(len(staged), inserted, dedupe.duplicate_count),
        uploaded_at=uploaded_at,
    )


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------


def analyze_ledger(
    session: Session,
    *,
    user_id: str,
    settings: AnalyticsSettings | None = None,
) -> AnalyticsResult:
    """Load the user's ledger and run the full analytics pipeline over it."""

    from .persistence import load_ledger

    return build_analytics(load_ledger(session, user_id=user_id), settings)


def analyze_records(
    records: Iterable[Mapping[str, Any]],
    settings: AnalyticsSettings | None = None,
) -> AnalyticsResult:
    """Analytics over raw ledger rows, e.g. a JSON export with legacy keys."""

    from .persistence import rows_to_transactions

    return build_analytics(rows_to_transactions(records), settings)


# ---------------------------------------------------------------------------
# Presentation helpers
# ---------------------------------------------------------------------------


def to_plain(obj: Any) -> Any:
    """Convert result objects into JSON-serializable values.

    Dataclasses become dicts (including read-only properties ``type`` on
    transactions), ``Decimal`` becomes a float rounded to cents, dates and
    datetimes become ISO strings, and lists and tuples become lists.
    """

    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return float(obj.quantize(_CENTS, rounding=ROUND_HALF_UP))
    if isinstance(obj, Transaction):
        out = {f.name: to_plain(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
        out["type"] = obj.type
        return out
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: to_plain(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    if isinstance(obj, Mapping):
        return {str(k): to_plain(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_plain(v) for v in obj]
    return obj


__all__ = [
    "stage_statement",
    "CommitResult",
    "commit_staged",
    "analyze_ledger",
    "analyze_records",
    "to_plain",
]
