# ruff: noqa: I001
"""CLI for the ``finance_dashboard`` package.

This module exposes callable command handlers (``cmd_stage``,
``cmd_import`` ...) that return a process exit code, and a Typer-based
console interface that wraps them. Environment variables (``DATABASE_URL``,
``FD_USER_ID`` and the ``FD_*`` analytics settings) are loaded from a local
``.env`` using ``python-dotenv`` before any command runs. Business logic lives
in ``finance_dashboard.api`` and the modules it orchestrates.

Handled failures print ``Error: ...`` to stderr and exit with status 1.
"""

from __future__ import annotations

import json
import os
import sys
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from typer.models import ArgumentInfo

from .categorization import KeywordRule
from .logging_setup import configure_logging
from .settings import AnalyticsSettings


# ---- Small module-level helpers used by CLI commands -------------------------


def _error(msg: str) -> int:
    print(f"Error: {msg}", file=sys.stderr)
    return 1


def _resolve_user_id(user_id: str | None) -> str | None:
    """Explicit option first, then ``FD_USER_ID``; blank values count as unset."""

    value = user_id if user_id is not None else os.getenv("FD_USER_ID")
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_money(raw: str, *, what: str) -> Decimal:
    try:
        value = Decimal(raw.replace(",", "").strip())
    except InvalidOperation as exc:
        raise ValueError(f"invalid {what}: {raw!r}") from exc
    if not value.is_finite():
        raise ValueError(f"invalid {what}: {raw!r}")
    return value


def _fmt(amount: Decimal) -> str:
    return f"{amount:,.2f}"


def _fmt_upload(value: datetime | None) -> str:
    return "never" if value is None else f"{value:%Y-%m-%d %H:%M} UTC"


def _load_ledger_json(path: Path) -> list[dict[str, Any]]:
    with path.open(encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        raise ValueError(f"{path}: expected a JSON array of ledger rows")
    return data


def _echo_json(payload: Any) -> None:
    from .api import to_plain

    print(json.dumps(to_plain(payload), indent=2))


def _load_rules() -> tuple[KeywordRule, ...] | None:
    """Keyword table from ``FD_CATEGORY_RULES`` or the built-in one; ``None`` after an error."""

    try:
        return AnalyticsSettings.from_env().keyword_rules()
    except (ValueError, OSError) as e:
        _error(f"could not load category rules: {e}")
        return None


# ---- Command handlers ----------------------------------------------------------


def cmd_stage(path: str, *, as_json: bool = False) -> int:
    """Parse a statement and print the staged transactions without saving them.

    Text output is one line per transaction, tab separated::

        <date>\t<amount>\t<category>\t<description>

    followed by a count line. ``--json`` emits the staged rows and the number
    of skipped rows instead.
    """

    from .api import stage_statement
    from .statement import StatementParseError

    rules = _load_rules()
    if rules is None:
        return 1

    try:
        result = stage_statement(path, rules=rules)
    except FileNotFoundError:
        return _error(f"File not found: {path}")
    except (StatementParseError, ValueError, OSError) as e:
        return _error(str(e))

    if not result.ok:
        return _error(result.reason)

    if as_json:
        _echo_json(
            {"transactions": result.transactions, "skipped_rows": result.skipped_rows}
        )
        return 0

    for t in result.transactions:
        print(f"{t.date}\t{_fmt(t.amount)}\t{t.category}\t{t.description}")
    print(f"{len(result.transactions)} transactions staged ({result.skipped_rows} rows skipped)")
    return 0


def cmd_import(
    path: str,
    *,
    user_id: str | None = None,
    database_url: str | None = None,
    assume_yes: bool = False,
) -> int:
    """Parse a statement, drop rows already in the ledger and insert the rest."""

    from .api import commit_staged, stage_statement
    from .statement import StatementParseError

    uid = _resolve_user_id(user_id)
    if uid is None:
        return _error("no user id; pass --user-id or set FD_USER_ID")

    rules = _load_rules()
    if rules is None:
        return 1

    try:
        result = stage_statement(path, rules=rules)
    except FileNotFoundError:
        return _error(f"File not found: {path}")
    except (StatementParseError, ValueError, OSError) as e:
        return _error(str(e))

    if not result.ok:
        return _error(result.reason)

    staged = result.transactions
    if not staged:
        print("No transactions found in the statement.")
        return 0

    print(f"Staged {len(staged)} transactions from {Path(path).name}.")
    if not assume_yes and not typer.confirm("Import them into the ledger?", default=True):
        print("Import cancelled.")
        return 0

    try:
        from db.client import session_scope

        with session_scope(database_url=database_url) as session:
            outcome = commit_staged(session, user_id=uid, staged=staged)
    except Exception as e:
        return _error(f"Failed to save transactions. Reason: {e}")

    print(outcome.message)
    return 0


def _print_report(result: Any, table: list[Any], totals: Any) -> None:
    s = result.summary
    print("Summary")
    print(f"  Income:      {_fmt(s.total_income)}")
    print(f"  Expenses:    {_fmt(s.total_expenses)}")
    print(f"  Net savings: {_fmt(s.net_savings)}")

    print()
    print("Monthly")
    for r in table:
        print(
            f"  {r.month_label}\t{_fmt(r.revenue)}\t{_fmt(r.expense)}\t{_fmt(r.savings)}"
            f"\t{r.savings_ratio:.0%}\t{_fmt(r.balance)}"
        )
    if table:
        print(
            f"  Total\t{_fmt(totals.revenue)}\t{_fmt(totals.expense)}\t{_fmt(totals.savings)}"
        )

    print()
    print("Categories (by expense)")
    for c in result.categories:
        print(f"  {c.category}\t{_fmt(c.expense)}\t{_fmt(c.income)}")

    print()
    print(f"Recurring ({result.recurring.count})")
    for p in result.recurring.patterns:
        print(f"  {p.key}\tx{p.count}\tevery ~{p.avg_interval_days:g} days\tlast {p.last_date}")

    print()
    print(f"Anomalies ({len(result.anomalies)})")
    for a in result.anomalies:
        print(
            f"  [{a.severity}] {a.date}\t{_fmt(a.amount)}\t{a.category}"
            f"\tz={a.z_score:.2f}\t{a.description}"
        )

    print()
    nxt = result.forecast.next_month
    if nxt is None:
        print("Forecast: not enough data")
    else:
        print(
            f"Forecast {nxt.month} ({nxt.method}): income {_fmt(nxt.projected_income)}, "
            f"expense {_fmt(nxt.projected_expense)}, savings {_fmt(nxt.projected_savings)}"
        )


def cmd_report(
    *,
    user_id: str | None = None,
    database_url: str | None = None,
    ledger_json: str | None = None,
    as_json: bool = False,
    year: str | None = None,
    window: int | None = None,
    z_moderate: float | None = None,
    z_severe: float | None = None,
) -> int:
    """Run the analytics pipeline over the stored ledger (or a JSON export)."""

    from .analytics import monthly_summary_table, monthly_totals
    from .api import analyze_ledger, analyze_records
    from .persistence import load_last_upload

    try:
        settings = AnalyticsSettings.from_env(
            forecast_window=window, z_moderate=z_moderate, z_severe=z_severe
        )
    except ValueError as e:
        return _error(str(e))

    last_upload: datetime | None = None
    try:
        if ledger_json is not None:
            result = analyze_records(_load_ledger_json(Path(ledger_json)), settings)
        else:
            uid = _resolve_user_id(user_id)
            if uid is None:
                return _error("no user id; pass --user-id or set FD_USER_ID")
            from db.client import session_scope

            with session_scope(database_url=database_url) as session:
                result = analyze_ledger(session, user_id=uid, settings=settings)
                last_upload = load_last_upload(session, user_id=uid)
    except Exception as e:
        return _error(f"failed to load ledger: {e}")

    table = monthly_summary_table(result.transactions, year=year)
    totals = monthly_totals(table)

    if as_json:
        _echo_json(
            {
                "last_upload": last_upload,
                "summary": result.summary,
                "monthly": result.monthly,
                "monthly_table": table,
                "monthly_totals": totals,
                "categories": result.categories,
                "recurring": {
                    "count": result.recurring.count,
                    "patterns": result.recurring.patterns,
                },
                "anomalies": result.anomalies,
                "forecast": result.forecast,
            }
        )
        return 0

    if ledger_json is None:
        print(f"Last upload: {_fmt_upload(last_upload)}")
        print()
    _print_report(result, table, totals)
    return 0


def cmd_edit(
    transaction_id: int,
    *,
    date: str,
    description: str,
    amount: str,
    user_id: str | None = None,
    database_url: str | None = None,
) -> int:
    """Replace a ledger row; the category is recomputed from the description."""

    from .persistence import update_transaction

    uid = _resolve_user_id(user_id)
    if uid is None:
        return _error("no user id; pass --user-id or set FD_USER_ID")
    rules = _load_rules()
    if rules is None:
        return 1

    try:
        value = _parse_money(amount, what="amount")
        from db.client import session_scope

        with session_scope(database_url=database_url) as session:
            updated = update_transaction(
                session,
                user_id=uid,
                transaction_id=transaction_id,
                date=date,
                description=description,
                amount=value,
                rules=rules,
            )
    except (LookupError, ValueError) as e:
        return _error(str(e))
    except Exception as e:
        return _error(f"update failed: {e}")

    print(
        f"Updated {updated.id}: {updated.date}\t{_fmt(updated.amount)}"
        f"\t{updated.category}\t{updated.description}"
    )
    return 0


def cmd_delete(
    transaction_id: int,
    *,
    user_id: str | None = None,
    database_url: str | None = None,
) -> int:
    from .persistence import delete_transaction

    uid = _resolve_user_id(user_id)
    if uid is None:
        return _error("no user id; pass --user-id or set FD_USER_ID")

    try:
        from db.client import session_scope

        with session_scope(database_url=database_url) as session:
            deleted = delete_transaction(session, user_id=uid, transaction_id=transaction_id)
    except Exception as e:
        return _error(f"delete failed: {e}")

    if not deleted:
        return _error(f"transaction {transaction_id} not found")
    print(f"Deleted transaction {transaction_id}")
    return 0


def cmd_budget_set(
    category: str,
    target: str,
    *,
    user_id: str | None = None,
    database_url: str | None = None,
) -> int:
    from .persistence import upsert_budget

    uid = _resolve_user_id(user_id)
    if uid is None:
        return _error("no user id; pass --user-id or set FD_USER_ID")

    try:
        value = _parse_money(target, what="budget target")
        from db.client import session_scope

        with session_scope(database_url=database_url) as session:
            budget = upsert_budget(session, user_id=uid, category=category, monthly_target=value)
    except ValueError as e:
        return _error(str(e))
    except Exception as e:
        return _error(f"saving budget failed: {e}")

    print(f"Budget for {budget.category}: {_fmt(budget.monthly_target)} per month")
    return 0


def cmd_budget_remove(
    category: str,
    *,
    user_id: str | None = None,
    database_url: str | None = None,
) -> int:
    from .persistence import delete_budget

    uid = _resolve_user_id(user_id)
    if uid is None:
        return _error("no user id; pass --user-id or set FD_USER_ID")

    try:
        from db.client import session_scope

        with session_scope(database_url=database_url) as session:
            removed = delete_budget(session, user_id=uid, category=category)
    except ValueError as e:
        return _error(str(e))
    except Exception as e:
        return _error(f"removing budget failed: {e}")

    if not removed:
        return _error(f"no budget for {category!r}")
    print(f"Removed budget for {category}")
    return 0


def cmd_budget_report(
    month: str,
    *,
    user_id: str | None = None,
    database_url: str | None = None,
    as_json: bool = False,
) -> int:
    """Actual spend against every budget for ``month`` (``YYYY-MM``)."""

    from .budgets import budget_report
    from .forecast import next_month_key
    from .persistence import load_budgets, load_ledger

    if next_month_key(month) is None:
        return _error(f"invalid month {month!r}; expected YYYY-MM")

    uid = _resolve_user_id(user_id)
    if uid is None:
        return _error("no user id; pass --user-id or set FD_USER_ID")

    try:
        from db.client import session_scope

        with session_scope(database_url=database_url) as session:
            budgets = load_budgets(session, user_id=uid)
            ledger = load_ledger(session, user_id=uid)
    except Exception as e:
        return _error(f"failed to load budgets: {e}")

    report = budget_report(ledger, budgets, month)
    if as_json:
        _echo_json(report)
        return 0
    if not report:
        print("No budgets set.")
        return 0
    for v in report:
        pct = "n/a" if v.percent is None else f"{v.percent:.0%}"
        status = "over" if v.variance > 0 else "within"
        print(
            f"{v.category}\t{_fmt(v.actual)} / {_fmt(v.target)}\t{pct}\t{status}"
            f" ({_fmt(v.variance)})"
        )
    return 0


def cmd_init_db(*, database_url: str | None = None) -> int:
    try:
        from db.client import create_schema

        create_schema(database_url=database_url)
    except Exception as e:
        return _error(f"failed to create tables: {e}")
    print("Database tables are ready.")
    return 0


# ---- Typer-based console interface -------------------------------------------


def _finish(code: int) -> None:
    if code:
        raise typer.Exit(code)


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import bank statements into a personal ledger and report on it. "
        "Loads DATABASE_URL, FD_USER_ID and FD_* settings from a local .env."
    ),
)
budget_app = typer.Typer(no_args_is_help=True, help="Manage monthly category budgets.")
app.add_typer(budget_app, name="budget")

# Module-level argument/option objects to satisfy ruff B008 (no calls in
# parameter defaults).
STATEMENT_PATH_ARG: ArgumentInfo = typer.Argument(
    ...,
    help="Path to a bank statement (.xlsx, .xlsm or .csv)",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
USER_ID_OPTION = typer.Option(None, "--user-id", help="Ledger owner (falls back to FD_USER_ID).")
DATABASE_URL_OPTION = typer.Option(
    None, "--database-url", help="Override DATABASE_URL (falls back to env var)."
)
LEDGER_JSON_OPTION = typer.Option(
    None,
    "--ledger-json",
    help="Read the ledger from a JSON export instead of the database.",
    dir_okay=False,
)


@app.command("stage")
def stage_cmd(
    path: Annotated[Path, STATEMENT_PATH_ARG],
    *,
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of text."),
) -> None:
    """Parse a statement and show what would be imported."""

    _finish(cmd_stage(str(path), as_json=as_json))


@app.command("import")
def import_cmd(
    path: Annotated[Path, STATEMENT_PATH_ARG],
    *,
    user_id: str | None = USER_ID_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Import a statement into the ledger, skipping rows already present."""

    _finish(cmd_import(str(path), user_id=user_id, database_url=database_url, assume_yes=yes))


@app.command("report")
def report_cmd(
    *,
    user_id: str | None = USER_ID_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
    ledger_json: Path | None = LEDGER_JSON_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of text."),
    year: str | None = typer.Option(None, help="Limit the monthly table to one year (YYYY)."),
    window: int | None = typer.Option(None, help="Forecast moving-average window in months."),
    z_moderate: float | None = typer.Option(None, help="z-score that flags an anomaly."),
    z_severe: float | None = typer.Option(None, help="z-score for a severe anomaly."),
) -> None:
    """Summary, monthly table, categories, recurring, anomalies and forecast."""

    _finish(
        cmd_report(
            user_id=user_id,
            database_url=database_url,
            ledger_json=str(ledger_json) if ledger_json is not None else None,
            as_json=as_json,
            year=year,
            window=window,
            z_moderate=z_moderate,
            z_severe=z_severe,
        )
    )


@app.command("edit")
def edit_cmd(
    transaction_id: int,
    *,
    date: str = typer.Option(..., help="New date (any supported format)."),
    description: str = typer.Option(..., help="New description."),
    amount: str = typer.Option(..., help="New signed amount (negative = debit)."),
    user_id: str | None = USER_ID_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Replace a ledger transaction."""

    _finish(
        cmd_edit(
            transaction_id,
            date=date,
            description=description,
            amount=amount,
            user_id=user_id,
            database_url=database_url,
        )
    )


@app.command("delete")
def delete_cmd(
    transaction_id: int,
    *,
    user_id: str | None = USER_ID_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Delete a ledger transaction."""

    _finish(cmd_delete(transaction_id, user_id=user_id, database_url=database_url))


@budget_app.command("set")
def budget_set_cmd(
    category: str,
    target: str,
    *,
    user_id: str | None = USER_ID_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Set the monthly target for a category label."""

    _finish(cmd_budget_set(category, target, user_id=user_id, database_url=database_url))


@budget_app.command("remove")
def budget_remove_cmd(
    category: str,
    *,
    user_id: str | None = USER_ID_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
) -> None:
    """Remove the budget for a category label."""

    _finish(cmd_budget_remove(category, user_id=user_id, database_url=database_url))


@budget_app.command("report")
def budget_report_cmd(
    month: str,
    *,
    user_id: str | None = USER_ID_OPTION,
    database_url: str | None = DATABASE_URL_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Emit JSON instead of text."),
) -> None:
    """Compare a month's spend with every budget."""

    _finish(
        cmd_budget_report(month, user_id=user_id, database_url=database_url, as_json=as_json)
    )


@app.command("init-db")
def init_db_cmd(*, database_url: str | None = DATABASE_URL_OPTION) -> None:
    """Create the ledger tables (for local SQLite use; Alembic manages Postgres)."""

    _finish(cmd_init_db(database_url=database_url))


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Central logging setup so child loggers inherit configuration
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m finance_dashboard.cli`
    app()
