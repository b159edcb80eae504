from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest
from db.client import reset_engine, session_scope
from db.models.finance import LedgerTransaction
from sqlalchemy import create_engine, inspect, select
from typer.testing import CliRunner

from finance_dashboard.cli import app
from tests.helpers.db import bootstrap_sqlite_db
from tests.helpers.ledger import PREAMBLE_ROWS

runner = CliRunner()


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    # No stray .env from the developer's checkout
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def statement(workdir: Path) -> Path:
    path = workdir / "march.csv"
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        for row in PREAMBLE_ROWS:
            writer.writerow(["" if c is None else c for c in row])
    return path


@pytest.fixture
def ledger_env(workdir: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    url = bootstrap_sqlite_db(workdir / "ledger.db")
    monkeypatch.setenv("DATABASE_URL", url)
    monkeypatch.setenv("FD_USER_ID", "u1")
    return url


def _ledger_ids(url: str) -> list[int]:
    with session_scope(database_url=url) as s:
        return list(s.execute(select(LedgerTransaction.id).order_by(LedgerTransaction.id)).scalars())


# ---- stage -------------------------------------------------------------------------


def test_stage_prints_staged_rows(statement: Path) -> None:
    result = runner.invoke(app, ["stage", str(statement)])

    assert result.exit_code == 0, result.output
    lines = result.stdout.strip().splitlines()
    assert lines[0] == "2025-03-01\t-5,000.00\tCASH WITHDRAWAL\tATM WDL"
    assert lines[-1] == "3 transactions staged (2 rows skipped)"


def test_stage_json(statement: Path) -> None:
    result = runner.invoke(app, ["stage", str(statement), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["skipped_rows"] == 2
    first = payload["transactions"][0]
    assert first["amount"] == -5000.0
    assert first["type"] == "debit"
    assert first["category"] == "CASH WITHDRAWAL"


def test_stage_missing_file_exits_non_zero(workdir: Path) -> None:
    result = runner.invoke(app, ["stage", str(workdir / "missing.xlsx")])
    assert result.exit_code == 1
    assert "Error: File not found" in result.output


def test_stage_reports_missing_rules_file_not_statement(
    statement: Path, workdir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("FD_CATEGORY_RULES", str(workdir / "rules.json"))

    result = runner.invoke(app, ["stage", str(statement)])

    assert result.exit_code == 1
    assert "could not load category rules" in result.output
    assert "rules.json" in result.output
    assert "File not found: " not in result.output


def test_stage_rejected_document(workdir: Path) -> None:
    path = workdir / "bad.csv"
    path.write_text("just,some,cells\n1,2,3\n", encoding="utf-8")

    result = runner.invoke(app, ["stage", str(path)])

    assert result.exit_code == 1
    assert "Could not find transaction headers" in result.output


# ---- import ------------------------------------------------------------------------


def test_import_then_reimport_reports_duplicates(statement: Path, ledger_env: str) -> None:
    first = runner.invoke(app, ["import", str(statement), "--yes"])
    assert first.exit_code == 0, first.output
    assert "Inserted 3 new transactions." in first.stdout

    second = runner.invoke(app, ["import", str(statement), "--yes"])
    assert second.exit_code == 0, second.output
    assert "All 3 staged transactions are duplicates" in second.stdout
    assert len(_ledger_ids(ledger_env)) == 3


def test_import_can_be_cancelled(statement: Path, ledger_env: str) -> None:
    result = runner.invoke(app, ["import", str(statement)], input="n\n")
    assert result.exit_code == 0, result.output
    assert "Import cancelled." in result.stdout
    assert _ledger_ids(ledger_env) == []


def test_import_requires_a_user(statement: Path, workdir: Path) -> None:
    result = runner.invoke(app, ["import", str(statement), "--yes"])
    assert result.exit_code == 1
    assert "no user id" in result.output


# ---- report ------------------------------------------------------------------------


def test_report_json_from_ledger(statement: Path, ledger_env: str) -> None:
    runner.invoke(app, ["import", str(statement), "--yes"])

    result = runner.invoke(app, ["report", "--json", "--window", "1"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["summary"] == {
        "total_income": 100000.0,
        "total_expenses": 6500.5,
        "net_savings": 93499.5,
    }
    assert payload["monthly_table"][0]["month_label"] == "2025-Mar"
    assert payload["forecast"]["next_month"]["month"] == "2025-04"
    assert payload["forecast"]["next_month"]["method"] == "moving-average-1"
    assert payload["last_upload"].startswith("20")
    assert {c["category"] for c in payload["categories"]} >= {"FOOD", "GROCERY SHOPPING"}


def test_report_text_shows_last_upload(statement: Path, ledger_env: str) -> None:
    before = runner.invoke(app, ["report"])
    assert before.exit_code == 0, before.output
    assert "Last upload: never" in before.stdout

    runner.invoke(app, ["import", str(statement), "--yes"])
    after = runner.invoke(app, ["report"])

    assert after.exit_code == 0, after.output
    assert "Last upload: never" not in after.stdout
    assert "UTC" in after.stdout


def test_report_text_from_ledger_json(workdir: Path) -> None:
    export = workdir / "ledger.json"
    export.write_text(
        json.dumps(
            [
                {"date": "2025-01-01", "Description": "SALARY", "Amount": 100000, "Category": "SALARY"},
                {"date": "2025-01-02", "Description": "ATM", "Amount": -3500, "Category": "CASH WITHDRAWAL"},
            ]
        ),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["report", "--ledger-json", str(export)])

    assert result.exit_code == 0, result.output
    assert "Net savings: 96,500.00" in result.stdout
    assert "Forecast 2025-02" in result.stdout
    assert "Last upload" not in result.stdout


def test_report_rejects_inconsistent_thresholds(workdir: Path) -> None:
    result = runner.invoke(app, ["report", "--z-moderate", "4", "--z-severe", "3"])
    assert result.exit_code == 1
    assert "invalid analytics settings" in result.output


# ---- edit / delete -------------------------------------------------------------------


def test_edit_recomputes_category(statement: Path, ledger_env: str) -> None:
    runner.invoke(app, ["import", str(statement), "--yes"])
    tx_id = _ledger_ids(ledger_env)[0]

    result = runner.invoke(
        app,
        [
            "edit",
            str(tx_id),
            "--date",
            "2025-03-04",
            "--description",
            "ZOMATO ORDER",
            "--amount=-450",
        ],
    )

    assert result.exit_code == 0, result.output
    assert f"Updated {tx_id}: 2025-03-04\t-450.00\tFOOD\tZOMATO ORDER" in result.stdout


def test_edit_unknown_id(ledger_env: str) -> None:
    result = runner.invoke(
        app, ["edit", "404", "--date", "2025-03-04", "--description", "X", "--amount", "1"]
    )
    assert result.exit_code == 1
    assert "not found" in result.output


def test_delete(statement: Path, ledger_env: str) -> None:
    runner.invoke(app, ["import", str(statement), "--yes"])
    tx_id = _ledger_ids(ledger_env)[0]

    assert runner.invoke(app, ["delete", str(tx_id)]).exit_code == 0
    again = runner.invoke(app, ["delete", str(tx_id)])
    assert again.exit_code == 1
    assert tx_id not in _ledger_ids(ledger_env)


# ---- budgets ---------------------------------------------------------------------------


def test_budget_set_report_remove(statement: Path, ledger_env: str) -> None:
    runner.invoke(app, ["import", str(statement), "--yes"])

    assert runner.invoke(app, ["budget", "set", "FOOD", "1000"]).exit_code == 0
    result = runner.invoke(app, ["budget", "report", "2025-03", "--json"])
    assert result.exit_code == 0, result.output
    [food] = json.loads(result.stdout)
    assert food["actual"] == 1500.5
    assert food["variance"] == 500.5

    assert runner.invoke(app, ["budget", "remove", "FOOD"]).exit_code == 0
    empty = runner.invoke(app, ["budget", "report", "2025-03"])
    assert "No budgets set." in empty.stdout


def test_budget_remove_matches_label_with_extra_spaces(ledger_env: str) -> None:
    assert runner.invoke(app, ["budget", "set", "FOOD  ITEMS", "900"]).exit_code == 0

    result = runner.invoke(app, ["budget", "remove", "FOOD  ITEMS"])

    assert result.exit_code == 0, result.output
    assert "Removed budget" in result.stdout


def test_budget_rejects_multi_label_category(ledger_env: str) -> None:
    result = runner.invoke(app, ["budget", "set", "FOOD-GROCERY SHOPPING", "1000"])
    assert result.exit_code == 1
    assert "single label" in result.output


def test_budget_report_rejects_bad_month(ledger_env: str) -> None:
    result = runner.invoke(app, ["budget", "report", "March"])
    assert result.exit_code == 1


# ---- init-db -----------------------------------------------------------------------------


def test_init_db_creates_tables(workdir: Path) -> None:
    url = f"sqlite+pysqlite:///{workdir / 'fresh.db'}"

    result = runner.invoke(app, ["init-db", "--database-url", url])

    assert result.exit_code == 0, result.output
    reset_engine()

    engine = create_engine(url)
    try:
        assert set(inspect(engine).get_table_names()) >= {"transactions", "category_budget", "user_uploads"}
    finally:
        engine.dispose()
