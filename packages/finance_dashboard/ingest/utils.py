"""Decode statement files into the row lists consumed by the statement parser.

Supported inputs:

- ``.xlsx`` / ``.xlsm``: first worksheet via ``openpyxl`` in read-only mode.
  Date-formatted cells arrive as ``datetime`` values, which the date
  normalizer accepts directly.
- ``.csv``: UTF-8 (BOM tolerated) via the stdlib :mod:`csv` module. All cells
  are strings.

No header detection happens here; the parser locates the header row itself.
"""

from __future__ import annotations

import csv
from os import PathLike
from pathlib import Path
from typing import Any

from openpyxl import load_workbook

from ..logging_setup import get_logger
from ..statement import StatementParseError

logger = get_logger("finance_dashboard.ingest")

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CSV_SUFFIXES = {".csv"}


def _load_excel_rows(path: Path) -> list[list[Any]]:
    wb = load_workbook(path, read_only=True, data_only=True)
    try:
        ws = wb.worksheets[0]
        return [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _load_csv_rows(path: Path) -> list[list[Any]]:
    with path.open(encoding="utf-8-sig", newline="") as f:
        return [list(row) for row in csv.reader(f)]


def load_statement_rows(path: str | PathLike[str]) -> list[list[Any]]:
    """Read ``path`` and return its first sheet as a list of cell rows.

    Raises
    ------
    FileNotFoundError
        When ``path`` does not exist.
    StatementParseError
        When the extension is not a supported spreadsheet format.
    """

    p = Path(path)
    if not p.is_file():
        raise FileNotFoundError(f"File not found: {p}")

    suffix = p.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        rows = _load_excel_rows(p)
    elif suffix in CSV_SUFFIXES:
        rows = _load_csv_rows(p)
    else:
        supported = ", ".join(sorted(EXCEL_SUFFIXES | CSV_SUFFIXES))
        raise StatementParseError(
            f"Unsupported statement format {suffix or '(none)'!r}; expected one of: {supported}"
        )

    logger.debug("loaded %d rows from %s", len(rows), p)
    return rows


__all__ = ["load_statement_rows"]
