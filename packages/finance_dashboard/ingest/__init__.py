"""Statement file decoding (spreadsheet → rows)."""

from .utils import load_statement_rows

__all__ = ["load_statement_rows"]
