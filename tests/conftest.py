"""Pytest configuration for test isolation and shared ledger fixtures.

Configuration is read from the process environment (``DATABASE_URL``,
``FD_USER_ID`` and the ``FD_*`` analytics settings), and the database client
keeps a module-level engine. Both would leak between tests, so an autouse
fixture clears the variables and disposes the shared engine after each test.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from db.client import reset_engine

from finance_dashboard.models import Transaction
from tests.helpers.ledger import tx

_ENV_VARS = (
    "DATABASE_URL",
    "FD_USER_ID",
    "FD_ANOMALY_Z_MODERATE",
    "FD_ANOMALY_Z_SEVERE",
    "FD_FORECAST_WINDOW",
    "FD_CATEGORY_RULES",
    "FINANCE_DASHBOARD_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield
    reset_engine()


@pytest.fixture
def sample_ledger() -> list[Transaction]:
    """Two months of salary, rent, food and cash spend."""

    return [
        tx("2025-01-01", "SALARY ACME CORP", "100000", "SALARY"),
        tx("2025-01-05", "HOUSE RENT JAN", "-25000", "RENT"),
        tx("2025-01-12", "UPI-SWIGGY INSTAMART", "-1500", "FOOD-GROCERY SHOPPING"),
        tx("2025-01-20", "ATM WDL", "-5000", "CASH WITHDRAWAL"),
        tx("2025-02-01", "SALARY ACME CORP", "120000", "SALARY"),
        tx("2025-02-05", "HOUSE RENT FEB", "-25000", "RENT"),
        tx("2025-02-14", "ZOMATO ORDER", "-2000", "FOOD"),
    ]
