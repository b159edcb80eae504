from __future__ import annotations

import logging

import pytest

from finance_dashboard.logging_setup import PACKAGE_LOGGER, get_logger, resolve_level


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (logging.DEBUG, logging.DEBUG),
        ("warning", logging.WARNING),
        (" ERROR ", logging.ERROR),
        ("15", 15),
        ("chatty", logging.INFO),
    ],
)
def test_resolve_level(raw: int | str, expected: int) -> None:
    assert resolve_level(raw) == expected


def test_resolve_level_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FINANCE_DASHBOARD_LOG_LEVEL", "DEBUG")
    assert resolve_level() == logging.DEBUG


def test_resolve_level_defaults_to_info() -> None:
    assert resolve_level() == logging.INFO


def test_get_logger_returns_package_child() -> None:
    log = get_logger("finance_dashboard.statement")
    assert log.name == "finance_dashboard.statement"
    assert logging.getLogger(PACKAGE_LOGGER).handlers
