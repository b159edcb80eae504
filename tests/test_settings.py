from __future__ import annotations

import json
from pathlib import Path

import pytest

from finance_dashboard.categorization import DEFAULT_RULES, KeywordRule
from finance_dashboard.settings import AnalyticsSettings


def test_defaults() -> None:
    s = AnalyticsSettings.from_env({})
    assert (s.z_moderate, s.z_severe, s.forecast_window) == (2.0, 3.0, 3)
    assert s.keyword_rules() == DEFAULT_RULES


def test_values_come_from_environment() -> None:
    s = AnalyticsSettings.from_env(
        {"FD_ANOMALY_Z_MODERATE": "1.5", "FD_ANOMALY_Z_SEVERE": "2.5", "FD_FORECAST_WINDOW": "6"}
    )
    assert (s.z_moderate, s.z_severe, s.forecast_window) == (1.5, 2.5, 6)


def test_explicit_overrides_win_and_none_is_ignored() -> None:
    s = AnalyticsSettings.from_env(
        {"FD_FORECAST_WINDOW": "6"}, forecast_window=2, z_moderate=None
    )
    assert s.forecast_window == 2
    assert s.z_moderate == 2.0


def test_process_environment_is_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FD_FORECAST_WINDOW", "4")
    assert AnalyticsSettings.from_env().forecast_window == 4


@pytest.mark.parametrize(
    "env",
    [
        {"FD_FORECAST_WINDOW": "0"},
        {"FD_FORECAST_WINDOW": "three"},
        {"FD_ANOMALY_Z_MODERATE": "-1"},
        {"FD_ANOMALY_Z_MODERATE": "3.5", "FD_ANOMALY_Z_SEVERE": "3.0"},
    ],
)
def test_invalid_values_raise_value_error(env: dict[str, str]) -> None:
    with pytest.raises(ValueError, match="invalid analytics settings"):
        AnalyticsSettings.from_env(env)


def test_rules_path_loads_replacement_table(tmp_path: Path) -> None:
    path = tmp_path / "rules.json"
    path.write_text(json.dumps([{"keyword": "GYM", "label": "FITNESS"}]), encoding="utf-8")

    s = AnalyticsSettings.from_env({"FD_CATEGORY_RULES": str(path)})

    assert s.keyword_rules() == (KeywordRule("GYM", "FITNESS"),)
