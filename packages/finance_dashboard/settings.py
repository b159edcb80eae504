"""Tunable analytics parameters.

Values come from keyword arguments or from ``FD_*`` environment variables
(loaded from ``.env`` by the CLI). Validation is done by pydantic so a bad
value fails loudly with the offending field named.

Environment variables
---------------------
``FD_ANOMALY_Z_MODERATE``
    z-score at which an expense is flagged (default ``2.0``).
``FD_ANOMALY_Z_SEVERE``
    z-score at which a flag becomes ``severe`` (default ``3.0``).
``FD_FORECAST_WINDOW``
    Number of trailing months averaged by the forecast (default ``3``).
``FD_CATEGORY_RULES``
    Optional path to a JSON keyword table replacing the built-in one.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .categorization import DEFAULT_RULES, KeywordRule, load_rules

_ENV_FIELDS = {
    "FD_ANOMALY_Z_MODERATE": "z_moderate",
    "FD_ANOMALY_Z_SEVERE": "z_severe",
    "FD_FORECAST_WINDOW": "forecast_window",
    "FD_CATEGORY_RULES": "rules_path",
}


class AnalyticsSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    z_moderate: float = Field(default=2.0, gt=0)
    z_severe: float = Field(default=3.0, gt=0)
    forecast_window: int = Field(default=3, ge=1)
    rules_path: Path | None = None

    @model_validator(mode="after")
    def _severe_not_below_moderate(self) -> AnalyticsSettings:
        if self.z_severe < self.z_moderate:
            raise ValueError("z_severe must be >= z_moderate")
        return self

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: object,
    ) -> AnalyticsSettings:
        """Build settings from ``FD_*`` variables; explicit ``overrides`` win.

        ``None`` overrides are ignored so CLI options can be passed through
        unconditionally.
        """

        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for var, name in _ENV_FIELDS.items():
            raw = env.get(var)
            if raw is not None and raw.strip():
                values[name] = raw.strip()
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ValueError(f"invalid analytics settings: {exc}") from exc

    def keyword_rules(self) -> tuple[KeywordRule, ...]:
        if self.rules_path is None:
            return DEFAULT_RULES
        return load_rules(self.rules_path)


__all__ = ["AnalyticsSettings"]
