"""Keyword-based categorization of transaction narrations.

A category is derived by substring matching the upper-cased description
against an ordered table of ``(keyword, label)`` rules. Every matching rule
contributes its label, so a narration such as ``"UPI-SWIGGY INSTAMART"`` can
belong to several categories at once; the labels are de-duplicated, sorted and
joined with ``-``. Descriptions matching no rule fall back to ``"Other"``.

The rule table is passed in by callers. :data:`DEFAULT_RULES` is the stock
table; :func:`load_rules` reads a replacement from JSON.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from os import PathLike
from pathlib import Path
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, TypeAdapter, field_validator

from .models import DEFAULT_CATEGORY, LABEL_SEPARATOR


class KeywordRule(NamedTuple):
    keyword: str
    label: str


DEFAULT_RULES: tuple[KeywordRule, ...] = (
    KeywordRule("SALARY", "SALARY"),
    KeywordRule("SAL CREDIT", "SALARY"),
    KeywordRule("PAYROLL", "SALARY"),
    KeywordRule("INTEREST", "INTEREST"),
    KeywordRule("INT.PD", "INTEREST"),
    KeywordRule("DIVIDEND", "INVESTMENT"),
    KeywordRule("MUTUAL FUND", "INVESTMENT"),
    KeywordRule("ZERODHA", "INVESTMENT"),
    KeywordRule("GROWW", "INVESTMENT"),
    KeywordRule("ATM", "CASH WITHDRAWAL"),
    KeywordRule("NWD", "CASH WITHDRAWAL"),
    KeywordRule("CASH WDL", "CASH WITHDRAWAL"),
    KeywordRule("SWIGGY", "FOOD"),
    KeywordRule("ZOMATO", "FOOD"),
    KeywordRule("RESTAURANT", "FOOD"),
    KeywordRule("CAFE", "FOOD"),
    KeywordRule("DOMINOS", "FOOD"),
    KeywordRule("INSTAMART", "GROCERY SHOPPING"),
    KeywordRule("BIGBASKET", "GROCERY SHOPPING"),
    KeywordRule("BLINKIT", "GROCERY SHOPPING"),
    KeywordRule("ZEPTO", "GROCERY SHOPPING"),
    KeywordRule("DMART", "GROCERY SHOPPING"),
    KeywordRule("GROCER", "GROCERY SHOPPING"),
    KeywordRule("AMAZON", "ONLINE SHOPPING"),
    KeywordRule("FLIPKART", "ONLINE SHOPPING"),
    KeywordRule("MYNTRA", "ONLINE SHOPPING"),
    KeywordRule("UBER", "TRAVEL"),
    KeywordRule("OLA CABS", "TRAVEL"),
    KeywordRule("IRCTC", "TRAVEL"),
    KeywordRule("MAKEMYTRIP", "TRAVEL"),
    KeywordRule("INDIGO", "TRAVEL"),
    KeywordRule("PETROL", "FUEL"),
    KeywordRule("FUEL", "FUEL"),
    KeywordRule("HPCL", "FUEL"),
    KeywordRule("BPCL", "FUEL"),
    KeywordRule("ELECTRICITY", "UTILITIES"),
    KeywordRule("BESCOM", "UTILITIES"),
    KeywordRule("AIRTEL", "UTILITIES"),
    KeywordRule("JIO", "UTILITIES"),
    KeywordRule("BROADBAND", "UTILITIES"),
    KeywordRule("HOUSE RENT", "RENT"),
    KeywordRule("RENTAL", "RENT"),
    KeywordRule("NETFLIX", "ENTERTAINMENT"),
    KeywordRule("SPOTIFY", "ENTERTAINMENT"),
    KeywordRule("HOTSTAR", "ENTERTAINMENT"),
    KeywordRule("BOOKMYSHOW", "ENTERTAINMENT"),
    KeywordRule("PHARMACY", "HEALTH"),
    KeywordRule("APOLLO", "HEALTH"),
    KeywordRule("HOSPITAL", "HEALTH"),
    KeywordRule("INSURANCE", "INSURANCE"),
    KeywordRule("LIC OF INDIA", "INSURANCE"),
    KeywordRule("EMI PAYMENT", "LOAN"),
    KeywordRule("LOAN", "LOAN"),
    KeywordRule("CREDIT CARD", "CREDIT CARD PAYMENT"),
    KeywordRule("CC PAYMENT", "CREDIT CARD PAYMENT"),
)


def get_category(description: str | None, rules: Sequence[KeywordRule] = DEFAULT_RULES) -> str:
    """Return the (possibly multi-label) category for ``description``.

    Rule order does not affect the result: labels are collected into a set and
    sorted before joining.
    """

    desc = (description or "").upper()
    found = {rule.label for rule in rules if rule.keyword.upper() in desc}
    if found:
        return LABEL_SEPARATOR.join(sorted(found))
    return DEFAULT_CATEGORY


# ---------------------------------------------------------------------------
# Loading replacement tables
# ---------------------------------------------------------------------------


class _RuleEntry(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    keyword: str
    label: str

    @field_validator("keyword", "label")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must be non-empty")
        return v

    @field_validator("label")
    @classmethod
    def _no_separator(cls, v: str) -> str:
        # A label containing the separator would split into two labels later
        if LABEL_SEPARATOR in v:
            raise ValueError(f"label must not contain {LABEL_SEPARATOR!r}")
        return v


_RULES_ADAPTER = TypeAdapter(list[_RuleEntry])


def parse_rules(data: object) -> tuple[KeywordRule, ...]:
    """Validate a decoded JSON list of ``{"keyword", "label"}`` objects."""

    entries = _RULES_ADAPTER.validate_python(data)
    return tuple(KeywordRule(e.keyword, e.label) for e in entries)


def load_rules(path: str | PathLike[str]) -> tuple[KeywordRule, ...]:
    """Read a keyword table from a JSON file (order preserved)."""

    with Path(path).open(encoding="utf-8") as f:
        return parse_rules(json.load(f))


__all__ = [
    "KeywordRule",
    "DEFAULT_RULES",
    "get_category",
    "parse_rules",
    "load_rules",
]
