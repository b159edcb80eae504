"""Personal finance dashboard core.

Bank statement ingestion, keyword categorization, duplicate filtering and
ledger analytics (summary, monthly and category aggregates, recurring
payments, anomalies, forecast and budgets). Persistence and the CLI are in
``finance_dashboard.persistence`` and ``finance_dashboard.cli``.
"""

from .analytics import (
    aggregate_categories,
    aggregate_monthly,
    build_analytics,
    monthly_summary_table,
    monthly_totals,
    summarize,
)
from .anomalies import detect_anomalies
from .budgets import budget_report, compute_budget_variance
from .categorization import DEFAULT_RULES, KeywordRule, get_category, load_rules
from .dates import format_date, format_display_date, normalize_date, parse_date
from .duplicates import DedupeResult, filter_duplicate_staged, make_transaction_key
from .forecast import build_forecast
from .models import (
    AnalyticsResult,
    AnomalyResult,
    BudgetVariance,
    CategoryBudget,
    CategorySummary,
    ForecastPoint,
    ForecastResult,
    MonthlyAggregate,
    MonthlySummaryRow,
    MonthlyTotals,
    RecurringPattern,
    RecurringResult,
    Summary,
    Transaction,
)
from .recurring import detect_recurring
from .settings import AnalyticsSettings
from .statement import (
    StatementParsed,
    StatementParseError,
    StatementRejected,
    parse_statement,
    process_statement,
)

__all__ = [
    # models
    "Transaction",
    "Summary",
    "MonthlyAggregate",
    "MonthlySummaryRow",
    "MonthlyTotals",
    "CategorySummary",
    "RecurringPattern",
    "RecurringResult",
    "AnomalyResult",
    "ForecastPoint",
    "ForecastResult",
    "CategoryBudget",
    "BudgetVariance",
    "AnalyticsResult",
    # normalization and ingestion
    "parse_date",
    "format_date",
    "normalize_date",
    "format_display_date",
    "KeywordRule",
    "DEFAULT_RULES",
    "get_category",
    "load_rules",
    "StatementParseError",
    "StatementParsed",
    "StatementRejected",
    "parse_statement",
    "process_statement",
    "DedupeResult",
    "make_transaction_key",
    "filter_duplicate_staged",
    # analytics
    "summarize",
    "aggregate_monthly",
    "aggregate_categories",
    "monthly_summary_table",
    "monthly_totals",
    "detect_recurring",
    "detect_anomalies",
    "build_forecast",
    "compute_budget_variance",
    "budget_report",
    "build_analytics",
    "AnalyticsSettings",
]
