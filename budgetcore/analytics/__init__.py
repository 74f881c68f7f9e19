"""Analytics package: aggregation, projection, category budgets and cash flow."""

from budgetcore.analytics.aggregator import aggregate_month, expand_splits, transactions_in_month
from budgetcore.analytics.budget_keys import (
    category_budget_key,
    category_limit,
    default_budget_key,
    resolve_total_budget,
    total_budget_key,
)
from budgetcore.analytics.calendar import add_months, month_key, parse_instant, to_local
from budgetcore.analytics.cash_flow import summarize_cash_flow
from budgetcore.analytics.category_budgets import track_categories
from budgetcore.analytics.pipeline import compute_analytics
from budgetcore.analytics.projection import daily_buckets, elapsed_days, project_month

__all__ = [
    "aggregate_month",
    "expand_splits",
    "transactions_in_month",
    "category_budget_key",
    "category_limit",
    "default_budget_key",
    "resolve_total_budget",
    "total_budget_key",
    "add_months",
    "month_key",
    "parse_instant",
    "to_local",
    "summarize_cash_flow",
    "track_categories",
    "compute_analytics",
    "daily_buckets",
    "elapsed_days",
    "project_month",
]
