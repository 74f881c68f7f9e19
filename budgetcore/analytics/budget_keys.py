"""
BudgetMap keys and total-budget resolution.

Three key shapes coexist in one flat mapping:

    "{context}-{YYYY-MM}"              month-specific total for a context
    "{context}-default"                fallback total for a context
    "{YYYY-MM}-category-{category}"    category limit

IMPORTANT: category limits are NOT qualified by context, unlike the
totals. Two contexts sharing a month label share their category limits.
This mirrors the stored data and is kept as-is until product decides
otherwise.
"""

from typing import Mapping


def total_budget_key(context: str, month: str) -> str:
    return f"{context}-{month}"


def default_budget_key(context: str) -> str:
    return f"{context}-default"


def category_budget_key(month: str, category: str) -> str:
    return f"{month}-category-{category}"


def resolve_total_budget(budgets: Mapping[str, float], context: str, month: str) -> float:
    """
    Resolve the total budget for a context and month.

    Precedence: month-specific -> context default -> 0. A stored zero
    falls through to the next level.
    """
    return (
        budgets.get(total_budget_key(context, month))
        or budgets.get(default_budget_key(context))
        or 0.0
    )


def category_limit(budgets: Mapping[str, float], month: str, category: str) -> float:
    return budgets.get(category_budget_key(month, category)) or 0.0
