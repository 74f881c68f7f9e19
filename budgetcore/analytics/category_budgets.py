"""
Category Budget Tracker

Per-category actual-vs-limit comparison for one month. A category is
kept if it has spending or a limit; kept rows are sorted by actual,
largest first.
"""

from collections import defaultdict
from typing import Mapping, Sequence

from budgetcore.analytics.budget_keys import category_limit
from budgetcore.models.analytics import CategoryBreakdown, CategoryBudgetRow, LeafEntry
from budgetcore.models.records import CategoryDescriptor


def track_categories(
    leaves: Sequence[LeafEntry],
    categories: Sequence[CategoryDescriptor],
    budgets: Mapping[str, float],
    month: str,
    default_color: str = "#cbd5e1",
) -> CategoryBreakdown:
    totals = defaultdict(float)
    for leaf in leaves:
        totals[leaf.category] += leaf.amount

    rows = []
    for cat in categories:
        actual = totals.get(cat.name, 0.0)
        limit = category_limit(budgets, month, cat.name)
        if actual > 0 or limit > 0:
            rows.append(CategoryBudgetRow(
                id=cat.id,
                name=cat.name,
                color_code=cat.color_code or default_color,
                actual=actual,
                limit=limit,
            ))

    # sorted() is stable: equal actuals keep taxonomy order
    rows = sorted(rows, key=lambda row: row.actual, reverse=True)

    return CategoryBreakdown(
        rows=rows,
        max_category_val=max([row.actual for row in rows] + [1.0]),
        total_for_donut=sum(row.actual for row in rows),
    )
